"""Named placeholders introduced by ``let`` directives.

Every change to the table is recorded in an undo log. ``checkpoint()`` returns
a position in that log and ``rollback()`` undoes everything recorded after it,
so nested scopes and abandoned match attempts restore earlier entries exactly,
including removing entries that did not exist before.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from formpatch.tree import Symbol, Tree


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()
_MISSING = object()


@dataclass(frozen=True)
class BindingEntry:
    declared: Tree
    """Value the name was bound to in the template."""
    resolved: Tree = UNSET
    """Tree captured by the first occurrence of the name, or UNSET."""

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not UNSET

    @property
    def value(self) -> Tree:
        return self.resolved if self.is_resolved else self.declared


class BindingTable:
    def __init__(self):
        self._entries: dict[Symbol, BindingEntry] = {}
        self._log: list[tuple[Symbol, object]] = []

    def __contains__(self, name) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: Symbol) -> BindingEntry | None:
        return self._entries.get(name)

    def checkpoint(self) -> int:
        return len(self._log)

    def rollback(self, checkpoint: int) -> None:
        while len(self._log) > checkpoint:
            name, previous = self._log.pop()
            if previous is _MISSING:
                del self._entries[name]
            else:
                self._entries[name] = previous

    def _set(self, name: Symbol, entry) -> None:
        self._log.append((name, self._entries.get(name, _MISSING)))
        if entry is _MISSING:
            del self._entries[name]
        else:
            self._entries[name] = entry

    def enter(self, bindings) -> dict:
        """Install fresh entries for ``(name, declared)`` pairs. Returns what they shadow."""
        shadowed = {}
        for name, declared in bindings:
            shadowed[name] = self._entries.get(name, _MISSING)
            self._set(name, BindingEntry(declared))
        return shadowed

    def leave(self, shadowed: dict) -> None:
        """Close a scope opened by ``enter``, bringing back the entries it shadowed."""
        for name, previous in shadowed.items():
            self._set(name, previous)

    def resolve(self, name: Symbol, tree: Tree) -> None:
        self._set(name, replace(self._entries[name], resolved=tree))

    def values(self, names) -> tuple:
        """``(name, value)`` pairs: the resolution when there is one, else the declared value."""
        return tuple((name, self._entries[name].value) for name in names)
