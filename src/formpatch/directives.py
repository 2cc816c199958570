"""Directive nodes: the closed set of patch instructions a template may contain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from formpatch.tree import Symbol, Tree, Vector, items_of


class DirectiveKind(str, Enum):
    SWAP = "swap"
    WRAP = "wrap"
    SPLICE = "splice"
    BIND = "let"
    CONCAT = "concat"
    LITERAL = "literal"
    REMOVE = "remove"
    ADD = "add"


@dataclass(frozen=True)
class Swap:
    """Replace ``old`` by ``new``."""

    old: Tree
    new: Tree
    kind: ClassVar[DirectiveKind] = DirectiveKind.SWAP


@dataclass(frozen=True)
class _Trimmed:
    triml: int
    trimr: int
    body: tuple | Vector

    @property
    def left(self) -> tuple:
        return items_of(self.body)[: self.triml]

    @property
    def inner(self) -> tuple:
        items = items_of(self.body)
        return items[self.triml : len(items) - self.trimr]

    @property
    def right(self) -> tuple:
        items = items_of(self.body)
        return items[len(items) - self.trimr :]


@dataclass(frozen=True)
class Wrap(_Trimmed):
    """Wrap the inner slice of ``body`` with its first ``triml`` and last ``trimr`` elements."""

    kind: ClassVar[DirectiveKind] = DirectiveKind.WRAP


@dataclass(frozen=True)
class Splice(_Trimmed):
    """Remove the wrapper ``body``, splicing its inner slice into the parent."""

    kind: ClassVar[DirectiveKind] = DirectiveKind.SPLICE


@dataclass(frozen=True)
class Bind:
    """Name subtrees once and refer to them by name inside ``body``."""

    bindings: tuple  # ((Symbol, Tree), ...)
    body: Tree
    kind: ClassVar[DirectiveKind] = DirectiveKind.BIND

    @property
    def names(self) -> tuple:
        return tuple(name for name, _ in self.bindings)


@dataclass(frozen=True)
class Concat:
    """A string built from string parts. Wildcard parts capture substrings."""

    parts: tuple
    kind: ClassVar[DirectiveKind] = DirectiveKind.CONCAT


@dataclass(frozen=True)
class Literal:
    """``inner`` taken verbatim: no directive, wildcard or binding inside it is interpreted."""

    inner: Tree
    kind: ClassVar[DirectiveKind] = DirectiveKind.LITERAL


@dataclass(frozen=True)
class Remove:
    """Forms present before patching, gone after."""

    forms: tuple
    kind: ClassVar[DirectiveKind] = DirectiveKind.REMOVE


@dataclass(frozen=True)
class Add:
    """Forms absent before patching, present after."""

    forms: tuple
    kind: ClassVar[DirectiveKind] = DirectiveKind.ADD


DIRECTIVE_TYPES = (Swap, Wrap, Splice, Bind, Concat, Literal, Remove, Add)


def is_directive(tree: Tree) -> bool:
    return isinstance(tree, DIRECTIVE_TYPES)


class DirectiveSyntax:
    """Maps directive kinds to their tag symbols and back.

    Tags are ``prefix + kind value``, so with the default prefix ``patch-`` a
    swap is written ``(patch-swap OLD NEW)``.
    """

    def __init__(self, prefix: str = "patch-", wildcard: str = "..."):
        self.prefix = prefix
        self.wildcard = Symbol(wildcard)
        self._tags = {kind: Symbol(f"{prefix}{kind.value}") for kind in DirectiveKind}
        self._kinds = {tag: kind for kind, tag in self._tags.items()}

    def tag(self, kind: DirectiveKind) -> Symbol:
        return self._tags[kind]

    def kind_of(self, tree: Tree) -> DirectiveKind | None:
        """Directive kind of a raw list node headed by a tag symbol, else None."""
        if isinstance(tree, tuple) and tree and isinstance(tree[0], Symbol):
            return self._kinds.get(tree[0])
        return None

    def __repr__(self) -> str:
        return f"DirectiveSyntax(prefix={self.prefix!r}, wildcard={self.wildcard.name!r})"
