"""Tree model shared by forms and templates.

A tree is an atom (``Symbol``, ``str``, ``int``, ``float`` or ``bool``), a list
node (a plain ``tuple`` of trees) or a vector node (``Vector``). Compiled
templates may additionally hold ``WILDCARD``, directive nodes and, after OLD
projection, ``ConcatPattern`` nodes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

Tree = Any
"""Any value accepted as a tree node. Kept loose, trees are plain Python values."""


@dataclass(frozen=True)
class Symbol:
    name: str

    def __repr__(self) -> str:
        return f"Symbol({self.name!r})"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Vector:
    """A vector node. Only ever matches another vector."""

    items: tuple = ()

    def __iter__(self) -> Iterator:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]


class _Wildcard:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "WILDCARD"

    def __reduce__(self):
        return (_Wildcard, ())


WILDCARD = _Wildcard()
"""Matches one or more elements of a sequence (or any substring inside a concat)."""


@dataclass(frozen=True)
class ConcatPattern:
    """OLD projection of a concat that still contains capture slots.

    ``parts`` holds literal strings and ``WILDCARD`` slots; adjacent strings are
    already merged.
    """

    parts: tuple


def is_sequence(tree: Tree) -> bool:
    return isinstance(tree, (tuple, Vector))


def items_of(tree: Tree) -> tuple:
    """Elements of a list or vector node."""
    return tree.items if isinstance(tree, Vector) else tree


def same_shape(tree: Tree, items) -> Tree:
    """Build a node of the same kind as ``tree`` (list or vector) from ``items``."""
    if isinstance(tree, Vector):
        return Vector(tuple(items))
    return tuple(items)


def tree_equal(a: Tree, b: Tree) -> bool:
    """Structural, type-strict equality. ``1``, ``1.0`` and ``True`` are all different."""
    if type(a) is not type(b):
        return False
    if isinstance(a, tuple):
        return len(a) == len(b) and all(tree_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Vector):
        return tree_equal(a.items, b.items)
    return a == b


def head_symbol(tree: Tree) -> Symbol | None:
    """First element of a list node when it is a symbol."""
    if isinstance(tree, tuple) and tree and isinstance(tree[0], Symbol):
        return tree[0]
    return None
