"""Collapse the directives of a compiled template into a plain tree.

The OLD projection is what the patched code looked like before patching, the
NEW projection what it looks like afterwards. Projection needs no form to
match against and never fails: the template compiler already rejected every
malformed directive.

A template occupies a run of elements in its enclosing sequence (an ``Add``
occupies none in the OLD projection, a ``Wrap`` may occupy several), so
``project`` returns a tuple of trees.
"""

from __future__ import annotations

from enum import Enum

from formpatch.directives import Add, Bind, Concat, DirectiveKind, Literal, Remove, Splice, Swap, Wrap, is_directive
from formpatch.exceptions import TemplateSyntaxError
from formpatch.tree import WILDCARD, ConcatPattern, Symbol, Tree, Vector


class Projection(str, Enum):
    OLD = "old"
    NEW = "new"


def project(template: Tree, which: Projection) -> tuple:
    """Project ``template`` to the run of plain trees it stands for."""
    return _project(template, Projection(which))


def project_one(template: Tree, which: Projection) -> Tree:
    """Project a template known to stand for exactly one tree."""
    trees = project(template, which)
    if len(trees) != 1:
        raise TemplateSyntaxError(f"Template projects to {len(trees)} forms, expected exactly one")
    return trees[0]


def project_seq(templates, which: Projection) -> tuple:
    which = Projection(which)
    out = []
    for template in templates:
        out.extend(_project(template, which))
    return tuple(out)


def _project(template: Tree, which: Projection) -> tuple:
    if isinstance(template, tuple):
        return (project_seq(template, which),)
    if isinstance(template, Vector):
        return (Vector(project_seq(template.items, which)),)
    if is_directive(template):
        return _PROJECTORS[template.kind](template, which)
    return (template,)


def _project_swap(node: Swap, which: Projection) -> tuple:
    return _project(node.old if which is Projection.OLD else node.new, which)


def _project_wrap(node: Wrap, which: Projection) -> tuple:
    if which is Projection.OLD:
        return project_seq(node.inner, which)
    return _project(node.body, which)


def _project_splice(node: Splice, which: Projection) -> tuple:
    if which is Projection.OLD:
        return _project(node.body, which)
    return project_seq(node.inner, which)


def _project_bind(node: Bind, which: Projection) -> tuple:
    return _project(substitute(node.body, dict(node.bindings)), which)


def _project_concat(node: Concat, which: Projection) -> tuple:
    parts = []
    for part in node.parts:
        if part is WILDCARD or isinstance(part, str):
            parts.append(part)
            continue
        for piece in _project(part, which):
            if isinstance(piece, ConcatPattern):
                parts.extend(piece.parts)
            else:
                parts.append(piece)
    merged = merge_strings(parts)
    if all(isinstance(part, str) for part in merged):
        return ("".join(merged),)
    return (ConcatPattern(tuple(merged)),)


def _project_literal(node: Literal, which: Projection) -> tuple:
    return (node.inner,)


def _project_remove(node: Remove, which: Projection) -> tuple:
    if which is Projection.OLD:
        return project_seq(node.forms, which)
    return ()


def _project_add(node: Add, which: Projection) -> tuple:
    if which is Projection.NEW:
        return project_seq(node.forms, which)
    return ()


_PROJECTORS = {
    DirectiveKind.SWAP: _project_swap,
    DirectiveKind.WRAP: _project_wrap,
    DirectiveKind.SPLICE: _project_splice,
    DirectiveKind.BIND: _project_bind,
    DirectiveKind.CONCAT: _project_concat,
    DirectiveKind.LITERAL: _project_literal,
    DirectiveKind.REMOVE: _project_remove,
    DirectiveKind.ADD: _project_add,
}


def merge_strings(parts) -> list:
    """Join runs of adjacent strings, keeping capture slots apart."""
    merged: list = []
    for part in parts:
        if isinstance(part, str) and merged and isinstance(merged[-1], str):
            merged[-1] += part
        else:
            merged.append(part)
    return merged


def substitute(tree: Tree, mapping: dict) -> Tree:
    """Replace every symbol bound in ``mapping`` by its value.

    Literals are left alone, and an inner let shadows the names it binds.
    """
    if not mapping:
        return tree
    if isinstance(tree, Symbol):
        return mapping.get(tree, tree)
    if isinstance(tree, tuple):
        return tuple(substitute(item, mapping) for item in tree)
    if isinstance(tree, Vector):
        return Vector(tuple(substitute(item, mapping) for item in tree))
    if isinstance(tree, Swap):
        return Swap(substitute(tree.old, mapping), substitute(tree.new, mapping))
    if isinstance(tree, (Wrap, Splice)):
        return type(tree)(tree.triml, tree.trimr, substitute(tree.body, mapping))
    if isinstance(tree, Bind):
        bindings = tuple((name, substitute(value, mapping)) for name, value in tree.bindings)
        inner = {name: value for name, value in mapping.items() if name not in tree.names}
        return Bind(bindings, substitute(tree.body, inner))
    if isinstance(tree, Concat):
        return Concat(tuple(substitute(part, mapping) for part in tree.parts))
    if isinstance(tree, (Remove, Add)):
        return type(tree)(tuple(substitute(form, mapping) for form in tree.forms))
    return tree
