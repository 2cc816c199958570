"""Compile raw trees into templates, and turn compiled trees back into raw ones.

Compilation replaces the wildcard symbol by ``WILDCARD`` and every list headed
by a directive tag by its directive node. All structural checks on directives
happen here, so later stages can assume well-formed templates.
"""

from __future__ import annotations

from formpatch.directives import (
    Add,
    Bind,
    Concat,
    DirectiveKind,
    DirectiveSyntax,
    Literal,
    Remove,
    Splice,
    Swap,
    Wrap,
    is_directive,
)
from formpatch.exceptions import InvalidBindingName, TemplateSyntaxError
from formpatch.projection import Projection, project
from formpatch.sexp import dumps, read
from formpatch.tree import WILDCARD, ConcatPattern, Symbol, Tree, Vector

DEFAULT_SYNTAX = DirectiveSyntax()


def compile_template(raw: Tree | str, syntax: DirectiveSyntax | None = None) -> Tree:
    """Compile one template, given as a raw tree or as source text."""
    if isinstance(raw, str):
        raw = read(raw)
    return _Compiler(syntax or DEFAULT_SYNTAX).compile(raw)


class _Compiler:
    def __init__(self, syntax: DirectiveSyntax):
        self.syntax = syntax
        self._handlers = {
            DirectiveKind.SWAP: self._swap,
            DirectiveKind.WRAP: self._wrap,
            DirectiveKind.SPLICE: self._splice,
            DirectiveKind.BIND: self._bind,
            DirectiveKind.CONCAT: self._concat,
            DirectiveKind.LITERAL: self._literal,
            DirectiveKind.REMOVE: self._remove,
            DirectiveKind.ADD: self._add,
        }

    def compile(self, raw: Tree) -> Tree:
        if isinstance(raw, Symbol) and raw == self.syntax.wildcard:
            return WILDCARD
        kind = self.syntax.kind_of(raw)
        if kind is not None:
            return self._handlers[kind](raw, raw[1:])
        if isinstance(raw, tuple):
            return tuple(self.compile(item) for item in raw)
        if isinstance(raw, Vector):
            return Vector(tuple(self.compile(item) for item in raw))
        return raw

    def _fail(self, raw: Tree, message: str):
        raise TemplateSyntaxError(f"{message}: {dumps(raw)}")

    def _swap(self, raw, operands):
        if len(operands) != 2:
            self._fail(raw, "swap takes exactly two forms")
        return Swap(self.compile(operands[0]), self.compile(operands[1]))

    def _trimmed(self, raw, operands, node_class):
        if not 1 <= len(operands) <= 3:
            self._fail(raw, f"{node_class.kind.value} takes [TRIML [TRIMR]] BODY")
        *trims, body = operands
        for trim in trims:
            if not isinstance(trim, int) or isinstance(trim, bool) or trim < 0:
                self._fail(raw, "trim counts must be non-negative integers")
        triml, trimr = (list(trims) + [0, 0])[:2]
        if not isinstance(body, (tuple, Vector)):
            self._fail(raw, f"{node_class.kind.value} body must be a list or vector")
        if triml + trimr > len(body):
            self._fail(raw, "trim counts exceed the body length")
        node = node_class(triml, trimr, self.compile(body))
        if any(item is WILDCARD for item in node.left + node.right):
            self._fail(raw, "trimmed elements cannot be wildcards")
        return node

    def _wrap(self, raw, operands):
        return self._trimmed(raw, operands, Wrap)

    def _splice(self, raw, operands):
        return self._trimmed(raw, operands, Splice)

    def _bind(self, raw, operands):
        if len(operands) != 2:
            self._fail(raw, "let takes a binding list and exactly one body form")
        raw_bindings, body = operands
        if not isinstance(raw_bindings, tuple):
            self._fail(raw, "let bindings must be a list")
        bindings = []
        seen = set()
        for binding in raw_bindings:
            if not isinstance(binding, tuple) or len(binding) != 2:
                self._fail(raw, "each binding must be (NAME VALUE)")
            name, value = binding
            if not isinstance(name, Symbol) or name == self.syntax.wildcard:
                raise InvalidBindingName(name)
            if name in seen:
                self._fail(raw, f"{name} is bound twice")
            seen.add(name)
            bindings.append((name, self.compile(value)))
        for name, value in bindings:
            if _mentions(value, seen):
                self._fail(raw, f"the value of {name} refers to a name bound by the same let")
        body = self.compile(body)
        if body is WILDCARD:
            self._fail(raw, "let body cannot be a bare wildcard")
        return Bind(tuple(bindings), body)

    def _concat(self, raw, operands):
        parts = tuple(self.compile(part) for part in operands)
        for part in parts:
            if part is WILDCARD or isinstance(part, str):
                continue
            if not is_directive(part) or not _projects_to_strings(part):
                self._fail(raw, "concat parts must be strings, wildcards or directives producing strings")
        return Concat(parts)

    def _literal(self, raw, operands):
        if len(operands) != 1:
            self._fail(raw, "literal takes exactly one form")
        return Literal(operands[0])

    def _remove(self, raw, operands):
        if not operands:
            self._fail(raw, "remove needs at least one form")
        return Remove(tuple(self.compile(form) for form in operands))

    def _add(self, raw, operands):
        if not operands:
            self._fail(raw, "add needs at least one form")
        return Add(tuple(self.compile(form) for form in operands))


def _mentions(tree: Tree, names) -> bool:
    """Whether any of ``names`` occurs in ``tree`` outside of literals."""
    if isinstance(tree, Symbol):
        return tree in names
    if isinstance(tree, (tuple, Vector)):
        return any(_mentions(item, names) for item in tree)
    if isinstance(tree, Swap):
        return _mentions(tree.old, names) or _mentions(tree.new, names)
    if isinstance(tree, (Wrap, Splice)):
        return _mentions(tree.body, names)
    if isinstance(tree, Bind):
        return any(_mentions(value, names) for _, value in tree.bindings) or _mentions(
            tree.body, set(names) - set(tree.names)
        )
    if isinstance(tree, Concat):
        return any(_mentions(part, names) for part in tree.parts)
    if isinstance(tree, (Remove, Add)):
        return any(_mentions(form, names) for form in tree.forms)
    return False


def _projects_to_strings(part: Tree) -> bool:
    for which in Projection:
        for piece in project(part, which):
            if not (isinstance(piece, (str, ConcatPattern)) or piece is WILDCARD):
                return False
    return True


def to_raw(tree: Tree, syntax: DirectiveSyntax | None = None) -> Tree:
    """Inverse of ``compile_template``: a raw tree that prints as the template's source."""
    syntax = syntax or DEFAULT_SYNTAX
    if tree is WILDCARD:
        return syntax.wildcard
    if isinstance(tree, tuple):
        return tuple(to_raw(item, syntax) for item in tree)
    if isinstance(tree, Vector):
        return Vector(tuple(to_raw(item, syntax) for item in tree))
    if isinstance(tree, ConcatPattern):
        return (syntax.tag(DirectiveKind.CONCAT), *(to_raw(part, syntax) for part in tree.parts))
    if not is_directive(tree):
        return tree
    tag = syntax.tag(tree.kind)
    if isinstance(tree, Swap):
        return (tag, to_raw(tree.old, syntax), to_raw(tree.new, syntax))
    if isinstance(tree, (Wrap, Splice)):
        return (tag, tree.triml, tree.trimr, to_raw(tree.body, syntax))
    if isinstance(tree, Bind):
        bindings = tuple((name, to_raw(value, syntax)) for name, value in tree.bindings)
        return (tag, bindings, to_raw(tree.body, syntax))
    if isinstance(tree, Concat):
        return (tag, *(to_raw(part, syntax) for part in tree.parts))
    if isinstance(tree, Literal):
        return (tag, tree.inner)
    return (tag, *(to_raw(form, syntax) for form in tree.forms))


def render(tree: Tree, syntax: DirectiveSyntax | None = None) -> str:
    """Source text of a compiled tree."""
    return dumps(to_raw(tree, syntax))
