"""Matching and reassembly for each directive kind.

Every resolver is a generator taking the matcher, the directive node and the
remaining forms of the enclosing sequence. It yields ``Match`` alternatives
whose ``captured`` is the single reassembled directive node and whose ``rest``
is the forms left after whatever the directive consumed.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterator

from formpatch.directives import Add, Bind, Concat, DirectiveKind, Literal, Remove, Splice, Swap, Wrap
from formpatch.matching.outcome import Match
from formpatch.projection import Projection, project
from formpatch.tree import WILDCARD, ConcatPattern, same_shape

if TYPE_CHECKING:
    from formpatch.matching.matcher import Matcher


def concat_source(parts, capture: bool = True) -> str:
    """Regex source for concat parts: strings literally, wildcards as ``.*`` groups."""
    group = "(.*)" if capture else "(?:.*)"
    source = ""
    for part in parts:
        if part is WILDCARD:
            source += group
        elif isinstance(part, ConcatPattern):
            source += concat_source(part.parts, capture)
        else:
            source += re.escape(part)
    return source


def _swap(matcher: Matcher, node: Swap, forms: tuple) -> Iterator[Match]:
    if not forms:
        return
    for old in matcher.iter_single(node.old, forms[0]):
        yield Match((Swap(old, node.new),), forms[1:])


def _wrap(matcher: Matcher, node: Wrap, forms: tuple) -> Iterator[Match]:
    for match in matcher.iter_span(node.inner, forms):
        body = same_shape(node.body, node.left + match.captured + node.right)
        yield Match((Wrap(node.triml, node.trimr, body),), match.rest)


def _splice(matcher: Matcher, node: Splice, forms: tuple) -> Iterator[Match]:
    # the wrapper is still present in the old form, so the whole body is matched
    if not forms:
        return
    for body in matcher.iter_element(node.body, forms[0]):
        yield Match((Splice(node.triml, node.trimr, body),), forms[1:])


def _bind(matcher: Matcher, node: Bind, forms: tuple) -> Iterator[Match]:
    table = matcher.bindings
    checkpoint = table.checkpoint()
    shadowed = table.enter(node.bindings)
    for match in matcher.iter_span((node.body,), forms):
        resolved = table.values(node.names)
        mark = table.checkpoint()
        table.leave(shadowed)
        yield Match((Bind(resolved, match.captured[0]),), match.rest)
        table.rollback(mark)
    table.rollback(checkpoint)


def _concat(matcher: Matcher, node: Concat, forms: tuple) -> Iterator[Match]:
    if not forms or not isinstance(forms[0], str):
        return
    source = ""
    for part in node.parts:
        if part is WILDCARD or isinstance(part, str):
            source += concat_source((part,))
        else:
            source += "(" + concat_source(project(part, Projection.OLD), capture=False) + ")"
    found = re.fullmatch(source, forms[0], re.DOTALL)
    if found is None:
        return
    captures = iter(found.groups())
    pieces = tuple((part, None if isinstance(part, str) else next(captures)) for part in node.parts)
    for parts in _rebuild_parts(matcher, pieces):
        yield Match((Concat(parts),), forms[1:])


def _rebuild_parts(matcher: Matcher, pieces: tuple) -> Iterator[tuple]:
    """Concat parts with every capture slot filled in, directive parts re-matched against their substring."""
    if not pieces:
        yield ()
        return
    (part, text), rest = pieces[0], pieces[1:]
    if text is None:
        heads = (part,)
    elif part is WILDCARD:
        heads = (text,)
    else:
        heads = matcher.iter_single(part, text)
    for head in heads:
        for tail in _rebuild_parts(matcher, rest):
            yield (head,) + tail


def _literal(matcher: Matcher, node: Literal, forms: tuple) -> Iterator[Match]:
    if not forms:
        return
    for inner in matcher.iter_single(node.inner, forms[0], literal=True):
        yield Match((Literal(inner),), forms[1:])


def _remove(matcher: Matcher, node: Remove, forms: tuple) -> Iterator[Match]:
    for match in matcher.iter_span(node.forms, forms):
        yield Match((Remove(match.captured),), match.rest)


def _add(matcher: Matcher, node: Add, forms: tuple) -> Iterator[Match]:
    yield Match((node,), forms)


RESOLVERS = {
    DirectiveKind.SWAP: _swap,
    DirectiveKind.WRAP: _wrap,
    DirectiveKind.SPLICE: _splice,
    DirectiveKind.BIND: _bind,
    DirectiveKind.CONCAT: _concat,
    DirectiveKind.LITERAL: _literal,
    DirectiveKind.REMOVE: _remove,
    DirectiveKind.ADD: _add,
}


def resolve_directive(matcher: Matcher, node, forms: tuple) -> Iterator[Match]:
    return RESOLVERS[node.kind](matcher, node, forms)
