"""Match compiled templates against sequences of forms.

Matching is a search over alternatives. ``iter_span`` yields every way a
template sequence can match a prefix of a form sequence, in preference order:
a wildcard first absorbs as many forms as it can and gives them back one at a
time only when the rest of the template fails to match. Directives are handed
to the directive resolvers, which yield their own alternatives, so
backtracking crosses directive boundaries.

Generators that change the binding table undo their change before producing
their next alternative, and leave the table as they found it once exhausted.
An alternative that a caller accepts (by not asking for the next one) keeps
its bindings.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

from formpatch.directives import is_directive
from formpatch.matching.bindings import BindingTable
from formpatch.matching.outcome import Match
from formpatch.matching.resolver import concat_source, resolve_directive
from formpatch.tree import WILDCARD, ConcatPattern, Symbol, Tree, Vector, tree_equal

logger = logging.getLogger("formpatch.matcher")


class Matcher:
    def __init__(self, bindings: BindingTable | None = None):
        self.bindings = bindings if bindings is not None else BindingTable()

    def match_span(self, templates, forms, *, partial: bool = False) -> Match | None:
        """First match of ``templates`` against ``forms``, or None.

        With ``partial`` the match may leave forms over, otherwise it has to
        consume every form.
        """
        forms = tuple(forms)
        for match in self.iter_span(tuple(templates), forms):
            if partial or not match.rest:
                return match
        return None

    def match_tree(self, template: Tree, form: Tree) -> Tree | None:
        """Match one template against one form, returning the reassembled output tree."""
        for output in self.iter_single(template, form):
            return output
        return None

    def count(self, templates, forms) -> int | None:
        """Number of leading ``forms`` the greediest partial match consumes, or None.

        Only probes: the binding table is left untouched.
        """
        checkpoint = self.bindings.checkpoint()
        match = self.match_span(templates, forms, partial=True)
        self.bindings.rollback(checkpoint)
        if match is None:
            return None
        return len(forms) - len(match.rest)

    def iter_span(self, templates: tuple, forms: tuple, literal: bool = False) -> Iterator[Match]:
        if not templates:
            yield Match((), forms)
            return
        head, rest = templates[0], templates[1:]
        for step in self._iter_head(head, forms, literal):
            for tail in self.iter_span(rest, step.rest, literal):
                yield Match(step.captured + tail.captured, tail.rest)

    def iter_single(self, template: Tree, form: Tree, literal: bool = False) -> Iterator[Tree]:
        """Alternatives for ``template`` matching exactly the one tree ``form``."""
        for match in self.iter_span((template,), (form,), literal):
            if not match.rest and len(match.captured) == 1:
                yield match.captured[0]

    def iter_element(self, template: Tree, form: Tree, literal: bool = False) -> Iterator[Tree]:
        """Alternatives for a template that is neither a wildcard nor a directive."""
        if isinstance(template, tuple):
            if isinstance(form, tuple):
                for match in self.iter_span(template, form, literal):
                    if not match.rest:
                        yield match.captured
            return
        if isinstance(template, Vector):
            if isinstance(form, Vector):
                for match in self.iter_span(template.items, form.items, literal):
                    if not match.rest:
                        yield Vector(match.captured)
            return
        if isinstance(template, ConcatPattern):
            if isinstance(form, str) and re.fullmatch(concat_source(template.parts), form, re.DOTALL):
                yield form
            return
        if tree_equal(template, form):
            yield form

    def _iter_head(self, head: Tree, forms: tuple, literal: bool) -> Iterator[Match]:
        if not literal:
            if head is WILDCARD:
                for size in range(len(forms), 0, -1):
                    yield Match(forms[:size], forms[size:])
                return
            if is_directive(head):
                yield from resolve_directive(self, head, forms)
                return
            if isinstance(head, Symbol) and head in self.bindings:
                if forms:
                    for name in self._iter_bound(head, forms[0]):
                        yield Match((name,), forms[1:])
                return
        if not forms:
            return
        for output in self.iter_element(head, forms[0], literal):
            yield Match((output,), forms[1:])

    def _iter_bound(self, name: Symbol, form: Tree) -> Iterator[Symbol]:
        entry = self.bindings.get(name)
        for captured in self.iter_single(entry.declared, form):
            if entry.is_resolved:
                if tree_equal(captured, entry.resolved):
                    yield name
                else:
                    logger.debug(f"{name} already bound to a different form, rejecting {form!r}")
                continue
            checkpoint = self.bindings.checkpoint()
            self.bindings.resolve(name, captured)
            yield name
            self.bindings.rollback(checkpoint)
