"""Locate where each template applies inside a definition.

Every position of every sequence in the definition is probed against the OLD
projection of every candidate. A position matched by one candidate is
committed when the full directive-resolving match succeeds there too: the
reassembled output replaces the consumed span. Otherwise the position is a
miss and the search goes on inside it. Templates must match exactly once, at one
unambiguous place, and must not overlap or nest.
"""

from __future__ import annotations

import logging

from formpatch.exceptions import (
    AmbiguousForm,
    AmbiguousTemplate,
    IncompleteMatch,
    TemplateMatchedTwice,
    TemplateSyntaxError,
    TemplateUnmatched,
)
from formpatch.matching import Matcher
from formpatch.projection import Projection, project
from formpatch.sexp import dumps
from formpatch.template import render
from formpatch.tree import Tree, is_sequence, items_of, same_shape

logger = logging.getLogger("formpatch.selector")


def _render_forms(forms) -> str:
    return " ".join(dumps(form) for form in forms)


class Candidate:
    """A template waiting to be located, with its OLD projection computed once."""

    def __init__(self, template: Tree):
        self.template = template
        self.old_projection = project(template, Projection.OLD)
        if not self.old_projection:
            raise TemplateSyntaxError(f"Template has nothing to match in the old definition: {render(template)}")
        self._matched = False

    @property
    def matched(self) -> bool:
        return self._matched

    def mark_matched(self) -> None:
        if self._matched:
            raise TemplateMatchedTwice(render(self.template))
        self._matched = True

    def __repr__(self) -> str:
        return f"Candidate({render(self.template)}, matched={self._matched})"


class TemplateSelector:
    def __init__(self, candidates, matcher: Matcher | None = None):
        self.candidates = list(candidates)
        self.matcher = matcher or Matcher()

    def select(self, forms) -> tuple:
        """Resolve every candidate inside ``forms``, returning the patched sequence."""
        output = self._select_seq(tuple(forms))
        for candidate in self.candidates:
            if not candidate.matched:
                raise TemplateUnmatched(render(candidate.template))
        return output

    def _select_seq(self, forms: tuple) -> tuple:
        output = []
        position = 0
        while position < len(forms):
            rest = forms[position:]
            hits = self._probe(rest)
            if len(hits) > 1:
                raise AmbiguousTemplate([render(candidate.template) for candidate, _ in hits], _render_forms(rest))
            committed = self._commit(*hits[0], rest) if hits else None
            if committed is None:
                output.append(self._select_tree(forms[position]))
                position += 1
                continue
            captured, count = committed
            output.extend(captured)
            position += count
        return tuple(output)

    def _select_tree(self, tree: Tree) -> Tree:
        if is_sequence(tree):
            return same_shape(tree, self._select_seq(items_of(tree)))
        return tree

    def _probe(self, forms: tuple) -> list:
        hits = []
        for candidate in self.candidates:
            if (count := self.matcher.count(candidate.old_projection, forms)) is not None:
                logger.debug(f"{render(candidate.template)} matches {count} form(s) at {_render_forms(forms[:count])}")
                hits.append((candidate, count))
        return hits

    def _check_overlap(self, candidate: Candidate, forms: tuple, count: int) -> None:
        """Reject spans overlapped by another candidate, or holding a nested match of another candidate."""
        span = forms[:count]
        for offset in range(1, count):
            for other in self.candidates:
                if other is not candidate and self.matcher.count(other.old_projection, forms[offset:]) is not None:
                    raise AmbiguousForm(render(candidate.template), _render_forms(span))
        if any(self._has_nested_match(tree, candidate) for tree in span):
            raise AmbiguousForm(render(candidate.template), _render_forms(span))

    def _has_nested_match(self, tree: Tree, committed: Candidate) -> bool:
        if not is_sequence(tree):
            return False
        items = items_of(tree)
        for position in range(len(items)):
            for candidate in self.candidates:
                if candidate is committed:
                    continue
                if self.matcher.count(candidate.old_projection, items[position:]) is not None:
                    return True
        return any(self._has_nested_match(item, committed) for item in items)

    def _commit(self, candidate: Candidate, count: int, forms: tuple) -> tuple[tuple, int] | None:
        """Run the full match over the probed span. None when it fails there, so the position is a miss.

        The probe only sees the OLD projection, which ignores binding consistency,
        so a probe hit can still fail here.
        """
        span = forms[:count]
        match = self.matcher.match_span((candidate.template,), span)
        if match is None:
            if self.matcher.count((candidate.template,), span) is not None:
                raise IncompleteMatch(render(candidate.template), _render_forms(span))
            logger.debug(f"{render(candidate.template)} probed but does not match {_render_forms(span)}, skipping")
            return None
        self._check_overlap(candidate, forms, count)
        candidate.mark_matched()
        logger.debug(f"Committed {render(candidate.template)} over {count} form(s)")
        return match.captured, count
