from typing import NamedTuple


class Match(NamedTuple):
    """One way a template sequence matched a prefix of a form sequence."""

    captured: tuple
    """Output elements: the matched forms with the template's directives reassembled around them."""
    rest: tuple
    """Forms left after the matched prefix."""
