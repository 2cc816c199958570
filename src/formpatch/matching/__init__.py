from formpatch.matching.bindings import UNSET, BindingEntry, BindingTable
from formpatch.matching.matcher import Matcher
from formpatch.matching.outcome import Match

__all__ = ["UNSET", "BindingEntry", "BindingTable", "Match", "Matcher"]
