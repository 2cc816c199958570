"""formpatch: locate patch templates inside tree-shaped definitions and resolve them into patches."""

__version__ = "0.3.0"

from formpatch.utils.log import logger  # noqa: E402  (sets up the package logger)
from formpatch.directives import DirectiveKind, DirectiveSyntax  # noqa: E402
from formpatch.exceptions import FormpatchError  # noqa: E402
from formpatch.matching import Matcher  # noqa: E402
from formpatch.projection import Projection, project, project_one  # noqa: E402
from formpatch.registry import ResolvedPatch, SourceIndex, TemplateRegistry  # noqa: E402
from formpatch.selector import Candidate, TemplateSelector  # noqa: E402
from formpatch.sexp import dumps, read, read_all  # noqa: E402
from formpatch.template import compile_template, render, to_raw  # noqa: E402
from formpatch.tree import WILDCARD, Symbol, Vector, tree_equal  # noqa: E402

__all__ = [
    "WILDCARD",
    "Candidate",
    "DirectiveKind",
    "DirectiveSyntax",
    "FormpatchError",
    "Matcher",
    "Projection",
    "ResolvedPatch",
    "SourceIndex",
    "Symbol",
    "TemplateRegistry",
    "TemplateSelector",
    "Vector",
    "compile_template",
    "dumps",
    "logger",
    "project",
    "project_one",
    "read",
    "read_all",
    "render",
    "to_raw",
    "tree_equal",
]
