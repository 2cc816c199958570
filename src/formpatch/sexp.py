"""Reading and printing trees as s-expression text.

Lists are written ``(a b c)``, vectors ``[a b c]``, strings in double quotes
with backslash escapes, ``'x`` reads as ``(quote x)`` and ``;`` starts a
comment running to the end of the line. ``#t`` and ``#f`` are the booleans.
"""

from __future__ import annotations

import re
from pathlib import Path

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from formpatch.exceptions import SexpSyntaxError
from formpatch.tree import Symbol, Tree, Vector

QUOTE = Symbol("quote")

GRAMMAR = r"""
    start: form*

    ?form: list
         | vector
         | quoted
         | string
         | atom

    list: "(" form* ")"
    vector: "[" form* "]"
    quoted: "'" form
    string: STRING
    atom: ATOM

    STRING: /"(?:[^"\\]|\\.)*"/s
    ATOM: /[^\s()\[\]";']+/
    COMMENT: /;[^\n]*/
    %ignore COMMENT
    %ignore /\s+/
"""

_INT_RE = re.compile(r"[+-]?\d+\Z")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.\d+|\d+(?:\.\d+)?[eE][+-]?\d+)\Z")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"'}


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body, flags=re.DOTALL)


def _parse_atom(token: str) -> Tree:
    if _INT_RE.match(token):
        return int(token)
    if _FLOAT_RE.match(token):
        return float(token)
    if token == "#t":
        return True
    if token == "#f":
        return False
    return Symbol(token)


@v_args(inline=True)
class TreeBuilder(Transformer):
    def atom(self, tok):
        return _parse_atom(str(tok))

    def string(self, tok):
        return _unescape(str(tok)[1:-1])

    def quoted(self, form):
        return (QUOTE, form)

    def list(self, *items):
        return tuple(items)

    def vector(self, *items):
        return Vector(tuple(items))

    def start(self, *forms):
        return list(forms)


parser = Lark(GRAMMAR, parser="lalr", transformer=TreeBuilder())


def _syntax_error(error: UnexpectedInput) -> SexpSyntaxError:
    offset = getattr(error, "pos_in_stream", None)
    if offset is not None and offset < 0:
        offset = None
    if isinstance(error, UnexpectedCharacters):
        message = "Unterminated string" if error.char == '"' else f"Unexpected character {error.char!r}"
    elif isinstance(error, UnexpectedToken) and error.token.type != "$END":
        message = f"Unexpected {error.token.value!r}"
    else:
        message = "Unexpected end of input"
    return SexpSyntaxError(message, offset)


def read_all(text: str) -> list[Tree]:
    """Read every top-level form of ``text``."""
    try:
        return parser.parse(text)
    except UnexpectedInput as e:
        raise _syntax_error(e) from None


def read(text: str) -> Tree:
    """Read exactly one form."""
    forms = read_all(text)
    if len(forms) != 1:
        raise SexpSyntaxError(f"Expected exactly one form, found {len(forms)}")
    return forms[0]


def read_file(path: Path | str) -> list[Tree]:
    return read_all(Path(path).read_text())


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


def dumps(tree: Tree) -> str:
    """Print a raw tree. Compiled templates go through ``formpatch.template.to_raw`` first."""
    if isinstance(tree, tuple):
        if len(tree) == 2 and tree[0] == QUOTE:
            return "'" + dumps(tree[1])
        return "(" + " ".join(dumps(item) for item in tree) + ")"
    if isinstance(tree, Vector):
        return "[" + " ".join(dumps(item) for item in tree) + "]"
    if isinstance(tree, Symbol):
        return tree.name
    # bool before int, bool is an int subclass
    if isinstance(tree, bool):
        return "#t" if tree else "#f"
    if isinstance(tree, str):
        return f'"{_escape(tree)}"'
    if isinstance(tree, (int, float)):
        return repr(tree)
    raise TypeError(f"Cannot print {tree!r} as an s-expression")
