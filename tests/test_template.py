"""Unit tests for template compilation."""

import pytest

from formpatch.directives import Add, Bind, Concat, DirectiveKind, DirectiveSyntax, Literal, Remove, Splice, Swap, Wrap
from formpatch.exceptions import InvalidBindingName, TemplateSyntaxError
from formpatch.sexp import read
from formpatch.template import compile_template, render, to_raw
from formpatch.tree import WILDCARD, Symbol

a, b, x, y = Symbol("a"), Symbol("b"), Symbol("x"), Symbol("y")


def test_compile_plain_tree_is_unchanged():
    assert compile_template("(f [1 2] \"s\")") == read("(f [1 2] \"s\")")


def test_compile_wildcard():
    assert compile_template("(f ... x)") == (Symbol("f"), WILDCARD, x)


def test_compile_each_directive():
    assert compile_template("(patch-swap a b)") == Swap(a, b)
    assert compile_template("(patch-wrap 1 0 (a b))") == Wrap(1, 0, (a, b))
    assert compile_template("(patch-splice 1 1 (a x b))") == Splice(1, 1, (a, x, b))
    assert compile_template("(patch-let ((x 1)) (f x))") == Bind(((x, 1),), (Symbol("f"), x))
    assert compile_template('(patch-concat "a" ... "b")') == Concat(("a", WILDCARD, "b"))
    assert compile_template("(patch-literal (patch-add ...))") == Literal((Symbol("patch-add"), Symbol("...")))
    assert compile_template("(patch-remove a b)") == Remove((a, b))
    assert compile_template("(patch-add a)") == Add((a,))


def test_wrap_trim_defaults():
    assert compile_template("(patch-wrap (a b))") == Wrap(0, 0, (a, b))
    assert compile_template("(patch-wrap 1 (a b))") == Wrap(1, 0, (a, b))


def test_wrap_slices():
    node = compile_template("(patch-wrap 1 1 (a x y b))")
    assert node.left == (a,)
    assert node.inner == (x, y)
    assert node.right == (b,)


def test_nested_directives_compile():
    template = compile_template("(f (patch-swap (g ...) (patch-add x)))")
    assert template == (Symbol("f"), Swap((Symbol("g"), WILDCARD), Add((x,))))


@pytest.mark.parametrize(
    "text",
    [
        "(patch-swap a)",
        "(patch-swap a b c)",
        "(patch-wrap 3 0 (a b))",
        "(patch-wrap -1 0 (a b))",
        "(patch-wrap 1 0 a)",
        "(patch-wrap 1 0 0 (a b))",
        "(patch-wrap 1 0 (... a))",
        "(patch-splice 0 1 (a ...))",
        "(patch-let (x) y)",
        "(patch-let ((x 1)) y z)",
        "(patch-let ((x 1) (x 2)) x)",
        "(patch-let ((x 1) (y (f x))) y)",
        "(patch-let ((x 1)) ...)",
        "(patch-concat \"a\" b)",
        "(patch-concat (patch-swap a \"b\"))",
        "(patch-literal a b)",
        "(patch-remove)",
        "(patch-add)",
    ],
)
def test_compile_errors(text):
    with pytest.raises(TemplateSyntaxError):
        compile_template(text)


def test_invalid_binding_name():
    with pytest.raises(InvalidBindingName):
        compile_template("(patch-let ((1 x)) y)")
    with pytest.raises(InvalidBindingName):
        compile_template('(patch-let (("x" 1)) y)')


def test_custom_syntax():
    syntax = DirectiveSyntax(prefix="el-patch-", wildcard="_")
    assert compile_template("(el-patch-swap a _)", syntax) == Swap(a, WILDCARD)
    assert compile_template("(patch-swap a b)", syntax) == (Symbol("patch-swap"), a, b)
    assert syntax.tag(DirectiveKind.BIND) == Symbol("el-patch-let")


def test_render_round_trip():
    text = '(f (patch-wrap 1 0 (g ...)) (patch-let ((x (h ...))) (k x)) (patch-concat "a" ...) (patch-literal (q)))'
    assert render(compile_template(text)) == text


def test_to_raw_uses_syntax():
    syntax = DirectiveSyntax(prefix="my-")
    assert to_raw(Add((WILDCARD,)), syntax) == (Symbol("my-add"), Symbol("..."))
