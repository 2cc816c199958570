"""Unit tests for OLD and NEW projection of templates."""

import pytest

from formpatch.exceptions import TemplateSyntaxError
from formpatch.projection import Projection, project, project_one
from formpatch.sexp import read
from formpatch.template import compile_template
from formpatch.tree import WILDCARD, ConcatPattern, Symbol

T = compile_template


def old(text):
    return project_one(T(text), Projection.OLD)


def new(text):
    return project_one(T(text), Projection.NEW)


def test_plain_template_projects_to_itself():
    assert old("(f [x 1] \"s\")") == read("(f [x 1] \"s\")")
    assert new("(f [x 1] \"s\")") == read("(f [x 1] \"s\")")


def test_swap():
    assert old("(f (patch-swap a b))") == read("(f a)")
    assert new("(f (patch-swap a b))") == read("(f b)")


def test_remove_and_add():
    assert old("(f (patch-remove x y) z)") == read("(f x y z)")
    assert new("(f (patch-remove x y) z)") == read("(f z)")
    assert old("(f (patch-add x) z)") == read("(f z)")
    assert new("(f (patch-add x) z)") == read("(f x z)")


def test_add_alone_projects_to_nothing():
    assert project(T("(patch-add x)"), Projection.OLD) == ()
    assert project(T("(patch-remove x)"), Projection.NEW) == ()


def test_wrap():
    template = "(progn (patch-wrap 1 0 (ignore-errors (a) (b))) (c))"
    assert old(template) == read("(progn (a) (b) (c))")
    assert new(template) == read("(progn (ignore-errors (a) (b)) (c))")


def test_splice():
    template = "(progn (patch-splice 1 0 (ignore-errors (a) (b))) (c))"
    assert old(template) == read("(progn (ignore-errors (a) (b)) (c))")
    assert new(template) == read("(progn (a) (b) (c))")


def test_wrap_with_vector_body():
    assert new("(f (patch-wrap 1 1 [open x close]))") == read("(f [open x close])")
    assert old("(f (patch-wrap 1 1 [open x close]))") == read("(f x)")


def test_bind_substitutes_names():
    """Names are replaced by their values in both projections."""
    template = "(patch-let ((v (g 1))) (f v (patch-swap v 2)))"
    assert old(template) == read("(f (g 1) (g 1))")
    assert new(template) == read("(f (g 1) 2)")


def test_bind_leaves_literals_alone():
    assert old("(patch-let ((v 1)) (f v (patch-literal v)))") == read("(f 1 v)")


def test_inner_bind_shadows_outer():
    """An inner let rebinding a name hides the outer value."""
    template = "(patch-let ((v 1)) (f v (patch-let ((v 2)) (g v))))"
    assert old(template) == read("(f 1 (g 2))")


def test_inner_bind_value_sees_outer_names():
    template = "(patch-let ((v 1)) (patch-let ((w (h v))) (g w)))"
    assert old(template) == read("(g (h 1))")


def test_concat_joins_strings():
    assert old('(f (patch-concat "foo" "-" "bar"))') == read('(f "foo-bar")')
    assert new('(f (patch-concat "a" (patch-swap "b" "c") "d"))') == read('(f "acd")')
    assert old('(f (patch-concat "a" (patch-swap "b" "c") "d"))') == read('(f "abd")')


def test_concat_with_wildcard_projects_to_pattern():
    """Wildcards survive as capture slots, adjacent strings are merged."""
    assert old('(patch-concat "foo" ... "bar")') == ConcatPattern(("foo", WILDCARD, "bar"))
    assert old('(patch-concat "a" (patch-concat "b" ...) "c")') == ConcatPattern(("ab", WILDCARD, "c"))


def test_literal_projects_verbatim():
    assert old("(f (patch-literal (patch-swap ... x)))") == (
        Symbol("f"),
        (Symbol("patch-swap"), Symbol("..."), Symbol("x")),
    )


def test_wildcard_survives_projection():
    assert old("(f ... (patch-swap x y))") == (Symbol("f"), WILDCARD, Symbol("x"))


def test_projection_does_not_change_template():
    template = T("(f (patch-let ((v 1)) (g v)) (patch-wrap 1 0 (h x)))")
    first = project(template, Projection.OLD)
    assert project(template, Projection.OLD) == first
    assert template == T("(f (patch-let ((v 1)) (g v)) (patch-wrap 1 0 (h x)))")


def test_projection_accepts_string_names():
    assert project(T("(patch-swap a b)"), "new") == (Symbol("b"),)


def test_project_one_rejects_runs():
    with pytest.raises(TemplateSyntaxError):
        project_one(T("(patch-wrap 1 0 (g x y))"), Projection.OLD)
    with pytest.raises(TemplateSyntaxError):
        project_one(T("(patch-add x)"), Projection.OLD)
