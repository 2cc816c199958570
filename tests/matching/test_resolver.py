import pytest

from formpatch.directives import Add, Bind, Concat, DirectiveKind, Literal, Remove, Splice, Swap, Wrap
from formpatch.matching import Matcher
from formpatch.matching.resolver import RESOLVERS, concat_source
from formpatch.projection import Projection, project_one
from formpatch.sexp import read
from formpatch.template import compile_template
from formpatch.tree import WILDCARD, ConcatPattern, Symbol

T = compile_template
f, g, h, v, w = (Symbol(name) for name in "fghvw")


@pytest.fixture
def matcher():
    return Matcher()


def test_every_kind_has_a_resolver():
    assert set(RESOLVERS) == set(DirectiveKind)


def test_swap_captures_old_form(matcher):
    output = matcher.match_tree(T("(f (patch-swap (g ...) (h)))"), read("(f (g 1 2))"))
    assert output == (f, Swap(read("(g 1 2)"), (h,)))


def test_swap_fails_on_mismatch(matcher):
    assert matcher.match_tree(T("(f (patch-swap (g ...) (h)))"), read("(f (h 1))")) is None


def test_wrap_backtracks_across_directive(matcher):
    """The wildcard inside the wrap gives up (done) so the sibling can match it."""
    template = T("(progn (patch-wrap 1 0 (ignore-errors ...)) (done))")
    output = matcher.match_tree(template, read("(progn (a) (b) (done))"))
    assert output == (
        Symbol("progn"),
        Wrap(1, 0, read("(ignore-errors (a) (b))")),
        read("(done)"),
    )


def test_splice_matches_wrapper(matcher):
    template = T("(progn (patch-splice 1 0 (ignore-errors ...)) (c))")
    output = matcher.match_tree(template, read("(progn (ignore-errors (a) (b)) (c))"))
    assert output == (Symbol("progn"), Splice(1, 0, read("(ignore-errors (a) (b))")), read("(c)"))
    assert matcher.match_tree(template, read("(progn (a) (b) (c))")) is None


def test_bind_resolves_names(matcher):
    output = matcher.match_tree(T("(patch-let ((v ...)) (f v v))"), read("(f 1 1)"))
    assert output == Bind(((v, 1),), (f, v, v))
    assert v not in matcher.bindings


def test_bind_rejects_inconsistent_forms(matcher):
    assert matcher.match_tree(T("(patch-let ((v ...)) (f v v))"), read("(f 1 2)")) is None
    assert len(matcher.bindings) == 0


def test_bind_backtracks_into_earlier_resolution(matcher):
    """A failed second occurrence undoes the resolution of the first."""
    output = matcher.match_tree(T("(patch-let ((v ...)) (... v ... v))"), read("(a b c b)"))
    assert output == Bind(((v, Symbol("b")),), (Symbol("a"), v, Symbol("c"), v))


def test_nested_bind(matcher):
    template = T("(patch-let ((v ...)) (f v (patch-let ((w (g ...))) (h w v))))")
    output = matcher.match_tree(template, read("(f 1 (h (g 2) 1))"))
    assert output == Bind(((v, 1),), (f, v, Bind(((w, (g, 2)),), (h, w, v))))
    assert matcher.match_tree(template, read("(f 1 (h (g 2) 3))")) is None


@pytest.mark.parametrize(
    ("template", "form", "parts"),
    [
        ('(patch-concat "foo-" ... "-bar")', "foo-mid-bar", ("foo-", "mid", "-bar")),
        ('(patch-concat "foo" ... "bar")', "foobarbar", ("foo", "bar", "bar")),
        ('(patch-concat ... "-" ...)', "a-b-c", ("a-b", "-", "c")),
        ('(patch-concat "x" ...)', "x\ny", ("x", "\ny")),
    ],
)
def test_concat_captures_substrings(matcher, template, form, parts):
    assert matcher.match_tree(T(template), form) == Concat(parts)


def test_concat_with_directive_part(matcher):
    """Directive parts match their OLD projection and are kept in the output."""
    output = matcher.match_tree(T('(patch-concat "a" (patch-swap "b" "c") ...)'), "abz")
    assert output == Concat(("a", Swap("b", "c"), "z"))


def test_concat_captures_between_anchors(matcher):
    assert matcher.match_tree(T('(patch-concat "foo" ... "bar")'), "foo-mid-bar") == Concat(("foo", "-mid-", "bar"))
    assert matcher.match_tree(T('(patch-concat "foo" ...)'), "foo") == Concat(("foo", ""))


def test_concat_rejects_non_strings_and_mismatches(matcher):
    template = T('(patch-concat "foo" ...)')
    assert matcher.match_tree(template, Symbol("foobar")) is None
    assert matcher.match_tree(template, "barfoo") is None


def test_concat_source():
    assert concat_source(("a.b", WILDCARD)) == r"a\.b(.*)"
    assert concat_source((ConcatPattern(("x", WILDCARD)),), capture=False) == "x(?:.*)"


def test_literal(matcher):
    template = T("(f (patch-literal (patch-swap a b)))")
    assert matcher.match_tree(template, read("(f (patch-swap a b))")) == (f, Literal(read("(patch-swap a b)")))
    assert matcher.match_tree(template, read("(f a)")) is None


def test_remove_captures_forms(matcher):
    output = matcher.match_tree(T("(f (patch-remove (g ...)) x)"), read("(f (g 1) x)"))
    assert output == (f, Remove((read("(g 1)"),)), Symbol("x"))


def test_add_consumes_nothing(matcher):
    output = matcher.match_tree(T("(f (patch-add (new)) x)"), read("(f x)"))
    assert output == (f, Add(((Symbol("new"),),)), Symbol("x"))
    assert matcher.match_tree(T("(f (patch-add (new)) x)"), read("(f (new) x)")) is None


def test_concat_directive_part_keeps_captured_text(matcher):
    """A wildcard inside a directive part is rebuilt from the matched substring."""
    output = matcher.match_tree(T('(patch-concat "a" (patch-swap ... "b"))'), "axyz")
    assert output == Concat(("a", Swap("xyz", "b")))
    assert project_one(output, Projection.OLD) == "axyz"
    assert project_one(output, Projection.NEW) == "ab"


def test_nested_concat_part(matcher):
    output = matcher.match_tree(T('(patch-concat "a" (patch-concat "b" ...) "c")'), "abxc")
    assert output == Concat(("a", Concat(("b", "x")), "c"))
