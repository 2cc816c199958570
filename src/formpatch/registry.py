"""Templates per (object name, definition kind), and their resolution into patches."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from jinja2 import StrictUndefined, Template
from pydantic import BaseModel

from formpatch.directives import DirectiveSyntax
from formpatch.exceptions import (
    DefinitionNotFound,
    TemplateNotFound,
    TemplateResolutionError,
    TemplateSyntaxError,
    VersionNotFound,
)
from formpatch.projection import Projection, project_one
from formpatch.selector import Candidate, TemplateSelector
from formpatch.sexp import QUOTE, dumps, read_all, read_file
from formpatch.template import compile_template, render
from formpatch.tree import Symbol, Tree, head_symbol, tree_equal

logger = logging.getLogger("formpatch.registry")


def as_symbol(value: Symbol | str) -> Symbol:
    return value if isinstance(value, Symbol) else Symbol(value)


class DefinitionLocator(Protocol):
    def locate(self, kind: Symbol, name: Symbol) -> Tree:
        """The definition of ``name`` of the given kind. Raises DefinitionNotFound."""
        ...


class SourceIndex:
    """Top-level ``(KIND NAME ...)`` forms of s-expression source, by kind and name.

    A later definition of the same kind and name replaces an earlier one, the
    way re-evaluating a file would.
    """

    def __init__(self, forms: Iterable[Tree] = ()):
        self._definitions: dict[tuple[Symbol, Symbol], Tree] = {}
        self.add_forms(forms)

    @classmethod
    def from_text(cls, text: str) -> SourceIndex:
        return cls(read_all(text))

    @classmethod
    def from_files(cls, paths: Iterable[Path | str]) -> SourceIndex:
        index = cls()
        for path in paths:
            index.add_forms(read_file(path))
        return index

    def add_forms(self, forms: Iterable[Tree]) -> None:
        for form in forms:
            if isinstance(form, tuple) and len(form) >= 2 and isinstance(form[0], Symbol) and isinstance(form[1], Symbol):
                self._definitions[(form[0], form[1])] = form

    def __len__(self) -> int:
        return len(self._definitions)

    def locate(self, kind: Symbol | str, name: Symbol | str) -> Tree:
        kind, name = as_symbol(kind), as_symbol(name)
        try:
            return self._definitions[(kind, name)]
        except KeyError:
            raise DefinitionNotFound(kind, name) from None


@dataclass(frozen=True)
class ResolvedPatch:
    tag: Symbol
    """Patch tag, for example ``patch-defun``."""
    name: Symbol
    body: tuple
    """Everything after the name in the resolved definition, directives included."""

    def as_tree(self) -> tuple:
        return (self.tag, self.name, *self.body)

    def render(self, syntax: DirectiveSyntax | None = None) -> str:
        return render(self.as_tree(), syntax)


class RegistryConfig(BaseModel):
    directive_prefix: str = "patch-"
    """Prefix of every directive tag, ``patch-`` gives ``patch-swap``, ``patch-wrap``, ..."""
    wildcard: str = "..."
    """Symbol standing for one or more forms in a template."""
    define_template_tag: str = "patch-define-template"
    """Head of the forms read by ``TemplateRegistry.load``."""
    tag_template: str = "patch-{{ head }}"
    """Jinja template for the patch tag of a kind missing from ``kind_tags``. Gets ``head``, ``kind`` and ``name``."""
    kind_tags: dict[str, str] = {}
    """Patch tag per definition kind, e.g. ``{"defun": "patch-defun"}``."""
    mode: Literal["build", "load"] = "build"
    """``build``: resolve once and drop the templates. ``load``: resolve on every expansion."""
    warn_on_load: bool = True
    """Log a warning whenever templates are resolved in load mode."""


class TemplateRegistry:
    def __init__(self, locator: DefinitionLocator, *, config_class: Callable = RegistryConfig, **kwargs):
        self.config = config_class(**kwargs)
        self.locator = locator
        self.syntax = DirectiveSyntax(self.config.directive_prefix, self.config.wildcard)
        self._templates: dict[Symbol, dict[Symbol, tuple]] = {}
        self._expanded: dict[tuple[Symbol, Symbol], ResolvedPatch] = {}

    def define(self, kind: Symbol | str, name_expr: Tree, templates: Iterable[Tree | str]) -> Symbol:
        """Register templates for the ``kind`` definition of ``name_expr``. Returns the resolved name."""
        kind = as_symbol(kind)
        name = self._resolve_name(name_expr)
        compiled = tuple(compile_template(template, self.syntax) for template in templates)
        if not compiled:
            raise TemplateSyntaxError(f"No templates given for {kind} {name}")
        for template in compiled:
            Candidate(template)
        self._templates.setdefault(name, {})[kind] = compiled
        self._expanded.pop((name, kind), None)
        logger.info(f"Defined {len(compiled)} template(s) for {kind} {name}")
        return name

    def _resolve_name(self, name_expr: Tree) -> Symbol:
        if isinstance(name_expr, (Symbol, str)):
            return as_symbol(name_expr)
        if isinstance(name_expr, tuple) and len(name_expr) == 2 and name_expr[0] == QUOTE:
            if isinstance(name_expr[1], Symbol):
                return name_expr[1]
        raise TemplateSyntaxError(f"Cannot resolve an object name from {dumps(name_expr)}")

    def load(self, text: str) -> list[tuple[Symbol, Symbol]]:
        """Define templates from ``(patch-define-template (KIND NAME) TEMPLATE ...)`` forms.

        Other top-level forms are ignored. Returns the ``(name, kind)`` pairs defined.
        """
        define_tag = Symbol(self.config.define_template_tag)
        defined = []
        for form in read_all(text):
            if head_symbol(form) != define_tag:
                continue
            target = form[1] if len(form) >= 3 else None
            if not (isinstance(target, tuple) and len(target) == 2 and isinstance(target[0], Symbol)):
                raise TemplateSyntaxError(f"Expected ({define_tag} (KIND NAME) TEMPLATE ...): {dumps(form)}")
            kind, name_expr = form[1]
            name = self.define(kind, name_expr, form[2:])
            defined.append((name, as_symbol(kind)))
        return defined

    def templates(self, name: Symbol | str, kind: Symbol | str) -> tuple:
        name, kind = as_symbol(name), as_symbol(kind)
        if name not in self._templates:
            raise TemplateNotFound(name)
        if kind not in self._templates[name]:
            raise VersionNotFound(name, kind)
        return self._templates[name][kind]

    def entries(self) -> list[tuple[Symbol, Symbol]]:
        return [(name, kind) for name, kinds in self._templates.items() for kind in kinds]

    def undefine(self, name: Symbol | str, kind: Symbol | str) -> None:
        name, kind = as_symbol(name), as_symbol(kind)
        self.templates(name, kind)
        del self._templates[name][kind]
        if not self._templates[name]:
            del self._templates[name]

    def patch_tag(self, kind: Symbol, name: Symbol, head: Symbol) -> Symbol:
        if tag := self.config.kind_tags.get(kind.name):
            return Symbol(tag)
        rendered = Template(self.config.tag_template, undefined=StrictUndefined).render(
            head=head.name, kind=kind.name, name=name.name
        )
        return Symbol(rendered)

    def resolve(self, name: Symbol | str, kind: Symbol | str) -> ResolvedPatch:
        """Locate the definition, match every template in it and build the patch."""
        name, kind = as_symbol(name), as_symbol(kind)
        templates = self.templates(name, kind)
        definition = self.locator.locate(kind, name)
        logger.debug(f"Resolving {len(templates)} template(s) against {dumps(definition)}")
        candidates = [Candidate(template) for template in templates]
        (resolved,) = TemplateSelector(candidates).select((definition,))
        if not (
            isinstance(resolved, tuple)
            and len(resolved) >= 2
            and tree_equal(resolved[0], definition[0])
            and tree_equal(resolved[1], definition[1])
        ):
            raise TemplateResolutionError(f"Templates for {kind} {name} may not change the head or the name")
        if not tree_equal(project_one(resolved, Projection.OLD), definition):
            raise TemplateResolutionError(f"Resolved templates for {kind} {name} do not reproduce the definition")
        tag = self.patch_tag(kind, name, resolved[0])
        logger.info(f"Resolved {len(templates)} template(s) for {kind} {name} into {tag}")
        return ResolvedPatch(tag, name, resolved[2:])

    def expand(self, name: Symbol | str, kind: Symbol | str) -> ResolvedPatch:
        """Resolve according to the configured mode."""
        name, kind = as_symbol(name), as_symbol(kind)
        if self.config.mode == "build":
            if (name, kind) not in self._expanded:
                self._expanded[(name, kind)] = self.resolve(name, kind)
                self.undefine(name, kind)
            return self._expanded[(name, kind)]
        if self.config.warn_on_load:
            logger.warning(f"Resolving templates for {kind} {name} at load time, consider build mode")
        return self.resolve(name, kind)
