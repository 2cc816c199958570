#!/usr/bin/env python3

"""Resolve patch templates against s-expression source files."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

from formpatch.config import DEFAULT_CONFIG_FILE, get_config_from_spec
from formpatch.exceptions import FormpatchError
from formpatch.projection import Projection, project
from formpatch.registry import ResolvedPatch, SourceIndex, TemplateRegistry
from formpatch.sexp import read_all
from formpatch.template import compile_template, render
from formpatch.tree import Symbol, head_symbol
from formpatch.utils.log import add_file_handler, logger, set_console_level
from formpatch.utils.serialize import UNSET, recursive_merge

_console = Console(highlight=False)

_HELP_TEXT = """Resolve patch templates into patches.

[not dim]
Templates are read from [bold green](patch-define-template (KIND NAME) TEMPLATE ...)[/bold green] forms,
definitions from top-level [bold green](KIND NAME ...)[/bold green] forms of the source files.
[/not dim]
"""

_CONFIG_SPEC_HELP_TEXT = """Path to config files, builtin config names, or key-value pairs.

[bold red]IMPORTANT:[/bold red] [red]If you set this option, the default config file will not be used.[/red]
Multiple configs will be recursively merged.

Examples:

[bold green]-c default.yaml -c registry.mode=load[/bold green]

[bold green]-c default.yaml -c registry.directive_prefix=el-patch-[/bold green]
"""

app = typer.Typer(rich_markup_mode="rich", add_completion=False)


def _build_registry(source: list[Path], config_spec: list[str], mode: str | None) -> TemplateRegistry:
    logger.debug(f"Building registry config from specs: {config_spec}")
    configs = [get_config_from_spec(spec) for spec in config_spec]
    configs.append({"registry": {"mode": mode or UNSET}})
    config = recursive_merge(*configs)
    index = SourceIndex.from_files(source)
    logger.info(f"Indexed {len(index)} definition(s) from {len(source)} file(s)")
    return TemplateRegistry(index, **config.get("registry", {}))


def _print_patch(patch: ResolvedPatch, registry: TemplateRegistry) -> None:
    _console.print(Rule(f" {patch.tag} {patch.name} ", style="cyan bold"))
    _console.print(patch.render(registry.syntax), markup=False)


def _fail(error: FormpatchError) -> None:
    _console.print(f"[red bold]{type(error).__name__}[/red bold]: {escape(str(error))}")
    raise typer.Exit(1)


# fmt: off
@app.command(help=_HELP_TEXT)
def resolve(
    templates: Path = typer.Argument(..., help="File with patch-define-template forms", exists=True, dir_okay=False),
    source: list[Path] = typer.Option(..., "-s", "--source", help="Source file(s) holding the definitions", exists=True, dir_okay=False),
    name: str | None = typer.Option(None, "-n", "--name", help="Only resolve templates of this object", rich_help_panel="Selection"),
    kind: str | None = typer.Option(None, "-k", "--kind", help="Only resolve templates of this definition kind", rich_help_panel="Selection"),
    mode: str | None = typer.Option(None, "--mode", help="Resolution mode, build or load", rich_help_panel="Advanced"),
    config_spec: list[str] = typer.Option([str(DEFAULT_CONFIG_FILE)], "-c", "--config", help=_CONFIG_SPEC_HELP_TEXT, rich_help_panel="Advanced"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write the full debug log to this file", rich_help_panel="Advanced"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show every template probe", rich_help_panel="Advanced"),
) -> None:
    # fmt: on
    if verbose:
        set_console_level(logging.DEBUG)
    if log_file is not None:
        add_file_handler(log_file)
    try:
        registry = _build_registry(source, config_spec, mode)
        defined = registry.load(templates.read_text())
        targets = [
            (entry_name, entry_kind)
            for entry_name, entry_kind in defined
            if (name is None or entry_name == Symbol(name)) and (kind is None or entry_kind == Symbol(kind))
        ]
        if not targets:
            _console.print("[yellow]No templates selected[/yellow]")
            raise typer.Exit(1)
        for entry_name, entry_kind in targets:
            _print_patch(registry.expand(entry_name, entry_kind), registry)
    except FormpatchError as e:
        _fail(e)


# fmt: off
@app.command("project")
def project_templates(
    templates: Path = typer.Argument(..., help="File with templates, bare or inside patch-define-template forms", exists=True, dir_okay=False),
    new: bool = typer.Option(False, "--new", help="Show the NEW projection instead of the OLD one"),
    config_spec: list[str] = typer.Option([str(DEFAULT_CONFIG_FILE)], "-c", "--config", help=_CONFIG_SPEC_HELP_TEXT),
) -> None:
    """Print the OLD (or NEW) projection of every template."""
    # fmt: on
    which = Projection.NEW if new else Projection.OLD
    try:
        registry = _build_registry([], config_spec, None)
        define_tag = Symbol(registry.config.define_template_tag)
        for form in read_all(templates.read_text()):
            raw_templates = form[2:] if head_symbol(form) == define_tag else (form,)
            for raw in raw_templates:
                template = compile_template(raw, registry.syntax)
                for tree in project(template, which):
                    _console.print(render(tree, registry.syntax), markup=False)
    except FormpatchError as e:
        _fail(e)


if __name__ == "__main__":
    app()
