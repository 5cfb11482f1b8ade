"""Command-line interface for lingobundle.

Commands:
    lingobundle compile CATALOG NAME   Compile a catalog into a bundle module
    lingobundle check-plural HEADER    Parse a Plural-Forms header and sample it
    lingobundle inspect CATALOG        Show the compiled key/value table
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Callable, Iterable, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lingobundle.arith import to_int32
from lingobundle.catalog import CONTEXT_GLUE, Catalog, CatalogMode
from lingobundle.cli.errors import CLIError, ErrorCode, error_boundary
from lingobundle.compiler import BundleCompiler, compile_plural_forms
from lingobundle.config import CompilerConfig
from lingobundle.emitter import emit_bundle
from lingobundle.logging import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="lingobundle",
    help="Compile gettext catalogs into Python resource bundles",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

DEFAULT_SAMPLES = [*range(0, 11), 100, 101, 102]

_state = {"verbose": False}


# =============================================================================
# Type Aliases
# =============================================================================

ConfigOpt = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Configuration file (TOML, JSON or YAML)"),
]

TemplateOpt = Annotated[
    bool,
    typer.Option("--template", help="Compile in template mode (echo source text)"),
]


# =============================================================================
# Helper Functions
# =============================================================================


def load_config(path: Path | None, **overrides) -> CompilerConfig:
    if _state["verbose"]:
        overrides["log_level"] = "DEBUG"
    config = CompilerConfig.load(path, **overrides)
    configure_logging(config.log_level)
    return config


def read_catalog(path: Path, template: bool = False) -> Catalog:
    """Load a catalog by file extension.

    Raises:
        CLIError: If the file is missing or its format unsupported.
    """
    if not path.exists():
        raise CLIError(
            f"File not found: {path}",
            ErrorCode.FILE_NOT_FOUND,
            hint="Check that the file exists and the path is correct.",
        )

    mode = CatalogMode.TEMPLATE if template else None
    suffix = path.suffix.lower()
    if suffix in (".po", ".pot"):
        from lingobundle.adapters import load_po

        return load_po(path, mode=mode)
    if suffix in (".json", ".yaml", ".yml"):
        from lingobundle.loader import load_catalog

        return load_catalog(path, mode=mode)
    raise CLIError(
        f"Unsupported catalog format: {suffix or path.name}",
        ErrorCode.INVALID_FILE_FORMAT,
        hint="Use a .po, .pot, .json, .yaml or .yml catalog.",
    )


def format_value(value: object) -> str:
    """Render a bundle value as rich markup."""
    if value is None:
        return "[dim]<untranslated>[/dim]"
    if isinstance(value, tuple):
        if not value:
            return "[dim]<no forms>[/dim]"
        return " | ".join(
            "[dim]<untranslated>[/dim]" if v is None else escape(v) for v in value
        )
    return escape(str(value))


def plural_samples(evaluator: Callable[[int], int], counts: Iterable[int]) -> list[tuple[int, int]]:
    """Pair each count with the form index a bundle would select for it."""
    return [(n, to_int32(evaluator(n))) for n in counts]


# =============================================================================
# Global Options
# =============================================================================


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Compile gettext catalogs into Python resource bundles."""
    _state["verbose"] = verbose


# =============================================================================
# Commands
# =============================================================================


@app.command(name="compile")
@error_boundary
def compile_cmd(
    catalog_file: Annotated[Path, typer.Argument(help="Catalog file (.po, .pot, .json, .yaml)")],
    name: Annotated[str, typer.Argument(help="Fully-qualified module name, e.g. myapp.locale.fr")],
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Root directory for the generated module"),
    ] = None,
    base: Annotated[
        Optional[str],
        typer.Option("--base", help="Dotted path of the bundle base class"),
    ] = None,
    template: TemplateOpt = False,
    config_file: ConfigOpt = None,
) -> None:
    """Compile a catalog and write it as an importable bundle module."""
    config = load_config(config_file, output_dir=output_dir, base=base)
    catalog = read_catalog(catalog_file, template)

    path = emit_bundle(catalog, name, config=config)
    typer.echo(f"Bundle written to {path}")
    typer.echo(f"  Messages: {len(catalog)}")
    typer.echo(f"  Mode: {catalog.mode.value}")


@app.command(name="check-plural")
@error_boundary
def check_plural_cmd(
    header: Annotated[str, typer.Argument(help="Plural-Forms value, e.g. 'nplurals=2; plural=(n != 1);'")],
    samples: Annotated[
        Optional[list[int]],
        typer.Option("--sample", "-n", help="Count to evaluate (repeatable)"),
    ] = None,
    config_file: ConfigOpt = None,
) -> None:
    """Parse and compile a Plural-Forms header, then evaluate sample counts."""
    config = load_config(config_file)
    rule, evaluator = compile_plural_forms(header, config)

    typer.echo(f"nplurals: {rule.nplurals}")
    typer.echo(f"plural: {rule.expression}")
    typer.echo(f"stack depth: {evaluator.max_stack_depth}")

    table = Table(title="Plural index")
    table.add_column("n", justify="right")
    table.add_column("index", justify="right")

    out_of_range = []
    for n, index in plural_samples(evaluator, samples or DEFAULT_SAMPLES):
        if not 0 <= index < rule.nplurals:
            out_of_range.append(n)
        table.add_row(str(n), str(index))
    console.print(table)

    if out_of_range:
        typer.echo(
            typer.style(
                f"Warning: index outside 0..{rule.nplurals - 1} for n = "
                + ", ".join(str(n) for n in out_of_range),
                fg="yellow",
            ),
            err=True,
        )


@app.command(name="inspect")
@error_boundary
def inspect_cmd(
    catalog_file: Annotated[Path, typer.Argument(help="Catalog file (.po, .pot, .json, .yaml)")],
    template: TemplateOpt = False,
    config_file: ConfigOpt = None,
) -> None:
    """Compile a catalog in memory and print its key/value table."""
    config = load_config(config_file)
    catalog = read_catalog(catalog_file, template)
    bundle = BundleCompiler(config).compile(catalog)

    table = Table(title=f"{catalog_file.name} ({catalog.mode.value})")
    table.add_column("Context", style="cyan")
    table.add_column("Id")
    table.add_column("Value")

    for key in bundle.keys():
        context, sep, msgid = key.partition(CONTEXT_GLUE)
        if not sep:
            context, msgid = "", key
        table.add_row(escape(context), escape(msgid), format_value(bundle.lookup(key)))

    console.print(table)
    typer.echo(f"{len(bundle)} keys, nplurals={bundle.nplurals}")


if __name__ == "__main__":
    app()
