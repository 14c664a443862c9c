"""Click-based CLI for color detection and stylesheet indexing."""

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from .config import ColorIndexerConfig, load_config
from .document import TextDocument
from .errors import ColorIndexerError
from .indexer_logging import setup_logging
from .models import ColorFormat, DetectionRecord
from .service import ColorService
from .workspace import read_stylesheet, source_id_for


def common_options(f: Any) -> Any:
    """Common options for all commands."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")(f)
    f = click.option(
        "--config",
        type=click.Path(exists=True, path_type=Path),
        help="Configuration file path",
    )(f)
    return f


def json_option(f: Any) -> Any:
    return click.option("--json", "as_json", is_flag=True, help="Output JSON")(f)


def _fail(error: ColorIndexerError) -> NoReturn:
    click.echo(error.format(), err=True)
    sys.exit(error.exit_code)


def _setup(config_path: Path | None, verbose: bool, quiet: bool) -> ColorIndexerConfig:
    """Validate flags, load configuration and configure logging."""
    if quiet and verbose:
        click.echo("Error: --quiet and --verbose are mutually exclusive", err=True)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ColorIndexerError as e:
        _fail(e)

    setup_logging(
        level=config.log_level,
        quiet=quiet,
        verbose=verbose,
        log_format=config.log_format,
    )
    return config


def _describe(record: DetectionRecord) -> str:
    """One-line text rendering of a detection record."""
    start = record.range.start
    flags = []
    if record.is_css_variable_declaration:
        flags.append("declaration")
    elif record.is_tailwind_class:
        flags.append(f"tailwind {record.variable_name}")
    elif record.is_css_variable:
        flags.append("variable")
    if record.is_wrapped_in_function:
        flags.append("wrapped")
    if record.is_css_class:
        flags.append("class")
    suffix = f"  [{', '.join(flags)}]" if flags else ""
    return (
        f"{start.line + 1}:{start.character + 1}  "
        f"{record.original_text} -> {record.normalized_color}{suffix}"
    )


@click.group()
@click.version_option(version="1.0.0")
def cli() -> None:
    """Color Indexer - find and convert colors in source files."""


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Index stylesheets under this directory first",
)
@json_option
@common_options
def scan(
    file: Path,
    root: Path | None,
    as_json: bool,
    config: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Detect colors in FILE."""
    settings = _setup(config, verbose, quiet)
    service = ColorService(settings)

    try:
        if root is not None:
            report = service.index_workspace(root)
            if not quiet and not as_json:
                click.echo(
                    f"📁 Indexed {report.files_indexed} stylesheets "
                    f"({report.variables} variables, {report.classes} classes)"
                )
        text = read_stylesheet(file)
    except ColorIndexerError as e:
        _fail(e)

    document = TextDocument(source_id_for(file), text)
    records = service.detect(document)

    if as_json:
        click.echo(json.dumps([record.to_dict() for record in records], indent=2))
        return

    if not records:
        if not quiet:
            click.echo("No colors found")
        return
    for record in records:
        click.echo(_describe(record))


@cli.command()
@click.argument("color")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([fmt.value for fmt in ColorFormat]),
    help="Only print this format",
)
@json_option
@common_options
def convert(
    color: str,
    fmt: str | None,
    as_json: bool,
    config: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Print COLOR in every format it can be written in."""
    settings = _setup(config, verbose, quiet)
    service = ColorService(settings)

    parsed = service.parse_color(color)
    if parsed is None:
        click.echo(f"Error: not a color: {color}", err=True)
        sys.exit(1)

    if fmt is not None:
        value = service.format_color(parsed, fmt)
        if value is None:
            click.echo(f"Error: {fmt} cannot represent {color}", err=True)
            sys.exit(1)
        click.echo(json.dumps({fmt: value}) if as_json else value)
        return

    conversions = service.format_conversions(parsed)
    if as_json:
        click.echo(json.dumps({c.format.value: c.value for c in conversions}, indent=2))
        return
    for conversion in conversions:
        click.echo(f"{conversion.format.value:<9} {conversion.value}")


@cli.command()
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@json_option
@common_options
def index(
    root: Path,
    as_json: bool,
    config: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Index the stylesheets under ROOT and report what was found."""
    settings = _setup(config, verbose, quiet)
    service = ColorService(settings)
    report = service.index_workspace(root)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    elif not quiet:
        click.echo(
            f"✅ Indexed {report.files_indexed}/{report.files_found} stylesheets "
            f"in {report.duration_ms:.0f}ms"
        )
        click.echo(f"   Variables: {report.variables}")
        click.echo(f"   Classes: {report.classes}")
        if report.truncated:
            click.echo(
                f"⚠️ Stopped at {settings.max_stylesheet_files} files", err=True
            )
    for path, reason in report.failures.items():
        click.echo(f"❌ {path}: {reason}", err=True)

    if not report.success:
        sys.exit(1)


@cli.command()
@click.argument("color")
@json_option
@common_options
def contrast(
    color: str,
    as_json: bool,
    config: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Show the WCAG contrast of COLOR against white and black."""
    settings = _setup(config, verbose, quiet)
    service = ColorService(settings)

    parsed = service.parse_color(color)
    if parsed is None:
        click.echo(f"Error: not a color: {color}", err=True)
        sys.exit(1)

    report = service.accessibility(parsed)
    if as_json:
        payload = {
            sample.label: {
                "contrast_ratio": round(sample.contrast_ratio, 2),
                "level": sample.level.level,
                "passes": list(sample.level.passes),
            }
            for sample in report.samples
        }
        click.echo(json.dumps(payload, indent=2))
        return

    for sample in report.samples:
        passes = ", ".join(sample.level.passes) or "none"
        click.echo(
            f"vs {sample.label:<5} {sample.contrast_ratio:5.2f}:1  "
            f"{sample.level.level}  (passes: {passes})"
        )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
