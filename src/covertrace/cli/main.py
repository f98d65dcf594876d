"""
Main CLI entry point for covertrace.

Provides the command-line interface using Click:
- decorate: show the path tag every document node receives
- report: compare a covered-path list with a document
- config: show the effective configuration
"""

import json as _json
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.syntax as _rich_syntax
import rich.table as _rich_table
import yaml as _yaml

import covertrace
import covertrace.codec as codec
import covertrace.config as config
import covertrace.logging as logging
import covertrace.paths as paths
import covertrace.report as report
import covertrace.terms as terms
import covertrace.tracing as tracing

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _load_data(path: _pathlib.Path) -> _typing.Any:
    """Load a JSON or YAML file (chosen by suffix)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise _click.ClickException(f"cannot read {path}: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return _yaml.safe_load(text)
        return _json.loads(text)
    except (ValueError, _yaml.YAMLError) as e:
        raise _click.ClickException(f"cannot parse {path}: {e}") from e


def _load_document(path: _pathlib.Path) -> terms.Term:
    try:
        return terms.from_python(_load_data(path))
    except TypeError as e:
        raise _click.ClickException(f"unsupported document {path}: {e}") from e


def _walk_tags(
    root: terms.Term,
) -> _typing.Iterator[tuple[terms.Term, str]]:
    """Yield every tagged term with its origin string, in document order."""
    stack = [root]
    while stack:
        term = stack.pop()
        if term.location is not None and codec.decode_path(term.location.file) is not None:
            yield term, term.location.file
        value = term.value
        if isinstance(value, terms.Array):
            stack.extend(reversed(value.terms))
        elif isinstance(value, terms.Object):
            stack.extend(reversed([item for _, item in value.items]))


def _console() -> _rich_console.Console:
    return _rich_console.Console(highlight=False)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(covertrace.__version__, "-v", "--version", prog_name="covertrace")
@_click.option(
    "--log-level",
    type=_click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Log level (default: from config)",
)
@_click.pass_context
def cli(ctx: _click.Context, log_level: str | None) -> None:
    """covertrace - input-document coverage for policy evaluation."""
    try:
        settings = config.Settings()
    except (config.ConfigFileError, _pydantic.ValidationError) as e:
        raise _click.ClickException(str(e)) from e

    logging.configure_logging(log_level or settings.logging.level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@_click.argument("document", type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path))
@_click.option("--json", "as_json", is_flag=True, help="Output JSON lines instead of a table")
@_click.pass_context
def decorate(ctx: _click.Context, document: _pathlib.Path, as_json: bool) -> None:
    """Show the path tag each node of DOCUMENT receives.

    DOCUMENT is a JSON or YAML file.

    Examples:
        covertrace decorate input.json
        covertrace decorate input.yaml --json
    """
    settings: config.Settings = ctx.obj["settings"]
    root = _load_document(document)

    with logging.TraceLogger(log_file=settings.logging.trace_file) as trace_logger:
        document_decorator = tracing.DocumentDecorator(
            provenance=settings.coverage.provenance,
            trace_logger=trace_logger,
        )
        try:
            document_decorator.decorate(root)
        except codec.PathEncodeError as e:
            raise _click.ClickException(str(e)) from e

    tagged = list(_walk_tags(root))

    if as_json:
        for term, origin in tagged:
            path = codec.decode_path(origin)
            _click.echo(
                _json.dumps({"path": list(path or ()), "origin": origin, "value": str(term)})
            )
        return

    table = _rich_table.Table(title=str(document))
    table.add_column("Path")
    table.add_column("Origin tag")
    table.add_column("Value", overflow="fold")
    for term, origin in tagged:
        path = codec.decode_path(origin) or paths.ROOT
        table.add_row(paths.format_path(path), origin, _shorten(str(term)))
    _console().print(table)


@cli.command(name="report")
@_click.argument("document", type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path))
@_click.option(
    "--covered",
    "covered_file",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
    required=True,
    help="JSON file holding the covered paths (array of arrays)",
)
@_click.option(
    "--min-coverage",
    type=_click.FloatRange(0, 100),
    default=0.0,
    show_default=True,
    help="Fail (exit 1) below this percentage",
)
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--show-covered", is_flag=True, help="List covered leaves too")
def report_cmd(
    document: _pathlib.Path,
    covered_file: _pathlib.Path,
    min_coverage: float,
    as_json: bool,
    show_covered: bool,
) -> None:
    """Report which leaves of DOCUMENT a policy read.

    The covered-path file is the output of CoverageTracer.covered() written
    as JSON, e.g. [["a", 1], ["b"]].

    Examples:
        covertrace report input.json --covered covered.json
        covertrace report input.json --covered covered.json --min-coverage 80
    """
    root = _load_document(document)
    covered = _load_data(covered_file)
    if not isinstance(covered, list) or not all(isinstance(p, list) for p in covered):
        raise _click.ClickException(f"{covered_file}: expected a JSON array of arrays")

    result = report.build_report(root, covered)

    if as_json:
        _click.echo(_json.dumps(result.to_dict(), indent=2))
    else:
        console = _console()
        console.print(
            f"Coverage: [bold]{result.percent:.1f}%[/bold] "
            f"({len(result.covered)}/{result.total} leaves)"
        )
        if result.uncovered:
            console.print("\nUncovered:")
            for path in result.uncovered:
                console.print(f"  [red]✗[/red] {paths.format_path(path)}")
        if show_covered and result.covered:
            console.print("\nCovered:")
            for path in result.covered:
                console.print(f"  [green]✓[/green] {paths.format_path(path)}")

    if not result.passes(min_coverage):
        raise SystemExit(1)


@cli.command(name="config")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_cmd(ctx: _click.Context, as_json: bool) -> None:
    """Show effective configuration from all sources."""
    settings: config.Settings = ctx.obj["settings"]
    full_config = settings.model_dump(mode="json")

    if as_json:
        _click.echo(_json.dumps(full_config, indent=2))
    else:
        yaml_text = _yaml.dump(full_config, default_flow_style=False, sort_keys=False)
        if _is_tty():
            _console().print(
                _rich_syntax.Syntax(yaml_text, "yaml", theme="monokai", background_color="default")
            )
        else:
            _click.echo(yaml_text.rstrip("\n"))

    unknown = settings.get_unknown_fields()
    if unknown:
        _click.echo(
            "\nWarning: unknown config keys: " + ", ".join(sorted(unknown)),
            err=True,
        )


def _is_tty() -> bool:
    return _sys.stdout.isatty()


def _shorten(text: str, limit: int = 60) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="covertrace")


if __name__ == "__main__":
    main()
