"""CLI entry point: command definitions using Click.

Commands:
    init          Generate a template config file
    solutions     List solution files found in the workspace
    diagnostics   Map an InspectCode report onto per-file diagnostics
"""

import functools
import json
import sys
import warnings
from datetime import datetime, timezone
from typing import Any

import click

from inspect_report import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load config for the current invocation. Exits on error."""
    from inspect_report.config import ConfigError, load

    obj = ctx.obj
    try:
        config = load(obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    if obj["verbose"]:
        click.echo(f"[verbose] Loaded configuration from '{obj['config_path']}'", err=True)
    return config


def _emit_json(data: Any, ctx: click.Context) -> None:
    """Write JSON to stdout or to the file specified by --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    output_path: str | None = obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Diagnostics written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_errors(func):
    """Decorator that catches report and loader exceptions and exits cleanly."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from inspect_report.client import (
            AuthenticationError,
            NetworkError,
            NotFoundError,
            ReportClientError,
        )
        from inspect_report.config import SolutionNotFoundError
        from inspect_report.reports.decoder import MalformedReportError

        try:
            return func(*args, **kwargs)
        except SolutionNotFoundError as exc:
            click.echo(f"Solution error: {exc}", err=True)
            sys.exit(1)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except NotFoundError as exc:
            click.echo(f"Not found: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except ReportClientError as exc:
            click.echo(f"Report error: {exc}", err=True)
            sys.exit(1)
        except MalformedReportError as exc:
            click.echo(f"Malformed report: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="inspect-config.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="inspect-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """InspectCode report tool. Map findings onto editor diagnostics, export as JSON."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="inspect-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template inspect-config.yaml file."""
    from inspect_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your report location and solution aliases.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# solutions
# ---------------------------------------------------------------------------

@cli.command("solutions")
@click.pass_context
def solutions_command(ctx: click.Context) -> None:
    """List solution files found in the configured workspace."""
    from inspect_report.discovery import find_solutions

    config = _load_config(ctx)
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Searching '{config.workspace}' for '{config.solution_glob}'", err=True)

    found = find_solutions(config.workspace, config.solution_glob, config.exclude)
    _emit_json({"workspace": config.workspace, "solutions": found}, ctx)


# ---------------------------------------------------------------------------
# diagnostics
# ---------------------------------------------------------------------------

@cli.command("diagnostics")
@click.argument("solution", required=False)
@click.option("--report", "report_source", default=None,
              help="Report path or URL (overrides the 'report' config value).")
@click.pass_context
@_handle_errors
def diagnostics_command(ctx: click.Context, solution: str | None, report_source: str | None) -> None:
    """Map the InspectCode report for SOLUTION onto per-file diagnostics.

    SOLUTION may be an alias from the config or a path to a .sln file. When
    omitted, the workspace must contain exactly one solution.
    """
    from inspect_report.client import ReportClient
    from inspect_report.discovery import solution_directory
    from inspect_report.reports.engine import ReportProcessor
    from inspect_report.sink import DiagnosticCollection

    config = _load_config(ctx)
    verbose = ctx.obj["verbose"]

    solution_path = _pick_solution(config, solution)
    project_directory = solution_directory(solution_path)
    source = report_source or config.report

    if verbose:
        click.echo(f"[verbose] Loading report '{source}' for '{solution_path}'", err=True)

    xml = ReportClient(token=config.token or None).fetch(source)

    sink = DiagnosticCollection()
    processor = ReportProcessor(sink, source=config.source)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = processor.run(xml, project_directory)

    for w in caught:
        click.echo(f"Warning: {w.message}", err=True)
    if verbose:
        for skipped in result.skipped:
            click.echo(
                f"[verbose] Skipped {skipped.issue.file}:{skipped.issue.line} "
                f"({skipped.reason}): {skipped.detail}",
                err=True,
            )

    snapshot = sink.snapshot()
    _emit_json({
        "report_type":   "diagnostics",
        "solution":      solution_path,
        "tools_version": result.tools_version,
        "generated_at":  datetime.now(timezone.utc).isoformat(),
        "summary":       result.summary(),
        "files": [
            {"file": file, "diagnostics": [d.to_dict() for d in diagnostics]}
            for file, diagnostics in snapshot.items()
        ],
        "skipped": [s.to_dict() for s in result.skipped],
    }, ctx)


def _pick_solution(config, name: str | None) -> str:
    from inspect_report.config import SolutionNotFoundError
    from inspect_report.discovery import find_solutions

    if name:
        return config.resolve_solution(name)

    found = find_solutions(config.workspace, config.solution_glob, config.exclude)
    if len(found) == 1:
        return found[0]
    if not found:
        raise SolutionNotFoundError(
            f"No solution file matching '{config.solution_glob}' under '{config.workspace}'."
        )
    raise SolutionNotFoundError(
        "Several solution files found, pass one explicitly:\n"
        + "\n".join(f"  - {path}" for path in found)
    )
