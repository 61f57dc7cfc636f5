"""CLI entry point for api-inspector."""

import json
import logging
from fnmatch import fnmatch
from pathlib import Path

import click

from api_inspector.analyzer.base import GroupedEndpoint
from api_inspector.analyzer.shape import extract_shape
from api_inspector.capture.base import CapturedExchange, read_capture_text
from api_inspector.capture.grouping import filter_exchanges, group_endpoints, latency_stats, unique_endpoints
from api_inspector.capture.load import FORMATS, load_exchanges
from api_inspector.config import Settings, load_settings
from api_inspector.errors import InspectorError
from api_inspector.report.render import analyze_all, diff_report, render_json, render_text

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbosity: int, base_level: str = "WARNING") -> None:
    """Set up root logging; each -v lowers the threshold one step."""
    level = logging.getLevelName(base_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity >= 2:
        level = min(level, logging.DEBUG)
    elif verbosity == 1:
        level = min(level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def _filter_endpoints(endpoints: list[GroupedEndpoint], patterns: tuple[str, ...]) -> list[GroupedEndpoint]:
    """Keep endpoints matching any 'METHOD /glob' or '/glob' pattern."""
    result = []
    for ep in endpoints:
        for pattern in patterns:
            parts = pattern.split(maxsplit=1)
            if len(parts) == 2:
                method, path_glob = parts
                if ep.method == method.upper() and fnmatch(ep.path, path_glob):
                    result.append(ep)
                    break
            elif fnmatch(ep.path, parts[0]):
                result.append(ep)
                break
    return result


def _load(ctx: click.Context, source: str, fmt: str) -> list[CapturedExchange]:
    settings: Settings = ctx.obj["settings"]
    try:
        return load_exchanges(source, fmt=fmt, settings=settings)
    except InspectorError as e:
        raise click.ClickException(str(e)) from e


source_argument = click.argument("source")
format_option = click.option(
    "--format", "fmt", default="auto", type=click.Choice(FORMATS), help="Capture format."
)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="Path to a YAML config file.")
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: Path | None):
    """API Inspector: detect response shape drift in captured API traffic."""
    try:
        settings = load_settings(config_path)
    except InspectorError as e:
        raise click.ClickException(str(e)) from e
    configure_logging(verbose, settings.log_level)
    ctx.obj = {"settings": settings}


@main.command()
@source_argument
@format_option
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.option("-e", "--endpoint", "patterns", multiple=True, help="Only analyze matching endpoints, e.g. 'GET /users/*'.")
@click.pass_context
def diffs(ctx: click.Context, source: str, fmt: str, as_json: bool, patterns: tuple[str, ...]):
    """Report missing fields and type changes per endpoint."""
    exchanges = _load(ctx, source, fmt)
    endpoints = group_endpoints(exchanges, ctx.obj["settings"])
    if patterns:
        endpoints = _filter_endpoints(endpoints, patterns)

    if as_json:
        click.echo(render_json(diff_report(endpoints)))
    else:
        click.echo(render_text(analyze_all(endpoints)))


@main.command()
@source_argument
@format_option
@click.pass_context
def endpoints(ctx: click.Context, source: str, fmt: str):
    """List captured endpoints with request counts."""
    exchanges = _load(ctx, source, fmt)
    for method, path, count in unique_endpoints(exchanges):
        click.echo(f"{count:>6}  {method} {path}")


@main.command()
@source_argument
@format_option
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON.")
@click.pass_context
def latency(ctx: click.Context, source: str, fmt: str, as_json: bool):
    """Show average, minimum and maximum latency per endpoint."""
    stats = latency_stats(_load(ctx, source, fmt))
    if as_json:
        click.echo(render_json(stats))
        return
    for s in stats:
        click.echo(
            f"{s['endpoint']}: avg {s['avgLatency']:.1f}ms "
            f"(min {s['minLatency']:.1f}ms, max {s['maxLatency']:.1f}ms, n={s['count']})"
        )


@main.command("requests")
@source_argument
@format_option
@click.option("--method", default=None, help="Filter by HTTP method.")
@click.option("--path", default=None, help="Filter by path substring.")
@click.option("--status", default=None, type=int, help="Filter by status code.")
@click.option("--session", default=None, help="Filter by session id.")
@click.option("--limit", default=None, type=click.IntRange(min=0), help="Maximum number of requests to show.")
@click.pass_context
def list_requests(
    ctx: click.Context,
    source: str,
    fmt: str,
    method: str | None,
    path: str | None,
    status: int | None,
    session: str | None,
    limit: int | None,
):
    """List captured requests, newest first."""
    settings: Settings = ctx.obj["settings"]
    exchanges = filter_exchanges(
        _load(ctx, source, fmt),
        method=method,
        path=path,
        status_code=status,
        session_id=session,
        limit=limit if limit is not None else settings.request_limit,
    )
    for ex in exchanges:
        status_text = ex.status_code if ex.status_code is not None else "error"
        duration = f"{ex.duration_ms:.0f}ms" if ex.duration_ms is not None else "-"
        click.echo(f"{ex.method} {ex.path} - {status_text} ({duration})")


@main.command()
@click.argument("json_path", type=click.Path(exists=True, path_type=Path))
def shape(json_path: Path):
    """Print the structural shape of a JSON document."""
    try:
        text = read_capture_text(json_path)
    except InspectorError as e:
        raise click.ClickException(str(e)) from e
    try:
        rendered = json.dumps(extract_shape(json.loads(text)), indent=2)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {json_path}: {e}") from e
    except RecursionError as e:
        raise click.ClickException(f"{json_path} is nested too deeply") from e
    click.echo(rendered)
