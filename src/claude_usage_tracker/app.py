"""Command line entry point: one-shot summary or a headless watch loop."""

import logging
import os
import signal
import sys
from pathlib import Path
from typing import Optional

import orjson
import typer

from claude_usage_tracker.types import DataRootNotFoundError, UsageSnapshot

app = typer.Typer(help="Track Claude Code API usage and cost from local logs.")

EXIT_CODE_NO_DATA_ROOT = 1

ORGANIZATION_NAME = "claude-usage-tracker"
APPLICATION_NAME = "Claude Usage Tracker"


def _create_core_app():
    from PySide6.QtCore import QCoreApplication

    core_app = QCoreApplication.instance()
    if core_app is None:
        core_app = QCoreApplication(sys.argv[:1] or ["claude-usage-tracker"])
    core_app.setApplicationName(APPLICATION_NAME)
    core_app.setOrganizationName(ORGANIZATION_NAME)
    return core_app


def _configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_repository(data_root: Optional[Path], verbose: bool):
    from claude_usage_tracker.services.config_manager import ConfigManager

    _create_core_app()
    config = ConfigManager()
    _configure_logging(verbose or config.get_bool("advanced/debugLogging"))
    return config, config.build_repository(data_root=data_root)


def snapshot_summary(snapshot: UsageSnapshot) -> dict:
    """Plain-data view of a snapshot for printing or JSON output."""
    block = snapshot.active_block
    summary = {
        "taken_at": snapshot.taken_at.isoformat(),
        "today": {
            "cost_usd": round(snapshot.today_stats.total_cost, 6),
            "tokens": snapshot.today_stats.total_tokens,
            "records": len(snapshot.today_records),
        },
        "all_time": {
            "cost_usd": round(snapshot.all_stats.total_cost, 6),
            "tokens": snapshot.all_stats.total_tokens,
            "sessions": snapshot.all_stats.session_count,
        },
        "active_session": None,
        "auto_token_limit": snapshot.auto_token_limit,
    }
    if block is not None:
        summary["active_session"] = {
            "start": block.start_time.isoformat(),
            "end": block.end_time.isoformat(),
            "tokens": block.tokens.total,
            "cost_usd": round(block.cost_usd, 6),
            "models": sorted(block.models),
            "tokens_per_minute": round(block.burn_rate.tokens_per_minute, 2),
            "cost_per_hour": round(block.burn_rate.cost_per_hour, 6),
            "projected_tokens": block.projection.total_tokens if block.projection else None,
            "projected_cost_usd": round(block.projection.total_cost, 6) if block.projection else None,
            "token_limit": block.token_limit,
        }
    return summary


def _format_summary(summary: dict) -> str:
    today = summary["today"]
    all_time = summary["all_time"]
    lines = [
        f"Today:    ${today['cost_usd']:.2f}  {today['tokens']:,} tokens  ({today['records']} requests)",
        f"All time: ${all_time['cost_usd']:.2f}  {all_time['tokens']:,} tokens  ({all_time['sessions']} sessions)",
    ]
    session = summary["active_session"]
    if session is None:
        lines.append("Session:  no active session")
    else:
        lines.append(
            f"Session:  {session['tokens']:,} tokens  ${session['cost_usd']:.2f}  "
            f"{session['tokens_per_minute']:,.0f} tok/min  ${session['cost_per_hour']:.2f}/h"
        )
        if session["projected_tokens"] is not None:
            lines.append(
                f"Projected: {session['projected_tokens']:,} tokens  ${session['projected_cost_usd']:.2f}"
            )
        if session["token_limit"]:
            lines.append(f"Limit:    {session['token_limit']:,} tokens")
    return "\n".join(lines)


@app.command()
def summary(
    data_root: Optional[Path] = typer.Option(
        None, "--data-root", "-d", help="Claude data directory (default ~/.claude)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Print today's and all-time usage plus the active session once."""
    _, repository = _build_repository(data_root, verbose)
    try:
        snap = repository.snapshot("manual")
    except DataRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_CODE_NO_DATA_ROOT)

    data = snapshot_summary(snap)
    if as_json:
        typer.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())
    else:
        typer.echo(_format_summary(data))


@app.command()
def watch(
    data_root: Optional[Path] = typer.Option(
        None, "--data-root", "-d", help="Claude data directory (default ~/.claude)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Keep refreshing on file changes and timers, logging each snapshot."""
    from claude_usage_tracker.services.file_watcher import FileWatcher
    from claude_usage_tracker.services.refresh_coordinator import RefreshCoordinator

    config, repository = _build_repository(data_root, verbose)
    if not os.path.isdir(repository.data_root):
        typer.echo(f"Error: Claude data directory not found: {repository.data_root}", err=True)
        raise typer.Exit(EXIT_CODE_NO_DATA_ROOT)

    core_app = _create_core_app()
    watcher = FileWatcher(debounce_ms=config.get_int("refresh/debounceMs"))
    coordinator = RefreshCoordinator(
        repository,
        watcher=watcher,
        interval_s=config.get_int("refresh/intervalSeconds"),
    )
    coordinator.snapshot_ready.connect(
        lambda snap: typer.echo(_format_summary(snapshot_summary(snap)) + "\n")
    )
    coordinator.refresh_failed.connect(lambda msg: typer.echo(f"Error: {msg}", err=True))

    # Allow Ctrl+C to kill the app
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    coordinator.start()
    ret = core_app.exec()
    coordinator.stop()
    raise typer.Exit(ret)


def run():
    app()
