# src/marketpulse/cli.py
"""
Command-line interface for the market pulse refresh.

This module provides CLI commands to:
- Refresh marketLenses + lastUpdated in the dashboard snapshot
- Show how each lens would render right now
- Check which job titles the AI classifier flags
"""

from dotenv import load_dotenv
load_dotenv(override=True)  # automatically looks for a .env file in the working directory

import json
import logging
import dataclasses
from pathlib import Path
from typing import List, Optional

import typer

from marketpulse.config import Settings
from marketpulse.io.snapshot import SnapshotError, describe_lens, load_snapshot, read_market_lenses
from marketpulse.models import ONET_LENS_KEY, USAJOBS_LENS_KEY
from marketpulse.pipeline.classify import matched_terms, title_has_ai
from marketpulse.pipeline.refresh import run_refresh

log = logging.getLogger("marketpulse")

# Typer app instance for CLI commands
app = typer.Typer(help="Market pulse refresh for the AI skills dashboard")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _settings(data_path: Optional[Path], **overrides) -> Settings:
    settings = Settings.from_env()
    changes = {k: v for k, v in overrides.items() if v is not None}
    if data_path is not None:
        changes["data_path"] = data_path
    return dataclasses.replace(settings, **changes) if changes else settings


@app.command()
def refresh(
    data_path: Optional[Path] = typer.Option(None, "--data-path", help="Snapshot JSON (default: $PULSE_DATA_PATH or ./data.json)"),
    window_days: Optional[int] = typer.Option(None, "--window-days", min=1, help="USAJOBS window in days"),
    max_results: Optional[int] = typer.Option(None, "--max-results", min=1, help="Max postings to sample"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the new lenses but do not write the snapshot"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Fetch USAJOBS + O*NET -> build lenses -> merge into the snapshot -> write it back.
    Lens failures are recorded in the lens; only snapshot read/write errors fail the run.
    """
    _setup_logging(verbose)
    settings = _settings(data_path, window_days=window_days, max_results=max_results)

    typer.echo(f"Refreshing market lenses in {settings.data_path}...")
    try:
        merged = run_refresh(settings, dry_run=dry_run)
    except SnapshotError as e:
        log.error(f"Update failed: {e}")
        typer.echo(f"Update failed: {e}", err=True)
        raise typer.Exit(code=1)

    if dry_run:
        lenses = merged["marketLenses"]
        typer.echo(json.dumps({
            USAJOBS_LENS_KEY: lenses[USAJOBS_LENS_KEY],
            ONET_LENS_KEY: lenses[ONET_LENS_KEY],
        }, indent=2, ensure_ascii=False))
        return

    typer.echo(f"Updated {settings.data_path} marketLenses + lastUpdated ({merged['lastUpdated']})")


@app.command()
def status(
    data_path: Optional[Path] = typer.Option(None, "--data-path", help="Snapshot JSON (default: $PULSE_DATA_PATH or ./data.json)"),
):
    """
    Print one line per lens the way the dashboard would show it.

    Always lists both pipeline lenses, so a missing one shows up as "not available".
    """
    settings = _settings(data_path)
    try:
        document = load_snapshot(settings.data_path)
    except SnapshotError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    views = read_market_lenses(document)
    keys = [USAJOBS_LENS_KEY, ONET_LENS_KEY] + [k for k in views if k not in (USAJOBS_LENS_KEY, ONET_LENS_KEY)]
    typer.echo(f"lastUpdated: {document.get('lastUpdated') or '-'}")
    for key in keys:
        typer.echo(describe_lens(key, views.get(key)))


@app.command()
def classify(titles: List[str] = typer.Argument(..., help="Job titles to check")):
    """
    Quick check: which titles count as AI-relevant, and which terms matched.
    """
    for title in titles:
        flag = "AI " if title_has_ai(title) else "-- "
        terms = matched_terms(title)
        suffix = f"  [{', '.join(terms)}]" if terms else ""
        typer.echo(f"{flag}{title}{suffix}")


if __name__ == "__main__":
    app()
