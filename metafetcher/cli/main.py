"""
Command line interface for the meta fetcher.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import typer

from metafetcher import __version__
from metafetcher.config import Settings, load_settings
from metafetcher.errors import MetaFetcherError
from metafetcher.services.logging import (
    configure_logging,
    get_logger,
    shutdown_logging,
)
from metafetcher.workflow.orchestrator import run_sync

app = typer.Typer(
    name="stremio-metafetcher",
    help="Fetch Cinemeta metas for IMDb IDs listed in CSV files that aren't cached yet.",
)
logger = get_logger(__name__)

PROGRAM_NAME = "stremio-metafetcher"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROGRAM_NAME} v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help=f"Print the version of {PROGRAM_NAME} and exit.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Console logging level (overrides settings).",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Path to .env file with settings.",
    ),
) -> None:
    """CLI entrypoint hook."""
    ctx.obj = {"log_level": log_level, "env_file": env_file}


@app.command()
def sync(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        "--dataDir",
        "-d",
        help=(
            "Location of the data directory. It contains CSV files with IMDb IDs and "
            'a "metas" subdirectory will be used for writing metas as JSON files.'
        ),
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=False,
        help="Optional YAML settings override.",
    ),
    dedupe: Optional[bool] = typer.Option(
        None,
        "--dedupe/--no-dedupe",
        help="Fetch repeated identifiers only once.",
    ),
    create_metas_dir: Optional[bool] = typer.Option(
        None,
        "--create-metas-dir/--no-create-metas-dir",
        help="Create the metas directory when it doesn't exist.",
    ),
) -> None:
    """Fetch and write every missing meta."""

    settings = _build_settings(ctx, config_path, data_dir, dedupe, create_metas_dir)
    _configure_logging_for_run(settings)
    try:
        run_sync(settings=settings)
    except MetaFetcherError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc
    finally:
        shutdown_logging()


@app.command()
def missing(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        "--dataDir",
        "-d",
        help="Location of the data directory.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=False,
        help="Optional YAML settings override.",
    ),
    dedupe: Optional[bool] = typer.Option(
        None,
        "--dedupe/--no-dedupe",
        help="List repeated identifiers only once.",
    ),
) -> None:
    """List the identifiers that have no cached meta, without fetching."""

    settings = _build_settings(ctx, config_path, data_dir, dedupe, None)
    _configure_logging_for_run(settings)
    try:
        results = run_sync(settings=settings, dry_run=True)
    except MetaFetcherError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc
    finally:
        shutdown_logging()

    for result in results:
        for identifier in result.missing:
            typer.echo(f"{result.csv_path.name}\t{identifier}")


@app.command("settings")
def show_settings(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=False,
        help="Optional YAML settings override.",
    ),
) -> None:
    """Print resolved settings for debugging."""
    settings = _build_settings(ctx, config_path, None, None, None)
    for key, value in settings.model_dump().items():
        typer.echo(f"{key}: {value}")


def _build_settings(
    ctx: typer.Context,
    config_path: Optional[Path],
    data_dir: Optional[Path],
    dedupe: Optional[bool],
    create_metas_dir: Optional[bool],
) -> Settings:
    obj = ctx.obj or {}
    overrides: Dict[str, Any] = {}
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    if dedupe is not None:
        overrides["deduplicate"] = dedupe
    if create_metas_dir is not None:
        overrides["create_metas_dir"] = create_metas_dir
    if obj.get("log_level"):
        overrides["log_level"] = obj["log_level"]
    return load_settings(
        config_path,
        overrides=overrides or None,
        env_file=obj.get("env_file"),
    )


def _configure_logging_for_run(settings: Settings) -> None:
    configure_logging(
        level=settings.log_level,
        log_to_file=settings.log_to_file,
        log_file=settings.resolve_log_file(),
        log_to_console=settings.log_to_console,
    )


def main() -> None:
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
