import typer
import yaml
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from batchmux.config.loader import load_config
from batchmux.domain.errors import BatchMuxError
from batchmux.infrastructure.logging import setup_logging, close_logging
from batchmux.infrastructure.event_bus import EventBus
from batchmux.infrastructure.file_scanner import FileScanner
from batchmux.infrastructure.ffmpeg import FFmpegAdapter
from batchmux.pipeline.conversion import ConversionTask
from batchmux.pipeline.orchestrator import Orchestrator

app = typer.Typer(help="batchmux - remux media files in bulk with ffmpeg")

@app.command()
def convert(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="File to convert"),
    directory: Optional[Path] = typer.Option(None, "--dir", "-d", help="Directory to search"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Search directory recursively"),
    workers: Optional[int] = typer.Option(None, "--workers", "-c", help="Number of concurrent conversions"),
    log_path: Optional[Path] = typer.Option(None, "--log-path", "-l", help="Append log lines to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print info lines to stdout"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to YAML config"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging"),
):
    """Convert one file, or every matching file in a directory, and delete the sources."""
    try:
        config = load_config(config_path)
        # Apply CLI overrides
        if workers is not None: config.general.workers = workers
        if recursive: config.general.recursive = True
        if verbose: config.general.verbose = True
        if log_path is not None: config.general.log_path = str(log_path)
        if debug: config.general.debug = True
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        logger = setup_logging(
            Path(config.general.log_path) if config.general.log_path else None,
            verbose=config.general.verbose,
            debug=config.general.debug,
        )
    except OSError as exc:
        typer.secho(f"Error: cannot open log file: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        logger.info(
            f"Config: workers={config.general.workers}, recursive={config.general.recursive}, "
            f"{config.general.source_extension} -> {config.general.target_extension}, "
            f"ffmpeg={config.ffmpeg.binary}"
        )

        ffmpeg = FFmpegAdapter(config.ffmpeg)
        task = ConversionTask(
            ffmpeg.remux,
            source_extension=config.general.source_extension,
            target_extension=config.general.target_extension,
        )
        scanner = FileScanner(config.general.source_extension)
        orchestrator = Orchestrator(
            config=config,
            event_bus=EventBus(),
            file_scanner=scanner,
            conversion_task=task,
        )

        # Returns (or raises) only after every worker has shut down.
        orchestrator.run(file=file, directory=directory)

    except KeyboardInterrupt:
        logger.error("Interrupted, all workers stopped")
        raise typer.Exit(code=130)

    except BatchMuxError as e:
        logger.error(str(e))
        # With a log file there is no stderr handler
        if config.general.log_path:
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    finally:
        close_logging()

if __name__ == "__main__":
    app()
