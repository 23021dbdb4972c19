"""Logging utilities for the Wayfinder explorer."""

import os
import sys
from pathlib import Path
from loguru import logger
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn

# Initialize rich console
console = Console()


def setup_logger(
    log_level: str = "INFO",
    log_file: str = "wayfinder.log",
    log_dir: str = None
):
    """
    Configure the logger with console and rotating file output.

    Args:
        log_level: Minimum level for both sinks
        log_file: File name inside the log directory
        log_dir: Directory for log files (defaults to $WAYFINDER_HOME/logs)
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> | <level>{message}</level>",
        level=log_level,
        colorize=True
    )

    base_dir = Path(log_dir) if log_dir else Path(os.getenv("WAYFINDER_HOME", ".")) / "logs"
    log_path = base_dir / log_file
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
        level=log_level,
        rotation="10 MB",
        retention="7 days",
        compression="zip"
    )

    return logger


def create_progress() -> Progress:
    """Create a rich spinner for long exploration rounds."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total} rounds"),
        TimeElapsedColumn(),
        console=console
    )


log = setup_logger(log_level=os.getenv("LOG_LEVEL", "INFO"))
