"""Shared utilities for batchfarm."""

import logging
from datetime import datetime, timedelta, timezone

from rich.console import Console
from rich.logging import RichHandler

# Rich console for pretty output
console = Console()


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up logging with Rich handler."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    return logging.getLogger("batchfarm")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module."""
    return logging.getLogger(f"batchfarm.{name}")


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_duration(duration: timedelta) -> str:
    """Format a duration as human-readable string."""
    seconds = duration.total_seconds()
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes:.0f}m {secs:.0f}s"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours:.0f}h {minutes:.0f}m"
