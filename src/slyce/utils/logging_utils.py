"""
Logging setup, performance records and batch progress for Slyce.

Console output goes through a shared rich ``Console``. Timing records use a
dedicated PERFORMANCE level on the ``slyce.performance`` logger so they can
be switched off without touching the rest of the logging.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

console = Console()

PERFORMANCE_LEVEL = 25
logging.addLevelName(PERFORMANCE_LEVEL, "PERFORMANCE")

PERFORMANCE_LOGGER = "slyce.performance"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_FORMATS = {
    "minimal": "%(levelname)s: %(message)s",
    "simple": "%(asctime)s %(levelname)s %(message)s",
    "detailed": "%(asctime)s %(name)s:%(funcName)s %(levelname)s %(message)s",
}


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
    include_performance: bool = True,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    Configure the root logger for Slyce.

    Args:
        level: Console logging level
        log_file: Optional file that receives every record at DEBUG level
        use_rich: Use a rich console handler instead of a plain stream
        include_performance: Whether PERFORMANCE records are emitted
        format_style: 'minimal', 'simple' or 'detailed' (plain handler, and
            whether rich shows source paths)

    Returns:
        The root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level if not log_file else min(level, logging.DEBUG))

    if use_rich:
        handler = RichHandler(
            console=console,
            show_path=format_style == "detailed",
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMATS.get(format_style, _FORMATS["detailed"]),
                                               datefmt=_DATE_FORMAT))
    handler.setLevel(level)
    root_logger.addHandler(handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FORMATS["detailed"], datefmt=_DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    logging.getLogger(PERFORMANCE_LOGGER).disabled = not include_performance
    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_performance(message: str, **metrics: Any) -> None:
    """Emit a PERFORMANCE record, e.g. ``edge detection (pixels=..., duration=...)``."""
    if metrics:
        message = f"{message} ({', '.join(f'{k}={v}' for k, v in metrics.items())})"
    logging.getLogger(PERFORMANCE_LOGGER).log(PERFORMANCE_LEVEL, message)


@contextmanager
def log_processing_stats(
    operation: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Generator[Dict[str, Any], None, None]:
    """
    Count processed, skipped and failed files of a batch and log a summary.

    The yielded dict is filled in by the caller; ``duration`` and
    ``success_rate`` are added when the block exits normally.
    """
    logger = logger or logging.getLogger()
    stats = {"files_processed": 0, "files_skipped": 0, "files_failed": 0}
    start = time.time()

    try:
        yield stats
    except Exception as e:
        logger.error(f"{operation} aborted after {time.time() - start:.2f}s: {e}")
        raise

    duration = time.time() - start
    attempted = stats["files_processed"] + stats["files_skipped"] + stats["files_failed"]
    stats["duration"] = duration
    stats["success_rate"] = stats["files_processed"] / attempted if attempted else 0

    logger.log(level, f"Finished {operation}: {stats['files_processed']} cropped, "
                      f"{stats['files_skipped']} skipped, {stats['files_failed']} failed "
                      f"in {duration:.2f}s")
    log_performance(operation, images=attempted, duration=f"{duration:.3f}s")


class ProcessingProgress:
    """Rich progress bar over a known number of images, counting failures."""

    def __init__(self, description: str, total: int, show_progress: bool = True):
        self.total = total
        self.completed = 0
        self.failed = 0
        self._progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            disable=not show_progress,
        )
        self._task = self._progress.add_task(description, total=total)

    def __enter__(self) -> "ProcessingProgress":
        self._progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._progress.stop()

    def update(self, advance: int = 1, success: bool = True) -> None:
        self._progress.advance(self._task, advance)
        if success:
            self.completed += advance
        else:
            self.failed += advance


def configure_opencv_logging(level: int = logging.WARNING) -> None:
    """Map a Python logging level onto OpenCV's own log level."""
    import cv2

    # OpenCV levels: 0=SILENT, 1=FATAL, 2=ERROR, 3=WARN, 4=INFO, 5=DEBUG
    if level <= logging.DEBUG:
        cv2.setLogLevel(5)
    elif level <= logging.INFO:
        cv2.setLogLevel(4)
    elif level <= logging.WARNING:
        cv2.setLogLevel(3)
    elif level <= logging.ERROR:
        cv2.setLogLevel(2)
    else:
        cv2.setLogLevel(0)
