"""Slyce utility modules."""

from .logging_utils import (
    setup_logging, get_logger, log_performance, log_processing_stats,
    ProcessingProgress, configure_opencv_logging, console
)

__all__ = [
    'setup_logging', 'get_logger', 'log_performance', 'log_processing_stats',
    'ProcessingProgress', 'configure_opencv_logging', 'console'
]
