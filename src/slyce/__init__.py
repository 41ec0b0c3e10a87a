"""Slyce: automatic content-margin detection and crop/pad for images."""

__version__ = "1.0.0"
__author__ = "Slyce Team"

from .geometry import Rectangle
from .processors import (
    EdgeDetector,
    EdgeMaxValues,
    detect_edges,
    find_margins,
    crop_expand,
)
from .session import CropSession
from .pipeline import SlycePipeline

__all__ = [
    "Rectangle",
    "EdgeDetector",
    "EdgeMaxValues",
    "detect_edges",
    "find_margins",
    "crop_expand",
    "CropSession",
    "SlycePipeline",
]
