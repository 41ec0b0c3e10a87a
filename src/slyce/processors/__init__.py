"""Slyce Processors Module.

Image processing components: edge detection, margin finding, crop/pad
compositing, image I/O and visualization.
"""

# Base processor
from .base import BaseProcessor

# Image I/O
from .image_io import (
    load_image,
    save_image,
    get_image_files,
    to_rgba,
)

# Edge detection
from .edge_detection import (
    EdgeDetector,
    EdgeMaxValues,
    EdgeChannel,
    detect_edges,
    chebyshev_distance,
    resolve_backend,
)

# Margin finding
from .margin_finder import (
    MarginFinder,
    find_margins,
)

# Crop/pad compositing
from .crop_expand import (
    CropCompositor,
    crop_expand,
    resolve_padding_color,
)

# Visualization
from .visualization import (
    edge_map_to_image,
    draw_margin_overlay,
)

__all__ = [
    # Base
    "BaseProcessor",

    # Image I/O
    "load_image",
    "save_image",
    "get_image_files",
    "to_rgba",

    # Edge detection
    "EdgeDetector",
    "EdgeMaxValues",
    "EdgeChannel",
    "detect_edges",
    "chebyshev_distance",
    "resolve_backend",

    # Margin finding
    "MarginFinder",
    "find_margins",

    # Crop/pad compositing
    "CropCompositor",
    "crop_expand",
    "resolve_padding_color",

    # Visualization
    "edge_map_to_image",
    "draw_margin_overlay",
]
