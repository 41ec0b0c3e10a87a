"""Crop/pad compositing of a source image through a target rectangle."""

import logging
from typing import Any, Optional, Tuple

import numpy as np

from .base import BaseProcessor
from .image_io import to_rgba
from ..config.models import CropConfig, parse_color
from ..exceptions import InvalidCropDimensions, UnknownSourceDimensions, ValidationError
from ..geometry import Rectangle

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int, int]

TRANSPARENT: Color = (0, 0, 0, 0)


def _source_size(image: Any) -> Tuple[int, int]:
    """Return (width, height) of ``image`` or raise UnknownSourceDimensions."""
    shape = getattr(image, "shape", None)
    if image is None or shape is None or len(shape) < 2:
        raise UnknownSourceDimensions(
            "Cannot determine source image dimensions",
            processor="crop_expand",
            source_type=type(image).__name__,
        )
    return int(shape[1]), int(shape[0])


def resolve_padding_color(image: np.ndarray, padding_color: Optional[Any] = None) -> Color:
    """Explicit colour if given, else the source pixel at (0, 0).

    A source without pixels and no explicit colour pads with transparent
    black.
    """
    if padding_color is not None:
        try:
            return parse_color(padding_color)
        except ValueError as e:
            raise ValidationError(f"Invalid padding colour: {e}")

    if image.shape[0] == 0 or image.shape[1] == 0:
        return TRANSPARENT
    return tuple(int(c) for c in image[0, 0])


def crop_expand(
    image: np.ndarray,
    rect: Rectangle,
    padding_color: Optional[Any] = None,
) -> np.ndarray:
    """Render ``image`` as seen through ``rect``, padding outside the source.

    ``rect`` is in source pixel coordinates and may extend past any side of
    the source, or miss it entirely. The output has exactly
    ``rect.height() x rect.width()`` pixels. Pixels outside the source get
    the padding colour; pixels inside are copied unchanged, alpha included.

    Args:
        image: Source RGBA8 image (grayscale and RGB arrays are converted)
        rect: Target rectangle, must have positive width and height
        padding_color: RGBA tuple, RGB tuple or '#rrggbb[aa]' string;
            defaults to the colour of the source pixel at (0, 0)

    Returns:
        New (rect.height(), rect.width(), 4) uint8 array

    Raises:
        InvalidCropDimensions: If rect is empty
        UnknownSourceDimensions: If the source has no usable shape
    """
    width, height = rect.width(), rect.height()
    if width <= 0 or height <= 0:
        raise InvalidCropDimensions(width, height)

    source_width, source_height = _source_size(image)
    if image.ndim != 3 or image.shape[2] != 4 or image.dtype != np.uint8:
        image = to_rgba(image)

    color = resolve_padding_color(image, padding_color)

    output = np.empty((height, width, 4), dtype=np.uint8)
    output[:, :] = color

    visible = rect.clone().intersect(Rectangle(0, 0, source_width, source_height))
    if not visible.is_empty():
        dx = visible.left - rect.left
        dy = visible.top - rect.top
        output[dy:dy + visible.height(), dx:dx + visible.width()] = \
            image[visible.top:visible.bottom, visible.left:visible.right]

    logger.debug(f"Cropped {source_width}x{source_height} source to {rect} "
                 f"(visible {visible}, padding {color})")
    return output


class CropCompositor(BaseProcessor):
    """Processor wrapper around ``crop_expand`` using the configured padding colour."""

    def __init__(self, config: Optional[CropConfig] = None):
        super().__init__(config or CropConfig())

    def process(self, image: np.ndarray, rect: Rectangle = None,
                padding_color: Optional[Any] = None, **kwargs) -> np.ndarray:
        if rect is None:
            raise ValidationError("A target rectangle is required")
        if padding_color is None:
            padding_color = self.config.padding_color
        return crop_expand(image, rect, padding_color)
