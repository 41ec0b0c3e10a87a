"""Interactive crop session.

A ``CropSession`` owns the state an interactive front end works with: the
loaded image, its edge maxima, and the current limit and margin. Edge
detection runs once per image; changing the limit or margin only re-runs
the cheap margin scan.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from .config import Config, OutputFormat, get_default_config
from .exceptions import ValidationError
from .geometry import Rectangle
from .processors import (
    CropCompositor,
    EdgeDetector,
    EdgeMaxValues,
    MarginFinder,
    draw_margin_overlay,
    load_image,
    save_image,
    to_rgba,
)

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, np.ndarray]


class CropSession:
    """Holds one image and the settings used to crop it."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_default_config()
        self.detector = EdgeDetector(self.config.edge_detection)
        self.margin_finder = MarginFinder(self.config.margins)
        self.compositor = CropCompositor(self.config.crop)

        self.image: Optional[np.ndarray] = None
        self.source_path: Optional[Path] = None
        self.edge_max_values: Optional[EdgeMaxValues] = None

    @property
    def limit(self) -> int:
        return self.config.margins.limit

    @limit.setter
    def limit(self, value: int) -> None:
        self._set_margin_option("limit", value)

    @property
    def margin(self) -> int:
        return self.config.margins.margin

    @margin.setter
    def margin(self, value: int) -> None:
        self._set_margin_option("margin", value)

    def _set_margin_option(self, name: str, value: int) -> None:
        try:
            setattr(self.config.margins, name, value)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {name}: {value}", {"errors": e.error_count()})

    @property
    def is_loaded(self) -> bool:
        return self.image is not None

    def load(self, source: ImageSource) -> EdgeMaxValues:
        """Load an image from a path or array and run edge detection on it."""
        if isinstance(source, np.ndarray):
            image = to_rgba(source)
            path = None
        else:
            path = Path(source)
            image = load_image(path)

        logger.info(f"Processing edges for {path or 'in-memory image'} "
                    f"({image.shape[1]}x{image.shape[0]})")
        edge_max_values = self.detector.process(image)

        self.image = image
        self.source_path = path
        self.edge_max_values = edge_max_values
        return edge_max_values

    def _require_image(self) -> None:
        if self.image is None:
            raise ValidationError("No image loaded")

    def margins(self, limit: Optional[int] = None) -> Rectangle:
        """Content rectangle at ``limit`` (the session limit by default)."""
        self._require_image()
        return self.margin_finder.process(self.edge_max_values, limit=limit)

    def crop_rect(self, limit: Optional[int] = None, margin: Optional[int] = None) -> Rectangle:
        """Content rectangle grown by the margin; may extend past the image.

        Empty margins are returned unchanged, so no content means no crop.
        """
        if margin is None:
            margin = self.margin
        margins = self.margins(limit)
        if margins.is_empty():
            return margins
        return margins.grow(margin)

    def can_crop(self) -> bool:
        return self.is_loaded and not self.margins().is_empty()

    def margin_info(self) -> Dict[str, int]:
        return self.margins().to_dict()

    def crop(self, padding_color: Optional[Any] = None) -> np.ndarray:
        """Crop the image to the current crop rectangle.

        Raises:
            InvalidCropDimensions: If no content was found at the current limit
        """
        rect = self.crop_rect()
        return self.compositor.process(self.image, rect, padding_color=padding_color)

    def save_crop(
        self,
        output_path: Union[str, Path],
        output_format: Optional[Union[str, OutputFormat]] = None,
        quality: Optional[int] = None,
        padding_color: Optional[Any] = None,
    ) -> Path:
        """Crop and write the result, choosing the extension from the format."""
        crop_config = self.config.crop
        output_format = OutputFormat(output_format or crop_config.output_format)
        extension = ".jpg" if output_format == OutputFormat.JPEG else ".png"
        path = Path(output_path)
        if path.suffix.lower() not in ((".jpg", ".jpeg") if extension == ".jpg" else (".png",)):
            path = path.with_suffix(extension)

        cropped = self.crop(padding_color=padding_color)
        save_image(cropped, path, quality=quality or crop_config.jpeg_quality)
        logger.info(f"Saved crop {cropped.shape[1]}x{cropped.shape[0]} to {path}")
        return path

    def preview(self) -> np.ndarray:
        """Image with the detected margins and the crop rectangle drawn on it."""
        margins = self.margins()
        return draw_margin_overlay(self.image, margins, self.crop_rect())
