"""Base processor class and common utilities for Slyce processors."""

from typing import Any, Dict, Optional
import logging
import numpy as np
from abc import ABC, abstractmethod
from pathlib import Path

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


class BaseProcessor(ABC):
    """Base class for all processors."""

    def __init__(self, config: Optional[Any] = None):
        """Initialize processor with optional configuration section."""
        self.config = config
        self.debug_images = {}  # Store debug images during processing

    def get_config_value(self, key: str, default: Any) -> Any:
        """Safely get a config value with a default."""
        if self.config is None:
            return default
        return getattr(self.config, key, default)

    @abstractmethod
    def process(self, data: Any, **kwargs) -> Any:
        """Run the processor. Must be implemented by subclasses."""
        pass

    def validate_image(self, image: np.ndarray) -> None:
        """Validate that the input is an RGBA8 image (H x W x 4, uint8)."""
        if image is None:
            raise ValidationError("Image cannot be None")
        if not isinstance(image, np.ndarray):
            raise ValidationError("Image must be a numpy array",
                                  {"type": type(image).__name__})
        if image.ndim != 3 or image.shape[2] != 4:
            raise ValidationError("Image must have shape (height, width, 4)",
                                  {"shape": image.shape})
        if image.dtype != np.uint8:
            raise ValidationError("Image must be 8-bit", {"dtype": str(image.dtype)})

    def save_debug_image(self, name: str, image: np.ndarray) -> None:
        """Store a debug image for later saving."""
        if self.get_config_value('save_debug_images', False):
            self.debug_images[name] = image

    def get_debug_images(self) -> Dict[str, np.ndarray]:
        """Get all stored debug images."""
        return self.debug_images

    def clear_debug_images(self) -> None:
        """Clear stored debug images."""
        self.debug_images = {}

    def save_debug_images_to_dir(self, debug_dir: Path, prefix: str = "") -> None:
        """Save all debug images to the specified directory."""
        from .image_io import save_image

        if not self.debug_images:
            return

        debug_dir.mkdir(parents=True, exist_ok=True)

        img_format = self.get_config_value('debug_image_format', 'png')
        quality = self.get_config_value('debug_compression_quality', 95)

        for name, image in self.debug_images.items():
            filename = f"{prefix}_{name}.{img_format}" if prefix else f"{name}.{img_format}"
            save_image(image, debug_dir / filename, quality=quality)
            logger.debug(f"Saved debug image: {debug_dir / filename}")
