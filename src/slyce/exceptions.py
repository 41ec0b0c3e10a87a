"""
Custom exceptions for Slyce.

Provides a hierarchy of exceptions for the errors that can occur while
loading images, detecting content margins and compositing crops.
"""

from typing import Optional, Any


class SlyceError(Exception):
    """Base exception for all Slyce errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(SlyceError):
    """Raised when there are configuration-related errors."""
    pass


class ValidationError(SlyceError):
    """Raised when input validation fails."""
    pass


class ProcessingError(SlyceError):
    """Raised when image processing operations fail."""

    def __init__(self, message: str, processor: Optional[str] = None,
                 image_path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if processor:
            details["processor"] = processor
        if image_path:
            details["image_path"] = image_path
        super().__init__(message, details)


class ImageLoadError(ProcessingError):
    """Raised when an image cannot be loaded or is invalid."""
    pass


class ImageSaveError(ProcessingError):
    """Raised when an image cannot be saved."""
    pass


class InvalidCropDimensions(ProcessingError):
    """Raised when a crop rectangle has zero or negative width or height."""

    def __init__(self, width: int, height: int, **kwargs: Any) -> None:
        super().__init__(
            f"Invalid crop dimensions: {width}x{height}",
            processor=kwargs.pop("processor", "crop_expand"),
            width=width,
            height=height,
            **kwargs,
        )


class UnknownSourceDimensions(ProcessingError):
    """Raised when the size of a source image cannot be determined."""
    pass


class UnsupportedComputeBackend(ProcessingError):
    """Raised when a requested compute backend is not available."""

    def __init__(self, backend: str, reason: str = "not available", **kwargs: Any) -> None:
        super().__init__(
            f"Compute backend '{backend}' is {reason}",
            processor=kwargs.pop("processor", "edge_detection"),
            backend=backend,
            **kwargs,
        )
        self.backend = backend
