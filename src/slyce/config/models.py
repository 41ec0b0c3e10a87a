"""
Pydantic models for Slyce configuration.

Defines the configuration schema with validation and defaults for the
edge detector, margin finder, crop compositor, batch directories and
logging.
"""

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EdgeMode(str, Enum):
    """What each pixel is compared against when measuring edge strength."""
    NEIGHBOR = "neighbor"
    BORDER = "border"


class ComputeBackend(str, Enum):
    """Execution substrate for the per-pixel edge computation."""
    NUMPY = "numpy"
    OPENCL = "opencl"


class OutputFormat(str, Enum):
    """Formats the cropped image can be written in."""
    PNG = "png"
    JPEG = "jpeg"


def parse_color(value: Any) -> Optional[Tuple[int, int, int, int]]:
    """Normalize a colour to an RGBA tuple.

    Accepts ``None``, ``#rrggbb`` / ``#rrggbbaa`` strings and sequences of
    three or four integers in 0..255. Three components get an opaque alpha.
    """
    if value is None:
        return None

    if isinstance(value, str):
        text = value.strip().lstrip('#')
        if len(text) not in (6, 8):
            raise ValueError(f"Colour must be #rrggbb or #rrggbbaa, got {value!r}")
        try:
            components = [int(text[i:i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError:
            raise ValueError(f"Invalid hex colour: {value!r}")
    else:
        try:
            components = [int(c) for c in value]
        except (TypeError, ValueError):
            raise ValueError(f"Colour must be a sequence of integers, got {value!r}")

    if len(components) == 3:
        components.append(255)
    if len(components) != 4:
        raise ValueError(f"Colour must have 3 or 4 components, got {len(components)}")
    if not all(0 <= c <= 255 for c in components):
        raise ValueError(f"Colour components must be in 0..255, got {components}")
    return tuple(components)


class SlyceModel(BaseModel):
    """Base for all configuration sections."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


class DirectoryConfig(SlyceModel):
    """Directory configuration for batch runs."""

    input_dir: str = Field(
        default="data/input",
        description="Directory containing images to crop"
    )
    output_dir: str = Field(
        default="data/output",
        description="Directory for cropped images"
    )
    debug_dir: str = Field(
        default="data/debug",
        description="Directory for debug images (edge maps, overlays)"
    )

    @field_validator('*')
    @classmethod
    def validate_directory_path(cls, v):
        """Validate directory path format."""
        if not v or not isinstance(v, str):
            raise ValueError("Directory path must be a non-empty string")
        return v.replace('\\', '/')


class EdgeDetectionConfig(SlyceModel):
    """Configuration for directional edge-strength detection."""

    mode: EdgeMode = Field(
        default=EdgeMode.NEIGHBOR,
        description="Compare pixels to their neighbours or to the image border"
    )
    backend: ComputeBackend = Field(
        default=ComputeBackend.NUMPY,
        description="Execution backend for the per-pixel computation"
    )
    band_height: int = Field(
        default=256,
        ge=1,
        description="Rows processed per band before folding into the aggregator"
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Worker processes for band-parallel aggregation"
    )
    keep_edge_map: bool = Field(
        default=False,
        description="Keep the full edge map after processing"
    )
    save_debug_images: bool = Field(
        default=False,
        description="Store edge maps and overlays as debug images"
    )
    debug_image_format: str = Field(
        default="png",
        pattern="^(png|jpg|jpeg)$",
        description="File format for debug images"
    )
    debug_compression_quality: int = Field(
        default=95,
        ge=1,
        le=100,
        description="JPEG quality for debug images"
    )

    @property
    def diff_to_edge(self) -> bool:
        return self.mode == EdgeMode.BORDER


class MarginConfig(SlyceModel):
    """Configuration for margin finding."""

    limit: int = Field(
        default=10,
        ge=0,
        le=255,
        description="Edge strengths above this value count as content"
    )
    margin: int = Field(
        default=0,
        ge=0,
        description="Pixels added around the detected content before cropping"
    )


class CropConfig(SlyceModel):
    """Configuration for the crop/pad compositor and output files."""

    padding_color: Optional[Tuple[int, int, int, int]] = Field(
        default=None,
        description="RGBA fill outside the source; top-left source pixel if unset"
    )
    output_format: OutputFormat = Field(
        default=OutputFormat.PNG,
        description="Output image format"
    )
    jpeg_quality: int = Field(
        default=92,
        ge=1,
        le=100,
        description="JPEG quality (ignored for PNG)"
    )
    output_suffix: str = Field(
        default="_crop",
        description="Suffix appended to the input file stem"
    )
    skip_empty: bool = Field(
        default=True,
        description="Skip images without detectable content instead of failing"
    )

    @field_validator('padding_color', mode='before')
    @classmethod
    def validate_padding_color(cls, v):
        """Accept hex strings and 3-component colours."""
        return parse_color(v)


class LoggingConfig(SlyceModel):
    """Configuration for logging setup."""

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich console output"
    )
    include_performance: bool = Field(
        default=True,
        description="Whether to include performance logging"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(SlyceModel):
    """Main configuration model for Slyce."""

    directories: DirectoryConfig = Field(
        default_factory=DirectoryConfig,
        description="Directory configuration"
    )
    edge_detection: EdgeDetectionConfig = Field(
        default_factory=EdgeDetectionConfig,
        description="Edge detection configuration"
    )
    margins: MarginConfig = Field(
        default_factory=MarginConfig,
        description="Margin finding configuration"
    )
    crop: CropConfig = Field(
        default_factory=CropConfig,
        description="Crop configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )

    version: str = Field(
        default="1.0.0",
        description="Configuration version"
    )
    description: Optional[str] = Field(
        default=None,
        description="Configuration description"
    )

    def create_output_directories(self) -> None:
        """Create output and debug directories."""
        from pathlib import Path

        Path(self.directories.output_dir).mkdir(parents=True, exist_ok=True)
        if self.edge_detection.save_debug_images:
            Path(self.directories.debug_dir).mkdir(parents=True, exist_ok=True)
