"""
Pytest configuration and shared fixtures for Slyce tests.

Provides synthetic RGBA images, temporary directories and configuration
shared by all test modules.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import numpy as np
import pytest

from slyce.config import Config, get_default_config
from slyce.utils.logging_utils import setup_logging

GRAY = (128, 128, 128, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)


def solid_image(width: int, height: int, color=GRAY) -> np.ndarray:
    """Create a uniform RGBA image."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    return image


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def square_image() -> np.ndarray:
    """100x100 gray image with a black 20x20 square covering (40,40)-(60,60)."""
    image = solid_image(100, 100, GRAY)
    image[40:60, 40:60] = BLACK
    return image


@pytest.fixture
def uniform_image() -> np.ndarray:
    """Perfectly uniform 32x24 image."""
    return solid_image(32, 24, GRAY)


@pytest.fixture
def noisy_image() -> np.ndarray:
    """Random RGBA image with a fixed seed."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(37, 53, 4), dtype=np.uint8)


@pytest.fixture
def red_image() -> np.ndarray:
    """Opaque red 10x10 image."""
    return solid_image(10, 10, RED)


@pytest.fixture
def sample_config(temp_dir: Path) -> Config:
    """Configuration writing into the temporary directory."""
    config = get_default_config()
    config.directories.input_dir = str(temp_dir / "input")
    config.directories.output_dir = str(temp_dir / "output")
    config.directories.debug_dir = str(temp_dir / "debug")
    config.logging.use_rich = False
    return config


@pytest.fixture
def sample_config_dict() -> dict:
    """Configuration dictionary as it would appear in a file."""
    return {
        "directories": {
            "input_dir": "test_input",
            "output_dir": "test_output",
            "debug_dir": "test_debug",
        },
        "edge_detection": {
            "mode": "border",
            "band_height": 64,
        },
        "margins": {
            "limit": 24,
            "margin": 8,
        },
        "crop": {
            "padding_color": "#ffffff",
            "output_format": "jpeg",
            "jpeg_quality": 80,
        },
    }


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Keep test output quiet."""
    setup_logging(
        level="WARNING",
        use_rich=False,
        include_performance=False,
        format_style="minimal"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (deselect with '-m \"not unit\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)

        if "slow" in item.name.lower():
            item.add_marker(pytest.mark.slow)
