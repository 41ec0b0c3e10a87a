"""Unit tests for RGBA image loading, saving and conversion."""

import numpy as np
import pytest

from slyce.exceptions import ImageLoadError, ImageSaveError, ValidationError
from slyce.processors.image_io import get_image_files, load_image, save_image, to_rgba


class TestToRgba:

    def test_grayscale(self):
        output = to_rgba(np.full((2, 3), 9, dtype=np.uint8))
        assert output.shape == (2, 3, 4)
        assert tuple(output[0, 0]) == (9, 9, 9, 255)

    def test_single_channel(self):
        output = to_rgba(np.full((2, 2, 1), 40, dtype=np.uint8))
        assert tuple(output[1, 1]) == (40, 40, 40, 255)

    def test_rgb(self):
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = (10, 20, 30)
        assert tuple(to_rgba(image)[0, 0]) == (10, 20, 30, 255)

    def test_bgr_order(self):
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)
        assert tuple(to_rgba(image, channel_order="bgr")[0, 0]) == (0, 0, 255, 255)

    def test_bgra_order(self):
        image = np.zeros((1, 1, 4), dtype=np.uint8)
        image[0, 0] = (1, 2, 3, 4)
        assert tuple(to_rgba(image, channel_order="bgr")[0, 0]) == (3, 2, 1, 4)

    def test_rgba_is_copied(self, noisy_image):
        output = to_rgba(noisy_image)
        np.testing.assert_array_equal(output, noisy_image)
        assert output is not noisy_image

    def test_sixteen_bit(self):
        output = to_rgba(np.full((2, 2), 65535, dtype=np.uint16))
        assert tuple(output[0, 0]) == (255, 255, 255, 255)

    def test_invalid_input(self):
        with pytest.raises(ValidationError):
            to_rgba([[1, 2], [3, 4]])
        with pytest.raises(ValidationError):
            to_rgba(np.zeros((2, 2), dtype=np.float64))
        with pytest.raises(ValidationError):
            to_rgba(np.zeros((2, 2, 2), dtype=np.uint8))
        with pytest.raises(ValidationError):
            to_rgba(np.zeros((2, 2, 3), dtype=np.uint8), channel_order="hsv")


class TestLoadSave:
    """Test image file round trips."""

    def test_png_keeps_alpha(self, temp_dir, noisy_image):
        path = temp_dir / "noisy.png"
        save_image(noisy_image, path)
        np.testing.assert_array_equal(load_image(path), noisy_image)

    def test_jpeg_drops_alpha(self, temp_dir):
        image = np.full((8, 8, 4), (200, 100, 50, 0), dtype=np.uint8)
        path = temp_dir / "flat.jpg"
        save_image(image, path, quality=95)
        loaded = load_image(path)
        assert loaded.shape == (8, 8, 4)
        assert (loaded[:, :, 3] == 255).all()
        assert abs(int(loaded[4, 4, 0]) - 200) <= 3

    def test_save_creates_parent(self, temp_dir, red_image):
        path = temp_dir / "nested" / "dir" / "red.png"
        save_image(red_image, path)
        assert path.exists()

    def test_save_rgb(self, temp_dir):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[:, :] = (0, 0, 255)
        path = temp_dir / "rgb.png"
        save_image(image, path)
        assert tuple(load_image(path)[0, 0]) == (0, 0, 255, 255)

    def test_load_missing(self, temp_dir):
        with pytest.raises(ImageLoadError):
            load_image(temp_dir / "missing.png")

    def test_load_corrupt(self, temp_dir):
        path = temp_dir / "corrupt.png"
        path.write_bytes(b"not an image")
        with pytest.raises(ImageLoadError):
            load_image(path)

    def test_save_empty(self, temp_dir):
        with pytest.raises(ImageSaveError):
            save_image(np.zeros((0, 0, 4), dtype=np.uint8), temp_dir / "empty.png")
        with pytest.raises(ImageSaveError):
            save_image(None, temp_dir / "none.png")


def test_get_image_files(temp_dir):
    """Test image discovery filters by extension and sorts."""
    for name in ("b.png", "a.JPG", "c.txt", "d.tiff"):
        (temp_dir / name).write_bytes(b"")

    files = get_image_files(temp_dir)

    assert [f.name for f in files] == ["a.JPG", "b.png", "d.tiff"]
