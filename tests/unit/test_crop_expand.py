"""Unit tests for crop/pad compositing."""

import numpy as np
import pytest

from slyce.config import CropConfig
from slyce.exceptions import InvalidCropDimensions, UnknownSourceDimensions, ValidationError
from slyce.geometry import Rectangle
from slyce.processors.crop_expand import CropCompositor, crop_expand, resolve_padding_color

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


def solid_image(width, height, color):
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    return image


class TestCropExpand:
    """Test cases for crop_expand."""

    def test_identity(self, noisy_image):
        height, width = noisy_image.shape[:2]
        output = crop_expand(noisy_image, Rectangle(0, 0, width, height))
        np.testing.assert_array_equal(output, noisy_image)
        assert not np.shares_memory(output, noisy_image)

    def test_inner_crop(self, noisy_image):
        output = crop_expand(noisy_image, Rectangle(5, 3, 20, 10))
        assert output.shape == (7, 15, 4)
        np.testing.assert_array_equal(output, noisy_image[3:10, 5:20])

    def test_padding_ring(self, red_image):
        output = crop_expand(red_image, Rectangle(0, 0, 10, 10).grow(5), BLUE)
        assert output.shape == (20, 20, 4)
        assert (output[5:15, 5:15] == RED).all()
        assert (output[:5] == BLUE).all()
        assert (output[15:] == BLUE).all()
        assert (output[:, :5] == BLUE).all()
        assert (output[:, 15:] == BLUE).all()

    def test_default_padding_is_top_left_pixel(self, red_image):
        red_image[0, 0] = GREEN
        output = crop_expand(red_image, Rectangle(-2, -2, 12, 12))
        assert tuple(output[0, 0]) == GREEN
        assert tuple(output[13, 13]) == GREEN
        assert tuple(output[2, 2]) == GREEN
        assert tuple(output[2, 3]) == RED

    def test_rect_outside_source(self, red_image):
        output = crop_expand(red_image, Rectangle(20, 20, 25, 26), BLUE)
        assert output.shape == (6, 5, 4)
        assert (output == BLUE).all()

    def test_hex_padding_color(self, red_image):
        output = crop_expand(red_image, Rectangle(-1, 0, 10, 10), "#0000ff")
        assert tuple(output[0, 0]) == BLUE

    def test_rgb_padding_color_gets_opaque_alpha(self, red_image):
        output = crop_expand(red_image, Rectangle(-1, 0, 10, 10), (1, 2, 3))
        assert tuple(output[0, 0]) == (1, 2, 3, 255)

    def test_alpha_is_copied_not_blended(self):
        image = solid_image(4, 4, (10, 20, 30, 0))
        output = crop_expand(image, Rectangle(-1, -1, 5, 5), (255, 255, 255, 255))
        assert tuple(output[1, 1]) == (10, 20, 30, 0)
        assert tuple(output[0, 0]) == (255, 255, 255, 255)

    def test_source_not_modified(self, red_image):
        before = red_image.copy()
        output = crop_expand(red_image, Rectangle(0, 0, 10, 10))
        output[:] = 0
        np.testing.assert_array_equal(red_image, before)

    def test_zero_area_source(self):
        source = np.zeros((0, 0, 4), dtype=np.uint8)
        output = crop_expand(source, Rectangle(0, 0, 3, 2))
        assert output.shape == (2, 3, 4)
        assert not output.any()

    def test_grayscale_source_is_converted(self):
        gray = np.full((3, 3), 77, dtype=np.uint8)
        output = crop_expand(gray, Rectangle(0, 0, 3, 3))
        assert tuple(output[1, 1]) == (77, 77, 77, 255)

    @pytest.mark.parametrize("rect", [
        Rectangle(0, 0, 0, 5),
        Rectangle(0, 0, 5, 0),
        Rectangle(5, 5, 2, 8),
    ])
    def test_invalid_dimensions(self, red_image, rect):
        with pytest.raises(InvalidCropDimensions):
            crop_expand(red_image, rect)

    def test_dimensions_checked_before_source(self):
        with pytest.raises(InvalidCropDimensions):
            crop_expand(None, Rectangle(0, 0, 0, 0))

    def test_unknown_source(self):
        with pytest.raises(UnknownSourceDimensions):
            crop_expand(None, Rectangle(0, 0, 2, 2))
        with pytest.raises(UnknownSourceDimensions):
            crop_expand(np.zeros(5, dtype=np.uint8), Rectangle(0, 0, 2, 2))

    def test_invalid_padding_color(self, red_image):
        with pytest.raises(ValidationError):
            crop_expand(red_image, Rectangle(0, 0, 2, 2), "#zz")


class TestResolvePaddingColor:

    def test_explicit(self, red_image):
        assert resolve_padding_color(red_image, "#01020304") == (1, 2, 3, 4)

    def test_top_left(self, red_image):
        assert resolve_padding_color(red_image) == RED


class TestCropCompositor:

    def test_uses_configured_padding(self, red_image):
        compositor = CropCompositor(CropConfig(padding_color="#00ff00"))
        output = compositor.process(red_image, Rectangle(-1, -1, 11, 11))
        assert tuple(output[0, 0]) == GREEN

    def test_explicit_padding_wins(self, red_image):
        compositor = CropCompositor(CropConfig(padding_color="#00ff00"))
        output = compositor.process(red_image, Rectangle(-1, -1, 11, 11), padding_color=BLUE)
        assert tuple(output[0, 0]) == BLUE

    def test_requires_rect(self, red_image):
        with pytest.raises(ValidationError):
            CropCompositor().process(red_image)
