"""Visualization helpers for edge maps and detected margins."""

from typing import Optional, Tuple

import cv2
import numpy as np

from .crop_expand import crop_expand
from ..geometry import Rectangle

MARGIN_COLOR = (255, 64, 64, 255)
CROP_COLOR = (64, 160, 255, 255)
BACKDROP_COLOR = (96, 96, 96, 255)


def edge_map_to_image(edge_map: np.ndarray) -> np.ndarray:
    """Render a (H, W, 4) up/down/left/right strength map as an RGB image.

    Red shows vertical transitions (up/down), green horizontal ones
    (left/right) and blue the strongest of all four.
    """
    vertical = np.maximum(edge_map[:, :, 0], edge_map[:, :, 1])
    horizontal = np.maximum(edge_map[:, :, 2], edge_map[:, :, 3])
    strongest = np.maximum(vertical, horizontal)
    return np.dstack((vertical, horizontal, strongest))


def draw_margin_overlay(
    image: np.ndarray,
    margins: Rectangle,
    crop_rect: Optional[Rectangle] = None,
    thickness: int = 2,
    margin_color: Tuple[int, int, int, int] = MARGIN_COLOR,
    crop_color: Tuple[int, int, int, int] = CROP_COLOR,
) -> np.ndarray:
    """Draw detected margins and the crop rectangle on a copy of ``image``.

    The crop rectangle may reach past the image, so the canvas is grown to
    cover both and the area outside the source is filled with a neutral
    backdrop.
    """
    height, width = image.shape[:2]
    canvas_rect = Rectangle(0, 0, width, height)
    if crop_rect is not None and not crop_rect.is_empty():
        canvas_rect.set(
            min(0, crop_rect.left),
            min(0, crop_rect.top),
            max(width, crop_rect.right),
            max(height, crop_rect.bottom),
        )

    if canvas_rect.is_empty():
        return image.copy()

    canvas = crop_expand(image, canvas_rect, BACKDROP_COLOR)
    ox, oy = -canvas_rect.left, -canvas_rect.top

    for rect, color in ((crop_rect, crop_color), (margins, margin_color)):
        if rect is None or rect.is_empty():
            continue
        # cv2.rectangle treats the second corner as inclusive
        cv2.rectangle(
            canvas,
            (rect.left + ox, rect.top + oy),
            (rect.right - 1 + ox, rect.bottom - 1 + oy),
            color,
            thickness,
        )
    return canvas
