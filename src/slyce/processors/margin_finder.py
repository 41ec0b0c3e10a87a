"""Content margin detection from edge maxima."""

import logging
from typing import Optional

import numpy as np

from .base import BaseProcessor
from .edge_detection import EdgeChannel, EdgeMaxValues
from ..config.models import MarginConfig
from ..geometry import Rectangle

logger = logging.getLogger(__name__)


def _first_above(values: np.ndarray, limit: int) -> Optional[int]:
    hits = np.flatnonzero(values.astype(np.int32) > limit)
    return int(hits[0]) if hits.size else None


def _last_above(values: np.ndarray, limit: int) -> Optional[int]:
    hits = np.flatnonzero(values.astype(np.int32) > limit)
    return int(hits[-1]) if hits.size else None


def find_margins(edge_max_values: EdgeMaxValues, limit: int) -> Rectangle:
    """Return the tightest rectangle outside which no edge is stronger than ``limit``.

    The left side is the first column with a left-facing edge above the
    limit and the right side is one past the last column with a right-facing
    edge above it; top and bottom use the up and down strengths of the rows.
    The comparison is strict, so ``limit=255`` can never find anything.

    If either side of an axis has no qualifying row or column, that whole
    axis collapses to ``(0, 0)`` and the result is empty.

    Args:
        edge_max_values: Aggregated maxima from an EdgeDetector pass
        limit: Edge strength threshold, normally 0..255

    Returns:
        Rectangle in image pixel coordinates (possibly empty)
    """
    columns = edge_max_values.column_maxs
    rows = edge_max_values.row_maxs

    left = _first_above(columns[:, EdgeChannel.LEFT], limit)
    right = _last_above(columns[:, EdgeChannel.RIGHT], limit)
    top = _first_above(rows[:, EdgeChannel.UP], limit)
    bottom = _last_above(rows[:, EdgeChannel.DOWN], limit)

    if left is None or right is None:
        left, right = 0, 0
    else:
        right += 1

    if top is None or bottom is None:
        top, bottom = 0, 0
    else:
        bottom += 1

    return Rectangle(left, top, right, bottom)


class MarginFinder(BaseProcessor):
    """Processor wrapper around ``find_margins`` with a configured limit."""

    def __init__(self, config: Optional[MarginConfig] = None):
        super().__init__(config or MarginConfig())

    def process(self, edge_max_values: EdgeMaxValues, limit: Optional[int] = None, **kwargs) -> Rectangle:
        if limit is None:
            limit = self.config.limit

        margins = find_margins(edge_max_values, limit)

        if margins.is_empty():
            logger.debug(f"No content found above limit {limit} "
                         f"({edge_max_values.width}x{edge_max_values.height})")
        else:
            logger.debug(f"Margins at limit {limit}: {margins}")
        return margins
