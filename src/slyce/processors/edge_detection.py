"""Directional edge-strength detection.

Every pixel gets four edge strengths (up, down, left, right): the Chebyshev
distance between its RGBA colour and a comparison colour in that direction.
In neighbour mode the comparison colour is the adjacent pixel, with
clamp-to-edge at the image border. In border mode it is the pixel on the
image frame in that direction (row 0, row H-1, column 0, column W-1).

Strengths are never kept as a full map unless requested. The image is
processed in bands of rows and each band is folded into an
``EdgeMaxValues`` aggregator holding the per-row and per-column maxima of
each direction, which is all the margin finder needs.
"""

import logging
import time
from enum import IntEnum
from multiprocessing import Pool
from typing import Iterator, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from .base import BaseProcessor
from ..config.models import ComputeBackend, EdgeDetectionConfig, EdgeMode
from ..exceptions import ProcessingError, UnsupportedComputeBackend, ValidationError
from ..utils.logging_utils import log_performance

logger = logging.getLogger(__name__)


class EdgeChannel(IntEnum):
    """Channel index of each direction in samples and aggregates."""
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


class EdgeMaxValues:
    """Per-row and per-column maxima of the four directional edge strengths.

    ``row_maxs[y, c]`` is the largest strength of direction ``c`` seen in
    row ``y``; ``column_maxs[x, c]`` likewise for column ``x``. Values only
    grow while samples are folded in, and ``clear`` resets them to zero.
    """

    def __init__(self, width: int, height: int):
        if width < 0 or height < 0:
            raise ValidationError("Aggregator dimensions must be non-negative",
                                  {"width": width, "height": height})
        self.width = int(width)
        self.height = int(height)
        self.row_maxs = np.zeros((self.height, 4), dtype=np.uint8)
        self.column_maxs = np.zeros((self.width, 4), dtype=np.uint8)

    def clear(self) -> None:
        self.row_maxs.fill(0)
        self.column_maxs.fill(0)

    def consider_sample(self, x: int, y: int, sample: Sequence[int]) -> None:
        """Fold one (up, down, left, right) sample at pixel (x, y)."""
        values = np.asarray(sample, dtype=np.uint8)
        np.maximum(self.row_maxs[y], values, out=self.row_maxs[y])
        np.maximum(self.column_maxs[x], values, out=self.column_maxs[x])

    def consider_band(self, y0: int, samples: np.ndarray) -> None:
        """Fold a (rows, width, 4) block of samples whose first row is ``y0``."""
        if samples.shape[0] == 0 or samples.shape[1] == 0:
            return
        self.consider_partial(y0, samples.max(axis=1), samples.max(axis=0))

    def consider_partial(self, y0: int, row_maxs: np.ndarray, column_maxs: np.ndarray) -> None:
        """Fold maxima already reduced over a band of rows starting at ``y0``."""
        rows = self.row_maxs[y0:y0 + row_maxs.shape[0]]
        np.maximum(rows, row_maxs, out=rows)
        np.maximum(self.column_maxs, column_maxs, out=self.column_maxs)

    def merge(self, other: "EdgeMaxValues") -> "EdgeMaxValues":
        """Take the per-channel maximum with another aggregator of the same size."""
        if (other.width, other.height) != (self.width, self.height):
            raise ValidationError(
                "Cannot merge edge maxima of different sizes",
                {"this": f"{self.width}x{self.height}", "other": f"{other.width}x{other.height}"},
            )
        np.maximum(self.row_maxs, other.row_maxs, out=self.row_maxs)
        np.maximum(self.column_maxs, other.column_maxs, out=self.column_maxs)
        return self

    def get_row_max(self, y: int) -> Tuple[int, int, int, int]:
        return tuple(int(v) for v in self.row_maxs[y])

    def get_column_max(self, x: int) -> Tuple[int, int, int, int]:
        return tuple(int(v) for v in self.column_maxs[x])

    def copy(self) -> "EdgeMaxValues":
        duplicate = EdgeMaxValues(self.width, self.height)
        duplicate.row_maxs[:] = self.row_maxs
        duplicate.column_maxs[:] = self.column_maxs
        return duplicate

    def __repr__(self) -> str:
        return f"EdgeMaxValues(width={self.width}, height={self.height})"


def chebyshev_distance(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Max over the last axis of |a - b|, as uint8. Broadcasts like numpy."""
    diff = np.abs(np.asarray(a, dtype=np.int16) - np.asarray(b, dtype=np.int16))
    return diff.max(axis=-1).astype(np.uint8)


def _reference_views(
    ext: np.ndarray,
    ext_top: int,
    y0: int,
    y1: int,
    height: int,
    first_row: np.ndarray,
    last_row: np.ndarray,
    diff_to_edge: bool,
) -> Tuple[np.ndarray, Tuple[np.ndarray, ...]]:
    """Return the band rows [y0, y1) and its up/down/left/right comparison colours.

    ``ext`` holds image rows [max(y0 - 1, 0), min(y1 + 1, height)) and
    starts at image row ``ext_top``.
    """
    band = ext[y0 - ext_top:y1 - ext_top]
    width = band.shape[1]

    if diff_to_edge:
        refs = (
            first_row[np.newaxis],
            last_row[np.newaxis],
            band[:, :1],
            band[:, width - 1:],
        )
    else:
        # Replicated border: the missing neighbour of a frame pixel is itself
        padded = cv2.copyMakeBorder(
            np.ascontiguousarray(ext),
            int(y0 == 0), int(y1 == height), 1, 1,
            cv2.BORDER_REPLICATE,
        )
        refs = (
            padded[:-2, 1:-1],
            padded[2:, 1:-1],
            padded[1:-1, :-2],
            padded[1:-1, 2:],
        )
    return band, refs


def _distances_numpy(band: np.ndarray, refs: Tuple[np.ndarray, ...]) -> np.ndarray:
    samples = np.empty(band.shape[:2] + (4,), dtype=np.uint8)
    band = band.astype(np.int16)
    for channel, ref in zip(EdgeChannel, refs):
        samples[:, :, channel] = chebyshev_distance(band, ref)
    return samples


def _distances_opencl(band: np.ndarray, refs: Tuple[np.ndarray, ...]) -> np.ndarray:
    samples = np.empty(band.shape[:2] + (4,), dtype=np.uint8)
    source = cv2.UMat(np.ascontiguousarray(band))
    for channel, ref in zip(EdgeChannel, refs):
        reference = cv2.UMat(np.ascontiguousarray(np.broadcast_to(ref, band.shape)))
        planes = cv2.split(cv2.absdiff(source, reference))
        distance = cv2.max(cv2.max(planes[0], planes[1]), cv2.max(planes[2], planes[3]))
        samples[:, :, channel] = distance.get()
    return samples


def _process_band_job(job: tuple) -> tuple:
    """Compute one band and reduce it. Module level so worker processes can run it."""
    y0, y1, ext_top, ext, height, first_row, last_row, diff_to_edge, backend, keep = job
    band, refs = _reference_views(ext, ext_top, y0, y1, height, first_row, last_row, diff_to_edge)
    if backend == ComputeBackend.OPENCL:
        samples = _distances_opencl(band, refs)
    else:
        samples = _distances_numpy(band, refs)
    return y0, samples.max(axis=1), samples.max(axis=0), samples if keep else None


def _band_jobs(
    image: np.ndarray,
    band_height: int,
    diff_to_edge: bool,
    backend: str,
    keep: bool,
) -> Iterator[tuple]:
    height = image.shape[0]
    first_row = image[0]
    last_row = image[height - 1]
    for y0 in range(0, height, band_height):
        y1 = min(y0 + band_height, height)
        ext_top = max(y0 - 1, 0)
        ext = image[ext_top:min(y1 + 1, height)]
        yield (y0, y1, ext_top, ext, height, first_row, last_row, diff_to_edge, backend, keep)


def resolve_backend(backend: Union[str, ComputeBackend]) -> ComputeBackend:
    """Check that ``backend`` can run here and return it as an enum.

    Raises:
        UnsupportedComputeBackend: If the backend is unknown or unavailable
    """
    try:
        backend = ComputeBackend(backend)
    except ValueError:
        raise UnsupportedComputeBackend(str(backend), "unknown")

    if backend == ComputeBackend.OPENCL:
        if not cv2.ocl.haveOpenCL():
            raise UnsupportedComputeBackend(backend.value, "not available (OpenCV reports no OpenCL device)")
        cv2.ocl.setUseOpenCL(True)
    return backend


class EdgeDetector(BaseProcessor):
    """Computes directional edge strengths and their row/column maxima.

    One detector owns one aggregator. Each call to ``process`` clears it
    (or reallocates it when the image size changes) before scanning, so the
    result always describes the last image only.
    """

    def __init__(self, config: Optional[EdgeDetectionConfig] = None, **overrides):
        config = config or EdgeDetectionConfig()
        if overrides:
            config = EdgeDetectionConfig(**{**config.model_dump(), **overrides})
        super().__init__(config)
        self.edge_max_values = EdgeMaxValues(0, 0)
        self.edge_map: Optional[np.ndarray] = None

    @property
    def diff_to_edge(self) -> bool:
        return self.config.diff_to_edge

    def process(self, image: np.ndarray, **kwargs) -> EdgeMaxValues:
        """Scan ``image`` (H x W x 4, uint8) and return the filled aggregator."""
        self.validate_image(image)
        self.clear_debug_images()

        height, width = image.shape[:2]
        if (self.edge_max_values.width, self.edge_max_values.height) == (width, height):
            self.edge_max_values.clear()
        else:
            self.edge_max_values = EdgeMaxValues(width, height)

        keep = self.config.keep_edge_map or self.config.save_debug_images
        self.edge_map = np.zeros((height, width, 4), dtype=np.uint8) if keep else None

        if width == 0 or height == 0:
            logger.debug(f"Empty image ({width}x{height}), nothing to scan")
            return self.edge_max_values

        backend = resolve_backend(self.config.backend)
        image = np.ascontiguousarray(image)
        band_height = self.config.band_height
        band_count = -(-height // band_height)
        workers = min(self.config.workers, band_count)

        if workers > 1 and backend == ComputeBackend.OPENCL:
            logger.warning("OpenCL backend runs in a single process; ignoring workers setting")
            workers = 1

        start = time.time()
        jobs = _band_jobs(image, band_height, self.diff_to_edge, backend, keep)

        if workers > 1:
            with Pool(processes=workers) as pool:
                for result in pool.imap(_process_band_job, jobs):
                    self._fold(result)
        else:
            for job in jobs:
                self._fold(_process_band_job(job))

        duration = time.time() - start
        logger.debug(
            f"Edge detection: {width}x{height}, mode={EdgeMode(self.config.mode).value}, "
            f"backend={backend.value}, bands={band_count}, workers={workers}"
        )
        log_performance("edge detection", pixels=width * height, duration=f"{duration:.3f}s")

        if self.edge_map is not None:
            from .visualization import edge_map_to_image
            self.save_debug_image('edge_map', edge_map_to_image(self.edge_map))

        return self.edge_max_values

    def _fold(self, result: tuple) -> None:
        y0, row_maxs, column_maxs, samples = result
        self.edge_max_values.consider_partial(y0, row_maxs, column_maxs)
        if samples is not None and self.edge_map is not None:
            self.edge_map[y0:y0 + samples.shape[0]] = samples

    def get_edge_max_values(self) -> EdgeMaxValues:
        return self.edge_max_values

    def get_edge_map(self) -> np.ndarray:
        """Full (H, W, 4) strength map of the last image, channels up/down/left/right."""
        if self.edge_map is None:
            raise ProcessingError(
                "Edge map was not kept; enable keep_edge_map",
                processor="edge_detection",
            )
        return self.edge_map


def detect_edges(
    image: np.ndarray,
    mode: Union[str, EdgeMode] = EdgeMode.NEIGHBOR,
    **kwargs,
) -> EdgeMaxValues:
    """Compute the edge maxima of ``image`` in the given mode.

    Args:
        image: RGBA8 image of shape (H, W, 4)
        mode: 'neighbor' or 'border'
        **kwargs: Other EdgeDetectionConfig fields (workers, band_height, backend)

    Returns:
        EdgeMaxValues sized to the image
    """
    return EdgeDetector(mode=mode, **kwargs).process(image)
