"""Image I/O utilities for loading and saving RGBA images.

Images are held in memory as ``(height, width, 4)`` uint8 arrays in RGBA
channel order. OpenCV reads and writes BGR(A), so conversion happens here
and nowhere else.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np

from ..exceptions import ImageLoadError, ImageSaveError, ValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp", ".webp"]


def to_rgba(image: np.ndarray, channel_order: str = "rgb") -> np.ndarray:
    """Convert a grayscale, RGB or RGBA array to an RGBA8 array.

    Args:
        image: Array of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4)
        channel_order: 'rgb' for arrays already in RGB(A) order,
            'bgr' for arrays in OpenCV's BGR(A) order

    Returns:
        New (H, W, 4) uint8 array; RGBA input in RGB order is copied

    Raises:
        ValidationError: If the array layout is not an image
    """
    if image is None or not isinstance(image, np.ndarray):
        raise ValidationError("Image must be a numpy array")
    if channel_order not in ("rgb", "bgr"):
        raise ValidationError(f"Invalid channel order: {channel_order}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ValidationError("Unsupported image dtype", {"dtype": str(image.dtype)})

    if image.ndim == 3 and image.shape[2] == 1:
        image = np.ascontiguousarray(image[:, :, 0])

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValidationError("Unsupported image shape", {"shape": image.shape})

    if image.shape[2] == 3:
        code = cv2.COLOR_BGR2RGBA if channel_order == "bgr" else cv2.COLOR_RGB2RGBA
        return cv2.cvtColor(image, code)
    if channel_order == "bgr":
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return image.copy()


def load_image(image_path: PathLike) -> np.ndarray:
    """Load image from file as RGBA.

    Args:
        image_path: Path to the image file

    Returns:
        (H, W, 4) uint8 RGBA array

    Raises:
        ImageLoadError: If image cannot be loaded
    """
    path = Path(image_path)
    if not path.exists():
        raise ImageLoadError(f"Image file not found: {path}", image_path=str(path))

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageLoadError(f"Could not load image: {path}", image_path=str(path))

    try:
        rgba = to_rgba(image, channel_order="bgr")
    except ValidationError as e:
        raise ImageLoadError(f"Unsupported image format: {path}",
                             image_path=str(path), reason=e.message)

    logger.debug(f"Loaded image: {path} ({rgba.shape[1]}x{rgba.shape[0]})")
    return rgba


def save_image(image: np.ndarray, output_path: PathLike, quality: Optional[int] = None) -> None:
    """Save an RGB(A) or grayscale image to file.

    The format follows the file extension. JPEG output drops the alpha
    channel; PNG keeps it.

    Args:
        image: Image array to save (RGBA, RGB or grayscale)
        output_path: Path where to save the image
        quality: JPEG quality 1..100 (ignored for other formats)

    Raises:
        ImageSaveError: If image is None, empty or cannot be written
    """
    path = Path(output_path)

    if image is None:
        raise ImageSaveError(f"Cannot save None as image to {path}", image_path=str(path))

    if image.size == 0:
        raise ImageSaveError(f"Cannot save empty image to {path}", image_path=str(path))

    is_jpeg = path.suffix.lower() in (".jpg", ".jpeg")

    if image.ndim == 2:
        bgr = image
    elif image.shape[2] == 4:
        bgr = cv2.cvtColor(image, cv2.COLOR_RGBA2BGR if is_jpeg else cv2.COLOR_RGBA2BGRA)
    else:
        bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

    params = []
    if is_jpeg and quality is not None:
        params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        ok = cv2.imwrite(str(path), bgr, params)
    except cv2.error as e:
        raise ImageSaveError(f"Could not save image: {path}", image_path=str(path), reason=str(e))
    if not ok:
        raise ImageSaveError(f"Could not save image: {path}", image_path=str(path))

    logger.debug(f"Saved image: {path}")


def get_image_files(directory: PathLike) -> List[Path]:
    """Get all image files from directory.

    Args:
        directory: Directory to search for images

    Returns:
        List of paths to image files, sorted
    """
    directory = Path(directory)
    image_files = set()  # Use set to avoid duplicates on case-insensitive filesystems

    for ext in IMAGE_EXTENSIONS:
        image_files.update(directory.glob(f"*{ext}"))
        image_files.update(directory.glob(f"*{ext.upper()}"))

    return sorted(image_files)
