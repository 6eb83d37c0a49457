"""
Image preparation: working-resolution downscale and edge map extraction.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from .params import ParameterBundle, DEFAULT_MAX_WORKING_DIMENSION

logger = logging.getLogger(__name__)

CLAHE_CLIP_LIMIT = 2.0
CLAHE_TILE_SIZE = (8, 8)

# Bounds for statistics-based edge thresholds
DYNAMIC_LOW_FLOOR = 10.0
DYNAMIC_HIGH_CEILING = 200.0


def to_working_resolution(
    image: np.ndarray,
    max_dimension: int = DEFAULT_MAX_WORKING_DIMENSION
) -> Tuple[np.ndarray, float]:
    """
    Downscale the image so its longer side is at most max_dimension.

    Args:
        image: Input image
        max_dimension: Longer side of the working image

    Returns:
        Tuple (working image, scale factor). Working coordinates divided by
        the scale factor give original pixel coordinates.
    """
    h, w = image.shape[:2]
    longer = max(h, w)
    if longer <= max_dimension:
        return image, 1.0

    scale = max_dimension / float(longer)
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))
    working = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)
    logger.debug("Downscaled %dx%d -> %dx%d (scale %.4f)", w, h, new_w, new_h, scale)
    return working, scale


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert 1, 3 (BGR) or 4 (BGRA) channel images to single channel."""
    if image.ndim == 2:
        return image
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def blur_kernel_size(rows: int, cols: int) -> int:
    size = max(3, min(rows, cols) // 400)
    if size % 2 == 0:
        size += 1
    return size


def close_kernel_size(rows: int, cols: int) -> int:
    return max(2, min(rows, cols) // 800)


def dynamic_edge_thresholds(blurred: np.ndarray) -> Tuple[float, float]:
    """
    Edge thresholds from image statistics: mean -/+ one standard deviation.

    Returns:
        Tuple (low, high)
    """
    mean, stddev = cv2.meanStdDev(blurred)
    mean_val = float(mean[0][0])
    std_val = float(stddev[0][0])
    low = max(DYNAMIC_LOW_FLOOR, mean_val - std_val)
    high = min(DYNAMIC_HIGH_CEILING, mean_val + std_val)
    return low, high


def preprocess(image: np.ndarray, params: ParameterBundle) -> Optional[np.ndarray]:
    """
    Build a binary edge map tuned for small, low-contrast card outlines.

    Args:
        image: Working-resolution image (grayscale, BGR or BGRA)
        params: Detection parameters

    Returns:
        Binary edge map with the same size as the input, or None for an
        empty image
    """
    if image is None or image.size == 0:
        return None

    gray = to_grayscale(image)
    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

    rows, cols = gray.shape[:2]

    # Local contrast equalization against uneven lighting
    clahe = cv2.createCLAHE(clipLimit=CLAHE_CLIP_LIMIT, tileGridSize=CLAHE_TILE_SIZE)
    enhanced = clahe.apply(gray)

    ksize = blur_kernel_size(rows, cols)
    blurred = cv2.GaussianBlur(enhanced, (ksize, ksize), 0)

    if params.adaptive_edges:
        low, high = dynamic_edge_thresholds(blurred)
    else:
        low, high = params.edge_threshold_low, params.edge_threshold_high
    if low > high:
        low, high = high, low

    edges = cv2.Canny(blurred, low, high)

    close_size = close_kernel_size(rows, cols)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (close_size, close_size))
    edge_map = cv2.morphologyEx(edges, cv2.MORPH_CLOSE, kernel)

    logger.debug(
        "Edge map: blur=%d, thresholds=(%.1f, %.1f)%s, close=%d",
        ksize, low, high, " adaptive" if params.adaptive_edges else "", close_size
    )
    return edge_map
