"""
Closed-contour candidates from a binary edge map.
"""

import logging
from typing import List

import cv2
import numpy as np

from .params import ParameterBundle

logger = logging.getLogger(__name__)

# A contour spanning the whole frame is only a document when the frame
# itself is card-shaped (tightly cropped photo)
FULL_FRAME_ASPECT_RANGE = (1.2, 2.2)


def _is_full_frame(contour: np.ndarray, cols: int, rows: int) -> bool:
    x, y, w, h = cv2.boundingRect(contour)
    return x == 0 and y == 0 and w == cols and h == rows


def extract_candidates(edge_map: np.ndarray, params: ParameterBundle) -> List[np.ndarray]:
    """
    Extract external contours whose area fits the admission window.

    Args:
        edge_map: Binary edge map (working resolution)
        params: Detection parameters (area ratios)

    Returns:
        List of contours in discovery order; empty when nothing survives
    """
    if edge_map is None or edge_map.size == 0:
        return []

    rows, cols = edge_map.shape[:2]
    image_area = float(rows * cols)
    if image_area <= 0:
        return []

    contours, _ = cv2.findContours(edge_map, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    if not contours:
        logger.debug("No contours in edge map")
        return []

    min_area = image_area * params.min_area_ratio
    max_area = image_area * params.max_area_ratio
    aspect_low, aspect_high = FULL_FRAME_ASPECT_RANGE

    candidates = []
    for contour in contours:
        area = cv2.contourArea(contour)
        if area < min_area or area > max_area:
            continue

        if _is_full_frame(contour, cols, rows):
            aspect = cols / float(rows)
            if not (aspect_low <= aspect <= aspect_high):
                continue

        candidates.append(contour)

    logger.debug(
        "%d of %d contours within area window [%.0f, %.0f]",
        len(candidates), len(contours), min_area, max_area
    )
    return candidates
