"""
Corner extraction and ordering for the winning candidate.
"""

import logging
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Hull re-simplification epsilon (ratio of hull perimeter)
HULL_EPSILON_FACTOR = 0.02

# Quadrilaterals with a smaller area are treated as collinear
MIN_QUAD_AREA = 1.0


def _extreme_points(points: np.ndarray) -> np.ndarray:
    """Leftmost, rightmost, topmost and bottommost points without duplicates."""
    extremes = np.array([
        points[np.argmin(points[:, 0])],
        points[np.argmax(points[:, 0])],
        points[np.argmin(points[:, 1])],
        points[np.argmax(points[:, 1])],
    ])
    # np.unique sorts by x, then y
    return np.unique(extremes, axis=0)[:4]


def resolve_corners(polygon: np.ndarray) -> Optional[np.ndarray]:
    """
    Reduce an approximated contour to exactly four corner points.

    Quadrilaterals are used as they are. Anything else (usually a card
    with rounded corners) goes through its convex hull, a coarser
    simplification of that hull and finally its extreme points.

    Args:
        polygon: Approximated contour, shape (N, 1, 2) or (N, 2)

    Returns:
        Array of shape (4, 2) or None if four corners cannot be found
    """
    if polygon is None or len(polygon) < 4:
        return None

    points = np.asarray(polygon).reshape(-1, 2)
    if points.dtype not in (np.int32, np.float32):
        points = points.astype(np.float32)
    if len(points) == 4:
        return points

    hull = cv2.convexHull(points.reshape(-1, 1, 2)).reshape(-1, 2)
    if len(hull) <= 4:
        if len(hull) < 4:
            logger.debug("Convex hull has only %d points", len(hull))
            return None
        return hull

    perimeter = cv2.arcLength(hull.reshape(-1, 1, 2), True)
    simplified = cv2.approxPolyDP(hull.reshape(-1, 1, 2), HULL_EPSILON_FACTOR * perimeter, True).reshape(-1, 2)
    if len(simplified) == 4:
        return simplified
    if len(simplified) < 4:
        logger.debug("Hull simplified to %d points", len(simplified))
        return None

    corners = _extreme_points(simplified)
    if len(corners) < 4:
        logger.debug("Only %d distinct extreme points", len(corners))
        return None
    return corners


def order_corners(points: np.ndarray) -> Optional[np.ndarray]:
    """
    Order corners clockwise starting with the one closest to the origin.

    Points are sorted by their angle around the centroid; with the image
    y axis pointing down ascending angles run top-left, top-right,
    bottom-right, bottom-left. The result does not depend on input order.

    Args:
        points: Four points, shape (4, 2)

    Returns:
        Ordered copy of the points, or None for duplicate or collinear points
    """
    pts = np.asarray(points)
    if pts.size != 8:
        return None
    pts = pts.reshape(4, 2)
    coords = pts.astype(np.float64)

    if len(np.unique(coords, axis=0)) < 4:
        logger.debug("Duplicate corner points")
        return None

    center = coords.mean(axis=0)
    dx = coords[:, 0] - center[0]
    dy = coords[:, 1] - center[1]
    angles = np.arctan2(dy, dx)
    # Angle first, distance from centroid breaks ties
    order = np.lexsort((np.hypot(dx, dy), angles))
    ordered = coords[order]

    area = abs(cv2.contourArea(ordered.astype(np.float32)))
    if area < MIN_QUAD_AREA:
        logger.debug("Corner points are collinear (area %.2f)", area)
        return None

    start = int(np.argmin(np.hypot(ordered[:, 0], ordered[:, 1])))
    return np.roll(pts[order], -start, axis=0)
