"""
Normalized document bounds.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


Point = Tuple[float, float]


@dataclass(frozen=True)
class DocumentBounds:
    """
    Four document corners in normalized [0, 1] coordinates.

    Corners are ordered top-left, top-right, bottom-right, bottom-left.
    Confidence is a document-likeness score in [0, 1], not a probability.
    """
    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point
    confidence: float

    @property
    def corners(self) -> List[Point]:
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def as_array(self) -> np.ndarray:
        """Corners as a (4, 2) float32 array."""
        return np.array(self.corners, dtype=np.float32)

    def to_pixels(self, width: int, height: int) -> np.ndarray:
        """
        Corners in pixel coordinates of an image with the given size.

        Returns:
            Array of shape (4, 2), float32
        """
        return self.as_array() * np.array([width, height], dtype=np.float32)

    def as_tuple(self) -> Tuple[float, ...]:
        """(x1, y1, x2, y2, x3, y3, x4, y4, confidence)"""
        flat = [coord for corner in self.corners for coord in corner]
        return tuple(flat) + (self.confidence,)


def _clip_unit(value: float) -> float:
    return float(min(1.0, max(0.0, value)))


def normalize_bounds(
    corners: np.ndarray,
    scale_factor: float,
    original_size: Tuple[int, int],
    confidence: float
) -> Optional[DocumentBounds]:
    """
    Map ordered working-resolution corners to normalized coordinates.

    Args:
        corners: Ordered corners at working resolution, shape (4, 2)
        scale_factor: Working size / original size
        original_size: Original image (width, height)
        confidence: Score of the winning candidate

    Returns:
        DocumentBounds, or None for a zero scale factor or empty image
    """
    width, height = original_size
    if scale_factor <= 0 or width <= 0 or height <= 0:
        return None

    pts = np.asarray(corners, dtype=np.float64).reshape(4, 2) / scale_factor
    normalized = [
        (_clip_unit(x / width), _clip_unit(y / height))
        for x, y in pts
    ]
    return DocumentBounds(
        top_left=normalized[0],
        top_right=normalized[1],
        bottom_right=normalized[2],
        bottom_left=normalized[3],
        confidence=_clip_unit(confidence),
    )
