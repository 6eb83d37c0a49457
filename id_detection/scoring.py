"""
Document-likeness scoring of contour candidates.

Each sub-score lies in [0, 1] and is looked up by name in SUB_SCORERS.
A ScoringProfile assigns the weights, so detector variants differ only
in data.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import cv2
import numpy as np

from .params import ParameterBundle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateGeometry:
    """Measurements of one approximated contour at working resolution."""
    vertex_count: int
    area_ratio: float
    aspect_ratio: float
    center_offset: float  # enclosing-circle center distance / image half-diagonal


@dataclass
class ScoredCandidate:
    contour: np.ndarray
    score: float


def area_score(geometry: CandidateGeometry, params: ParameterBundle) -> float:
    ratio = geometry.area_ratio
    if ratio < 0.002 or ratio > 0.99:
        return 0.0
    if 0.01 <= ratio <= 0.70:
        return 1.0
    if ratio > 0.85:
        # Tightly cropped card photo
        return 0.9
    return 0.5


def aspect_score(geometry: CandidateGeometry, params: ParameterBundle) -> float:
    target = params.target_aspect_ratio
    deviation = abs(geometry.aspect_ratio - target) / (target * params.aspect_tolerance)
    return max(0.0, 1.0 - deviation)


def shape_score(geometry: CandidateGeometry, params: ParameterBundle) -> float:
    vertices = geometry.vertex_count
    if vertices == 4:
        return 1.0
    if 4 < vertices <= 8:
        return 0.8
    if 8 < vertices <= 12:
        # Rounded corners break into extra vertices
        return 0.5
    return 0.0


def centeredness_score(geometry: CandidateGeometry, params: ParameterBundle) -> float:
    return min(1.0, max(0.0, 1.0 - geometry.center_offset))


SubScorer = Callable[[CandidateGeometry, ParameterBundle], float]

SUB_SCORERS: Dict[str, SubScorer] = {
    'area': area_score,
    'aspect': aspect_score,
    'shape': shape_score,
    'centeredness': centeredness_score,
}


@dataclass(frozen=True)
class ScoringProfile:
    """
    Weights for the named sub-scores plus the acceptance floor.

    Attributes:
        name: Profile name used in config ('id1', 'generic')
        weights: Sub-score name -> weight; weights should sum to 1.0
        min_score: Best candidates scoring at or below this are rejected
    """
    name: str
    weights: Mapping[str, float] = field(default_factory=dict)
    min_score: float = 0.1

    def __post_init__(self):
        unknown = set(self.weights) - set(SUB_SCORERS)
        if unknown:
            raise ValueError(f"Unknown sub-scores: {sorted(unknown)}")


ID1_PROFILE = ScoringProfile(
    name='id1',
    weights={'area': 0.25, 'aspect': 0.40, 'shape': 0.15, 'centeredness': 0.20},
)

# Shape and size only; for documents that are not ID-1 sized
GENERIC_PROFILE = ScoringProfile(
    name='generic',
    weights={'area': 0.45, 'shape': 0.35, 'centeredness': 0.20},
)

PROFILES: Dict[str, ScoringProfile] = {
    ID1_PROFILE.name: ID1_PROFILE,
    GENERIC_PROFILE.name: GENERIC_PROFILE,
}


def approximate(contour: np.ndarray, params: ParameterBundle) -> np.ndarray:
    """Douglas-Peucker simplification with epsilon relative to the perimeter."""
    perimeter = cv2.arcLength(contour, True)
    if perimeter <= 0:
        return contour
    return cv2.approxPolyDP(contour, params.approx_epsilon_factor * perimeter, True)


def measure(polygon: np.ndarray, image_size: Tuple[int, int]) -> Optional[CandidateGeometry]:
    """
    Measure an approximated contour.

    Args:
        polygon: Approximated contour
        image_size: Working image (width, height)

    Returns:
        Geometry, or None for degenerate input (zero image area, flat box)
    """
    width, height = image_size
    image_area = float(width * height)
    half_diagonal = math.hypot(width / 2.0, height / 2.0)
    if image_area <= 0 or half_diagonal <= 0 or len(polygon) == 0:
        return None

    _, _, box_w, box_h = cv2.boundingRect(polygon)
    if box_h <= 0:
        return None

    (cx, cy), _ = cv2.minEnclosingCircle(polygon)
    offset = math.hypot(cx - width / 2.0, cy - height / 2.0)

    return CandidateGeometry(
        vertex_count=len(polygon),
        area_ratio=cv2.contourArea(polygon) / image_area,
        aspect_ratio=box_w / float(box_h),
        center_offset=offset / half_diagonal,
    )


def score_candidate(
    polygon: np.ndarray,
    image_size: Tuple[int, int],
    params: ParameterBundle,
    profile: ScoringProfile = ID1_PROFILE
) -> float:
    """
    Weighted document-likeness score in [0, 1].

    Args:
        polygon: Approximated contour
        image_size: Working image (width, height)
        params: Detection parameters (target aspect ratio and tolerance)
        profile: Sub-score weights

    Returns:
        Score; 0.0 for polygons with fewer than 4 vertices
    """
    if len(polygon) < 4:
        return 0.0

    geometry = measure(polygon, image_size)
    if geometry is None:
        return 0.0

    score = 0.0
    for name, weight in profile.weights.items():
        score += weight * SUB_SCORERS[name](geometry, params)
    return min(1.0, max(0.0, score))


def select_best(
    contours: List[np.ndarray],
    image_size: Tuple[int, int],
    params: ParameterBundle,
    profile: ScoringProfile = ID1_PROFILE
) -> Optional[ScoredCandidate]:
    """
    Score all candidates and keep the best one.

    Ties keep the first candidate. Returns None when no candidate scores
    above the profile's floor.
    """
    best = None
    for contour in contours:
        polygon = approximate(contour, params)
        score = score_candidate(polygon, image_size, params, profile)
        if best is None or score > best.score:
            best = ScoredCandidate(contour=polygon, score=score)

    if best is None:
        return None
    if best.score <= profile.min_score:
        logger.debug("Best score %.3f at or below floor %.2f", best.score, profile.min_score)
        return None

    logger.debug("Best candidate: %d vertices, score %.3f", len(best.contour), best.score)
    return best
