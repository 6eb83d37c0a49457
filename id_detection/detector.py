"""
ISO/IEC 7810 ID-1 document detector using OpenCV
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional

import numpy as np

from .bounds import DocumentBounds, normalize_bounds
from .candidates import extract_candidates
from .corners import order_corners, resolve_corners
from .params import (
    DEFAULT_MAX_WORKING_DIMENSION,
    ParameterBundle,
    apply_overrides,
    parse_config_value,
    select_parameters,
)
from .preprocessing import preprocess, to_working_resolution
from .scoring import ID1_PROFILE, ScoringProfile, select_best

logger = logging.getLogger(__name__)

# Grayscale, BGR and BGRA
SUPPORTED_CHANNELS = (1, 3, 4)


class FailureReason(Enum):
    """Why a detection call produced no bounds"""
    INVALID_IMAGE = "invalid_image"
    NO_CANDIDATES = "no_candidates"
    SCORE_BELOW_THRESHOLD = "score_below_threshold"
    INSUFFICIENT_CORNERS = "insufficient_corners"
    DEGENERATE_CORNERS = "degenerate_corners"


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of one detection call: bounds on success, a reason otherwise.

    working_corners holds the ordered corners at working resolution
    together with scale_factor, so callers can map them back to pixels.
    """
    bounds: Optional[DocumentBounds] = None
    failure: Optional[FailureReason] = None
    working_corners: Optional[np.ndarray] = None
    scale_factor: float = 1.0

    @property
    def found(self) -> bool:
        return self.bounds is not None


class DocumentDetector:
    """
    Class for ID-1 document detection in images.

    Runs a single synchronous pipeline: downscale, edge map, contour
    candidates, scoring, corner resolution, ordering, normalization.
    The detector holds no per-call state and can be shared between threads.
    """

    def __init__(
        self,
        profile: ScoringProfile = ID1_PROFILE,
        max_working_dimension: int = DEFAULT_MAX_WORKING_DIMENSION
    ):
        """
        Initialize the detector.

        Args:
            profile: Sub-score weights and acceptance floor
            max_working_dimension: Longer side of the working-resolution image,
                used when no explicit parameters are passed
        """
        self.profile = profile
        self.max_working_dimension = max_working_dimension

    def parameters_for(self, width: int, height: int) -> ParameterBundle:
        """Adaptive parameters for a working image of the given size."""
        params = select_parameters(width, height)
        if params.max_working_dimension != self.max_working_dimension:
            params = replace(params, max_working_dimension=self.max_working_dimension)
        return params

    def _working_dimension(self, params: Optional[ParameterBundle], overrides: Mapping[str, str]) -> int:
        if params is not None:
            return params.max_working_dimension
        if 'max_working_dimension' in overrides:
            value = int(parse_config_value('max_working_dimension', overrides['max_working_dimension']))
            if value <= 0:
                raise ValueError(f"max_working_dimension must be positive, got {value}")
            return value
        return self.max_working_dimension

    def run(
        self,
        image: np.ndarray,
        params: Optional[ParameterBundle] = None,
        overrides: Optional[Mapping[str, str]] = None
    ) -> DetectionResult:
        """
        Detect the document and report why detection failed, if it did.

        Args:
            image: Input image (grayscale, BGR or BGRA)
            params: Explicit parameters; computed from the working
                resolution when omitted
            overrides: Config key -> string value, applied on top of the
                adaptive parameters (ignored when params is given)

        Returns:
            DetectionResult

        Raises:
            ValueError: If overrides are not numeric or break parameter invariants
        """
        overrides = overrides or {}
        if image is None or image.size == 0 or image.ndim not in (2, 3):
            return DetectionResult(failure=FailureReason.INVALID_IMAGE)
        if image.ndim == 3 and image.shape[2] not in SUPPORTED_CHANNELS:
            logger.debug("Unsupported channel count %d", image.shape[2])
            return DetectionResult(failure=FailureReason.INVALID_IMAGE)

        orig_h, orig_w = image.shape[:2]
        if orig_h == 0 or orig_w == 0:
            return DetectionResult(failure=FailureReason.INVALID_IMAGE)

        working, scale = to_working_resolution(image, self._working_dimension(params, overrides))
        work_h, work_w = working.shape[:2]

        if params is None:
            params = apply_overrides(self.parameters_for(work_w, work_h), overrides)

        edge_map = preprocess(working, params)
        if edge_map is None:
            return DetectionResult(failure=FailureReason.INVALID_IMAGE)

        candidates = extract_candidates(edge_map, params)
        if not candidates:
            logger.debug("No document candidates")
            return DetectionResult(failure=FailureReason.NO_CANDIDATES, scale_factor=scale)

        best = select_best(candidates, (work_w, work_h), params, self.profile)
        if best is None:
            return DetectionResult(failure=FailureReason.SCORE_BELOW_THRESHOLD, scale_factor=scale)

        corners = resolve_corners(best.contour)
        if corners is None:
            return DetectionResult(failure=FailureReason.INSUFFICIENT_CORNERS, scale_factor=scale)

        ordered = order_corners(corners)
        if ordered is None:
            return DetectionResult(failure=FailureReason.DEGENERATE_CORNERS, scale_factor=scale)

        bounds = normalize_bounds(ordered, scale, (orig_w, orig_h), best.score)
        if bounds is None:
            return DetectionResult(failure=FailureReason.INVALID_IMAGE, scale_factor=scale)

        logger.debug("Document found with confidence %.3f", bounds.confidence)
        return DetectionResult(bounds=bounds, working_corners=ordered, scale_factor=scale)

    def detect(self, image: np.ndarray, params: Optional[ParameterBundle] = None) -> Optional[DocumentBounds]:
        """
        Detect the document in the image.

        Args:
            image: Input image (grayscale, BGR or BGRA)
            params: Explicit parameters (optional)

        Returns:
            DocumentBounds with corners ordered top-left, top-right,
            bottom-right, bottom-left, or None if no document was found
        """
        return self.run(image, params).bounds
