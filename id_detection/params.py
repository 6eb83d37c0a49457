"""
Detection parameters for ISO/IEC 7810 ID-1 documents.

The bundle is immutable. Adaptive selection and explicit overrides both
return new bundles instead of mutating detector state.
"""

from dataclasses import dataclass, replace, fields
from typing import Dict, Mapping, Optional
import os

from dotenv import load_dotenv


# 85.6mm x 53.98mm
ID1_ASPECT_RATIO = 85.6 / 53.98

# Longer side of the image the pipeline works on
DEFAULT_MAX_WORKING_DIMENSION = 1200

WIDE_FRAME_RATIO = 2.5


@dataclass(frozen=True)
class ParameterBundle:
    """
    Tunable values for one detection call.

    Attributes:
        edge_threshold_low: Lower hysteresis threshold for edge extraction
        edge_threshold_high: Upper hysteresis threshold for edge extraction
        min_area_ratio: Smallest candidate area as ratio of working image area
        max_area_ratio: Largest candidate area as ratio of working image area
        approx_epsilon_factor: Polygon approximation epsilon (ratio of perimeter)
        target_aspect_ratio: Expected document width/height
        aspect_tolerance: Allowed relative deviation from target aspect ratio
        adaptive_edges: Derive edge thresholds from image statistics instead
            of using edge_threshold_low/high
        max_working_dimension: Longer side of the working-resolution image
    """
    edge_threshold_low: float = 20.0
    edge_threshold_high: float = 60.0
    min_area_ratio: float = 0.005
    max_area_ratio: float = 0.85
    approx_epsilon_factor: float = 0.01
    target_aspect_ratio: float = ID1_ASPECT_RATIO
    aspect_tolerance: float = 0.35
    adaptive_edges: bool = True
    max_working_dimension: int = DEFAULT_MAX_WORKING_DIMENSION

    def __post_init__(self):
        positive = {
            'edge_threshold_low': self.edge_threshold_low,
            'edge_threshold_high': self.edge_threshold_high,
            'min_area_ratio': self.min_area_ratio,
            'max_area_ratio': self.max_area_ratio,
            'approx_epsilon_factor': self.approx_epsilon_factor,
            'target_aspect_ratio': self.target_aspect_ratio,
            'aspect_tolerance': self.aspect_tolerance,
            'max_working_dimension': self.max_working_dimension,
        }
        for name, value in positive.items():
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if self.min_area_ratio >= self.max_area_ratio:
            raise ValueError(
                f"min_area_ratio ({self.min_area_ratio}) must be smaller than "
                f"max_area_ratio ({self.max_area_ratio})"
            )
        if self.max_area_ratio > 1.0:
            raise ValueError(f"max_area_ratio must not exceed 1.0, got {self.max_area_ratio}")


# (upper bound of min dimension, low, high, min ratio, max ratio, epsilon, tolerance)
_RESOLUTION_TIERS = [
    (400, 30.0, 90.0, 0.05, 0.95, 0.02, 0.50),
    (800, 25.0, 75.0, 0.01, 0.90, 0.015, 0.40),
    (1500, 20.0, 60.0, 0.005, 0.85, 0.01, 0.35),
    (None, 15.0, 45.0, 0.002, 0.80, 0.008, 0.30),
]


def select_parameters(width: int, height: int) -> ParameterBundle:
    """
    Pick parameters for a working image of the given size.

    Args:
        width: Working image width in pixels
        height: Working image height in pixels

    Returns:
        Parameter bundle for that resolution
    """
    min_dim = min(width, height)
    max_dim = max(width, height)

    for limit, low, high, min_ratio, max_ratio, epsilon, tolerance in _RESOLUTION_TIERS:
        if limit is None or min_dim < limit:
            break

    # Wide framing: the document covers a smaller part of the frame
    if min_dim > 0 and max_dim / min_dim > WIDE_FRAME_RATIO:
        min_ratio *= 0.5
        tolerance *= 1.2

    return ParameterBundle(
        edge_threshold_low=low,
        edge_threshold_high=high,
        min_area_ratio=min_ratio,
        max_area_ratio=max_ratio,
        approx_epsilon_factor=epsilon,
        aspect_tolerance=tolerance,
    )


def with_edge_thresholds(bundle: ParameterBundle, low: float, high: float) -> ParameterBundle:
    """Fixed edge thresholds; turns off the statistics-based thresholds."""
    return replace(bundle, edge_threshold_low=low, edge_threshold_high=high, adaptive_edges=False)


def with_area_ratios(bundle: ParameterBundle, min_ratio: float, max_ratio: float) -> ParameterBundle:
    return replace(bundle, min_area_ratio=min_ratio, max_area_ratio=max_ratio)


def with_target_aspect_ratio(bundle: ParameterBundle, ratio: float, tolerance: float) -> ParameterBundle:
    return replace(bundle, target_aspect_ratio=ratio, aspect_tolerance=tolerance)


# Config key -> bundle field
CONFIG_KEYS: Dict[str, str] = {
    'canny_threshold1': 'edge_threshold_low',
    'canny_threshold2': 'edge_threshold_high',
    'min_area_ratio': 'min_area_ratio',
    'max_area_ratio': 'max_area_ratio',
    'approx_epsilon_factor': 'approx_epsilon_factor',
    'target_aspect_ratio': 'target_aspect_ratio',
    'aspect_tolerance': 'aspect_tolerance',
    'max_working_dimension': 'max_working_dimension',
}

_INT_FIELDS = {f.name for f in fields(ParameterBundle) if f.type in (int, 'int')}


def parse_config_value(key: str, value: str) -> float:
    """
    Parse a numeric config value.

    Raises:
        ValueError: If value is not a finite number
    """
    number = float(value)
    if number != number or number in (float('inf'), float('-inf')):
        raise ValueError(f"{key} must be a finite number, got {value!r}")
    return number


def apply_overrides(bundle: ParameterBundle, overrides: Mapping[str, str]) -> ParameterBundle:
    """
    Apply explicit string overrides on top of a bundle.

    Unknown keys are ignored. Setting either edge threshold disables
    the adaptive edge thresholds.

    Args:
        bundle: Bundle to start from (usually the adaptive one)
        overrides: Config key -> string value

    Returns:
        New bundle

    Raises:
        ValueError: If a value is not numeric or the result breaks bundle invariants
    """
    changes = {}
    for key, value in overrides.items():
        field_name = CONFIG_KEYS.get(key)
        if field_name is None:
            continue
        number = parse_config_value(key, value)
        changes[field_name] = int(number) if field_name in _INT_FIELDS else number

    if 'edge_threshold_low' in changes or 'edge_threshold_high' in changes:
        changes['adaptive_edges'] = False

    if not changes:
        return bundle
    return replace(bundle, **changes)


def load_overrides_from_env(prefix: str = "ID_READER_", environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Collect config overrides from environment variables.

    ID_READER_MIN_AREA_RATIO=0.02 becomes {'min_area_ratio': '0.02'}.
    A .env file in the working directory is loaded first.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    overrides = {}
    for name, value in environ.items():
        if not name.startswith(prefix):
            continue
        key = name[len(prefix):].lower()
        if key in CONFIG_KEYS or key == 'scoring_profile':
            overrides[key] = value
    return overrides
