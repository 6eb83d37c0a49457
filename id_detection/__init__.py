"""
ID Document Detection Module

Locates ISO/IEC 7810 ID-1 documents (ID cards, driver's licenses,
credit cards) in photographs and returns their four corners in
normalized coordinates with a confidence score.
"""

from .bounds import DocumentBounds
from .detector import DocumentDetector, DetectionResult, FailureReason
from .params import ParameterBundle, select_parameters, apply_overrides
from .scoring import ScoringProfile, ID1_PROFILE, GENERIC_PROFILE, PROFILES
from .visualizer import BoundsVisualizer

__all__ = [
    'DocumentBounds',
    'DocumentDetector',
    'DetectionResult',
    'FailureReason',
    'ParameterBundle',
    'select_parameters',
    'apply_overrides',
    'ScoringProfile',
    'ID1_PROFILE',
    'GENERIC_PROFILE',
    'PROFILES',
    'BoundsVisualizer',
]
