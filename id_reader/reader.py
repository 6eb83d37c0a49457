"""
Reader API: raw pixel buffers in, document bounds out.

Failures are reported as ErrorCode values on the result; no exception
leaves process_image.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

import cv2
import numpy as np

from id_detection import DocumentBounds, DocumentDetector, PROFILES, ID1_PROFILE
from id_detection.params import CONFIG_KEYS, parse_config_value

from .codes import Country, DocumentType, ErrorCode, ImageFormat

logger = logging.getLogger(__name__)

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0


def version_string() -> str:
    return f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"


PROFILE_KEY = 'scoring_profile'

_TO_BGR = {
    ImageFormat.RGB: cv2.COLOR_RGB2BGR,
    ImageFormat.RGBA: cv2.COLOR_RGBA2BGR,
    ImageFormat.BGRA: cv2.COLOR_BGRA2BGR,
}


@dataclass
class ImageBuffer:
    """
    Raw 8-bit image.

    Attributes:
        data: Pixel bytes, row after row
        width: Width in pixels
        height: Height in pixels
        stride: Bytes per row including padding; 0 means width * channels
        format: Pixel layout
    """
    data: Union[bytes, bytearray, memoryview, np.ndarray]
    width: int
    height: int
    stride: int = 0
    format: ImageFormat = ImageFormat.BGR

    @classmethod
    def from_array(cls, image: np.ndarray, format: ImageFormat = ImageFormat.BGR) -> 'ImageBuffer':
        """Wrap an OpenCV-style uint8 array (H x W or H x W x C)."""
        image = np.ascontiguousarray(image, dtype=np.uint8)
        h, w = image.shape[:2]
        return cls(data=image, width=w, height=h, stride=image.strides[0], format=format)


@dataclass
class ExtractedField:
    """A text field read from the document (not populated by detection)."""
    name: str
    value: str
    confidence: float
    x: int
    y: int
    width: int
    height: int


@dataclass
class ReadResult:
    error: ErrorCode
    document_type: DocumentType = DocumentType.UNKNOWN
    country: Country = Country.UNKNOWN
    bounds: Optional[DocumentBounds] = None
    fields: List[ExtractedField] = field(default_factory=list)
    overall_confidence: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error == ErrorCode.SUCCESS

    def to_dict(self) -> Dict:
        data = {
            'error': int(self.error),
            'message': self.error.description,
            'documentType': self.document_type.display_name,
            'country': self.country.display_name,
            'fields': [vars(f) for f in self.fields],
            'overallConfidence': self.overall_confidence,
        }
        if self.bounds is not None:
            data['corners'] = [list(corner) for corner in self.bounds.corners]
            data['confidence'] = self.bounds.confidence
        return data


def buffer_to_bgr(image: ImageBuffer) -> Optional[np.ndarray]:
    """
    Convert a raw buffer to the layout the detector expects
    (BGR, or single channel for grayscale).

    Returns:
        Array, or None when sizes, stride or data length do not add up

    Raises:
        ValueError: For an unknown pixel format
    """
    fmt = ImageFormat(image.format)
    channels = fmt.channels
    width, height = int(image.width), int(image.height)
    if width <= 0 or height <= 0 or image.data is None:
        return None

    row_bytes = width * channels
    stride = int(image.stride) or row_bytes
    if stride < row_bytes:
        return None

    if isinstance(image.data, np.ndarray):
        flat = np.ascontiguousarray(image.data).view(np.uint8).reshape(-1)
    else:
        flat = np.frombuffer(image.data, dtype=np.uint8)

    # The last row may come without padding
    needed = stride * (height - 1) + row_bytes
    if flat.size < needed:
        return None
    if flat.size < stride * height:
        flat = np.concatenate([flat, np.zeros(stride * height - flat.size, dtype=np.uint8)])

    rows = flat[:stride * height].reshape(height, stride)[:, :row_bytes]
    if channels == 1:
        return np.ascontiguousarray(rows)

    pixels = np.ascontiguousarray(rows).reshape(height, width, channels)
    if fmt in _TO_BGR:
        return cv2.cvtColor(pixels, _TO_BGR[fmt])
    return pixels


class IdReader:
    """
    Reader context: string configuration plus detection entry points.

    Explicit configuration overrides the resolution-adaptive parameters
    for every following call. Each instance owns its configuration; use
    one instance per thread when the configuration changes concurrently.
    """

    def __init__(self, config: Optional[Mapping[str, str]] = None):
        self._config: Dict[str, str] = {}
        for key, value in (config or {}).items():
            code = self.set_config(key, value)
            if code != ErrorCode.SUCCESS:
                raise ValueError(f"Invalid config {key}={value!r}: {code.description}")

    @property
    def config(self) -> Dict[str, str]:
        return dict(self._config)

    def set_config(self, key: str, value: str) -> ErrorCode:
        """
        Store a configuration value.

        Numeric keys must parse as numbers; unknown keys are stored and
        otherwise ignored.
        """
        if not key or value is None:
            return ErrorCode.INVALID_INPUT

        value = str(value)
        try:
            if key in CONFIG_KEYS:
                parse_config_value(key, value)
            elif key == PROFILE_KEY and value not in PROFILES:
                raise ValueError(f"Unknown scoring profile {value!r}")
        except ValueError as e:
            logger.warning("Rejected config %s=%r: %s", key, value, e)
            return ErrorCode.PROCESSING_FAILED

        self._config[key] = value
        return ErrorCode.SUCCESS

    def get_config(self, key: str) -> Optional[str]:
        return self._config.get(key)

    def _detector(self) -> DocumentDetector:
        profile = PROFILES.get(self._config.get(PROFILE_KEY, ''), ID1_PROFILE)
        return DocumentDetector(profile=profile)

    def process_image(self, image: ImageBuffer) -> ReadResult:
        """
        Detect the document in a raw pixel buffer.

        Args:
            image: Raw image with explicit size, stride and format

        Returns:
            ReadResult; bounds are set only when error is SUCCESS
        """
        if image is None:
            return ReadResult(error=ErrorCode.INVALID_INPUT)

        try:
            pixels = buffer_to_bgr(image)
        except ValueError:
            return ReadResult(error=ErrorCode.UNSUPPORTED_FORMAT)
        except cv2.error as e:
            logger.warning("Pixel conversion failed: %s", e)
            return ReadResult(error=ErrorCode.PROCESSING_FAILED)

        if pixels is None:
            return ReadResult(error=ErrorCode.INVALID_INPUT)
        return self.process_array(pixels)

    def process_array(self, image: np.ndarray) -> ReadResult:
        """
        Detect the document in an already decoded BGR (or grayscale) array.
        """
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            return ReadResult(error=ErrorCode.INVALID_INPUT)

        overrides = {k: v for k, v in self._config.items() if k in CONFIG_KEYS}
        try:
            result = self._detector().run(image, overrides=overrides)
        except ValueError as e:
            logger.warning("Invalid detection parameters: %s", e)
            return ReadResult(error=ErrorCode.INVALID_INPUT)
        except cv2.error as e:
            logger.warning("Detection failed: %s", e)
            return ReadResult(error=ErrorCode.PROCESSING_FAILED)

        if not result.found:
            logger.debug("No document: %s", result.failure.value)
            return ReadResult(error=ErrorCode.NO_DOCUMENT_FOUND)

        return ReadResult(
            error=ErrorCode.SUCCESS,
            bounds=result.bounds,
            overall_confidence=result.bounds.confidence,
        )
