"""
ID reader API

Boundary around the id_detection core: accepts raw pixel buffers in
several formats, keeps string configuration and reports failures as
error codes.
"""

from .codes import Country, DocumentType, ErrorCode, ImageFormat, error_string
from .reader import (
    ExtractedField,
    IdReader,
    ImageBuffer,
    ReadResult,
    buffer_to_bgr,
    version_string,
    VERSION_MAJOR,
    VERSION_MINOR,
    VERSION_PATCH,
)

__all__ = [
    'Country',
    'DocumentType',
    'ErrorCode',
    'ImageFormat',
    'error_string',
    'ExtractedField',
    'IdReader',
    'ImageBuffer',
    'ReadResult',
    'buffer_to_bgr',
    'version_string',
    'VERSION_MAJOR',
    'VERSION_MINOR',
    'VERSION_PATCH',
]
