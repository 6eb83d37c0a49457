"""
Enumerations shared by the reader API: formats, error codes, document
types and countries.
"""

from enum import IntEnum


class ImageFormat(IntEnum):
    """Pixel layout of a raw image buffer"""
    RGB = 0
    RGBA = 1
    BGR = 2
    BGRA = 3
    GRAYSCALE = 4

    @property
    def channels(self) -> int:
        return _CHANNELS[self]


_CHANNELS = {
    ImageFormat.RGB: 3,
    ImageFormat.RGBA: 4,
    ImageFormat.BGR: 3,
    ImageFormat.BGRA: 4,
    ImageFormat.GRAYSCALE: 1,
}


class ErrorCode(IntEnum):
    SUCCESS = 0
    INVALID_INPUT = -1
    MEMORY_ALLOCATION = -2
    PROCESSING_FAILED = -3
    NO_DOCUMENT_FOUND = -4
    UNSUPPORTED_FORMAT = -5
    INITIALIZATION_FAILED = -6

    @property
    def description(self) -> str:
        return _ERROR_DESCRIPTIONS.get(self, "Unknown error")


_ERROR_DESCRIPTIONS = {
    ErrorCode.SUCCESS: "Success",
    ErrorCode.INVALID_INPUT: "Invalid input",
    ErrorCode.MEMORY_ALLOCATION: "Memory allocation failed",
    ErrorCode.PROCESSING_FAILED: "Processing failed",
    ErrorCode.NO_DOCUMENT_FOUND: "No document found",
    ErrorCode.UNSUPPORTED_FORMAT: "Unsupported format",
    ErrorCode.INITIALIZATION_FAILED: "Initialization failed",
}


class DocumentType(IntEnum):
    UNKNOWN = 0
    DRIVERS_LICENSE = 1
    PASSPORT = 2
    ID_CARD = 3
    CREDIT_CARD = 4

    @property
    def display_name(self) -> str:
        return _DOCUMENT_NAMES[self]


_DOCUMENT_NAMES = {
    DocumentType.UNKNOWN: "Unknown",
    DocumentType.DRIVERS_LICENSE: "Driver's License",
    DocumentType.PASSPORT: "Passport",
    DocumentType.ID_CARD: "ID Card",
    DocumentType.CREDIT_CARD: "Credit Card",
}


class Country(IntEnum):
    """Issuing country (ISO 3166-1 alpha-2 names)"""
    UNKNOWN = 0
    US = 1
    CA = 2
    GB = 3
    DE = 4
    FR = 5
    AU = 6

    @property
    def display_name(self) -> str:
        return _COUNTRY_NAMES[self]


_COUNTRY_NAMES = {
    Country.UNKNOWN: "Unknown",
    Country.US: "United States",
    Country.CA: "Canada",
    Country.GB: "United Kingdom",
    Country.DE: "Germany",
    Country.FR: "France",
    Country.AU: "Australia",
}


def error_string(code: int) -> str:
    """Description for a raw error code value, 'Unknown error' if it is not one."""
    try:
        return ErrorCode(code).description
    except ValueError:
        return "Unknown error"
