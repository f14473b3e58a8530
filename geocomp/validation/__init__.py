"""Validation for geocomp.

This module provides:
1. The geocomp exception hierarchy (raised by library operations)
2. ValidationError reports and the GeometryValidator (returned, not raised)
"""

from geocomp.validation.errors import (
    AttributeJoinError,
    CategoryError,
    ColumnNotFoundError,
    CrsError,
    CrsOverrideError,
    GeocompError,
    GeographicCrsError,
    GeometryPairingError,
    MissingCrsError,
    RasterIndexError,
    RasterValueError,
    ValidationError,
)
from geocomp.validation.geometry import GeometryValidator

__all__ = [
    "AttributeJoinError",
    "CategoryError",
    "ColumnNotFoundError",
    "CrsError",
    "CrsOverrideError",
    "GeocompError",
    "GeographicCrsError",
    "GeometryPairingError",
    "GeometryValidator",
    "MissingCrsError",
    "RasterIndexError",
    "RasterValueError",
    "ValidationError",
]
