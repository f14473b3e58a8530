"""Validation error definitions and the geocomp exception hierarchy.

Hierarchy::

    GeocompError
    ├── CrsError (ValueError)
    │   ├── MissingCrsError
    │   ├── CrsOverrideError
    │   └── GeographicCrsError
    ├── ColumnNotFoundError (KeyError)
    ├── GeometryPairingError (ValueError)
    ├── AttributeJoinError (ValueError)
    ├── RasterIndexError (IndexError)
    ├── RasterValueError (ValueError)
    └── CategoryError (ValueError)
"""

from dataclasses import dataclass


@dataclass
class ValidationError:
    """Represents a validation error with descriptive message."""

    message: str
    field: str | None = None


class GeocompError(Exception):
    """Base exception for all geocomp errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class CrsError(GeocompError, ValueError):
    """Raised for unparseable or unusable coordinate reference systems."""


class MissingCrsError(CrsError):
    """Raised when an operation needs a CRS and none is defined."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: no CRS defined (set one with set_crs first)")
        self.operation = operation


class CrsOverrideError(CrsError):
    """Raised when set_crs would silently replace an existing, different CRS."""


class GeographicCrsError(CrsError):
    """Raised when a planar operation is requested on geographic coordinates."""


class ColumnNotFoundError(GeocompError, KeyError):
    """Raised when requested attribute columns are absent."""

    def __init__(self, missing: list[str], available: list[str]) -> None:
        super().__init__(
            f"Column(s) not found: {', '.join(map(str, missing))}. "
            f"Available: {', '.join(map(str, available))}"
        )
        self.missing = missing
        self.available = available


class GeometryPairingError(GeocompError, ValueError):
    """Raised when attribute rows and geometries cannot be paired 1:1."""


class AttributeJoinError(GeocompError, ValueError):
    """Raised when an attribute join cannot be performed as requested."""


class RasterIndexError(GeocompError, IndexError):
    """Raised for cell, row/column or coordinate lookups outside a grid."""


class RasterValueError(GeocompError, ValueError):
    """Raised when a value cannot be stored in a raster cell."""


class CategoryError(GeocompError, ValueError):
    """Raised for invalid category tables and unknown categories."""
