"""Spatial operations for geocomp.

This package provides:
- CRS handling (parsing, description, explicit reprojection, UTM zone lookup)
- CRS-aware measurement (area, length, distance, buffer)
- Geometry utilities (precision model, repair)
"""

# CRS handling
from geocomp.spatial.crs import (
    crs_info,
    ensure_crs,
    is_geographic,
    require_crs,
    to_crs_object,
    utm_crs_for_geometry,
    utm_crs_for_lonlat,
)

# Measurement operations
from geocomp.spatial.operations import area, buffer, distance, length

# General utilities
from geocomp.spatial.utils import apply_precision, make_valid_geometries

__all__ = [
    "crs_info",
    "ensure_crs",
    "is_geographic",
    "require_crs",
    "to_crs_object",
    "utm_crs_for_geometry",
    "utm_crs_for_lonlat",
    "area",
    "buffer",
    "distance",
    "length",
    "apply_precision",
    "make_valid_geometries",
]
