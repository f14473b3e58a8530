"""General spatial utilities.

This module provides geometry-level helpers shared by table operations:
- Precision model application (grid snapping)
- Geometry repair
"""

import geopandas as gpd
from shapely import set_precision
from shapely.validation import make_valid


def apply_precision(
    geometry: gpd.GeoSeries,
    grid_size: float = 0.0001,
) -> gpd.GeoSeries:
    """Snap geometry coordinates to a grid.

    Unions and other overlay operations can introduce tiny coordinate
    variations; snapping the result keeps repeated runs comparable.

    Args:
        geometry: Input GeoSeries
        grid_size: Grid size in CRS units (default: 0.0001)

    Returns:
        GeoSeries with precision-snapped geometries (same index and CRS).
        Null and empty geometries are passed through unchanged.
    """
    snapped = [
        set_precision(geom, grid_size=grid_size) if geom else geom for geom in geometry
    ]
    return gpd.GeoSeries(snapped, index=geometry.index, crs=geometry.crs, name=geometry.name)


def make_valid_geometries(geometry: gpd.GeoSeries) -> gpd.GeoSeries:
    """Repair invalid geometries using Shapely's make_valid.

    Fixes common geometry issues like self-intersections and unclosed rings.

    Args:
        geometry: Input GeoSeries (may contain invalid geometries)

    Returns:
        GeoSeries with repaired geometries (same index and CRS)
    """
    repaired = [make_valid(geom) if geom else geom for geom in geometry]
    return gpd.GeoSeries(repaired, index=geometry.index, crs=geometry.crs, name=geometry.name)
