"""CRS-aware measurement operations.

Measurements are only meaningful in a known CRS:
- Projected CRS: planar measurement in CRS units
- Geographic CRS: geodesic area/length on the WGS84 ellipsoid; distance and
  buffer run in the local UTM zone (or are refused, see CrsConfig)
- No CRS: refused with MissingCrsError rather than computed in unknown units
"""

import logging

import geopandas as gpd
import numpy as np
import pandas as pd
from pyproj import CRS, Geod
from shapely.geometry.base import BaseGeometry

from geocomp.config import CONSTANTS, DEFAULT_CRS_CONFIG, CrsConfig
from geocomp.spatial.crs import require_crs, utm_crs_for_geometry
from geocomp.validation.errors import GeographicCrsError, MissingCrsError

logger = logging.getLogger(__name__)

_GEOD = Geod(ellps=CONSTANTS.ELLIPSOID)


def _planar(
    geometry: gpd.GeoSeries,
    operation: str,
    config: CrsConfig,
) -> tuple[gpd.GeoSeries, CRS | None]:
    """Return geometry in a planar CRS and the geographic CRS it came from.

    The second element is None when the input was already projected.
    """
    crs = require_crs(geometry.crs, operation)
    if not crs.is_geographic:
        return geometry, None

    if config.geographic_strategy == "error":
        msg = (
            f"Cannot {operation} on geographic coordinates ({crs.name}); "
            f"reproject to a projected CRS first"
        )
        raise GeographicCrsError(msg)

    utm = utm_crs_for_geometry(geometry, config)
    logger.info(f"{operation}: {crs.name} is geographic, working in {utm.name}")
    return geometry.to_crs(utm), crs


def area(geometry: gpd.GeoSeries) -> pd.Series:
    """Area of each geometry.

    Returns square CRS units for projected data and square metres (geodesic)
    for geographic data. Null geometries give NaN.
    """
    crs = require_crs(geometry.crs, "compute area")
    if not crs.is_geographic:
        return pd.Series(geometry.area, index=geometry.index, name="area")

    values = [
        abs(_GEOD.geometry_area_perimeter(geom)[0]) if geom is not None else np.nan
        for geom in geometry
    ]
    return pd.Series(values, index=geometry.index, name="area", dtype=float)


def length(geometry: gpd.GeoSeries) -> pd.Series:
    """Length (perimeter for polygons) of each geometry.

    Returns CRS units for projected data and metres (geodesic) for geographic
    data. Null geometries give NaN.
    """
    crs = require_crs(geometry.crs, "compute length")
    if not crs.is_geographic:
        return pd.Series(geometry.length, index=geometry.index, name="length")

    values = [
        _GEOD.geometry_length(geom) if geom is not None else np.nan for geom in geometry
    ]
    return pd.Series(values, index=geometry.index, name="length", dtype=float)


def distance(
    geometry: gpd.GeoSeries,
    other: gpd.GeoSeries | BaseGeometry,
    config: CrsConfig | None = None,
) -> pd.Series:
    """Distance from each geometry to another geometry or series.

    Args:
        geometry: Input geometries
        other: A single geometry (taken to be in geometry's CRS) or a GeoSeries
            of the same length compared element by element (reprojected to
            geometry's CRS when it differs)
        config: CRS configuration (geographic strategy)

    Returns:
        Series of distances in CRS units, or metres for geographic input

    Raises:
        MissingCrsError: If either input has no CRS
        GeographicCrsError: If input is geographic and the strategy is "error"
        ValueError: If a GeoSeries other has a different length
    """
    config = config or DEFAULT_CRS_CONFIG
    crs = require_crs(geometry.crs, "compute distance")

    if isinstance(other, gpd.GeoSeries):
        if other.crs is None:
            raise MissingCrsError("compute distance")
        if len(other) != len(geometry):
            msg = f"Cannot compare {len(geometry)} geometries with {len(other)} element-wise"
            raise ValueError(msg)
        other_series = other.to_crs(crs) if other.crs != crs else other
    else:
        other_series = gpd.GeoSeries([other] * len(geometry), crs=crs)

    planar, _ = _planar(geometry, "compute distance", config)
    if planar.crs != other_series.crs:
        other_series = other_series.to_crs(planar.crs)

    result = planar.distance(other_series, align=False)
    return pd.Series(result.values, index=geometry.index, name="distance", dtype=float)


def buffer(
    geometry: gpd.GeoSeries,
    distance_: float,
    config: CrsConfig | None = None,
) -> gpd.GeoSeries:
    """Buffer each geometry by a distance.

    The distance is in CRS units for projected data and in metres for
    geographic data (buffered in the local UTM zone, then projected back so the
    result keeps the input CRS).
    """
    config = config or DEFAULT_CRS_CONFIG
    planar, original_crs = _planar(geometry, "buffer", config)

    buffered = planar.buffer(distance_)
    if original_crs is not None:
        buffered = buffered.to_crs(original_crs)

    return gpd.GeoSeries(buffered.values, index=geometry.index, crs=geometry.crs, name=geometry.name)
