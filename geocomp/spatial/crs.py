"""Coordinate reference system handling.

A CRS is a tag: it is set once on a geometry store and read by everything
downstream. Changing coordinates is always the explicit job of
``to_crs``/``ensure_crs``; nothing here reprojects as a side effect.
"""

import logging
import math
from typing import Any

import geopandas as gpd
from pyproj import CRS
from pyproj.exceptions import CRSError as PyprojCRSError

from geocomp.config import CONSTANTS, DEFAULT_CRS_CONFIG, CrsConfig
from geocomp.models.domain import CrsInfo
from geocomp.models.enums import CrsKind
from geocomp.validation.errors import CrsError, MissingCrsError

logger = logging.getLogger(__name__)


def to_crs_object(crs: Any) -> CRS:
    """Parse any user CRS input into a pyproj CRS.

    Accepts EPSG strings ("EPSG:4326"), integer EPSG codes, WKT, PROJ strings
    and CRS objects.

    Raises:
        MissingCrsError: If crs is None
        CrsError: If pyproj cannot parse the input
    """
    if crs is None:
        raise MissingCrsError("interpret CRS")
    if isinstance(crs, CRS):
        return crs
    try:
        return CRS.from_user_input(crs)
    except PyprojCRSError as e:
        msg = f"Unrecognised CRS: {crs!r}"
        raise CrsError(msg) from e


def require_crs(crs: Any, operation: str) -> CRS:
    """Return the parsed CRS, raising MissingCrsError naming the operation if undefined."""
    if crs is None:
        raise MissingCrsError(operation)
    return to_crs_object(crs)


def is_geographic(crs: Any) -> bool:
    """True when the CRS uses angular (longitude/latitude) coordinates."""
    return require_crs(crs, "check CRS kind").is_geographic


def crs_info(crs: Any) -> CrsInfo:
    """Describe a CRS: name, EPSG code, kind and axis units."""
    parsed = require_crs(crs, "describe CRS")
    units = parsed.axis_info[0].unit_name if parsed.axis_info else None
    return CrsInfo(
        name=parsed.name,
        epsg=parsed.to_epsg(),
        kind=CrsKind.GEOGRAPHIC if parsed.is_geographic else CrsKind.PROJECTED,
        units=units,
    )


def ensure_crs(gdf: gpd.GeoDataFrame, target_crs: Any) -> gpd.GeoDataFrame:
    """Ensure GeoDataFrame is in the target CRS, transforming if necessary.

    Args:
        gdf: Input GeoDataFrame (or GeoSeries)
        target_crs: Target coordinate reference system

    Returns:
        GeoDataFrame in target CRS (transformed if necessary, original if
        already correct)

    Raises:
        MissingCrsError: If input GeoDataFrame has no CRS defined
    """
    if gdf.crs is None:
        raise MissingCrsError("reproject")

    target = to_crs_object(target_crs)
    if gdf.crs != target:
        logger.debug(f"Reprojecting {len(gdf)} geometries: {gdf.crs.to_string()} -> {target.to_string()}")
        return gdf.to_crs(target)

    return gdf


def utm_zone(lon: float) -> int:
    """UTM zone number (1-60) containing a longitude."""
    width = CONSTANTS.UTM_ZONE_WIDTH_DEG
    return math.floor((lon + 180) / width) % CONSTANTS.UTM_ZONE_COUNT + 1


def utm_crs_for_lonlat(lon: float, lat: float) -> CRS:
    """Return the WGS84 UTM CRS for a longitude/latitude position.

    The northern zone (EPSG:326zz) is used from the equator upwards, the
    southern one (EPSG:327zz) below it.

    Raises:
        CrsError: If the position is not a valid longitude/latitude
    """
    if not (-180 <= lon <= 180) or not (-90 <= lat <= 90):
        msg = f"Not a longitude/latitude position: ({lon}, {lat})"
        raise CrsError(msg)

    base = CONSTANTS.UTM_NORTH_EPSG_BASE if lat >= 0 else CONSTANTS.UTM_SOUTH_EPSG_BASE
    return CRS.from_epsg(base + utm_zone(lon))


def utm_crs_for_geometry(geometry: gpd.GeoSeries, config: CrsConfig | None = None) -> CRS:
    """Return the UTM CRS at the centre of a geometry series' bounds.

    Raises:
        MissingCrsError: If the series has no CRS
        CrsError: If the series has no non-empty geometry to locate
    """
    config = config or DEFAULT_CRS_CONFIG
    require_crs(geometry.crs, "locate UTM zone")
    lonlat = ensure_crs(geometry, config.default_geographic_crs)
    minx, miny, maxx, maxy = lonlat.total_bounds
    if any(math.isnan(v) for v in (minx, miny, maxx, maxy)):
        msg = "Cannot locate UTM zone for empty geometries"
        raise CrsError(msg)
    return utm_crs_for_lonlat((minx + maxx) / 2, (miny + maxy) / 2)
