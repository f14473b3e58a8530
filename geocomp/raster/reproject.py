"""Raster reprojection.

Reprojecting a raster builds a new grid in the target CRS and estimates
each new cell from the source cells (resampling). Continuous grids default
to bilinear interpolation. Categorical grids only allow methods that return
existing codes (nearest, mode), since interpolating between category codes
would invent categories.
"""

import logging
from typing import Any

import numpy as np
from rasterio.warp import calculate_default_transform, reproject

from geocomp.config import DEFAULT_RASTER_CONFIG, RasterConfig
from geocomp.models.enums import Resampling
from geocomp.raster.grid import RasterGrid, portable_dtype
from geocomp.spatial.crs import require_crs, to_crs_object
from geocomp.validation.errors import CategoryError

logger = logging.getLogger(__name__)


def _fill_value(grid: RasterGrid, dtype: np.dtype, config: RasterConfig) -> float | int:
    """Value for target cells no source cell covers, in the warp dtype."""
    if grid.nodata is not None:
        return grid.nodata
    if np.issubdtype(grid.dtype, np.floating):
        return np.nan
    if not np.issubdtype(dtype, np.integer):
        # wide integers warped as float64
        return config.integer_nodata
    info = np.iinfo(dtype)
    if info.min <= config.integer_nodata <= info.max:
        return config.integer_nodata
    return info.max


def reproject_grid(
    grid: RasterGrid,
    dst_crs: Any,
    resolution: float | tuple[float, float] | None = None,
    method: Resampling | str | None = None,
    config: RasterConfig | None = None,
) -> RasterGrid:
    """Reproject a grid to another CRS.

    Args:
        grid: Source grid (must have a CRS)
        dst_crs: Target CRS
        resolution: Target cell size in target CRS units (default: chosen by
            GDAL to preserve the number of cells)
        method: Resampling method (default: RasterConfig per grid kind)
        config: Raster configuration

    Returns:
        New RasterGrid with the source dtype (uint8 for boolean grids),
        categories and name; cells outside the source footprint hold the
        nodata value (NaN for floats without one)

    Raises:
        MissingCrsError: If the grid has no CRS
        CategoryError: If a categorical grid is resampled with a method that
            can create new values
    """
    config = config or DEFAULT_RASTER_CONFIG
    src_crs = require_crs(grid.crs, "reproject raster")
    target = to_crs_object(dst_crs)

    if method is None:
        method = (
            config.categorical_resampling if grid.is_categorical else config.continuous_resampling
        )
    method = Resampling.parse(method)
    if grid.is_categorical and not method.preserves_categories:
        msg = (
            f"Categorical grid '{grid.name}' cannot be resampled with '{method.value}'; "
            f"use nearest or mode"
        )
        raise CategoryError(msg)

    dst_transform, width, height = calculate_default_transform(
        src_crs,
        target,
        grid.ncols,
        grid.nrows,
        *grid.extent.as_bounds(),
        resolution=resolution,
    )

    work_dtype = portable_dtype(grid.values)
    fill = _fill_value(grid, work_dtype, config)
    source = grid.to_array().astype(work_dtype)
    destination = np.full((height, width), fill, dtype=work_dtype)

    src_nodata = grid.nodata
    if src_nodata is None and np.issubdtype(work_dtype, np.floating):
        src_nodata = np.nan

    logger.info(
        f"Reprojecting '{grid.name}' {grid.nrows}x{grid.ncols} {src_crs.to_string()} -> "
        f"{target.to_string()} {height}x{width} ({method.value})"
    )
    reproject(
        source=source,
        destination=destination,
        src_transform=grid.transform,
        src_crs=src_crs,
        src_nodata=src_nodata,
        dst_transform=dst_transform,
        dst_crs=target,
        dst_nodata=fill,
        resampling=method.rasterio,
    )

    is_float = np.issubdtype(grid.dtype, np.floating)
    # booleans stay uint8 so cells outside the source can hold nodata
    out_dtype = work_dtype if grid.dtype == np.bool_ else grid.dtype
    return RasterGrid.from_array(
        destination.astype(out_dtype),
        (dst_transform.c, dst_transform.f),
        (dst_transform.a, -dst_transform.e),
        crs=target,
        nodata=grid.nodata if is_float else fill,
        categories=grid.categories,
        name=grid.name,
    )
