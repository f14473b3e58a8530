"""Reading and writing raster grids as GeoTIFF.

Category tables have no GeoTIFF equivalent that survives every GDAL
driver, so they are stored as a JSON dataset tag ("categories") holding
[code, label] pairs in table order.
"""

import json
import logging
from pathlib import Path

import numpy as np
import rasterio

from geocomp.raster.categories import CategoryTable
from geocomp.raster.grid import RasterGrid, portable_dtype
from geocomp.validation.errors import RasterIndexError, RasterValueError

logger = logging.getLogger(__name__)

CATEGORIES_TAG = "categories"
NAME_TAG = "name"


def _nodata_for(dtype: np.dtype, nodata: float | None) -> float | int | None:
    if nodata is None or np.issubdtype(dtype, np.floating):
        return nodata
    return int(nodata)


def read_raster(path: Path | str, band: int = 1) -> RasterGrid:
    """Read one band of a raster file into a RasterGrid.

    Args:
        path: Raster file (any GDAL-readable format)
        band: 1-based band number

    Returns:
        RasterGrid with the file's CRS, nodata value and (if tagged)
        category table

    Raises:
        FileNotFoundError: If the file does not exist
        RasterIndexError: If the band does not exist
        RasterValueError: If the raster is rotated or sheared
    """
    path = Path(path)
    if not path.exists():
        msg = f"Raster file not found: {path}"
        raise FileNotFoundError(msg)

    with rasterio.open(path) as src:
        if band < 1 or band > src.count:
            msg = f"Band {band} out of range 1..{src.count} in {path.name}"
            raise RasterIndexError(msg)

        transform = src.transform
        if transform.b != 0 or transform.d != 0:
            msg = f"Rotated rasters are not supported: {path.name}"
            raise RasterValueError(msg)

        data = src.read(band)
        tags = src.tags()
        crs = src.crs.to_wkt() if src.crs is not None else None
        nodata = _nodata_for(data.dtype, src.nodatavals[band - 1])

    categories = None
    if CATEGORIES_TAG in tags:
        pairs = json.loads(tags[CATEGORIES_TAG])
        categories = CategoryTable({int(code): label for code, label in pairs})

    grid = RasterGrid.from_array(
        data,
        (transform.c, transform.f),
        (transform.a, -transform.e),
        crs=crs,
        nodata=nodata,
        categories=categories,
        name=tags.get(NAME_TAG, path.stem),
    )
    logger.info(f"Read raster {path.name} band {band}: {grid.nrows}x{grid.ncols} {grid.dtype}")
    return grid


def write_raster(grid: RasterGrid, path: Path | str) -> Path:
    """Write a grid as a single-band GeoTIFF.

    64-bit integer grids are stored as 32-bit integers when their values
    fit; boolean grids are stored as uint8.

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    dtype = portable_dtype(grid.values)
    profile = {
        "driver": "GTiff",
        "height": grid.nrows,
        "width": grid.ncols,
        "count": 1,
        "dtype": dtype.name,
        "crs": grid.crs.to_wkt() if grid.crs is not None else None,
        "transform": grid.transform,
        "nodata": grid.nodata,
    }

    tags = {NAME_TAG: grid.name}
    if grid.categories is not None:
        pairs = list(zip(grid.categories.codes, grid.categories.labels, strict=True))
        tags[CATEGORIES_TAG] = json.dumps(pairs)

    with rasterio.open(path, "w", **profile) as dst:
        dst.write(grid.to_array().astype(dtype), 1)
        dst.update_tags(**tags)

    logger.info(f"Wrote raster '{grid.name}' to {path}")
    return path
