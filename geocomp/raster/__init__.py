"""Raster grids: regular cells indexed by ID, row/column or coordinate.

Commonly used exports:
- RasterGrid, Extent: the grid and its bounding box
- CategoryTable: code -> label table for categorical grids
- reproject_grid: CRS-aware raster reprojection
- read_raster, write_raster: GeoTIFF input and output
"""

from geocomp.raster.categories import CategoryTable
from geocomp.raster.grid import Extent, RasterGrid
from geocomp.raster.io import read_raster, write_raster
from geocomp.raster.reproject import reproject_grid

__all__ = [
    "CategoryTable",
    "Extent",
    "RasterGrid",
    "read_raster",
    "reproject_grid",
    "write_raster",
]
