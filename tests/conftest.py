"""Shared fixtures: small in-memory feature tables and raster grids."""

import numpy as np
import pytest
from shapely.geometry import Point

from geocomp.features.table import FeatureTable
from geocomp.raster.categories import CategoryTable
from geocomp.raster.grid import RasterGrid
from tests.utils import square


@pytest.fixture
def districts() -> FeatureTable:
    """Four adjacent 10 x 10 districts in British National Grid (100 sq m each)."""
    return FeatureTable(
        {
            "name": ["Ashby", "Barton", "Cotham", "Denby"],
            "region": ["North", "North", "South", "South"],
            "population": [100, 200, 300, 400],
        },
        [square(0, 0), square(10, 0), square(20, 0), square(30, 0)],
        crs="EPSG:27700",
    )


@pytest.fixture
def towns_wgs84() -> FeatureTable:
    """Three points in WGS84 longitude/latitude."""
    return FeatureTable(
        {"town": ["London", "Oxford", "Cambridge"]},
        [Point(-0.1276, 51.5072), Point(-1.2577, 51.752), Point(0.1218, 52.2053)],
        crs="EPSG:4326",
    )


@pytest.fixture
def grid_3x3() -> RasterGrid:
    """3 x 3 grid over (0, 0, 3, 3) holding 1..9, 1-unit cells, EPSG:27700."""
    return RasterGrid.from_extent((0, 0, 3, 3), 3, 3, crs="EPSG:27700", name="elevation")


@pytest.fixture
def soil_categories() -> CategoryTable:
    return CategoryTable.from_labels(["clay", "sand", "silt"])


@pytest.fixture
def soil_grid(soil_categories) -> RasterGrid:
    """Categorical 2 x 3 grid; 0 is nodata."""
    codes = np.array([[1, 2, 3], [3, 0, 1]], dtype=np.int32)
    return RasterGrid.from_array(
        codes,
        origin=(0.0, 2.0),
        resolution=1.0,
        crs="EPSG:27700",
        nodata=0,
        categories=soil_categories,
        name="soil",
    )
