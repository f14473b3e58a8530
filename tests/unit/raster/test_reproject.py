"""Unit tests for raster reprojection."""

import numpy as np
import pytest

from geocomp.config import RasterConfig
from geocomp.raster import RasterGrid, reproject_grid
from geocomp.validation.errors import CategoryError, MissingCrsError


@pytest.fixture
def lonlat_grid() -> RasterGrid:
    """4 x 4 float grid of 1-degree cells south-east of (0, 52), WGS84."""
    values = np.arange(16, dtype=np.float64).reshape(4, 4)
    return RasterGrid.from_array(values, origin=(0.0, 52.0), resolution=1.0, crs="EPSG:4326", name="temp")


@pytest.fixture
def lonlat_landcover() -> RasterGrid:
    """Categorical 4 x 4 grid in WGS84 with codes 1 and 2 only."""
    labels = np.array([["urban", "urban", "forest", "forest"]] * 4, dtype=object)
    return RasterGrid.from_labels(labels, origin=(0.0, 52.0), resolution=1.0, crs="EPSG:4326")


def test_continuous_reprojection(lonlat_grid):
    """Test a continuous grid lands in the target CRS keeping dtype and name."""
    result = lonlat_grid.reproject("EPSG:3857")

    assert result.crs.to_epsg() == 3857
    assert result.dtype == np.float64
    assert result.name == "temp"
    assert not result.is_categorical
    valid = result.values[result.valid_mask()]
    assert valid.size > 0
    assert valid.min() >= 0.0
    assert valid.max() <= 15.0


def test_reprojection_with_resolution(lonlat_grid):
    """Test the target cell size can be fixed."""
    result = reproject_grid(lonlat_grid, "EPSG:3857", resolution=50_000)

    assert result.resolution == pytest.approx((50_000, 50_000))


def test_categorical_reprojection_keeps_codes(lonlat_landcover):
    """Test categorical grids default to nearest and only hold known codes."""
    result = lonlat_landcover.reproject("EPSG:3857")

    assert result.categories == lonlat_landcover.categories
    assert set(np.unique(result.values)) <= {0, 1, 2}
    assert result.dtype == lonlat_landcover.dtype


def test_categorical_mode_allowed(lonlat_landcover):
    """Test mode resampling keeps categories."""
    result = lonlat_landcover.reproject("EPSG:3857", method="mode")

    assert set(np.unique(result.values)) <= {0, 1, 2}


@pytest.mark.parametrize("method", ["bilinear", "cubic", "average"])
def test_categorical_interpolation_refused(lonlat_landcover, method):
    """Test interpolating methods cannot be used on categorical grids."""
    with pytest.raises(CategoryError, match="use nearest or mode"):
        lonlat_landcover.reproject("EPSG:3857", method=method)


def test_missing_crs_refused():
    """Test a grid without CRS cannot be reprojected."""
    grid = RasterGrid.from_extent((0, 0, 2, 2), 2, 2)

    with pytest.raises(MissingCrsError):
        grid.reproject("EPSG:3857")


def test_integer_grid_gets_configured_nodata():
    """Test integer grids without nodata are filled with integer_nodata."""
    grid = RasterGrid.from_extent((0, 48, 4, 52), 4, 4, crs="EPSG:4326")

    result = grid.reproject("EPSG:3857", method="near", config=RasterConfig(integer_nodata=-1))

    assert result.nodata == -1
    assert result.dtype == grid.dtype
    assert set(np.unique(result.values)) <= set(range(1, 17)) | {-1}


def test_boolean_grid_reprojection():
    """Test boolean grids warp as uint8 with room for a nodata value."""
    grid = RasterGrid.from_array(
        np.array([[True, False], [False, True]]), (0, 2), 1.0, crs="EPSG:27700", name="mask"
    )

    result = grid.reproject("EPSG:4326", method="nearest")

    assert result.dtype == np.uint8
    assert result.nodata == 255
    assert set(np.unique(result.values)) <= {0, 1, 255}
    assert result.valid_mask().any()
