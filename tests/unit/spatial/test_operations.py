"""Unit tests for CRS-aware measurement operations."""

import math

import geopandas as gpd
import pytest
from shapely.geometry import LineString, Point, box

from geocomp.config import CrsConfig
from geocomp.spatial.operations import area, buffer, distance, length
from geocomp.validation.errors import GeographicCrsError, MissingCrsError
from tests.utils import square


def test_area_projected_in_crs_units(districts):
    """Test planar area for projected data."""
    result = area(districts.geometry)

    assert list(result) == [100.0, 100.0, 100.0, 100.0]
    assert result.name == "area"


def test_area_geographic_is_geodesic():
    """Test area of a 1 x 1 degree cell at the equator in square metres."""
    cell = gpd.GeoSeries([box(0, 0, 1, 1)], crs="EPSG:4326")

    # ~111.3 km x ~110.6 km
    assert area(cell).iloc[0] == pytest.approx(1.2308e10, rel=0.01)


def test_length_geographic_is_geodesic():
    """Test one degree of longitude along the equator in metres."""
    line = gpd.GeoSeries([LineString([(0, 0), (1, 0)])], crs="EPSG:4326")

    assert length(line).iloc[0] == pytest.approx(111_319.49, rel=1e-4)


def test_area_null_geometry_is_nan():
    """Test null geometries measure as NaN on geographic data."""
    cells = gpd.GeoSeries([box(0, 0, 1, 1), None], crs="EPSG:4326")

    assert math.isnan(area(cells).iloc[1])


@pytest.mark.parametrize("operation", [area, length])
def test_measurement_without_crs_is_refused(operation):
    """Test measurements in unknown units are refused."""
    with pytest.raises(MissingCrsError):
        operation(gpd.GeoSeries([box(0, 0, 1, 1)]))


def test_distance_projected_to_point(districts):
    """Test planar distance from each district to a point."""
    result = distance(districts.geometry, Point(-5, 5))

    assert list(result) == pytest.approx([5.0, 15.0, 25.0, 35.0])
    assert result.index.equals(districts.index)


def test_distance_geographic_in_metres(towns_wgs84):
    """Test lon/lat distances are measured in metres via the local UTM zone."""
    london = towns_wgs84.geometry.iloc[0]
    result = distance(towns_wgs84.geometry, london)

    assert result.iloc[0] == pytest.approx(0.0, abs=1e-6)
    # London - Oxford is roughly 83 km
    assert result.iloc[1] == pytest.approx(82_700, rel=0.02)


def test_distance_geographic_refused_with_error_strategy(towns_wgs84):
    """Test the 'error' strategy refuses planar operations on lon/lat."""
    config = CrsConfig(geographic_strategy="error")

    with pytest.raises(GeographicCrsError, match="geographic coordinates"):
        distance(towns_wgs84.geometry, Point(0, 51), config=config)


def test_distance_without_crs_is_refused():
    """Test distances between untagged geometries are refused."""
    with pytest.raises(MissingCrsError):
        distance(gpd.GeoSeries([Point(0, 0)]), Point(1, 1))


def test_distance_element_wise_reprojects_other():
    """Test a GeoSeries in another CRS is reprojected before comparing."""
    # Inside Great Britain, where the EPSG:27700 round trip is exact
    squares = gpd.GeoSeries(
        [square(400_000 + 10 * i, 300_000) for i in range(4)], crs="EPSG:27700"
    )
    other = squares.centroid.to_crs("EPSG:4326")

    result = distance(squares, other)

    assert list(result) == pytest.approx([0.0, 0.0, 0.0, 0.0], abs=1e-3)


def test_distance_element_wise_length_mismatch(districts):
    """Test element-wise comparison needs equal lengths."""
    other = gpd.GeoSeries([Point(0, 0)], crs="EPSG:27700")

    with pytest.raises(ValueError, match="element-wise"):
        distance(districts.geometry, other)


def test_buffer_projected(districts):
    """Test buffering a 10 x 10 square by 1 unit."""
    result = buffer(districts.geometry, 1.0)

    # 100 + 4 edges of 10 x 1 + a full circle of radius 1 at the corners
    assert result.area.iloc[0] == pytest.approx(100 + 40 + math.pi, rel=1e-2)
    assert result.crs == districts.crs


def test_buffer_geographic_in_metres_keeps_crs(towns_wgs84):
    """Test buffering lon/lat points by metres returns lon/lat polygons."""
    result = buffer(towns_wgs84.geometry, 1000.0)

    assert result.crs.to_epsg() == 4326
    assert area(result).iloc[0] == pytest.approx(math.pi * 1000**2, rel=0.02)
