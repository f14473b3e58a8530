"""Helpers shared by tests."""

import geopandas as gpd
from shapely.geometry import Polygon


def square(x: float, y: float, size: float = 10.0) -> Polygon:
    """Axis-aligned square with its lower-left corner at (x, y)."""
    return Polygon([(x, y), (x + size, y), (x + size, y + size), (x, y + size)])


def assert_same_geometries(actual: gpd.GeoSeries, expected: list) -> None:
    """Assert geometries match element-wise (topological equality).

    Args:
        actual: Geometries to check
        expected: Expected shapely geometries, in order

    Raises:
        AssertionError: If lengths differ or any pair is not equal
    """
    assert len(actual) == len(
        expected
    ), f"Geometry count mismatch: {len(actual)} vs {len(expected)}"
    for i, (got, want) in enumerate(zip(actual, expected, strict=True)):
        assert got.equals(want), f"Geometry {i} differs: {got.wkt} vs {want.wkt}"
