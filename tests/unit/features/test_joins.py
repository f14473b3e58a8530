"""Unit tests for attribute joins."""

import logging

import numpy as np
import pandas as pd
import pytest
from shapely.geometry import Point

from geocomp.config import JoinConfig
from geocomp.features import FeatureTable, attribute_join
from geocomp.features.joins import key_kind, resolve_keys
from geocomp.validation.errors import AttributeJoinError, ColumnNotFoundError
from tests.utils import assert_same_geometries, square


@pytest.fixture
def region_stats() -> pd.DataFrame:
    """Per-region attributes; 'East' matches no district."""
    return pd.DataFrame(
        {
            "region": ["North", "South", "East"],
            "gdp": [1.5, 2.5, 3.5],
        }
    )


def test_left_join_keeps_rows_and_geometries(districts, region_stats):
    """Test a left join adds attributes and keeps left geometries in order."""
    result, report = attribute_join(districts, region_stats, on="region")

    assert result.columns == ["name", "region", "population", "gdp"]
    assert list(result["gdp"]) == [1.5, 1.5, 2.5, 2.5]
    assert result.crs == districts.crs
    assert_same_geometries(result.geometry, list(districts.geometry))
    assert report.left_rows == 4
    assert report.result_rows == 4
    assert report.matched_rows == 4
    assert report.unused_right_keys == ["East"]
    assert report.fully_matched


def test_left_join_unmatched_rows_get_missing_values(districts, caplog):
    """Test unmatched left rows are kept with missing right attributes."""
    right = pd.DataFrame({"region": ["North"], "gdp": [1.5]})

    with caplog.at_level(logging.WARNING, logger="geocomp.features.joins"):
        result, report = attribute_join(districts, right, on="region")

    assert len(result) == 4
    assert np.isnan(result["gdp"].iloc[2])
    assert report.unmatched_left_keys == ["South"]
    assert report.matched_rows == 2
    assert "found no match" in caplog.text


def test_unmatched_warning_can_be_disabled(districts, caplog):
    """Test warn_unmatched=False keeps the log quiet."""
    right = pd.DataFrame({"region": ["North"], "gdp": [1.5]})

    with caplog.at_level(logging.WARNING, logger="geocomp.features.joins"):
        attribute_join(districts, right, on="region", config=JoinConfig(warn_unmatched=False))

    assert "found no match" not in caplog.text


def test_inner_join_keeps_matched_rows_only(districts):
    """Test an inner join drops unmatched rows and their geometries."""
    right = pd.DataFrame({"region": ["South"], "gdp": [2.5]})

    result = districts.join(right, on="region", how="inner")

    assert list(result["name"]) == ["Cotham", "Denby"]
    assert_same_geometries(result.geometry, [square(20, 0), square(30, 0)])


def test_unsupported_join_type(districts, region_stats):
    """Test right and outer joins are refused (no left geometry for every row)."""
    with pytest.raises(AttributeJoinError, match="Unsupported join type"):
        attribute_join(districts, region_stats, on="region", how="right")


def test_join_on_shared_columns_by_default(districts, region_stats, caplog):
    """Test keys default to the shared column names."""
    with caplog.at_level(logging.INFO, logger="geocomp.features.joins"):
        result, report = attribute_join(districts, region_stats)

    assert report.keys == [("region", "region")]
    assert "gdp" in result
    assert "shared column" in caplog.text


def test_join_with_different_key_names(districts):
    """Test left_on/right_on joins drop the redundant right key column."""
    right = pd.DataFrame({"area_name": ["North", "South"], "gdp": [1.5, 2.5]})

    result, report = attribute_join(districts, right, left_on="region", right_on="area_name")

    assert "area_name" not in result.columns
    assert list(result["gdp"]) == [1.5, 1.5, 2.5, 2.5]
    assert report.keys == [("region", "area_name")]


def test_overlapping_columns_get_suffix(districts):
    """Test clashing right-hand columns are suffixed."""
    right = pd.DataFrame({"region": ["North", "South"], "population": [1000, 2000]})

    result = districts.join(right, on="region")

    assert result.columns == ["name", "region", "population", "population_right"]
    assert list(result["population"]) == [100, 200, 300, 400]


def test_incompatible_key_types_refused(districts):
    """Test numeric keys cannot be joined with text keys."""
    table = districts.assign(code=[1, 2, 3, 4])
    right = pd.DataFrame({"code": ["1", "2"], "value": [10, 20]})

    with pytest.raises(AttributeJoinError, match="key types differ"):
        attribute_join(table, right, on="code")


def test_relationship_violation(districts):
    """Test duplicated right keys violate the default many_to_one relationship."""
    right = pd.DataFrame({"region": ["North", "North"], "gdp": [1.0, 2.0]})

    with pytest.raises(AttributeJoinError, match="many_to_one"):
        attribute_join(districts, right, on="region")

    result, _ = attribute_join(districts, right, on="region", relationship="many_to_many")
    assert len(result) == 6
    assert len(result.geometry) == 6


def test_right_feature_table_geometry_dropped(districts):
    """Test the right table's geometry never replaces the left geometry."""
    right = FeatureTable(
        {"region": ["North", "South"], "gdp": [1.5, 2.5]},
        [Point(100, 100), Point(200, 200)],
        crs="EPSG:27700",
    )

    result = districts.join(right, on="region")

    assert result.columns == ["name", "region", "population", "gdp"]
    assert_same_geometries(result.geometry, list(districts.geometry))


def test_right_column_named_like_geometry(districts):
    """Test a right-hand 'geometry' attribute is refused."""
    right = pd.DataFrame({"region": ["North"], "geometry": ["POINT (0 0)"]})

    with pytest.raises(AttributeJoinError, match="geometry column"):
        attribute_join(districts, right, on="region")


def test_resolve_keys_errors():
    """Test inconsistent or missing key arguments."""
    with pytest.raises(AttributeJoinError, match="not both"):
        resolve_keys(["a"], ["a"], on="a", left_on="a", right_on="a")
    with pytest.raises(AttributeJoinError, match="together"):
        resolve_keys(["a"], ["a"], left_on="a")
    with pytest.raises(AttributeJoinError, match="No shared columns"):
        resolve_keys(["a"], ["b"])
    with pytest.raises(ColumnNotFoundError):
        resolve_keys(["a"], ["b"], on="a")


@pytest.mark.parametrize(
    "series, kind",
    [
        (pd.Series([1, 2]), "numeric"),
        (pd.Series([1.5, None]), "numeric"),
        (pd.Series(["a", "b"]), "text"),
        (pd.Series(["a", "b"], dtype="category"), "text"),
        (pd.Series([True, False]), "boolean"),
        (pd.Series(pd.to_datetime(["2024-01-01"])), "datetime"),
        (pd.Series([None, None], dtype=object), "empty"),
    ],
)
def test_key_kind(series, kind):
    """Test key classification used for compatibility checks."""
    assert key_kind(series) == kind
