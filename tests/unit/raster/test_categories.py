"""Unit tests for category tables."""

import numpy as np
import pandas as pd
import pytest

from geocomp.raster import CategoryTable
from geocomp.validation.errors import CategoryError


def test_from_labels_numbers_from_one(soil_categories):
    """Test labels are numbered consecutively in order."""
    assert soil_categories.codes == [1, 2, 3]
    assert soil_categories.labels == ["clay", "sand", "silt"]
    assert len(soil_categories) == 3
    assert 2 in soil_categories
    assert 0 not in soil_categories


def test_lookup_both_ways(soil_categories):
    """Test code <-> label lookups."""
    assert soil_categories.label(2) == "sand"
    assert soil_categories.code("silt") == 3


def test_unknown_lookups(soil_categories):
    """Test unknown codes and labels raise CategoryError."""
    with pytest.raises(CategoryError, match="Unknown category code"):
        soil_categories.label(9)
    with pytest.raises(CategoryError, match="Unknown category label"):
        soil_categories.code("peat")


def test_encode_decode(soil_categories):
    """Test array conversion keeps shape; nodata and NaN decode to None."""
    codes = soil_categories.encode([["clay", "silt"], ["sand", "clay"]])
    assert codes.tolist() == [[1, 3], [2, 1]]

    labels = soil_categories.decode(np.array([1, 0, 3]), nodata=0)
    assert labels.tolist() == ["clay", None, "silt"]
    assert soil_categories.decode(np.array([np.nan, 2.0])).tolist() == [None, "sand"]


def test_invalid_tables():
    """Test duplicate labels and non-integer codes are refused."""
    with pytest.raises(CategoryError, match="Duplicate"):
        CategoryTable({1: "clay", 2: "clay"})
    with pytest.raises(CategoryError, match="integers"):
        CategoryTable({1.5: "clay"})
    with pytest.raises(CategoryError, match="Duplicate"):
        CategoryTable.from_labels(["clay", "clay"])


def test_frame_round_trip(soil_categories):
    """Test conversion to and from a value/label table."""
    frame = soil_categories.to_frame()

    assert list(frame.columns) == ["value", "label"]
    assert CategoryTable.from_frame(frame) == soil_categories


def test_from_frame_missing_column():
    """Test frames need both columns."""
    with pytest.raises(CategoryError, match="no 'label' column"):
        CategoryTable.from_frame(pd.DataFrame({"value": [1]}))
