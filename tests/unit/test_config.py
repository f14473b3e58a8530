"""Unit tests for configuration."""

import pytest
from pydantic import ValidationError


def test_default_config_values():
    """Test default configuration values."""
    from geocomp.config import DEFAULT_CRS_CONFIG, DEFAULT_JOIN_CONFIG, DEFAULT_RASTER_CONFIG

    assert DEFAULT_CRS_CONFIG.default_geographic_crs == "EPSG:4326"
    assert DEFAULT_CRS_CONFIG.allow_override is False
    assert DEFAULT_CRS_CONFIG.geographic_strategy == "utm"
    assert DEFAULT_JOIN_CONFIG.relationship == "many_to_one"
    assert DEFAULT_JOIN_CONFIG.right_suffix == "_right"
    assert DEFAULT_JOIN_CONFIG.warn_unmatched is True
    assert DEFAULT_RASTER_CONFIG.continuous_resampling == "bilinear"
    assert DEFAULT_RASTER_CONFIG.categorical_resampling == "near"
    assert DEFAULT_RASTER_CONFIG.integer_nodata == -9999


def test_physical_constants():
    """Test UTM and datum constants."""
    from geocomp.config import CONSTANTS

    assert CONSTANTS.CRS_WGS84 == "EPSG:4326"
    assert CONSTANTS.UTM_NORTH_EPSG_BASE == 32600
    assert CONSTANTS.UTM_SOUTH_EPSG_BASE == 32700


def test_environment_overrides_config(monkeypatch):
    """Test that prefixed environment variables override defaults."""
    from geocomp.config import CrsConfig, JoinConfig, RasterConfig

    monkeypatch.setenv("CRS_ALLOW_OVERRIDE", "true")
    monkeypatch.setenv("JOIN_RELATIONSHIP", "one_to_one")
    monkeypatch.setenv("RASTER_INTEGER_NODATA", "-1")

    assert CrsConfig().allow_override is True
    assert JoinConfig().relationship == "one_to_one"
    assert RasterConfig().integer_nodata == -1


def test_invalid_geographic_strategy_rejected():
    """Test that only 'utm' and 'error' strategies are accepted."""
    from geocomp.config import CrsConfig

    with pytest.raises(ValidationError):
        CrsConfig(geographic_strategy="planar")


def test_empty_right_suffix_rejected():
    """Test that an empty join suffix is rejected."""
    from geocomp.config import JoinConfig

    with pytest.raises(ValidationError, match="right_suffix cannot be empty"):
        JoinConfig(right_suffix="")
