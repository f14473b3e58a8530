"""Configuration and constants for geocomp.

This module defines the fixed constants and the tunable behaviour of the
engine:
- CRS handling (CrsConfig with CRS_ prefix)
- Attribute joins (JoinConfig with JOIN_ prefix)
- Raster reprojection (RasterConfig with RASTER_ prefix)

Configuration can be overridden via:
1. Environment variables (e.g., CRS_ALLOW_OVERRIDE=true, JOIN_RELATIONSHIP=one_to_one)
2. .env file in the current directory
3. Default values in code
"""

from dataclasses import dataclass
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class PhysicalConstants:
    """Geodetic constants used by CRS and measurement operations.

    These are NOT configurable - they describe the WGS84 datum and the UTM
    zone layout, which never vary.
    """

    CRS_WGS84: str = "EPSG:4326"
    ELLIPSOID: str = "WGS84"

    # UTM zones are 6 degrees wide; EPSG codes 326zz (north) and 327zz (south)
    UTM_ZONE_WIDTH_DEG: int = 6
    UTM_ZONE_COUNT: int = 60
    UTM_NORTH_EPSG_BASE: int = 32600
    UTM_SOUTH_EPSG_BASE: int = 32700


# Module-level singleton for physical constants
CONSTANTS = PhysicalConstants()


class CrsConfig(BaseSettings):
    """Coordinate reference system behaviour.

    Can be overridden via environment variables with CRS_ prefix:
    - CRS_DEFAULT_GEOGRAPHIC_CRS
    - CRS_ALLOW_OVERRIDE
    - CRS_GEOGRAPHIC_STRATEGY

    Attributes:
        default_geographic_crs: CRS used to locate data on the globe (UTM zone lookup)
        allow_override: Let set_crs replace an existing, different CRS tag
        geographic_strategy: What planar operations do on lon/lat data:
            "utm" measures in the local UTM zone, "error" refuses
    """

    model_config = SettingsConfigDict(
        env_prefix="CRS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_geographic_crs: str = Field(
        default=CONSTANTS.CRS_WGS84, description="Geographic CRS for globe-level lookups"
    )
    allow_override: bool = Field(
        default=False, description="Allow set_crs to replace an existing CRS"
    )
    geographic_strategy: Literal["utm", "error"] = Field(
        default="utm", description="Planar operations on geographic data: 'utm' or 'error'"
    )


DEFAULT_CRS_CONFIG = CrsConfig()


class JoinConfig(BaseSettings):
    """Attribute join behaviour.

    Can be overridden via environment variables with JOIN_ prefix:
    - JOIN_RELATIONSHIP
    - JOIN_RIGHT_SUFFIX
    - JOIN_WARN_UNMATCHED

    Attributes:
        relationship: Expected key relationship, checked by pandas merge
            validation (one_to_one, one_to_many, many_to_one, many_to_many)
        right_suffix: Suffix for right-hand columns that clash with left ones
        warn_unmatched: Log a warning when left keys find no partner
    """

    model_config = SettingsConfigDict(
        env_prefix="JOIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    relationship: Literal["one_to_one", "one_to_many", "many_to_one", "many_to_many"] = Field(
        default="many_to_one", description="Expected key relationship between left and right"
    )
    right_suffix: str = Field(default="_right", description="Suffix for clashing right columns")
    warn_unmatched: bool = Field(default=True, description="Warn about unmatched left keys")

    @field_validator("right_suffix")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v:
            msg = "right_suffix cannot be empty"
            raise ValueError(msg)
        return v


DEFAULT_JOIN_CONFIG = JoinConfig()


class RasterConfig(BaseSettings):
    """Raster reprojection defaults.

    Can be overridden via environment variables with RASTER_ prefix:
    - RASTER_CONTINUOUS_RESAMPLING
    - RASTER_CATEGORICAL_RESAMPLING
    - RASTER_INTEGER_NODATA

    Attributes:
        continuous_resampling: Default method for continuous grids
        categorical_resampling: Default method for categorical grids
        integer_nodata: Fill value for integer grids that define no nodata
    """

    model_config = SettingsConfigDict(
        env_prefix="RASTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    continuous_resampling: str = Field(
        default="bilinear", description="Resampling method for continuous rasters"
    )
    categorical_resampling: str = Field(
        default="near", description="Resampling method for categorical rasters"
    )
    integer_nodata: int = Field(
        default=-9999, description="Nodata fill for integer rasters without nodata"
    )


DEFAULT_RASTER_CONFIG = RasterConfig()
