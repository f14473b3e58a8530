"""Value objects describing CRSs, joins and rasters.

These are immutable pydantic models returned by engine operations for
inspection and reporting; they carry no geometry or cell data themselves.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from geocomp.models.enums import CrsKind


class CrsInfo(BaseModel):
    """Description of a coordinate reference system.

    Attributes:
        name: Human-readable CRS name (e.g. "WGS 84")
        epsg: EPSG code, None if the CRS has no exact EPSG match
        kind: Geographic (angular) or projected (planar)
        units: Axis unit name (e.g. "degree", "metre")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="CRS name")
    epsg: int | None = Field(default=None, description="EPSG code if identifiable")
    kind: CrsKind = Field(description="Geographic or projected")
    units: str | None = Field(default=None, description="Axis units")

    @property
    def is_geographic(self) -> bool:
        return self.kind == CrsKind.GEOGRAPHIC

    @property
    def authority_string(self) -> str | None:
        """EPSG:nnnn string, or None when there is no EPSG code."""
        return f"EPSG:{self.epsg}" if self.epsg is not None else None


class JoinReport(BaseModel):
    """Outcome of an attribute join.

    Attributes:
        keys: Pairs of (left key, right key) column names used
        left_rows: Rows in the left table
        right_rows: Rows in the right table
        result_rows: Rows in the joined table
        matched_rows: Result rows that found a right-hand partner
        unmatched_left_keys: Distinct left key values with no partner
        unused_right_keys: Distinct right key values never matched
    """

    model_config = ConfigDict(frozen=True)

    keys: list[tuple[str, str]]
    left_rows: int = Field(ge=0)
    right_rows: int = Field(ge=0)
    result_rows: int = Field(ge=0)
    matched_rows: int = Field(ge=0)
    unmatched_left_keys: list[Any] = Field(default_factory=list)
    unused_right_keys: list[Any] = Field(default_factory=list)

    @property
    def fully_matched(self) -> bool:
        return not self.unmatched_left_keys


class RasterSummary(BaseModel):
    """Descriptive statistics of raster cell values, nodata excluded.

    Statistics are None when a grid holds no valid cells.
    """

    model_config = ConfigDict(frozen=True)

    min: float | None = None
    max: float | None = None
    mean: float | None = None
    std: float | None = None
    valid_cells: int = Field(ge=0)
    nodata_cells: int = Field(ge=0)
