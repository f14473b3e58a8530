"""FeatureTable: an attribute table paired 1:1 with a geometry store.

The attribute store is a pandas DataFrame; the geometry store is a
GeoSeries carrying the CRS. Both always share length and index, so a
geometry follows its row through every subset, sort, join and aggregation
("sticky" geometry). Only drop_geometry removes it.

Every operation returns a new table; inputs are never mutated.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import geopandas as gpd
import numpy as np
import pandas as pd
from pyproj import CRS
from shapely.geometry.base import BaseGeometry

from geocomp.config import DEFAULT_CRS_CONFIG, CrsConfig
from geocomp.features import aggregation, joins
from geocomp.models.domain import CrsInfo, JoinReport
from geocomp.spatial import operations
from geocomp.spatial.crs import crs_info, ensure_crs, require_crs, to_crs_object
from geocomp.spatial.utils import make_valid_geometries
from geocomp.validation.errors import (
    ColumnNotFoundError,
    CrsOverrideError,
    GeometryPairingError,
)

logger = logging.getLogger(__name__)

DEFAULT_GEOMETRY_NAME = "geometry"


class FeatureTable:
    """Simple features: attribute rows each paired with one geometry.

    Args:
        attributes: Attribute data (anything pandas.DataFrame accepts).
            May be omitted for a geometry-only table.
        geometry: Geometries, one per attribute row (GeoSeries, GeometryArray
            or sequence of shapely geometries / None)
        crs: CRS tag for the geometries. Must agree with a CRS already carried
            by a GeoSeries argument.
        geometry_name: Name of the geometry column; may not be an attribute name

    Raises:
        GeometryPairingError: If row counts differ or the geometry name is
            also an attribute column
        CrsOverrideError: If crs conflicts with the geometry's own CRS
    """

    def __init__(
        self,
        attributes: Any = None,
        geometry: Iterable[BaseGeometry | None] | None = None,
        crs: Any = None,
        geometry_name: str = DEFAULT_GEOMETRY_NAME,
    ):
        geometry = [] if geometry is None else geometry
        geometry_crs = getattr(geometry, "crs", None)
        geometries = list(geometry)

        if attributes is None:
            attributes = pd.DataFrame(index=pd.RangeIndex(len(geometries)))
        else:
            attributes = pd.DataFrame(attributes).copy()

        if geometry_name in attributes.columns:
            msg = f"Geometry column name '{geometry_name}' is also an attribute column"
            raise GeometryPairingError(msg)

        if len(geometries) != len(attributes):
            msg = (
                f"Cannot pair {len(attributes)} attribute rows with "
                f"{len(geometries)} geometries"
            )
            raise GeometryPairingError(msg)

        if crs is not None and geometry_crs is not None and to_crs_object(crs) != geometry_crs:
            msg = (
                f"crs={crs!r} conflicts with geometry CRS {geometry_crs.to_string()}; "
                f"use to_crs to reproject"
            )
            raise CrsOverrideError(msg)

        crs = geometry_crs if crs is None else to_crs_object(crs)

        self._attributes = attributes
        self._geometry = gpd.GeoSeries(
            geometries, index=attributes.index, crs=crs, name=geometry_name
        )

    @classmethod
    def _from_parts(cls, attributes: pd.DataFrame, geometry: gpd.GeoSeries) -> "FeatureTable":
        """Build a table from stores that are already paired (no copies)."""
        table = cls.__new__(cls)
        table._attributes = attributes
        table._geometry = geometry
        table._check_pairing()
        return table

    def _check_pairing(self) -> None:
        if len(self._attributes) != len(self._geometry) or not self._attributes.index.equals(
            self._geometry.index
        ):
            msg = "Attribute and geometry stores are out of step"
            raise GeometryPairingError(msg)
        if self._geometry.name in self._attributes.columns:
            msg = f"Geometry column name '{self._geometry.name}' is also an attribute column"
            raise GeometryPairingError(msg)

    def _with_attributes(self, attributes: pd.DataFrame) -> "FeatureTable":
        """New table with replaced attributes and the current geometry."""
        return self._from_parts(attributes, self._geometry.copy())

    def _with_geometry(self, geometry: gpd.GeoSeries) -> "FeatureTable":
        """New table with the current attributes and replaced geometry."""
        return self._from_parts(self._attributes.copy(), geometry.rename(self.geometry_name))

    def _take(self, positions: np.ndarray) -> "FeatureTable":
        """Row subset by integer positions; geometries follow their rows."""
        return self._from_parts(
            self._attributes.iloc[positions].copy(),
            self._geometry.iloc[positions].copy(),
        )

    @classmethod
    def from_geodataframe(cls, gdf: gpd.GeoDataFrame) -> "FeatureTable":
        """Split a GeoDataFrame into attribute and geometry stores."""
        geometry_name = gdf.geometry.name
        attributes = pd.DataFrame(gdf.drop(columns=geometry_name))
        return cls(attributes, gdf.geometry, geometry_name=geometry_name)

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        geometry_field: str = DEFAULT_GEOMETRY_NAME,
        crs: Any = None,
    ) -> "FeatureTable":
        """Build a table from dict records holding a geometry under geometry_field."""
        frame = pd.DataFrame.from_records(list(records))
        if geometry_field not in frame.columns:
            raise ColumnNotFoundError([geometry_field], list(frame.columns))
        geometry = frame.pop(geometry_field)
        return cls(frame, list(geometry), crs=crs, geometry_name=geometry_field)

    @classmethod
    def read(cls, path: Path | str, layer: str | None = None, crs: Any = None) -> "FeatureTable":
        """Read a vector file (see geocomp.features.io.read_table)."""
        from geocomp.features.io import read_table

        return read_table(path, layer=layer, crs=crs)

    def to_geodataframe(self) -> gpd.GeoDataFrame:
        """Combine both stores into a GeoDataFrame."""
        frame = self._attributes.copy()
        frame[self.geometry_name] = self._geometry
        return gpd.GeoDataFrame(frame, geometry=self.geometry_name)

    def write(self, path: Path | str) -> Path:
        """Write the table, choosing the output format from the file suffix."""
        from geocomp.models.geometry import GeometryFormat
        from geocomp.outputs import get_output_strategy

        path = Path(path)
        return get_output_strategy(GeometryFormat.from_path(path)).write(self, path)

    def copy(self) -> "FeatureTable":
        return self._from_parts(self._attributes.copy(), self._geometry.copy())

    @property
    def crs(self) -> CRS | None:
        return self._geometry.crs

    @property
    def geometry_name(self) -> str:
        return self._geometry.name

    @property
    def columns(self) -> list[str]:
        """Attribute column names (the geometry column is not included)."""
        return list(self._attributes.columns)

    @property
    def attributes(self) -> pd.DataFrame:
        """Copy of the attribute store."""
        return self._attributes.copy()

    @property
    def geometry(self) -> gpd.GeoSeries:
        """Copy of the geometry store."""
        return self._geometry.copy()

    @property
    def index(self) -> pd.Index:
        return self._attributes.index

    @property
    def shape(self) -> tuple[int, int]:
        """(rows, attribute columns)."""
        return self._attributes.shape

    @property
    def total_bounds(self) -> np.ndarray:
        """minx, miny, maxx, maxy of all geometries."""
        return self._geometry.total_bounds

    def __len__(self) -> int:
        return len(self._attributes)

    def __contains__(self, column: object) -> bool:
        return column == self.geometry_name or column in self._attributes.columns

    def __getitem__(self, column: str) -> pd.Series:
        if column == self.geometry_name:
            return self.geometry
        if column not in self._attributes.columns:
            raise ColumnNotFoundError([column], self.columns)
        return self._attributes[column].copy()

    def __repr__(self) -> str:
        crs = self.crs.to_string() if self.crs is not None else None
        return (
            f"FeatureTable({len(self)} features, {len(self.columns)} attributes, "
            f"geometry='{self.geometry_name}', crs={crs})"
        )

    def _require_columns(self, columns: Iterable[str]) -> None:
        missing = [c for c in columns if c not in self._attributes.columns]
        if missing:
            raise ColumnNotFoundError(missing, self.columns)

    def set_crs(
        self,
        crs: Any,
        allow_override: bool | None = None,
        config: CrsConfig | None = None,
    ) -> "FeatureTable":
        """Tag the geometries with a CRS without transforming coordinates.

        Args:
            crs: CRS to tag
            allow_override: Replace an existing, different CRS tag
                (default: CrsConfig.allow_override)
            config: CRS configuration

        Raises:
            CrsOverrideError: If a different CRS is already set and overriding
                is not allowed
        """
        config = config or DEFAULT_CRS_CONFIG
        allow = config.allow_override if allow_override is None else allow_override
        target = to_crs_object(crs)

        if self.crs is not None and self.crs != target:
            if not allow:
                msg = (
                    f"Table already has CRS {self.crs.to_string()}; use to_crs to "
                    f"reproject or allow_override=True to re-tag"
                )
                raise CrsOverrideError(msg)
            logger.warning(
                f"Re-tagging CRS {self.crs.to_string()} as {target.to_string()} "
                f"without transforming coordinates"
            )

        return self._with_geometry(self._geometry.set_crs(target, allow_override=True))

    def to_crs(self, crs: Any) -> "FeatureTable":
        """Reproject the geometries to another CRS.

        Raises:
            MissingCrsError: If the table has no CRS to transform from
        """
        require_crs(self.crs, "reproject")
        source = self.crs.to_string()
        reprojected = ensure_crs(self._geometry, crs)
        logger.info(f"Reprojected {len(self)} features: {source} -> {reprojected.crs.to_string()}")
        return self._with_geometry(reprojected)

    def crs_info(self) -> CrsInfo:
        return crs_info(self.crs)

    def select(self, columns: str | Iterable[str]) -> "FeatureTable":
        """Keep only the given attribute columns; the geometry always stays."""
        names = [columns] if isinstance(columns, str) else list(columns)
        names = [c for c in names if c != self.geometry_name]
        self._require_columns(names)
        return self._with_attributes(self._attributes[names].copy())

    def drop(self, columns: str | Iterable[str]) -> "FeatureTable":
        """Remove attribute columns."""
        names = [columns] if isinstance(columns, str) else list(columns)
        self._require_columns(names)
        return self._with_attributes(self._attributes.drop(columns=names))

    def rename(self, mapping: Mapping[str, str]) -> "FeatureTable":
        """Rename attribute columns."""
        self._require_columns(mapping.keys())
        if self.geometry_name in mapping.values():
            msg = f"Cannot rename an attribute to the geometry column name '{self.geometry_name}'"
            raise GeometryPairingError(msg)
        return self._with_attributes(self._attributes.rename(columns=dict(mapping)))

    def assign(self, **columns: Any) -> "FeatureTable":
        """Add or replace attribute columns.

        Values follow pandas.DataFrame.assign: scalars, array-likes, or callables
        receiving the attribute DataFrame.
        """
        if self.geometry_name in columns:
            msg = f"Cannot assign to the geometry column '{self.geometry_name}'"
            raise GeometryPairingError(msg)
        return self._with_attributes(self._attributes.assign(**columns))

    def drop_geometry(self) -> pd.DataFrame:
        """Return the attributes alone, without geometry."""
        return self._attributes.copy()

    def filter(self, mask: Any) -> "FeatureTable":
        """Keep rows where mask is True.

        Args:
            mask: Boolean Series (aligned on the table index), boolean
                array-like of the table's length, or a callable taking the
                attribute DataFrame and returning one of those.
                Missing values (NA/None/NaN) in the mask drop the row.

        Raises:
            ValueError: If an array-like mask has the wrong length
        """
        if callable(mask):
            mask = mask(self._attributes)

        if isinstance(mask, pd.Series):
            if not mask.index.equals(self.index):
                mask = mask.reindex(self.index)
            values = mask.to_numpy(dtype=object)
        else:
            values = np.asarray(mask, dtype=object)
            if values.ndim != 1 or len(values) != len(self):
                msg = f"Mask has {values.size} values; table has {len(self)} rows"
                raise ValueError(msg)

        flags = pd.array(values, dtype="boolean")
        na_count = int(flags.isna().sum())
        if na_count:
            logger.debug(f"filter: {na_count} missing mask value(s) treated as False")

        keep = flags.fillna(False).to_numpy(dtype=bool)
        return self._take(np.flatnonzero(keep))

    def query(self, expr: str, **kwargs: Any) -> "FeatureTable":
        """Keep rows matching a pandas query expression over the attributes.

        `@name` in the expression refers to a variable in the caller's scope.
        """
        level = kwargs.pop("level", 0) + 1
        return self.filter(self._attributes.eval(expr, level=level, **kwargs))

    def take(self, positions: Iterable[int]) -> "FeatureTable":
        """Rows at the given integer positions, in the given order."""
        return self._take(np.asarray(list(positions), dtype=int))

    def head(self, n: int = 5) -> "FeatureTable":
        return self._take(np.arange(min(max(n, 0), len(self))))

    def sort_by(self, columns: str | list[str], ascending: bool | list[bool] = True) -> "FeatureTable":
        """Sort rows by attribute columns (stable)."""
        names = [columns] if isinstance(columns, str) else list(columns)
        self._require_columns(names)
        order = (
            self._attributes.reset_index(drop=True)
            .sort_values(names, ascending=ascending, kind="stable")
            .index.to_numpy()
        )
        return self._take(order)

    def reset_index(self) -> "FeatureTable":
        """Renumber rows 0..n-1 in both stores."""
        return self._from_parts(
            self._attributes.reset_index(drop=True),
            self._geometry.reset_index(drop=True),
        )

    def aggregate(
        self,
        by: str | list[str],
        agg: Mapping[str, str | Callable | list] | None = None,
        dissolve: bool = True,
        count_column: str | None = None,
        grid_size: float | None = None,
    ) -> "FeatureTable":
        """Group rows and combine their geometries (see features.aggregation)."""
        return aggregation.aggregate(
            self,
            by,
            agg=agg,
            dissolve=dissolve,
            count_column=count_column,
            grid_size=grid_size,
        )

    def join(
        self,
        right: "pd.DataFrame | FeatureTable",
        on: str | list[str] | None = None,
        left_on: str | list[str] | None = None,
        right_on: str | list[str] | None = None,
        how: str = "left",
        relationship: str | None = None,
    ) -> "FeatureTable":
        """Attribute join keeping this table's geometry (see features.joins)."""
        table, _ = self.join_with_report(
            right, on=on, left_on=left_on, right_on=right_on, how=how, relationship=relationship
        )
        return table

    def join_with_report(
        self,
        right: "pd.DataFrame | FeatureTable",
        on: str | list[str] | None = None,
        left_on: str | list[str] | None = None,
        right_on: str | list[str] | None = None,
        how: str = "left",
        relationship: str | None = None,
    ) -> "tuple[FeatureTable, JoinReport]":
        return joins.attribute_join(
            self, right, on=on, left_on=left_on, right_on=right_on, how=how, relationship=relationship
        )

    def area(self) -> pd.Series:
        return operations.area(self._geometry)

    def length(self) -> pd.Series:
        return operations.length(self._geometry)

    def distance(
        self,
        other: "FeatureTable | gpd.GeoSeries | BaseGeometry",
        config: CrsConfig | None = None,
    ) -> pd.Series:
        """Distance from each feature to a geometry or to the paired feature of other."""
        if isinstance(other, FeatureTable):
            other = other.geometry
        return operations.distance(self._geometry, other, config=config)

    def buffer(self, distance: float, config: CrsConfig | None = None) -> "FeatureTable":
        return self._with_geometry(operations.buffer(self._geometry, distance, config=config))

    def make_valid(self) -> "FeatureTable":
        return self._with_geometry(make_valid_geometries(self._geometry))
