"""Attribute aggregation for feature tables.

Rows are grouped by attribute values; attributes are summarised with pandas
and each group's geometries are combined into one geometry, so every
output row is still paired with exactly one geometry.
"""

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

import geopandas as gpd
import pandas as pd
from shapely.geometry import GeometryCollection
from shapely.ops import unary_union

from geocomp.spatial.utils import apply_precision
from geocomp.validation.errors import ColumnNotFoundError

if TYPE_CHECKING:
    from geocomp.features.table import FeatureTable

logger = logging.getLogger(__name__)


def _combine(geometries: gpd.GeoSeries, dissolve: bool):
    parts = [geom for geom in geometries if geom is not None]
    if dissolve:
        return unary_union(parts)
    return GeometryCollection(parts)


def aggregate(
    table: "FeatureTable",
    by: str | list[str],
    agg: Mapping[str, str | Callable | list] | None = None,
    dissolve: bool = True,
    count_column: str | None = None,
    grid_size: float | None = None,
) -> "FeatureTable":
    """Group features by attribute values and combine each group.

    Args:
        table: Input feature table
        by: Grouping column(s). Rows with a missing key are dropped.
        agg: pandas aggregation per column (e.g. {"pop": "sum"}).
            None sums every numeric non-key column.
        dissolve: True unions each group's geometries; False collects them
            unchanged into a GeometryCollection
        count_column: If given, add a column with the number of rows per group
        grid_size: If given, snap the combined geometries to this grid

    Returns:
        FeatureTable with one row per group (sorted by key), the key columns
        first, and the input CRS

    Raises:
        ColumnNotFoundError: If a key or aggregated column does not exist
    """
    keys = [by] if isinstance(by, str) else list(by)
    attributes = table.attributes.reset_index(drop=True)
    geometry = table.geometry.reset_index(drop=True)

    missing = [k for k in keys if k not in attributes.columns]
    if agg is not None:
        missing += [c for c in agg if c not in attributes.columns]
    if missing:
        raise ColumnNotFoundError(missing, list(attributes.columns))

    if agg is None:
        numeric = attributes.drop(columns=keys).select_dtypes(include="number").columns
        agg = {column: "sum" for column in numeric}

    grouped = attributes.groupby(keys, sort=True, dropna=True, observed=True)
    sizes = grouped.size()

    if agg:
        summary = grouped.agg(dict(agg))
        if isinstance(summary.columns, pd.MultiIndex):
            summary.columns = ["_".join(map(str, c)) for c in summary.columns]
    else:
        summary = pd.DataFrame(index=sizes.index)

    if count_column is not None:
        summary[count_column] = sizes

    # Group numbers follow the sorted group order of summary; dropped keys never match
    codes = grouped.ngroup().to_numpy()
    combined = [_combine(geometry[codes == i], dissolve) for i in range(len(summary))]
    result_geometry = gpd.GeoSeries(combined, crs=table.crs)
    if grid_size is not None:
        result_geometry = apply_precision(result_geometry, grid_size=grid_size)

    summary = summary.reset_index()
    logger.info(f"Aggregated {len(table)} features into {len(summary)} groups by {keys}")

    return type(table)(
        summary, result_geometry, geometry_name=table.geometry_name
    )
