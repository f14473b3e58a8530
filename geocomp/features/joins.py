"""Attribute joins for feature tables.

Joins combine a feature table with another table on shared key columns.
The geometry always comes from the left-hand table: each result row carries
the geometry of the left row it was built from, whatever the join
multiplies or drops.
"""

import logging
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from geocomp.config import DEFAULT_JOIN_CONFIG, JoinConfig
from geocomp.models.domain import JoinReport
from geocomp.models.enums import JoinHow
from geocomp.validation.errors import AttributeJoinError, ColumnNotFoundError

if TYPE_CHECKING:
    from geocomp.features.table import FeatureTable

logger = logging.getLogger(__name__)

_ROW_COLUMN = "__geocomp_row__"
_MERGE_COLUMN = "__geocomp_merge__"
_PREVIEW_KEYS = 10


def _as_list(value: str | list[str]) -> list[str]:
    return [value] if isinstance(value, str) else list(value)


def resolve_keys(
    left_columns: list[str],
    right_columns: list[str],
    on: str | list[str] | None = None,
    left_on: str | list[str] | None = None,
    right_on: str | list[str] | None = None,
) -> tuple[list[str], list[str]]:
    """Work out the left and right key columns of a join.

    Uses on, else left_on/right_on, else every column name both sides share.

    Raises:
        AttributeJoinError: If keys are given inconsistently or none can be found
        ColumnNotFoundError: If a named key is missing on either side
    """
    if on is not None:
        if left_on is not None or right_on is not None:
            msg = "Pass either on or left_on/right_on, not both"
            raise AttributeJoinError(msg)
        left_keys = right_keys = _as_list(on)
    elif left_on is not None or right_on is not None:
        if left_on is None or right_on is None:
            msg = "left_on and right_on must be given together"
            raise AttributeJoinError(msg)
        left_keys, right_keys = _as_list(left_on), _as_list(right_on)
        if len(left_keys) != len(right_keys):
            msg = f"left_on has {len(left_keys)} key(s) but right_on has {len(right_keys)}"
            raise AttributeJoinError(msg)
    else:
        left_keys = right_keys = [c for c in left_columns if c in right_columns]
        if not left_keys:
            msg = "No shared columns to join by; pass on or left_on/right_on"
            raise AttributeJoinError(msg)
        logger.info(f"Joining by shared column(s): {left_keys}")

    missing_left = [k for k in left_keys if k not in left_columns]
    if missing_left:
        raise ColumnNotFoundError(missing_left, left_columns)
    missing_right = [k for k in right_keys if k not in right_columns]
    if missing_right:
        raise ColumnNotFoundError(missing_right, right_columns)

    return left_keys, right_keys


def key_kind(series: pd.Series) -> str:
    """Classify a key column as numeric, text, datetime, boolean or empty."""
    dtype = series.dtype
    if isinstance(dtype, pd.CategoricalDtype):
        return key_kind(pd.Series(dtype.categories))
    if pd.api.types.is_bool_dtype(dtype):
        return "boolean"
    if pd.api.types.is_numeric_dtype(dtype):
        return "numeric"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "datetime"

    inferred = pd.api.types.infer_dtype(series, skipna=True)
    if inferred == "empty":
        return "empty"
    if inferred in ("integer", "floating", "mixed-integer-float", "decimal"):
        return "numeric"
    if inferred == "boolean":
        return "boolean"
    if inferred in ("datetime", "datetime64", "date"):
        return "datetime"
    return "text"


def check_key_types(
    left: pd.DataFrame,
    right: pd.DataFrame,
    left_keys: list[str],
    right_keys: list[str],
) -> None:
    """Refuse to join keys of different kinds (e.g. integer codes with names).

    Raises:
        AttributeJoinError: If a key pair mixes kinds
    """
    for left_key, right_key in zip(left_keys, right_keys, strict=True):
        left_kind = key_kind(left[left_key])
        right_kind = key_kind(right[right_key])
        if "empty" in (left_kind, right_kind) or left_kind == right_kind:
            continue
        msg = (
            f"Cannot join '{left_key}' ({left[left_key].dtype}, {left_kind}) with "
            f"'{right_key}' ({right[right_key].dtype}, {right_kind}): key types differ"
        )
        raise AttributeJoinError(msg)


def _distinct_keys(frame: pd.DataFrame, keys: list[str]) -> pd.MultiIndex:
    return pd.MultiIndex.from_frame(frame[keys]).unique()


def _key_values(index: pd.MultiIndex, n_keys: int) -> list[Any]:
    """Plain key values: scalars for single keys, tuples otherwise."""
    if n_keys == 1:
        return [t[0] for t in index]
    return list(index)


def attribute_join(
    left: "FeatureTable",
    right: "pd.DataFrame | FeatureTable",
    on: str | list[str] | None = None,
    left_on: str | list[str] | None = None,
    right_on: str | list[str] | None = None,
    how: JoinHow | str = JoinHow.LEFT,
    relationship: str | None = None,
    config: JoinConfig | None = None,
) -> "tuple[FeatureTable, JoinReport]":
    """Join attributes from right onto a feature table, keeping left geometries.

    Args:
        left: Feature table providing rows and geometry
        right: Attribute table; a FeatureTable's geometry is dropped first
        on: Key column(s) with the same name on both sides
        left_on: Left key column(s) when names differ
        right_on: Right key column(s) when names differ (dropped from result)
        how: "left" keeps every left row, "inner" only matched rows
        relationship: Expected key relationship, e.g. "many_to_one"
            (default: JoinConfig.relationship)
        config: Join configuration

    Returns:
        Tuple of (joined FeatureTable, JoinReport)

    Raises:
        AttributeJoinError: For unsupported join types, incompatible keys,
            a right column named like the geometry column, or keys violating
            the relationship
        ColumnNotFoundError: If key columns are missing
    """
    config = config or DEFAULT_JOIN_CONFIG

    try:
        how = JoinHow(how.value if isinstance(how, JoinHow) else how)
    except ValueError as e:
        msg = (
            f"Unsupported join type: {how}. Supported: "
            f"{', '.join(h.value for h in JoinHow)} (the geometry comes from the left)"
        )
        raise AttributeJoinError(msg) from e

    if isinstance(right, type(left)):
        logger.info(f"Dropping right-hand geometry '{right.geometry_name}' before attribute join")
        right_frame = right.drop_geometry()
    else:
        right_frame = pd.DataFrame(right)

    if left.geometry_name in right_frame.columns:
        msg = f"Right table has a column named like the geometry column '{left.geometry_name}'"
        raise AttributeJoinError(msg)

    attributes = left.attributes.reset_index(drop=True)
    left_keys, right_keys = resolve_keys(
        list(attributes.columns), list(right_frame.columns), on, left_on, right_on
    )
    check_key_types(attributes, right_frame, left_keys, right_keys)
    relationship = relationship or config.relationship

    attributes[_ROW_COLUMN] = np.arange(len(attributes))
    try:
        merged = attributes.merge(
            right_frame,
            how=how.value,
            left_on=left_keys,
            right_on=right_keys,
            suffixes=("", config.right_suffix),
            validate=relationship,
            indicator=_MERGE_COLUMN,
        )
    except pd.errors.MergeError as e:
        msg = f"Join keys {right_keys} violate the {relationship} relationship: {e}"
        raise AttributeJoinError(msg) from e

    # Keep only the left copy of keys whose names differ between the sides
    redundant = []
    for left_key, right_key in zip(left_keys, right_keys, strict=True):
        if left_key == right_key:
            continue
        name = right_key + config.right_suffix if right_key in attributes.columns else right_key
        if name in merged.columns:
            redundant.append(name)

    matched_rows = int((merged[_MERGE_COLUMN] == "both").sum())
    positions = merged[_ROW_COLUMN].to_numpy()
    merged = merged.drop(columns=[_ROW_COLUMN, _MERGE_COLUMN, *redundant]).reset_index(drop=True)
    geometry = left.geometry.iloc[positions].reset_index(drop=True)

    result = type(left)(merged, geometry, geometry_name=left.geometry_name)

    left_distinct = _distinct_keys(attributes, left_keys)
    right_distinct = _distinct_keys(right_frame, right_keys)
    unmatched = left_distinct[~left_distinct.isin(right_distinct)]
    unused = right_distinct[~right_distinct.isin(left_distinct)]

    report = JoinReport(
        keys=list(zip(left_keys, right_keys, strict=True)),
        left_rows=len(attributes),
        right_rows=len(right_frame),
        result_rows=len(result),
        matched_rows=matched_rows,
        unmatched_left_keys=_key_values(unmatched, len(left_keys)),
        unused_right_keys=_key_values(unused, len(right_keys)),
    )

    if report.unmatched_left_keys and config.warn_unmatched:
        preview = report.unmatched_left_keys[:_PREVIEW_KEYS]
        logger.warning(
            f"{len(report.unmatched_left_keys)} left key value(s) found no match in "
            f"{right_keys}: {preview}"
        )

    logger.info(
        f"{how.value} join on {report.keys}: {report.left_rows} x {report.right_rows} rows "
        f"-> {report.result_rows} ({report.matched_rows} matched)"
    )
    return result, report
