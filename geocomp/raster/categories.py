"""Category lookup tables for categorical rasters.

A categorical raster stores integer codes in its cells; the CategoryTable
maps each code to a label (e.g. 1 -> "clay").
"""

from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np
import pandas as pd

from geocomp.validation.errors import CategoryError


class CategoryTable:
    """Ordered mapping of integer cell codes to labels.

    Args:
        mapping: code -> label pairs, in display order

    Raises:
        CategoryError: If codes are not integers or labels repeat
    """

    def __init__(self, mapping: Mapping[int, str]):
        codes = list(mapping.keys())
        labels = [str(label) for label in mapping.values()]

        for code in codes:
            if isinstance(code, bool) or not isinstance(code, int | np.integer):
                msg = f"Category codes must be integers, got {code!r}"
                raise CategoryError(msg)
        if len(set(labels)) != len(labels):
            duplicates = sorted({label for label in labels if labels.count(label) > 1})
            msg = f"Duplicate category labels: {', '.join(duplicates)}"
            raise CategoryError(msg)

        self._labels = {int(code): label for code, label in zip(codes, labels, strict=True)}
        self._codes = {label: code for code, label in self._labels.items()}

    @classmethod
    def from_labels(cls, labels: Iterable[str], start: int = 1) -> "CategoryTable":
        """Number labels consecutively from start, keeping their order."""
        labels = list(labels)
        if len(set(labels)) != len(labels):
            msg = "Duplicate category labels"
            raise CategoryError(msg)
        return cls({start + i: label for i, label in enumerate(labels)})

    @classmethod
    def from_mapping(cls, mapping: Mapping[int, str]) -> "CategoryTable":
        return cls(mapping)

    @classmethod
    def from_frame(
        cls, frame: pd.DataFrame, code_column: str = "value", label_column: str = "label"
    ) -> "CategoryTable":
        """Build from a two-column table of codes and labels."""
        for column in (code_column, label_column):
            if column not in frame.columns:
                msg = f"Category frame has no '{column}' column"
                raise CategoryError(msg)
        return cls(dict(zip(frame[code_column].astype(int), frame[label_column], strict=True)))

    @property
    def codes(self) -> list[int]:
        return list(self._labels.keys())

    @property
    def labels(self) -> list[str]:
        return list(self._labels.values())

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, code: object) -> bool:
        return code in self._labels

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryTable):
            return NotImplemented
        return list(self._labels.items()) == list(other._labels.items())

    def __repr__(self) -> str:
        return f"CategoryTable({self._labels!r})"

    def label(self, code: int) -> str:
        """Label of a code.

        Raises:
            CategoryError: If the code is not in the table
        """
        try:
            return self._labels[int(code)]
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Unknown category code: {code!r}"
            raise CategoryError(msg) from e

    def code(self, label: str) -> int:
        """Code of a label.

        Raises:
            CategoryError: If the label is not in the table
        """
        if label not in self._codes:
            msg = f"Unknown category label: {label!r}. Known: {', '.join(self.labels)}"
            raise CategoryError(msg)
        return self._codes[label]

    def encode(self, labels: Any) -> np.ndarray:
        """Convert an array of labels to codes (shape preserved)."""
        array = np.asarray(labels, dtype=object)
        return np.vectorize(self.code, otypes=[np.int64])(array)

    def decode(self, codes: Any, nodata: Any = None) -> np.ndarray:
        """Convert an array of codes to labels; nodata and NaN become None.

        Raises:
            CategoryError: If a code other than nodata is not in the table
        """
        array = np.asarray(codes)
        result = np.empty(array.shape, dtype=object)
        for position, code in np.ndenumerate(array):
            if _is_missing(code, nodata):
                result[position] = None
            else:
                result[position] = self.label(code)
        return result

    def to_frame(self) -> pd.DataFrame:
        """Two-column table: value, label."""
        return pd.DataFrame({"value": self.codes, "label": self.labels})


def _is_missing(value: Any, nodata: Any) -> bool:
    if isinstance(value, float | np.floating) and np.isnan(value):
        return True
    return nodata is not None and value == nodata
