"""Base output strategy interface for feature tables."""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from geocomp.features.table import FeatureTable


class OutputStrategy(Protocol):
    """Protocol for output strategies that serialize feature tables.

    Output strategies handle the transformation of a FeatureTable into a
    file format (GeoPackage, GeoJSON, CSV, etc.). Operations return tables;
    the caller decides when and where to write them.
    """

    def write(self, table: "FeatureTable", output_path: Path) -> Path:
        """Write a feature table to a file.

        Args:
            table: Feature table to write
            output_path: Path where output file should be written

        Returns:
            Path to the written output file

        Raises:
            IOError: If writing fails
            ValueError: If the table is empty
        """
        ...
