"""CSV output strategy for feature tables.

CSV has no geometry type, so geometries are written as WKT in a column named
like the table's geometry column. The CRS is not stored; read_table takes
it as an argument.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from geocomp.features.table import FeatureTable

logger = logging.getLogger(__name__)


class CSVOutputStrategy:
    """Writes attributes plus a WKT geometry column to CSV."""

    def write(self, table: "FeatureTable", output_path: Path) -> Path:
        """Write the table to a CSV file.

        Returns:
            Path to the written CSV file

        Raises:
            ValueError: If the table is empty
        """
        if len(table) == 0:
            raise ValueError("Cannot write CSV: table is empty")

        df = table.drop_geometry()
        df[table.geometry_name] = table.geometry.to_wkt()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False)

        logger.info(f"Wrote {len(table)} rows to {output_path}")
        return output_path
