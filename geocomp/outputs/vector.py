"""Vector file output strategy (GeoPackage, GeoJSON, shapefile)."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from geocomp.models.geometry import GeometryFormat

if TYPE_CHECKING:
    from geocomp.features.table import FeatureTable

logger = logging.getLogger(__name__)


class VectorFileOutputStrategy:
    """Writes feature tables with geopandas using the OGR driver of a format.

    Shapefiles truncate attribute names to 10 characters; GeoPackage keeps
    them intact and is the safer choice for wide tables.
    """

    def __init__(self, geometry_format: GeometryFormat):
        if geometry_format.driver is None:
            msg = f"{geometry_format.value} is not a vector file format"
            raise ValueError(msg)
        self.geometry_format = geometry_format

    def write(self, table: "FeatureTable", output_path: Path) -> Path:
        """Write the table to output_path.

        Returns:
            Path to the written file

        Raises:
            ValueError: If the table is empty
        """
        if len(table) == 0:
            raise ValueError(f"Cannot write {self.geometry_format.value}: table is empty")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        table.to_geodataframe().to_file(output_path, driver=self.geometry_format.driver)

        logger.info(f"Wrote {len(table)} features to {output_path}")
        return output_path
