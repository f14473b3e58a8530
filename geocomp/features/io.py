"""Reading vector files into feature tables."""

import logging
from pathlib import Path
from typing import Any

import geopandas as gpd
import pandas as pd

from geocomp.features.table import DEFAULT_GEOMETRY_NAME, FeatureTable
from geocomp.models.geometry import GeometryFormat
from geocomp.validation.errors import ColumnNotFoundError

logger = logging.getLogger(__name__)


def read_table(
    path: Path | str,
    layer: str | None = None,
    crs: Any = None,
    geometry_column: str = DEFAULT_GEOMETRY_NAME,
) -> FeatureTable:
    """Read a vector file into a FeatureTable.

    Shapefile, GeoJSON and GeoPackage are read with geopandas. CSV files are
    expected to hold geometries as WKT in geometry_column (as written by
    CSVOutputStrategy); CSV carries no CRS, so pass crs to tag one.

    Args:
        path: File to read
        layer: Layer name for multi-layer sources (GeoPackage)
        crs: CRS tag for sources without one (CSV); must agree with the
            file's own CRS otherwise
        geometry_column: WKT column name for CSV input

    Raises:
        ValueError: If the file suffix is not a supported vector format
        ColumnNotFoundError: If a CSV has no geometry_column
    """
    path = Path(path)
    geometry_format = GeometryFormat.from_path(path)

    if geometry_format == GeometryFormat.CSV:
        frame = pd.read_csv(path)
        if geometry_column not in frame.columns:
            raise ColumnNotFoundError([geometry_column], list(frame.columns))
        wkt = frame.pop(geometry_column)
        geometry = gpd.GeoSeries.from_wkt(wkt.where(wkt.notna(), None))
        table = FeatureTable(frame, geometry, crs=crs, geometry_name=geometry_column)
    else:
        gdf = gpd.read_file(path, layer=layer) if layer else gpd.read_file(path)
        table = FeatureTable.from_geodataframe(gdf)
        if crs is not None:
            table = table.set_crs(crs)

    logger.info(f"Read {len(table)} features from {path.name} ({geometry_format.value})")
    return table
