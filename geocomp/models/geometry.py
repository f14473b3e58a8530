"""Geometry-related domain models."""

from enum import StrEnum
from pathlib import Path


class GeometryFormat(StrEnum):
    """Supported vector file formats."""

    SHAPEFILE = "shapefile"
    GEOJSON = "geojson"
    GEOPACKAGE = "gpkg"
    CSV = "csv"

    @property
    def driver(self) -> str | None:
        """OGR driver name used by geopandas (None for CSV)."""
        return {
            GeometryFormat.SHAPEFILE: "ESRI Shapefile",
            GeometryFormat.GEOJSON: "GeoJSON",
            GeometryFormat.GEOPACKAGE: "GPKG",
            GeometryFormat.CSV: None,
        }[self]

    @classmethod
    def from_path(cls, path: Path) -> "GeometryFormat":
        """Detect the format from a file suffix.

        Raises:
            ValueError: If the suffix is not a supported vector format
        """
        suffix = Path(path).suffix.lower()
        formats = {
            ".shp": cls.SHAPEFILE,
            ".geojson": cls.GEOJSON,
            ".json": cls.GEOJSON,
            ".gpkg": cls.GEOPACKAGE,
            ".csv": cls.CSV,
        }
        if suffix not in formats:
            msg = f"Unsupported vector format '{suffix}'. Expected: {', '.join(formats)}"
            raise ValueError(msg)
        return formats[suffix]
