"""Geometry validation for vector files and feature tables."""

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import geopandas as gpd

from geocomp.models.geometry import GeometryFormat
from geocomp.validation.errors import ValidationError

if TYPE_CHECKING:
    from geocomp.features.table import FeatureTable


class GeometryValidator:
    """Validates geometry from vector files or in-memory feature tables.

    Checks:
    - Shapefile: component files present (.shp, .shx, .dbf, .prj)
    - File readable by geopandas
    - CRS defined
    - No null geometries
    - No invalid geometries
    - Geometry types in the allowed set (if one is given)

    Problems are collected and returned, not raised, so callers can report
    every issue at once.
    """

    def __init__(self, allowed_types: Iterable[str] | None = None):
        self.allowed_types = set(allowed_types) if allowed_types is not None else None

    def validate(self, geometry_path: Path, geometry_format: GeometryFormat) -> list[ValidationError]:
        """Validate a geometry file.

        Args:
            geometry_path: Path to the file (.shp, .geojson, .gpkg, ...)
            geometry_format: Format of the file (see GeometryFormat.from_path)

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if geometry_format == GeometryFormat.SHAPEFILE:
            errors.extend(self._validate_shapefile_components(geometry_path))
            if errors:
                return errors

        try:
            if geometry_format == GeometryFormat.CSV:
                from geocomp.features.io import read_table

                gdf = read_table(geometry_path).to_geodataframe()
            else:
                gdf = gpd.read_file(geometry_path)
        except Exception as e:
            return errors + [
                ValidationError(
                    message=f"Cannot read {geometry_format.value}: {e}",
                    field=geometry_format.value,
                )
            ]

        return errors + self._validate_geometry(gdf.geometry, gdf.crs)

    def validate_table(
        self, table: "FeatureTable", allowed_types: Iterable[str] | None = None
    ) -> list[ValidationError]:
        """Validate the geometry store of a feature table.

        Args:
            table: Feature table to check
            allowed_types: Geometry types to accept, e.g. {"Polygon",
                "MultiPolygon"} (default: the validator's own setting)

        Returns:
            List of validation errors (empty if valid)
        """
        allowed = set(allowed_types) if allowed_types is not None else self.allowed_types
        return self._validate_geometry(table.geometry, table.crs, allowed)

    def _validate_shapefile_components(self, shapefile_path: Path) -> list[ValidationError]:
        errors = []
        required_extensions = [".shp", ".shx", ".dbf", ".prj"]
        base_path = shapefile_path.with_suffix("")

        for ext in required_extensions:
            if not (base_path.with_suffix(ext)).exists():
                errors.append(
                    ValidationError(
                        message=f"Missing required shapefile component: {ext}",
                        field="shapefile",
                    )
                )

        return errors

    def _validate_geometry(
        self, geometry: gpd.GeoSeries, crs, allowed_types: set[str] | None = None
    ) -> list[ValidationError]:
        """Checks shared by files and tables."""
        allowed_types = allowed_types if allowed_types is not None else self.allowed_types
        errors = []

        if crs is None:
            errors.append(ValidationError(message="Geometry has no defined CRS", field="crs"))

        null_count = int(geometry.isna().sum())
        if null_count > 0:
            errors.append(
                ValidationError(message=f"Found {null_count} null geometries", field="geometry")
            )

        present = geometry[geometry.notna()]
        invalid_count = int((~present.is_valid).sum())
        if invalid_count > 0:
            errors.append(
                ValidationError(
                    message=f"Found {invalid_count} invalid geometries (self-intersections, etc.)",
                    field="geometry",
                )
            )

        if allowed_types is not None:
            invalid_types = set(present.geom_type.unique()) - allowed_types
            if invalid_types:
                errors.append(
                    ValidationError(
                        message=f"Invalid geometry types found: {', '.join(sorted(invalid_types))}. "
                        f"Expected: {', '.join(sorted(allowed_types))}",
                        field="geometry",
                    )
                )

        return errors
