"""Output strategies for feature tables."""

from geocomp.models.geometry import GeometryFormat
from geocomp.outputs.base import OutputStrategy
from geocomp.outputs.csv import CSVOutputStrategy
from geocomp.outputs.vector import VectorFileOutputStrategy


def get_output_strategy(geometry_format: GeometryFormat) -> OutputStrategy:
    """Output strategy writing the given format."""
    if geometry_format == GeometryFormat.CSV:
        return CSVOutputStrategy()
    return VectorFileOutputStrategy(geometry_format)


__all__ = [
    "CSVOutputStrategy",
    "OutputStrategy",
    "VectorFileOutputStrategy",
    "get_output_strategy",
]
