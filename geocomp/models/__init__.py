"""Domain models for geocomp."""

from geocomp.models.domain import CrsInfo, JoinReport, RasterSummary
from geocomp.models.enums import CrsKind, JoinHow, Resampling
from geocomp.models.geometry import GeometryFormat

__all__ = [
    "CrsInfo",
    "JoinReport",
    "RasterSummary",
    "CrsKind",
    "JoinHow",
    "Resampling",
    "GeometryFormat",
]
