"""Enumerations shared across geocomp."""

from enum import Enum

from rasterio.enums import Resampling as RioResampling


class CrsKind(Enum):
    """Whether a CRS uses angular (geographic) or planar (projected) coordinates."""

    GEOGRAPHIC = "geographic"
    PROJECTED = "projected"


class JoinHow(Enum):
    """Supported attribute join types.

    Only join types that keep every result row paired with a left-hand
    geometry are supported.
    """

    LEFT = "left"
    INNER = "inner"


class Resampling(Enum):
    """Raster resampling methods (names follow GDAL)."""

    NEAREST = "near"
    BILINEAR = "bilinear"
    CUBIC = "cubic"
    AVERAGE = "average"
    MODE = "mode"

    @property
    def rasterio(self) -> RioResampling:
        """Equivalent rasterio resampling enum."""
        return {
            Resampling.NEAREST: RioResampling.nearest,
            Resampling.BILINEAR: RioResampling.bilinear,
            Resampling.CUBIC: RioResampling.cubic,
            Resampling.AVERAGE: RioResampling.average,
            Resampling.MODE: RioResampling.mode,
        }[self]

    @property
    def preserves_categories(self) -> bool:
        """True for methods that only ever return existing cell values."""
        return self in (Resampling.NEAREST, Resampling.MODE)

    @classmethod
    def parse(cls, value: "Resampling | str") -> "Resampling":
        """Accept an enum member, its value ("near") or its name ("nearest")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        msg = f"Unknown resampling method: {value}. Supported: {', '.join(m.value for m in cls)}"
        raise ValueError(msg)
