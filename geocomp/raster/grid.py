"""RasterGrid: a regular grid of cells located by origin and resolution.

Cells carry no coordinates of their own. A cell's position follows from the
grid's origin (top-left corner), resolution and its cell ID:

    cell = row * ncols + col        (0-based, row-major)
    x    = xmin + (col + 0.5) * xres
    y    = ymax - (row + 0.5) * yres

Values are held in a flat numpy array in cell ID order.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from pyproj import CRS
from rasterio.transform import Affine, from_origin

from geocomp.config import RasterConfig
from geocomp.models.domain import CrsInfo, RasterSummary
from geocomp.models.enums import Resampling
from geocomp.raster.categories import CategoryTable
from geocomp.spatial.crs import crs_info, to_crs_object
from geocomp.validation.errors import CategoryError, RasterIndexError, RasterValueError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extent:
    """Bounding box of a grid (xmin, ymin, xmax, ymax)."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __post_init__(self):
        if self.xmax <= self.xmin or self.ymax <= self.ymin:
            msg = f"Empty extent: {self}"
            raise ValueError(msg)

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def contains(self, x: float, y: float) -> bool:
        """True if (x, y) lies inside or on the boundary."""
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    def as_bounds(self) -> tuple[float, float, float, float]:
        """(left, bottom, right, top) as used by rasterio."""
        return (self.xmin, self.ymin, self.xmax, self.ymax)


def _scalar_or_array(values: np.ndarray) -> Any:
    return values.item() if values.ndim == 0 else values


def _is_integer_like(values: np.ndarray) -> bool:
    return np.issubdtype(values.dtype, np.integer) and not np.issubdtype(values.dtype, np.bool_)


class RasterGrid:
    """Single-layer raster grid.

    Args:
        values: Cell values, flat in cell ID order (or any shape with
            nrows * ncols elements, flattened row-major)
        nrows: Number of rows
        ncols: Number of columns
        origin: (xmin, ymax) of the top-left corner
        resolution: Cell size; a single number or (xres, yres), both positive
        crs: Optional CRS tag
        nodata: Value marking missing cells (NaN is always missing for floats)
        categories: Optional code -> label table; makes the grid categorical
        name: Layer name

    Raises:
        ValueError: If the shape, values or resolution are inconsistent
        RasterValueError: If a categorical grid holds non-integer values
        CategoryError: If a categorical grid holds codes not in its table
    """

    def __init__(
        self,
        values: Any,
        nrows: int,
        ncols: int,
        origin: tuple[float, float],
        resolution: float | tuple[float, float],
        crs: Any = None,
        nodata: float | int | None = None,
        categories: CategoryTable | None = None,
        name: str = "layer",
    ):
        _check_shape(nrows, ncols)

        array = np.array(values).ravel()
        if array.size != nrows * ncols:
            msg = f"{array.size} values cannot fill a {nrows} x {ncols} grid"
            raise ValueError(msg)

        if np.ndim(resolution) == 0:
            xres = yres = float(resolution)
        else:
            xres, yres = (float(r) for r in resolution)
        if xres <= 0 or yres <= 0:
            msg = f"Resolution must be positive, got ({xres}, {yres})"
            raise ValueError(msg)

        if categories is not None:
            if not _is_integer_like(array):
                msg = f"Categorical grids need integer codes, got {array.dtype}"
                raise RasterValueError(msg)
            _check_codes(np.unique(array), categories, nodata)

        self._values = array
        self._nrows = int(nrows)
        self._ncols = int(ncols)
        self._origin = (float(origin[0]), float(origin[1]))
        self._resolution = (xres, yres)
        self._crs = to_crs_object(crs) if crs is not None else None
        self._nodata = nodata
        self._categories = categories
        self.name = name

    @classmethod
    def from_array(
        cls,
        array: Any,
        origin: tuple[float, float],
        resolution: float | tuple[float, float],
        **kwargs: Any,
    ) -> "RasterGrid":
        """Build from a 2-D (rows, cols) array."""
        array = np.asarray(array)
        if array.ndim != 2:
            msg = f"Expected a 2-D array, got {array.ndim} dimension(s)"
            raise ValueError(msg)
        nrows, ncols = array.shape
        return cls(array, nrows, ncols, origin, resolution, **kwargs)

    @classmethod
    def from_extent(
        cls,
        extent: "Extent | tuple[float, float, float, float]",
        nrows: int,
        ncols: int,
        values: Any = None,
        **kwargs: Any,
    ) -> "RasterGrid":
        """Build a grid covering an extent with nrows x ncols cells.

        The resolution follows from extent and shape. Without values the
        cells are numbered 1..ncell.
        """
        _check_shape(nrows, ncols)
        if not isinstance(extent, Extent):
            extent = Extent(*extent)
        if values is None:
            values = np.arange(1, nrows * ncols + 1)
        resolution = (extent.width / ncols, extent.height / nrows)
        return cls(values, nrows, ncols, (extent.xmin, extent.ymax), resolution, **kwargs)

    @classmethod
    def from_labels(
        cls,
        labels: Any,
        origin: tuple[float, float],
        resolution: float | tuple[float, float],
        categories: CategoryTable | None = None,
        nodata: int = 0,
        **kwargs: Any,
    ) -> "RasterGrid":
        """Build a categorical grid from a 2-D array of labels.

        Missing labels (None) become nodata. Without a category table the
        distinct labels are numbered from 1 in sorted order.
        """
        array = np.asarray(labels, dtype=object)
        present = array != None  # noqa: E711
        if categories is None:
            categories = CategoryTable.from_labels(sorted({str(v) for v in array[present]}))
        if nodata in categories:
            msg = f"nodata {nodata} is also a category code"
            raise CategoryError(msg)

        codes = np.full(array.shape, nodata, dtype=np.int32)
        codes[present] = categories.encode(array[present])
        return cls.from_array(
            codes, origin, resolution, nodata=nodata, categories=categories, **kwargs
        )

    def copy(self) -> "RasterGrid":
        return RasterGrid(
            self._values.copy(),
            self._nrows,
            self._ncols,
            self._origin,
            self._resolution,
            crs=self._crs,
            nodata=self._nodata,
            categories=self._categories,
            name=self.name,
        )

    @classmethod
    def read(cls, path: Path | str, band: int = 1) -> "RasterGrid":
        """Read one band of a raster file (see geocomp.raster.io.read_raster)."""
        from geocomp.raster.io import read_raster

        return read_raster(path, band=band)

    def write(self, path: Path | str) -> Path:
        """Write as GeoTIFF (see geocomp.raster.io.write_raster)."""
        from geocomp.raster.io import write_raster

        return write_raster(self, path)

    @property
    def nrows(self) -> int:
        return self._nrows

    @property
    def ncols(self) -> int:
        return self._ncols

    @property
    def shape(self) -> tuple[int, int]:
        return (self._nrows, self._ncols)

    @property
    def ncell(self) -> int:
        return self._nrows * self._ncols

    @property
    def origin(self) -> tuple[float, float]:
        """(xmin, ymax) of the top-left corner."""
        return self._origin

    @property
    def resolution(self) -> tuple[float, float]:
        """(xres, yres)."""
        return self._resolution

    @property
    def extent(self) -> Extent:
        xmin, ymax = self._origin
        xres, yres = self._resolution
        return Extent(xmin, ymax - self._nrows * yres, xmin + self._ncols * xres, ymax)

    @property
    def transform(self) -> Affine:
        """Affine transform from (col, row) to (x, y) of cell corners."""
        xres, yres = self._resolution
        return from_origin(self._origin[0], self._origin[1], xres, yres)

    @property
    def crs(self) -> CRS | None:
        return self._crs

    def crs_info(self) -> CrsInfo:
        return crs_info(self._crs)

    @property
    def nodata(self) -> float | int | None:
        return self._nodata

    @property
    def categories(self) -> CategoryTable | None:
        return self._categories

    @property
    def is_categorical(self) -> bool:
        return self._categories is not None

    @property
    def dtype(self) -> np.dtype:
        return self._values.dtype

    def __repr__(self) -> str:
        crs = self._crs.to_string() if self._crs is not None else None
        kind = "categorical" if self.is_categorical else str(self.dtype)
        return (
            f"RasterGrid('{self.name}', {self._nrows}x{self._ncols}, "
            f"res={self._resolution}, extent={self.extent.as_bounds()}, {kind}, crs={crs})"
        )

    def _check_cells(self, cell: Any) -> np.ndarray:
        cells = np.asarray(cell)
        if not _is_integer_like(cells):
            msg = f"Cell IDs must be integers, got {cells.dtype}"
            raise RasterIndexError(msg)
        if cells.size and (cells.min() < 0 or cells.max() >= self.ncell):
            msg = f"Cell ID out of range 0..{self.ncell - 1}"
            raise RasterIndexError(msg)
        return cells

    def cell_from_rowcol(self, row: Any, col: Any) -> Any:
        """Cell ID(s) of 0-based row/column position(s).

        Raises:
            RasterIndexError: If a row or column is outside the grid
        """
        rows, cols = np.asarray(row), np.asarray(col)
        if not (_is_integer_like(rows) and _is_integer_like(cols)):
            msg = "Rows and columns must be integers"
            raise RasterIndexError(msg)
        if rows.size and (rows.min() < 0 or rows.max() >= self._nrows):
            msg = f"Row out of range 0..{self._nrows - 1}"
            raise RasterIndexError(msg)
        if cols.size and (cols.min() < 0 or cols.max() >= self._ncols):
            msg = f"Column out of range 0..{self._ncols - 1}"
            raise RasterIndexError(msg)
        return _scalar_or_array(rows * self._ncols + cols)

    def rowcol_from_cell(self, cell: Any) -> tuple[Any, Any]:
        """0-based (row, col) of cell ID(s)."""
        rows, cols = np.divmod(self._check_cells(cell), self._ncols)
        return _scalar_or_array(rows), _scalar_or_array(cols)

    def cell_from_xy(self, x: Any, y: Any) -> Any:
        """Cell ID(s) containing coordinate(s).

        Points on the right or bottom edge of the grid belong to the last
        column or row.

        Raises:
            RasterIndexError: If a point lies outside the extent
        """
        xs, ys = np.asarray(x, dtype=float), np.asarray(y, dtype=float)
        extent = self.extent
        outside = (
            np.isnan(xs)
            | np.isnan(ys)
            | (xs < extent.xmin)
            | (xs > extent.xmax)
            | (ys < extent.ymin)
            | (ys > extent.ymax)
        )
        if np.any(outside):
            msg = f"Coordinate outside grid extent {extent.as_bounds()}"
            raise RasterIndexError(msg)

        xres, yres = self._resolution
        cols = np.minimum(np.floor((xs - extent.xmin) / xres).astype(np.int64), self._ncols - 1)
        rows = np.minimum(np.floor((extent.ymax - ys) / yres).astype(np.int64), self._nrows - 1)
        return _scalar_or_array(rows * self._ncols + cols)

    def xy_from_cell(self, cell: Any) -> tuple[Any, Any]:
        """Centre coordinate(s) of cell ID(s)."""
        rows, cols = np.divmod(self._check_cells(cell), self._ncols)
        xres, yres = self._resolution
        xs = self._origin[0] + (cols + 0.5) * xres
        ys = self._origin[1] - (rows + 0.5) * yres
        return _scalar_or_array(np.asarray(xs)), _scalar_or_array(np.asarray(ys))

    def _cells_for_key(self, key: Any) -> np.ndarray:
        """Cell IDs addressed by a grid[...] key."""
        if isinstance(key, tuple):
            if len(key) != 2:
                msg = f"Expected grid[row, col], got {len(key)} indices"
                raise RasterIndexError(msg)
            if any(isinstance(k, slice) for k in key):
                return np.arange(self.ncell).reshape(self.shape)[key].ravel()
            return np.asarray(self.cell_from_rowcol(*key))

        key_array = np.asarray(key)
        if key_array.dtype == np.bool_:
            if key_array.size != self.ncell:
                msg = f"Boolean mask has {key_array.size} values; grid has {self.ncell} cells"
                raise RasterIndexError(msg)
            return np.flatnonzero(key_array.ravel())
        return self._check_cells(key_array)

    @property
    def values(self) -> np.ndarray:
        """Copy of the flat value array in cell ID order."""
        return self._values.copy()

    def to_array(self) -> np.ndarray:
        """Copy of the values as a (rows, cols) array."""
        return self._values.reshape(self.shape).copy()

    def __getitem__(self, key: Any) -> Any:
        """Values by cell ID(s), by [row, col], or by boolean mask."""
        if isinstance(key, tuple) and any(isinstance(k, slice) for k in key):
            return self.to_array()[key]
        cells = self._cells_for_key(key)
        return _scalar_or_array(self._values[cells])

    def value_at_xy(self, x: Any, y: Any) -> Any:
        return _scalar_or_array(self._values[np.asarray(self.cell_from_xy(x, y))])

    def valid_mask(self) -> np.ndarray:
        """Flat boolean array, True where a cell holds data."""
        mask = np.ones(self.ncell, dtype=bool)
        if np.issubdtype(self.dtype, np.floating):
            mask &= ~np.isnan(self._values)
        if self._nodata is not None:
            mask &= self._values != self._nodata
        return mask

    def __setitem__(self, key: Any, value: Any) -> None:
        """Overwrite cells by cell ID(s), [row, col], slices or boolean mask."""
        self._store(self._cells_for_key(key), value)

    def set_values(self, cells: Any, value: Any) -> None:
        """Overwrite the given cell IDs (or boolean mask) with value(s)."""
        self._store(self._cells_for_key(cells), value)

    def _store(self, cells: np.ndarray, value: Any) -> None:
        incoming = np.asarray(value)

        if incoming.dtype.kind in "OUS":
            if not self.is_categorical:
                msg = "Only categorical grids accept labels"
                raise RasterValueError(msg)
            incoming = self._encode_labels(incoming)

        if _is_integer_like(self._values):
            incoming = self._as_integers(incoming)

        if self.is_categorical:
            _check_codes(np.unique(incoming), self._categories, self._nodata)

        if incoming.ndim > 1:
            # 2-D blocks from slice keys line up with the flat cell order
            incoming = incoming.ravel()
        self._values[cells] = incoming
        logger.debug(f"Overwrote {np.size(cells)} cell(s) of '{self.name}'")

    def _encode_labels(self, labels: np.ndarray) -> np.ndarray:
        flat = labels.ravel()
        codes = np.empty(flat.shape, dtype=np.int64)
        for i, label in enumerate(flat):
            if label is None:
                if self._nodata is None:
                    msg = "Cannot store a missing label: grid has no nodata value"
                    raise RasterValueError(msg)
                codes[i] = self._nodata
            else:
                codes[i] = self._categories.code(label)
        return codes.reshape(labels.shape)

    def _as_integers(self, incoming: np.ndarray) -> np.ndarray:
        if incoming.dtype.kind == "f":
            if np.any(np.isnan(incoming)):
                msg = f"Cannot store NaN in {self.dtype} grid '{self.name}'; use its nodata value"
                raise RasterValueError(msg)
            if np.any(incoming != np.round(incoming)):
                msg = f"Cannot store fractional values in {self.dtype} grid '{self.name}'"
                raise RasterValueError(msg)
        elif incoming.dtype.kind not in "iub":
            msg = f"Cannot store {incoming.dtype} values in {self.dtype} grid '{self.name}'"
            raise RasterValueError(msg)

        info = np.iinfo(self.dtype)
        if incoming.size and (incoming.min() < info.min or incoming.max() > info.max):
            msg = f"Values out of range for {self.dtype} ({info.min}..{info.max})"
            raise RasterValueError(msg)
        return incoming.astype(self.dtype)

    def labels(self) -> np.ndarray:
        """(rows, cols) array of category labels; nodata cells are None.

        Raises:
            CategoryError: If the grid is not categorical
        """
        if self._categories is None:
            msg = f"Grid '{self.name}' is not categorical"
            raise CategoryError(msg)
        return self._categories.decode(self.to_array(), nodata=self._nodata)

    def frequency(self) -> pd.DataFrame:
        """Count of cells per distinct value (nodata excluded).

        Categorical grids get a label column as well.
        """
        values, counts = np.unique(self._values[self.valid_mask()], return_counts=True)
        frame = pd.DataFrame({"value": values, "count": counts})
        if self._categories is not None:
            frame.insert(1, "label", [self._categories.label(v) for v in values])
        return frame

    def summary(self) -> RasterSummary:
        """Min, max, mean and standard deviation of valid cells."""
        mask = self.valid_mask()
        valid = self._values[mask].astype(float)
        nodata_cells = int(self.ncell - mask.sum())
        if valid.size == 0:
            return RasterSummary(valid_cells=0, nodata_cells=nodata_cells)
        return RasterSummary(
            min=float(valid.min()),
            max=float(valid.max()),
            mean=float(valid.mean()),
            std=float(valid.std()),
            valid_cells=int(valid.size),
            nodata_cells=nodata_cells,
        )

    def reproject(
        self,
        crs: Any,
        resolution: float | tuple[float, float] | None = None,
        method: Resampling | str | None = None,
        config: RasterConfig | None = None,
    ) -> "RasterGrid":
        """Reproject to another CRS (see geocomp.raster.reproject)."""
        from geocomp.raster.reproject import reproject_grid

        return reproject_grid(self, crs, resolution=resolution, method=method, config=config)


def _check_codes(codes: np.ndarray, categories: CategoryTable, nodata: Any) -> None:
    unknown = [c for c in np.ravel(codes).tolist() if c not in categories and c != nodata]
    if unknown:
        msg = f"Codes not in category table: {sorted(set(unknown))}"
        raise CategoryError(msg)


def _check_shape(nrows: int, ncols: int) -> None:
    if nrows <= 0 or ncols <= 0:
        msg = f"Grid needs at least one row and column, got {nrows} x {ncols}"
        raise ValueError(msg)


# 64-bit integers are not supported by every GDAL build
_NARROWED_DTYPES = {np.dtype(np.int64): np.int32, np.dtype(np.uint64): np.uint32}


def portable_dtype(values: np.ndarray) -> np.dtype:
    """dtype GDAL can warp and write for values: 64-bit integers are narrowed
    to 32 bits when they fit, otherwise widened to float64; booleans become uint8."""
    if values.dtype == np.bool_:
        return np.dtype(np.uint8)
    narrowed = _NARROWED_DTYPES.get(values.dtype)
    if narrowed is None:
        return values.dtype
    info = np.iinfo(narrowed)
    if values.size and (values.min() < info.min or values.max() > info.max):
        return np.dtype(np.float64)
    return np.dtype(narrowed)
