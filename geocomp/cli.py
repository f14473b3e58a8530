"""Command line interface for geocomp.

Usage:
    geocomp crs-info data/districts.gpkg
    geocomp reproject data/districts.gpkg out/districts_wgs84.geojson --to-crs EPSG:4326
    geocomp aggregate data/districts.gpkg out/regions.gpkg --by region --sum population
    geocomp raster-info data/elevation.tif
"""

import logging
from pathlib import Path

import typer
from rasterio.errors import RasterioIOError

from geocomp.common.log_utils import configure_logging
from geocomp.features.io import read_table
from geocomp.raster.io import read_raster
from geocomp.validation.errors import GeocompError

logger = logging.getLogger(__name__)

app = typer.Typer(help="Attribute, CRS and raster cell operations on geographic data")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging before any command runs."""
    configure_logging(level=logging.DEBUG if verbose else None)


def _fail(error: Exception) -> None:
    logger.debug("Command failed", exc_info=error)
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


@app.command("crs-info")
def crs_info(
    path: Path = typer.Argument(..., help="Vector file to inspect", exists=True),
):
    """Print the CRS of a vector file."""
    try:
        info = read_table(path).crs_info()
    except (GeocompError, ValueError) as e:
        _fail(e)

    typer.echo(f"Name:  {info.name}")
    typer.echo(f"EPSG:  {info.epsg if info.epsg is not None else '(none)'}")
    typer.echo(f"Kind:  {info.kind.value}")
    typer.echo(f"Units: {info.units or '(unknown)'}")


@app.command()
def reproject(
    source: Path = typer.Argument(..., help="Input vector file", exists=True),
    destination: Path = typer.Argument(..., help="Output file (format from suffix)"),
    to_crs: str = typer.Option(..., "--to-crs", "-t", help="Target CRS, e.g. EPSG:4326"),
):
    """Reproject a vector file to another CRS."""
    try:
        table = read_table(source).to_crs(to_crs)
        written = table.write(destination)
    except (GeocompError, ValueError) as e:
        _fail(e)

    typer.echo(f"Wrote {len(table)} features in {to_crs} to {written}")


@app.command()
def aggregate(
    source: Path = typer.Argument(..., help="Input vector file", exists=True),
    destination: Path = typer.Argument(..., help="Output file (format from suffix)"),
    by: list[str] = typer.Option(..., "--by", "-b", help="Grouping column (repeatable)"),
    sum_columns: list[str] = typer.Option(
        None,
        "--sum",
        "-s",
        help="Column to sum per group (repeatable; default: every numeric column)",
    ),
    count_column: str | None = typer.Option(
        None, "--count", help="Add a column holding the number of features per group"
    ),
):
    """Group features by attribute values and dissolve each group's geometries."""
    agg = {column: "sum" for column in sum_columns} if sum_columns else None
    try:
        table = read_table(source).aggregate(by, agg=agg, count_column=count_column)
        written = table.write(destination)
    except (GeocompError, ValueError) as e:
        _fail(e)

    typer.echo(f"Wrote {len(table)} groups to {written}")


@app.command("raster-info")
def raster_info(
    path: Path = typer.Argument(..., help="Raster file to inspect", exists=True),
    band: int = typer.Option(1, "--band", help="1-based band number", min=1),
):
    """Print shape, resolution, extent, CRS and value summary of a raster band."""
    try:
        grid = read_raster(path, band=band)
    except (GeocompError, RasterioIOError) as e:
        _fail(e)

    summary = grid.summary()
    crs = grid.crs_info().authority_string if grid.crs is not None else None
    typer.echo(f"Name:       {grid.name}")
    typer.echo(f"Shape:      {grid.nrows} x {grid.ncols} ({grid.ncell} cells)")
    typer.echo(f"Resolution: {grid.resolution[0]} x {grid.resolution[1]}")
    typer.echo(f"Extent:     {grid.extent.as_bounds()}")
    typer.echo(f"CRS:        {crs or '(none)'}")
    typer.echo(f"Type:       {'categorical' if grid.is_categorical else grid.dtype}")
    typer.echo(
        f"Values:     min={summary.min} max={summary.max} mean={summary.mean} "
        f"({summary.valid_cells} valid, {summary.nodata_cells} nodata)"
    )
    if grid.is_categorical:
        for value, label, count in grid.frequency().itertuples(index=False, name=None):
            typer.echo(f"  {value:>4} {label}: {count}")


if __name__ == "__main__":
    app()
