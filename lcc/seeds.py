"""Seed points: projection to the raster CRS and rasterization onto a grid."""
import geopandas as gpd
import numpy as np
from rasterio.transform import rowcol
from shapely.geometry import Point

from .errors import OutOfBoundsError
from .models import Raster, SeedPoint


def project_points(points: list[SeedPoint], crs) -> list[tuple[float, float]]:
    """Return (x, y) of WGS84 seed points in crs. No CRS leaves lon/lat as is."""
    if crs is None:
        return [(p.lon, p.lat) for p in points]
    wgs84 = gpd.GeoSeries([Point(p.lon, p.lat) for p in points], crs="EPSG:4326")
    proj = wgs84.to_crs(crs)
    return [(float(x), float(y)) for x, y in zip(proj.x, proj.y)]


def point_cell(raster: Raster, x: float, y: float) -> tuple[int, int]:
    """Row/col of the cell containing (x, y); raises OutOfBoundsError outside the grid."""
    rows, cols = raster.shape
    r, c = rowcol(raster.transform, x, y)
    r, c = int(r), int(c)
    if not (0 <= r < rows and 0 <= c < cols):
        raise OutOfBoundsError(
            f"Point ({x:.3f}, {y:.3f}) is outside raster bounds {raster.bounds}"
        )
    return r, c


def rasterize_seeds(points_xy: list[tuple[float, float]], grid: Raster) -> Raster:
    """Seed raster on grid: 1.0 at each point's cell, NaN elsewhere."""
    if not points_xy:
        raise ValueError("Seed set is empty")
    data = np.full(grid.shape, np.nan)
    for x, y in points_xy:
        r, c = point_cell(grid, x, y)
        data[r, c] = 1.0
    return Raster(data, grid.transform, grid.crs)


def check_seeds_on_data(points_xy: list[tuple[float, float]], grid: Raster) -> None:
    """Raise OutOfBoundsError when a point falls on a no-data cell of grid."""
    for x, y in points_xy:
        r, c = point_cell(grid, x, y)
        if not np.isfinite(grid.data[r, c]):
            raise OutOfBoundsError(f"Point ({x:.3f}, {y:.3f}) falls on a no-data cell")
