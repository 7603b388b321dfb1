"""Clipping: region of interest around seeds, and rasters to corridor polygons."""
import geopandas as gpd
import numpy as np
from rasterio.features import geometry_mask
from rasterio.transform import rowcol
from rasterio.windows import Window, transform as window_transform
from shapely.geometry import MultiPoint, box

from .errors import OutOfBoundsError
from .models import Raster
from .utils import buffer_distance_units


def roi_box(points_xy: list[tuple[float, float]], buffer_dist: float):
    """Buffer the points by buffer_dist (CRS units) and return the bounding box."""
    if not points_xy:
        raise ValueError("ROI needs at least one point")
    geom = MultiPoint(points_xy).buffer(buffer_dist)
    return box(*geom.bounds)


def roi_for_points(points_xy: list[tuple[float, float]], crs, buffer_m: float):
    """ROI box around projected points with a buffer given in meters."""
    lat = 0.0
    if crs is not None:
        center = gpd.GeoSeries([MultiPoint(points_xy).centroid], crs=crs).to_crs("EPSG:4326")
        lat = float(center.y.iloc[0])
    return roi_box(points_xy, buffer_distance_units(crs, buffer_m, lat))


def roi_window(raster: Raster, roi) -> Window:
    """Pixel window covering roi, clamped to the raster. Raises if they do not overlap."""
    rows, cols = raster.shape
    minx, miny, maxx, maxy = roi.bounds
    r_idx, c_idx = rowcol(raster.transform, [minx, maxx], [maxy, miny])
    r0, r1 = sorted(int(r) for r in r_idx)
    c0, c1 = sorted(int(c) for c in c_idx)
    r0, c0 = max(r0, 0), max(c0, 0)
    r1, c1 = min(r1 + 1, rows), min(c1 + 1, cols)
    if r0 >= r1 or c0 >= c1:
        raise OutOfBoundsError(f"ROI {roi.bounds} does not overlap raster bounds {raster.bounds}")
    return Window(c0, r0, c1 - c0, r1 - r0)


def clip_to_roi(raster: Raster, roi) -> Raster:
    """Crop raster to the ROI bounding box (cells are never resampled)."""
    win = roi_window(raster, roi)
    r0, c0 = int(win.row_off), int(win.col_off)
    data = raster.data[r0:r0 + int(win.height), c0:c0 + int(win.width)].copy()
    return Raster(data, window_transform(win, raster.transform), raster.crs)


def inside_geometries(raster: Raster, geometries) -> np.ndarray:
    """Boolean array, True for cells touched by any geometry."""
    geoms = [g for g in geometries if g is not None and not g.is_empty]
    if not geoms:
        return np.zeros(raster.shape, dtype=bool)
    return geometry_mask(
        geoms,
        out_shape=raster.shape,
        transform=raster.transform,
        all_touched=True,
        invert=True,
    )


def clip_to_geometries(raster: Raster, geometries, keep: np.ndarray | None = None) -> Raster:
    """Set cells outside the geometries to NaN; cells flagged in keep are retained."""
    inside = inside_geometries(raster, geometries)
    if keep is not None:
        inside = inside | keep
    data = np.where(inside, raster.data, np.nan)
    return raster.with_data(data)
