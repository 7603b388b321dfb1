"""Terrain inputs: GeoTIFF loading, slope, water masks and resampling."""
from pathlib import Path
import warnings

import numpy as np
import rasterio
from rasterio.enums import Resampling
from rasterio.transform import Affine
from rasterio.warp import reproject

from .errors import DataAlignmentError
from .models import Raster
from .utils import cell_sizes_meters


def read_raster(path: Path, band: int = 1) -> Raster:
    """Read one band as float64 with the file's nodata value replaced by NaN."""
    if not path.exists():
        raise FileNotFoundError(f"Raster not found: {path}")
    with rasterio.open(path) as src:
        data = src.read(band).astype(np.float64)
        nodata = src.nodata
        transform = src.transform
        crs = src.crs

    if nodata is not None and not np.isnan(nodata):
        data[data == nodata] = np.nan
    return Raster(data, transform, crs)


def slope_degrees(dem: Raster) -> Raster:
    """Slope from DEM using central differences.

    slope = arctan( sqrt( (dz/dx)^2 + (dz/dy)^2 ) )  [degrees]

    Cell spacing is converted to meters so geographic DEMs give sensible
    slopes. NaN elevations propagate to their neighbours.
    """
    rows, cols = dem.shape
    if rows < 2 or cols < 2:
        raise DataAlignmentError(f"DEM too small for slope: {dem.shape}")
    dx, dy = cell_sizes_meters(dem)
    gy, gx = np.gradient(dem.data.astype(np.float64), dy, dx)
    slope = np.degrees(np.arctan(np.hypot(gx, gy)))
    return dem.with_data(slope)


def water_mask(occurrence: Raster, threshold: float) -> Raster:
    """1 where water occurrence exceeds threshold percent, else 0. No-data counts as land."""
    occ = occurrence.data
    water = np.where(np.isnan(occ), 0.0, (occ > threshold).astype(np.float64))
    return occurrence.with_data(water)


def land_sea_mask(dem: Raster) -> Raster:
    """Quick water approximation from elevation alone: 1 where elevation <= 0."""
    elev = dem.data
    sea = np.where(np.isnan(elev), 0.0, (elev <= 0).astype(np.float64))
    return dem.with_data(sea)


def combine_masks(a: Raster, b: Raster) -> Raster:
    return a.with_data(np.maximum(a.data, b.data))


def coarsen(raster: Raster, factor: int) -> Raster:
    """Aggregate factor x factor blocks by their mean, ignoring NaN.

    Partial blocks on the right and bottom edges are kept; blocks with no
    valid cells become NaN.
    """
    if factor < 1:
        raise ValueError(f"Coarsening factor must be >= 1, got {factor}")
    if factor == 1:
        return raster
    rows, cols = raster.shape
    out_rows = -(-rows // factor)
    out_cols = -(-cols // factor)
    padded = np.full((out_rows * factor, out_cols * factor), np.nan)
    padded[:rows, :cols] = raster.data
    blocks = padded.reshape(out_rows, factor, out_cols, factor)
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Mean of empty slice", category=RuntimeWarning)
        data = np.nanmean(blocks, axis=(1, 3))
    transform = raster.transform * Affine.scale(factor)
    return Raster(data, transform, raster.crs)


def resolution_factor(native_m: float, target_m: float) -> int:
    """Integer block size that brings a native cell size closest to target (>= 1)."""
    if native_m <= 0:
        raise ValueError(f"Invalid native resolution: {native_m}")
    return max(1, int(round(target_m / native_m)))


def align_to(raster: Raster, reference: Raster,
             resampling: Resampling = Resampling.nearest) -> Raster:
    """Resample raster onto the reference grid (shape, transform, CRS)."""
    if raster.crs is None or reference.crs is None:
        raise DataAlignmentError("Both rasters need a CRS to be aligned")
    dest = np.full(reference.shape, np.nan, dtype=np.float64)
    reproject(
        source=raster.data.astype(np.float64),
        destination=dest,
        src_transform=raster.transform,
        src_crs=raster.crs,
        src_nodata=np.nan,
        dst_transform=reference.transform,
        dst_crs=reference.crs,
        dst_nodata=np.nan,
        resampling=resampling,
    )
    return Raster(dest, reference.transform, reference.crs)
