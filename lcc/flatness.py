"""Flat-area detection on the cost surface using an 8-neighbor Laplacian."""
import numpy as np

from .clipping import inside_geometries
from .models import Raster

# Neighbor offsets: 0=E, 1=SE, 2=S, 3=SW, 4=W, 5=NW, 6=N, 7=NE
_DR = np.array([0, 1, 1, 1, 0, -1, -1, -1], dtype=np.int32)
_DC = np.array([1, 1, 0, -1, -1, -1, 0, 1], dtype=np.int32)

# Unnormalized kernel [[1, 1, 1], [1, -8, 1], [1, 1, 1]]
LAPLACIAN_8 = np.array([[1, 1, 1], [1, -8, 1], [1, 1, 1]], dtype=np.float64)


def laplacian(raster: Raster) -> Raster:
    """Discrete 8-neighbor Laplacian; edge cells see replicated borders, NaN spreads to neighbors."""
    values = raster.data.astype(np.float64)
    rows, cols = values.shape
    padded = np.pad(values, 1, mode="edge")
    total = -8.0 * values
    for i in range(8):
        total = total + padded[1 + _DR[i]:rows + 1 + _DR[i], 1 + _DC[i]:cols + 1 + _DC[i]]
    return raster.with_data(total)


def flat_mask(cost: Raster, threshold: float) -> Raster:
    """True where |Laplacian| <= threshold; no-data is never flat."""
    edges = np.abs(laplacian(cost).data)
    with np.errstate(invalid="ignore"):
        flat = np.isfinite(edges) & (edges <= threshold)
    return cost.with_data(flat)


def flat_areas_in_corridor(flat: Raster, polygons) -> Raster:
    """Flat mask limited to cells touched by the corridor polygons."""
    geoms = list(polygons.geometry) if hasattr(polygons, "geometry") else list(polygons)
    inside = inside_geometries(flat, geoms)
    return flat.with_data(flat.data.astype(bool) & inside)
