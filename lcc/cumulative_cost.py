"""Cumulative cost from seed cells over an 8-connected cost grid (multi-source Dijkstra)."""
import heapq
import math

import numpy as np

from .errors import OutOfBoundsError
from .models import Raster, require_aligned
from .utils import cell_sizes_meters


# Neighbor offsets: 0=E, 1=SE, 2=S, 3=SW, 4=W, 5=NW, 6=N, 7=NE
_DR = (0, 1, 1, 1, 0, -1, -1, -1)
_DC = (1, 1, 0, -1, -1, -1, 0, 1)
_DIAGONAL = (False, True, False, True, False, True, False, True)


def seed_cells(seeds: Raster) -> np.ndarray:
    """Boolean array of seed cells: finite and positive values."""
    data = seeds.data
    with np.errstate(invalid="ignore"):
        return np.isfinite(data) & (data > 0)


def within_radius(sources: np.ndarray, radius: float, dx: float = 1.0, dy: float = 1.0) -> np.ndarray:
    """Cells whose Euclidean distance to the nearest source is <= radius.

    dx, dy are the cell width and height in the units of radius.
    """
    rows, cols = sources.shape
    src_r, src_c = np.nonzero(sources)
    rr = np.arange(rows, dtype=np.float64)[:, None] * dy
    cc = np.arange(cols, dtype=np.float64)[None, :] * dx
    nearest = np.full((rows, cols), np.inf)
    r2 = radius * radius
    for r, c in zip(src_r, src_c):
        nearest = np.minimum(nearest, (rr - r * dy) ** 2 + (cc - c * dx) ** 2)
    return nearest <= r2


def cumulative_cost(
    cost: Raster,
    seeds: Raster,
    max_distance: float,
    skip_diagonal_adjustment: bool = False,
    cell_size: tuple[float, float] | None = None,
) -> Raster:
    """Minimum accumulated cost from any seed cell to every reachable cell.

    Parameters
    ----------
    cost : Cost raster; NaN cells cannot be entered. High-cost (capped) cells
        are expensive but traversable.
    seeds : Raster on the same grid, seed cells > 0, everything else NaN or 0.
    max_distance : Search cutoff in meters, measured as straight-line distance
        from the nearest seed cell.
    skip_diagonal_adjustment : Use the longer cell side for diagonal steps
        instead of the cell diagonal.
    cell_size : (width, height) of a cell in meters; derived from the grid
        when omitted. East-west steps use the width, north-south steps the
        height.

    Each step between neighbors u and v costs
    ``step_length * (cost[u] + cost[v]) / 2``. Unreached cells are NaN.
    """
    require_aligned(cost, seeds)
    if max_distance < 0:
        raise ValueError(f"max_distance must be >= 0, got {max_distance}")
    if cell_size is None:
        cell_size = cell_sizes_meters(cost)
    dx, dy = cell_size

    rows, cols = cost.shape
    values = cost.data.astype(np.float64)
    sources = seed_cells(seeds) & np.isfinite(values)
    if not sources.any():
        raise OutOfBoundsError("No seed cell lies on valid cost data")

    passable = np.isfinite(values) & within_radius(sources, max_distance, dx, dy)

    diag = max(dx, dy) if skip_diagonal_adjustment else math.hypot(dx, dy)
    steps = [diag if _DIAGONAL[k] else (dx if _DR[k] == 0 else dy) for k in range(8)]
    offsets = [_DR[k] * cols + _DC[k] for k in range(8)]

    # flat Python lists keep the inner loop off numpy scalar overhead
    cost_flat = values.ravel().tolist()
    open_flat = passable.ravel().tolist()
    dist = [math.inf] * (rows * cols)
    done = [False] * (rows * cols)

    heap: list[tuple[float, int, int]] = []
    counter = 0
    for i in np.flatnonzero(sources & passable).tolist():
        dist[i] = 0.0
        heap.append((0.0, counter, i))
        counter += 1
    heapq.heapify(heap)

    while heap:
        d, _, i = heapq.heappop(heap)
        if done[i]:
            continue
        done[i] = True
        r, c = divmod(i, cols)
        cu = cost_flat[i]
        for k in range(8):
            rr = r + _DR[k]
            cc = c + _DC[k]
            if rr < 0 or rr >= rows or cc < 0 or cc >= cols:
                continue
            j = i + offsets[k]
            if done[j] or not open_flat[j]:
                continue
            alt = d + steps[k] * 0.5 * (cu + cost_flat[j])
            if alt < dist[j]:
                dist[j] = alt
                counter += 1
                heapq.heappush(heap, (alt, counter, j))

    out = np.array(dist, dtype=np.float64).reshape(rows, cols)
    out[~np.array(done, dtype=bool).reshape(rows, cols)] = np.nan
    return cost.with_data(out)
