"""Least-cost corridor: combined cumulative cost within a tolerance of its minimum."""
import numpy as np

from .errors import NoPathFoundError
from .models import CorridorMask, Raster, require_aligned

# Float summation order differs between the two solves; cells tied with the
# minimum must still pass a zero tolerance.
_REL_EPS = 1e-9


def combine(from_a: Raster, from_b: Raster) -> Raster:
    """Elementwise sum; NaN in either input stays NaN."""
    require_aligned(from_a, from_b)
    return from_a.with_data(from_a.data + from_b.data)


def minimum_cost(combined: Raster) -> float:
    """Global minimum over valid cells."""
    valid = combined.data[np.isfinite(combined.data)]
    if valid.size == 0:
        raise NoPathFoundError(
            "Seed regions are not connected within the search radius (no valid combined cost)"
        )
    return float(valid.min())


def corridor_threshold(minimum: float, tolerance: float) -> float:
    return minimum + tolerance + _REL_EPS * max(1.0, abs(minimum))


def extract_corridor(
    from_a: Raster,
    from_b: Raster,
    tolerance: float,
    relative: bool = False,
) -> CorridorMask:
    """Select cells whose combined cost is <= minimum + tolerance.

    Parameters
    ----------
    from_a, from_b : Cumulative cost rasters from two seed sets, same grid.
    tolerance : Cost units; with ``relative`` a fraction of the minimum.
    """
    if tolerance < 0:
        raise ValueError(f"Tolerance must be >= 0, got {tolerance}")
    combined = combine(from_a, from_b)
    minimum = minimum_cost(combined)
    tol = minimum * tolerance if relative else tolerance
    threshold = corridor_threshold(minimum, tol)
    with np.errstate(invalid="ignore"):
        mask = np.isfinite(combined.data) & (combined.data <= threshold)
    return CorridorMask(
        mask=combined.with_data(mask),
        combined=combined,
        minimum=minimum,
        threshold=threshold,
    )
