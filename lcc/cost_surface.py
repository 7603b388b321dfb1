"""Cost surfaces from slope and water.

Two interchangeable land-cost models, both capped at MAX_COST:

- hiking: inverse of Tobler's hiking speed, 1 / (6 * exp(-3.5 * |tan(slope + 0.05)|))
- quadratic: 1 - 0.025 * s + 0.031 * s^2 with s in degrees

Water cells are forced to MAX_COST after the land cost is computed.
"""
import numpy as np

from .config import COST_MODELS, MAX_COST
from .models import Raster, require_aligned


def hiking_cost(slope_deg: np.ndarray) -> np.ndarray:
    slope_rad = np.asarray(slope_deg, dtype=np.float64) * (np.pi / 180.0)
    with np.errstate(over="ignore", divide="ignore"):
        cost = 1.0 / (6.0 * np.exp(-3.5 * np.abs(np.tan(slope_rad + 0.05))))
    return np.minimum(cost, MAX_COST)


def quadratic_cost(slope_deg: np.ndarray) -> np.ndarray:
    s = np.asarray(slope_deg, dtype=np.float64)
    cost = 1.0 + (-0.025 * s) + (0.031 * s ** 2)
    return np.minimum(cost, MAX_COST)


_MODELS = {
    "hiking": hiking_cost,
    "quadratic": quadratic_cost,
}


def land_cost(slope: Raster, model: str) -> Raster:
    if model not in _MODELS:
        raise ValueError(f"Unknown cost model '{model}', expected one of {COST_MODELS}")
    return slope.with_data(_MODELS[model](slope.data))


def build_cost_surface(slope: Raster | None, water: Raster | None, model: str = "hiking") -> Raster:
    """Per-cell traversal cost; water (mask == 1) is set to MAX_COST on either model."""
    require_aligned(slope, water)
    cost = land_cost(slope, model).data
    # NaN slope stays NaN on land; np.minimum propagates it
    cost = np.where(water.data == 1, MAX_COST, cost)
    return slope.with_data(cost)
