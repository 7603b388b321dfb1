"""Iterative corridor refinement from coarse to fine resolution.

Each round coarsens the base cost raster, restricts it to the previous
round's corridor, solves from both endpoints and extracts a new corridor.
Rounds after the first only search inside the earlier corridor, so a true
optimum that left the coarse corridor is not recovered.
"""
import numpy as np

from .clipping import clip_to_geometries
from .corridor import extract_corridor
from .cumulative_cost import cumulative_cost
from .models import CorridorResult, RefinementStep, Raster, RoundResult
from .seeds import rasterize_seeds
from .terrain import coarsen
from .utils import cell_sizes_meters
from .vectorize import vectorize_mask


def run_round(
    cost: Raster,
    start_xy: tuple[float, float],
    end_xy: tuple[float, float],
    step: RefinementStep,
    max_distance: float,
    previous=None,
    skip_diagonal_adjustment: bool = False,
    keep_rasters: bool = False,
) -> RoundResult:
    """One solve + extract + vectorize pass at step.multiplier times the base cell size."""
    round_cost = coarsen(cost, step.multiplier)
    seeds_a = rasterize_seeds([start_xy], round_cost)
    seeds_b = rasterize_seeds([end_xy], round_cost)
    if previous is not None:
        keep = np.isfinite(seeds_a.data) | np.isfinite(seeds_b.data)
        round_cost = clip_to_geometries(round_cost, previous.geometry, keep=keep)

    cell_m = cell_sizes_meters(round_cost)
    from_start = cumulative_cost(round_cost, seeds_a, max_distance,
                                 skip_diagonal_adjustment, cell_size=cell_m)
    from_end = cumulative_cost(round_cost, seeds_b, max_distance,
                               skip_diagonal_adjustment, cell_size=cell_m)
    corridor = extract_corridor(from_start, from_end, step.tolerance, relative=step.relative)
    polygons = vectorize_mask(corridor.mask)

    result = RoundResult(
        step=step,
        minimum=corridor.minimum,
        threshold=corridor.threshold,
        cell_count=corridor.cell_count,
        polygons=polygons,
        mask=corridor.mask,
    )
    if keep_rasters:
        result.from_start = from_start
        result.from_end = from_end
        result.combined = corridor.combined
    return result


def refine_corridor(
    cost: Raster,
    start_xy: tuple[float, float],
    end_xy: tuple[float, float],
    schedule: tuple[RefinementStep, ...],
    max_distance: float,
    skip_diagonal_adjustment: bool = False,
    keep_rasters: bool = False,
    verbose: bool = False,
) -> CorridorResult:
    """Run every round of schedule in order; the last round's polygons are the corridor.

    Parameters
    ----------
    cost : Cost raster at base resolution.
    start_xy, end_xy : Endpoints in the cost raster's CRS.
    schedule : Rounds, usually coarse to fine.
    max_distance : Search radius in meters for each solve.
    keep_rasters : Keep cumulative and combined rasters on each round.

    Raises NoPathFoundError when the endpoints are disconnected. A round that
    selects no cells stops the refinement and the result is empty.
    """
    if not schedule:
        raise ValueError("Refinement schedule is empty")
    rounds: list[RoundResult] = []
    previous = None
    for n, step in enumerate(schedule, start=1):
        result = run_round(
            cost, start_xy, end_xy, step, max_distance,
            previous=previous,
            skip_diagonal_adjustment=skip_diagonal_adjustment,
            keep_rasters=keep_rasters,
        )
        rounds.append(result)
        if verbose:
            print(f"    Round {n}/{len(schedule)} ({step.label()}): "
                  f"min cost {result.minimum:.2f}, {result.cell_count} cells, "
                  f"{len(result.polygons)} polygon(s)")
        if result.polygons.empty:
            if verbose:
                print("    Corridor is empty; widen the tolerance.")
            break
        previous = result.polygons
    return CorridorResult(rounds)
