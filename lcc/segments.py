"""Corridor runs over chains of waypoints.

Segments are independent: each one gets the same immutable cost raster and
produces its own corridor, so they can be solved in separate processes.
"""
from concurrent.futures import ProcessPoolExecutor

import numpy as np

from .clipping import clip_to_roi, roi_for_points
from .cost_surface import build_cost_surface
from .errors import CorridorError, DataAlignmentError
from .flatness import flat_areas_in_corridor, flat_mask
from .models import CorridorSettings, Raster, Segment, SegmentResult, SeedPoint
from .refine import refine_corridor
from .seeds import check_seeds_on_data, project_points
from .terrain import (
    align_to,
    coarsen,
    combine_masks,
    land_sea_mask,
    resolution_factor,
    slope_degrees,
    water_mask,
)
from .utils import cell_sizes_meters


def chain_segments(points: list[SeedPoint], include_direct: bool = False) -> list[Segment]:
    """Consecutive pairs start->p1->...->end; optionally also start->end."""
    if len(points) < 2:
        raise ValueError("Need at least two points to form a segment")
    segments = [Segment(a, b) for a, b in zip(points[:-1], points[1:])]
    if include_direct and len(points) > 2:
        segments.append(Segment(points[0], points[-1]))
    return segments


def prepare_cost(
    dem: Raster,
    occurrence: Raster | None,
    points: list[SeedPoint],
    settings: CorridorSettings,
    align_water: bool = False,
) -> Raster:
    """DEM + water occurrence to a cost raster clipped to the ROI at base resolution.

    Raises DataAlignmentError when occurrence is None unless settings.use_water
    is off.
    """
    if occurrence is None and settings.use_water:
        raise DataAlignmentError("Water occurrence raster missing; disable use_water for a terrain-only run")

    points_xy = project_points(points, dem.crs)
    roi = roi_for_points(points_xy, dem.crs, settings.roi_buffer_m)
    dem_roi = clip_to_roi(dem, roi)

    water = None
    if occurrence is not None and settings.use_water:
        if align_water:
            occurrence = align_to(occurrence, dem_roi)
        else:
            occurrence = clip_to_roi(occurrence, roi)
        water = water_mask(occurrence, settings.water_threshold)
    if settings.land_sea_mask:
        sea = land_sea_mask(dem_roi)
        water = sea if water is None else combine_masks(water, sea)
    if water is None:
        water = dem_roi.with_data(np.zeros(dem_roi.shape))

    slope = slope_degrees(dem_roi)
    cost = build_cost_surface(slope, water, settings.cost_model)

    factor = resolution_factor(max(cell_sizes_meters(cost)), settings.base_resolution_m)
    return coarsen(cost, factor)


def solve_segment(
    cost: Raster,
    segment: Segment,
    settings: CorridorSettings,
    verbose: bool = False,
) -> SegmentResult:
    """Refine one segment's corridor and its flat areas. Raises CorridorError subclasses."""
    start_xy, end_xy = project_points([segment.start, segment.end], cost.crs)
    check_seeds_on_data([start_xy, end_xy], cost)
    corridor = refine_corridor(
        cost,
        start_xy,
        end_xy,
        settings.schedule,
        settings.max_distance_m,
        skip_diagonal_adjustment=settings.skip_diagonal_adjustment,
        keep_rasters=settings.keep_diagnostics,
        verbose=verbose,
    )
    flat = flat_areas_in_corridor(flat_mask(cost, settings.flat_threshold), corridor.polygons)
    return SegmentResult(segment, corridor=corridor, flat_areas=flat)


def _solve_or_record(cost: Raster, segment: Segment, settings: CorridorSettings,
                     verbose: bool) -> SegmentResult:
    try:
        return solve_segment(cost, segment, settings, verbose=verbose)
    except CorridorError as e:
        return SegmentResult(segment, error=f"{type(e).__name__}: {e}")


def solve_segments(
    cost: Raster,
    segments: list[Segment],
    settings: CorridorSettings,
    workers: int = 1,
    verbose: bool = False,
) -> list[SegmentResult]:
    """Solve every segment; failures are recorded on the result instead of raised.

    Results keep the order of segments. With workers > 1 segments run in a
    process pool and per-round progress is not printed.
    """
    if workers <= 1 or len(segments) <= 1:
        results = []
        for seg in segments:
            if verbose:
                print(f"  Segment {seg.name}")
            results.append(_solve_or_record(cost, seg, settings, verbose))
        return results

    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(_solve_or_record, cost, seg, settings, False)
            for seg in segments
        ]
        return [f.result() for f in futures]
