#!/usr/bin/env python3
"""
Least-Cost Corridor Workflow
============================
Build a slope/water cost surface from a DEM, then find least-cost corridors
between consecutive seed points with coarse-to-fine refinement.

Usage:
    python main.py                                   # defaults from lcc/config.py
    python main.py --cost-model quadratic --water-threshold 80
    python main.py --schedule "50:5%,25:25,12:1" --max-distance 250000 --workers 4
    python main.py --seeds route.txt --direct --diagnostics
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lcc.config import (
    BASE_RESOLUTION_M,
    COST_MODEL,
    COST_MODELS,
    DEM_PATH,
    FLAT_THRESHOLD,
    MAX_DISTANCE_M,
    OUTPUT_DIR,
    ROI_BUFFER_M,
    SEEDS_FILE,
    WATER_PATH,
    WATER_THRESHOLD,
)
from lcc.errors import CorridorError
from lcc.export import export_segment, write_raster
from lcc.models import CorridorSettings
from lcc.segments import chain_segments, prepare_cost, solve_segments
from lcc.terrain import read_raster
from lcc.utils import parse_schedule, read_seed_points
from lcc.validation import (
    load_reference_path,
    print_reference_comparison,
    print_validation_summary,
    validate_asset_dem,
    validate_asset_water,
    validate_corridor_output,
    validate_seeds,
)

DEFAULT_SCHEDULE_TEXT = "50:5%,25:25,12:1"


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Least-cost corridors: cost surface, cumulative cost, iterative refinement",
    )
    p.add_argument("--dem", type=Path, default=DEM_PATH, help=f"DEM GeoTIFF (default: {DEM_PATH})")
    p.add_argument(
        "--water", type=Path, default=WATER_PATH,
        help=f"Water occurrence GeoTIFF, 0-100 (default: {WATER_PATH}). Skipped if missing.",
    )
    p.add_argument(
        "--seeds", type=Path, default=SEEDS_FILE,
        help=f"Seed file, one 'name, lat, lon' per line (default: {SEEDS_FILE})",
    )
    p.add_argument("--out", type=Path, default=OUTPUT_DIR, help=f"Output directory (default: {OUTPUT_DIR})")
    p.add_argument(
        "--cost-model", choices=COST_MODELS, default=COST_MODEL,
        help=f"Land cost function (default: {COST_MODEL})",
    )
    p.add_argument(
        "--water-threshold", type=float, default=WATER_THRESHOLD,
        help=f"Occurrence percent above which a cell is water (default: {WATER_THRESHOLD})",
    )
    p.add_argument(
        "--max-distance", type=float, default=MAX_DISTANCE_M,
        help=f"Search radius per solve in meters (default: {MAX_DISTANCE_M})",
    )
    p.add_argument(
        "--roi-buffer", type=float, default=ROI_BUFFER_M,
        help=f"ROI buffer radius around seeds in meters (default: {ROI_BUFFER_M})",
    )
    p.add_argument(
        "--base-resolution", type=float, default=BASE_RESOLUTION_M,
        help=f"Base cell size in meters (default: {BASE_RESOLUTION_M})",
    )
    p.add_argument(
        "--schedule", default=DEFAULT_SCHEDULE_TEXT,
        help="Refinement rounds as multiplier:tolerance, a trailing % means a fraction of "
             f"the round's minimum cost (default: {DEFAULT_SCHEDULE_TEXT})",
    )
    p.add_argument(
        "--flat-threshold", type=float, default=FLAT_THRESHOLD,
        help=f"Max |Laplacian| of cost for a flat cell (default: {FLAT_THRESHOLD})",
    )
    p.add_argument("--skip-diagonal-adjustment", action="store_true",
                   help="Count diagonal steps as one cell length")
    p.add_argument("--land-sea-mask", action="store_true",
                   help="Also treat elevation <= 0 as water")
    p.add_argument("--align-water", action="store_true",
                   help="Resample the water raster onto the DEM grid instead of requiring alignment")
    p.add_argument("--no-water", action="store_true",
                   help="Terrain-only run: ignore the water raster")
    p.add_argument("--reference", type=Path, default=None,
                   help="Reference least-cost path (vector file) to compare each corridor against")
    p.add_argument("--direct", action="store_true",
                   help="Add a direct first-to-last segment to the waypoint chain")
    p.add_argument("--diagnostics", action="store_true",
                   help="Also write cumulative and combined cost rasters of the final round")
    p.add_argument("--workers", type=int, default=1, help="Segments solved in parallel (default: 1)")
    return p.parse_args()


def main() -> int:
    args = parse_args()
    try:
        schedule = parse_schedule(args.schedule)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    settings = CorridorSettings(
        cost_model=args.cost_model,
        water_threshold=args.water_threshold,
        max_distance_m=args.max_distance,
        schedule=schedule,
        base_resolution_m=args.base_resolution,
        roi_buffer_m=args.roi_buffer,
        flat_threshold=args.flat_threshold,
        skip_diagonal_adjustment=args.skip_diagonal_adjustment,
        land_sea_mask=args.land_sea_mask,
        use_water=not args.no_water,
        keep_diagnostics=args.diagnostics,
    )

    print("=" * 60)
    print("Least-Cost Corridor Workflow")
    print("=" * 60)
    print(f"  Cost model:      {settings.cost_model}")
    print(f"  Water threshold: {settings.water_threshold:g}%")
    print(f"  Search radius:   {settings.max_distance_m:g} m")
    print(f"  ROI buffer:      {settings.roi_buffer_m:g} m")
    print(f"  Schedule:        {', '.join(s.label() for s in schedule)}")

    # ── 1) Validate assets ──────────────────────────────────────
    print(f"\n[1/5] Validating assets...")
    dem_result = validate_asset_dem(args.dem)
    if not dem_result["valid"]:
        print(f"ERROR: DEM invalid - {dem_result.get('error')}")
        return 1
    print(f"  DEM: OK ({dem_result['shape'][0]}x{dem_result['shape'][1]}, {dem_result['crs']})")

    use_water = settings.use_water
    if use_water and not args.water.exists():
        print(f"ERROR: Water occurrence raster not found: {args.water} (use --no-water for a terrain-only run)")
        return 1
    if use_water:
        water_result = validate_asset_water(args.water, args.dem)
        if not water_result["valid"]:
            print(f"ERROR: Water raster invalid - {water_result.get('error')}")
            return 1
        if water_result["aligned_with_dem"] is False and not args.align_water:
            print("ERROR: Water raster is not on the DEM grid. Use --align-water to resample it.")
            return 1
        print("  Water occurrence: OK")
    else:
        print("  Water occurrence: disabled (--no-water), terrain cost only")

    try:
        points = read_seed_points(args.seeds)
        validate_seeds(points, dem_result["crs"], dem_result["bounds"])
    except (OSError, ValueError, CorridorError) as e:
        print(f"ERROR: {e}")
        return 1
    for p in points:
        print(f"  Seed {p.name}: {p.lat}, {p.lon}")

    reference = None
    if args.reference is not None:
        try:
            reference = load_reference_path(args.reference)
        except (OSError, ValueError) as e:
            print(f"ERROR: {e}")
            return 1
        print(f"  Reference path: {args.reference} ({len(reference)} feature(s))")

    # ── 2) Cost surface ────────────────────────────────────────
    print(f"\n[2/5] Building cost surface...")
    dem = read_raster(args.dem)
    occurrence = read_raster(args.water) if use_water else None
    try:
        cost = prepare_cost(dem, occurrence, points, settings, align_water=args.align_water)
    except CorridorError as e:
        print(f"ERROR: {e}")
        return 1
    print(f"  Cost raster: {cost.shape[0]}x{cost.shape[1]} cells")
    args.out.mkdir(parents=True, exist_ok=True)
    write_raster(cost, args.out / "cost_surface.tif")
    print(f"  Cost surface written: {args.out / 'cost_surface.tif'}")

    # ── 3) Corridors ───────────────────────────────────────────
    segments = chain_segments(points, include_direct=args.direct)
    print(f"\n[3/5] Solving {len(segments)} segment(s)...")
    results = solve_segments(cost, segments, settings, workers=args.workers, verbose=True)

    # ── 4) Export ──────────────────────────────────────────────
    print(f"\n[4/5] Writing outputs...")
    for res in results:
        if not res.ok:
            continue
        print(f"  {res.segment.name}:")
        export_segment(res, args.out)

    # ── 5) Validation summary ──────────────────────────────────
    print(f"\n[5/5] Validating outputs...")
    checks = {}
    for res in results:
        if res.ok:
            checks[res.segment.name] = validate_corridor_output(args.out / res.segment.name)
    print_validation_summary(results, checks)
    if reference is not None:
        print_reference_comparison(results, reference)

    print("\n" + "=" * 60)
    print("OUTPUT SUMMARY")
    print("=" * 60)
    print(f"  Cost surface:  {args.out / 'cost_surface.tif'}")
    for res in results:
        if res.ok:
            print(f"  {res.segment.name:<14} {args.out / res.segment.name / 'corridor.geojson'}")
    print("=" * 60)

    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
