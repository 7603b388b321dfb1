#!/usr/bin/env python3
"""
Validate assets before processing.
Run this first to ensure the DEM, water raster and seed file are usable.
"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lcc.config import DEM_PATH, SEEDS_FILE, WATER_PATH
from lcc.errors import CorridorError
from lcc.utils import read_seed_points
from lcc.validation import validate_asset_dem, validate_asset_water, validate_seeds


def main() -> int:
    print("Validating assets...")

    dem_result = validate_asset_dem(DEM_PATH)
    print(f"DEM: {'VALID' if dem_result['valid'] else 'INVALID'}")
    if not dem_result["valid"]:
        print(f"  Error: {dem_result.get('error')}")
        return 1
    print(f"  CRS: {dem_result.get('crs')}")
    print(f"  Shape: {dem_result.get('shape')}")
    print(f"  Resolution: {dem_result.get('res')}")
    print(f"  Bounds: {dem_result.get('bounds')}")

    water_result = validate_asset_water(WATER_PATH, DEM_PATH)
    print(f"Water occurrence: {'VALID' if water_result['valid'] else 'INVALID'}")
    if not water_result["valid"]:
        print(f"  Error: {water_result.get('error')}")
    else:
        print(f"  Aligned with DEM: {water_result.get('aligned_with_dem')}")

    try:
        points = read_seed_points(SEEDS_FILE)
        validate_seeds(points, dem_result["crs"], dem_result["bounds"])
    except (OSError, ValueError, CorridorError) as e:
        print(f"Seeds: INVALID")
        print(f"  Error: {e}")
        return 1
    print(f"Seeds: VALID ({len(points)} points)")

    if not water_result["valid"]:
        return 1
    print("All assets are valid!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
