"""Validation: input assets, seeds, corridor outputs, reference paths."""
from pathlib import Path

import geopandas as gpd
from shapely.geometry import Point
from shapely.ops import unary_union
import numpy as np
import rasterio

from .errors import OutOfBoundsError
from .models import SeedPoint, SegmentResult


def validate_asset_dem(dem_path: Path) -> dict:
    """Validate DEM asset before processing: exists, readable, has CRS and data."""
    if not dem_path.exists():
        return {"valid": False, "error": f"DEM not found: {dem_path}"}
    try:
        with rasterio.open(dem_path) as src:
            data = src.read(1, masked=True)
            crs = src.crs
            bounds = src.bounds
            shape = src.shape
            res = src.res
        if crs is None:
            return {"valid": False, "error": "DEM has no CRS", "crs": None}
        has_data = bool(data.count() > 0)
        return {
            "valid": True,
            "crs": crs,
            "bounds": bounds,
            "shape": shape,
            "res": res,
            "has_data": has_data,
        }
    except Exception as e:
        return {"valid": False, "error": str(e), "crs": None}


def validate_asset_water(water_path: Path, dem_path: Path | None = None) -> dict:
    """Validate water occurrence raster: readable, values in 0-100, grid vs DEM."""
    if not water_path.exists():
        return {"valid": False, "error": f"Water occurrence raster not found: {water_path}"}
    try:
        with rasterio.open(water_path) as src:
            data = src.read(1, masked=True)
            crs = src.crs
            transform = src.transform
            shape = src.shape
    except Exception as e:
        return {"valid": False, "error": str(e)}
    if crs is None:
        return {"valid": False, "error": "Water raster has no CRS"}
    in_range = bool(data.count() == 0 or (data.min() >= 0 and data.max() <= 100))
    aligned = None
    if dem_path is not None and dem_path.exists():
        with rasterio.open(dem_path) as dem:
            aligned = (
                dem.crs == crs
                and dem.shape == shape
                and dem.transform.almost_equals(transform)
            )
    return {
        "valid": in_range,
        "error": None if in_range else "Occurrence values outside 0-100",
        "crs": crs,
        "shape": shape,
        "aligned_with_dem": aligned,
    }


def validate_seeds(points: list[SeedPoint], dem_crs, dem_bounds) -> None:
    """Raise OutOfBoundsError when a seed is outside the DEM extent."""
    if dem_crs is None:
        raise ValueError("DEM has no CRS. Define it before projecting seed points.")
    seeds_wgs84 = gpd.GeoSeries([Point(p.lon, p.lat) for p in points], crs="EPSG:4326")
    seeds_proj = seeds_wgs84.to_crs(dem_crs)
    for p, x, y in zip(points, seeds_proj.x, seeds_proj.y):
        if not (dem_bounds.left <= x <= dem_bounds.right and dem_bounds.bottom <= y <= dem_bounds.top):
            raise OutOfBoundsError(
                f"Seed '{p.name}' ({x:.0f}, {y:.0f}) is outside DEM bounds "
                f"({dem_bounds.left:.0f}-{dem_bounds.right:.0f}, {dem_bounds.bottom:.0f}-{dem_bounds.top:.0f})."
            )


def validate_corridor_output(seg_dir: Path) -> dict:
    """Check a segment folder: corridor GeoJSON readable and non-empty, flat raster present."""
    corridor_path = seg_dir / "corridor.geojson"
    flat_path = seg_dir / "flat_in_corridor.tif"
    if not corridor_path.exists():
        return {"valid": False, "error": f"Missing {corridor_path.name}", "polygons": 0}
    gdf = gpd.read_file(corridor_path)
    flat_cells = None
    if flat_path.exists():
        with rasterio.open(flat_path) as src:
            flat_cells = int(np.count_nonzero(src.read(1)))
    return {
        "valid": len(gdf) > 0 and bool(gdf.geometry.is_valid.all()),
        "polygons": len(gdf),
        "area": float(gdf.geometry.area.sum()) if len(gdf) else 0.0,
        "crs": gdf.crs,
        "flat_cells": flat_cells,
    }


def compare_reference_path(polygons: gpd.GeoDataFrame, reference) -> dict:
    """Share of a reference least-cost path (line geometry or GeoDataFrame) inside the corridor."""
    if hasattr(reference, "geometry"):
        if polygons.crs is not None and reference.crs is not None and reference.crs != polygons.crs:
            reference = reference.to_crs(polygons.crs)
        line = unary_union(list(reference.geometry))
    else:
        line = reference
    total = line.length
    if polygons.empty or total == 0:
        return {"length": total, "inside_length": 0.0, "inside_fraction": 0.0}
    corridor = unary_union(list(polygons.geometry))
    inside = line.intersection(corridor).length
    return {
        "length": total,
        "inside_length": inside,
        "inside_fraction": inside / total,
    }


def load_reference_path(path: Path) -> gpd.GeoDataFrame:
    """Read a reference path (any vector format geopandas reads) with its CRS."""
    if not path.exists():
        raise FileNotFoundError(f"Reference path not found: {path}")
    gdf = gpd.read_file(path)
    if gdf.empty:
        raise ValueError(f"Reference path file has no features: {path}")
    return gdf


def print_reference_comparison(results: list[SegmentResult], reference: gpd.GeoDataFrame) -> dict[str, dict]:
    """Print and return, per solved segment, how much of the reference path lies in its corridor."""
    print("  Reference path inside corridor:")
    report = {}
    for res in results:
        if not res.ok:
            continue
        check = compare_reference_path(res.corridor.polygons, reference)
        report[res.segment.name] = check
        print(f"    {res.segment.name}: {check['inside_fraction'] * 100:.1f}% "
              f"({check['inside_length']:.0f} of {check['length']:.0f} units)")
    return report


def print_validation_summary(results: list[SegmentResult], checks: dict[str, dict]) -> None:
    """Print validation summary report."""
    print("\n" + "=" * 50)
    print("VALIDATION SUMMARY")
    print("=" * 50)
    for res in results:
        name = res.segment.name
        if not res.ok:
            print(f"  ✗ {name}: {res.error}")
            continue
        check = checks.get(name, {"valid": False})
        ok = check.get("valid", False)
        line = f"  {'✓' if ok else '✗'} {name}: "
        if ok:
            line += f"{check['polygons']} polygon(s), {check['area']:.0f} sq units"
            if check.get("flat_cells") is not None:
                line += f", {check['flat_cells']} flat cells"
            line += f", min cost {res.corridor.minimum:.2f}"
        else:
            line += "INVALID " + str(check.get("error", "empty corridor"))
        print(line)
    print()
    if results and all(r.ok and checks.get(r.segment.name, {}).get("valid") for r in results):
        print("All corridors validated successfully.")
    else:
        print("WARNING: Some segments failed. Check output above.")
