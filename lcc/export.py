"""Write corridor results to disk: GeoJSON polygons, GeoTIFF rasters, JSON summary."""
from pathlib import Path
import json

import numpy as np
import rasterio

from .models import Raster, SegmentResult


def write_raster(raster: Raster, out_path: Path) -> Path:
    """Write a single-band GeoTIFF. Boolean rasters become uint8 (nodata 0), others float32 (nodata NaN)."""
    data = raster.data
    if data.dtype == bool:
        out = data.astype(np.uint8)
        dtype, nodata = "uint8", 0
    else:
        out = data.astype(np.float32)
        dtype, nodata = "float32", np.nan
    meta = {
        "driver": "GTiff",
        "height": out.shape[0],
        "width": out.shape[1],
        "count": 1,
        "dtype": dtype,
        "crs": raster.crs,
        "transform": raster.transform,
        "nodata": nodata,
        "compress": "deflate",
    }
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(out_path, "w", **meta) as dst:
        dst.write(out, 1)
    return out_path


def write_polygons(gdf, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    gdf.to_file(out_path, driver="GeoJSON")
    return out_path


def segment_summary(result: SegmentResult) -> dict:
    summary = {
        "segment": result.segment.name,
        "start": {"name": result.segment.start.name,
                  "lon": result.segment.start.lon, "lat": result.segment.start.lat},
        "end": {"name": result.segment.end.name,
                "lon": result.segment.end.lon, "lat": result.segment.end.lat},
        "ok": result.ok,
        "error": result.error,
        "rounds": [],
    }
    if result.corridor is not None:
        for rnd in result.corridor.rounds:
            summary["rounds"].append({
                "schedule": rnd.step.label(),
                "min_cost": rnd.minimum,
                "threshold": rnd.threshold,
                "cells": rnd.cell_count,
                "polygons": int(len(rnd.polygons)),
            })
        summary["empty"] = result.corridor.is_empty
    if result.flat_areas is not None:
        summary["flat_cells"] = int(np.count_nonzero(result.flat_areas.data))
    return summary


def export_segment(result: SegmentResult, out_dir: Path) -> list[Path]:
    """Write one segment's outputs into out_dir/<segment name>/. Returns paths written."""
    seg_dir = out_dir / result.segment.name
    seg_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    if result.corridor is not None and result.corridor.polygons is not None:
        corridor_path = write_polygons(result.corridor.polygons, seg_dir / "corridor.geojson")
        written.append(corridor_path)
        print(f"    corridor.geojson written ({len(result.corridor.polygons)} polygon(s))")

        last = result.corridor.rounds[-1]
        for name, raster in (
            ("cumulative_from_start", last.from_start),
            ("cumulative_from_end", last.from_end),
            ("combined_cost", last.combined),
        ):
            if raster is not None:
                written.append(write_raster(raster, seg_dir / f"{name}.tif"))
                print(f"    {name}.tif written")

    if result.flat_areas is not None:
        written.append(write_raster(result.flat_areas, seg_dir / "flat_in_corridor.tif"))
        print("    flat_in_corridor.tif written")

    summary_path = seg_dir / "summary.json"
    summary_path.write_text(json.dumps(segment_summary(result), indent=2), encoding="utf-8")
    written.append(summary_path)
    return written
