"""Utility functions: seed files, schedules, CRS units."""
import math
from pathlib import Path

from pyproj import CRS

from .models import RefinementStep, SeedPoint

FEET_PER_METER = 3.28084
METERS_PER_DEGREE = 111_320.0


def read_seed_points(path: Path) -> list[SeedPoint]:
    """Read named points, one 'name, lat, lon' per line. Blank lines and # comments are skipped."""
    points = []
    for line_no, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = [p.strip() for p in line.split(",")]
        if len(parts) != 3:
            raise ValueError(f"Expected 'name, lat, lon' in {path}:{line_no}, got: {line}")
        name = parts[0]
        lat = float(parts[1])
        lon = float(parts[2])
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            raise ValueError(f"Coordinates out of range in {path}:{line_no}: {lat}, {lon}")
        points.append(SeedPoint(name, lon, lat))
    if len(points) < 2:
        raise ValueError(f"Need at least two seed points in {path}, found {len(points)}")
    return points


def parse_schedule(text: str) -> tuple[RefinementStep, ...]:
    """Parse 'multiplier:tolerance' pairs, e.g. '50:5%,25:25,12:1'.

    A trailing % makes the tolerance a fraction of the round's minimum cost.
    """
    steps = []
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            mult, tol = item.split(":")
            relative = tol.strip().endswith("%")
            value = float(tol.strip().rstrip("%"))
            if relative:
                value /= 100.0
            step = RefinementStep(int(mult), value, relative)
        except ValueError as e:
            raise ValueError(f"Bad schedule entry '{item}' (expected N:tol or N:pct%)") from e
        if step.multiplier < 1 or step.tolerance < 0:
            raise ValueError(f"Bad schedule entry '{item}': multiplier >= 1 and tolerance >= 0 required")
        steps.append(step)
    if not steps:
        raise ValueError("Refinement schedule is empty")
    return tuple(steps)


def meters_per_unit(crs, lat: float = 0.0) -> float:
    """Length of one CRS unit in meters. No CRS means the grid is already in meters."""
    if crs is None:
        return 1.0
    crs = CRS.from_user_input(crs)
    if crs.is_geographic:
        return METERS_PER_DEGREE * max(0.01, math.cos(math.radians(lat)))
    units = crs.axis_info[0].unit_name.lower()
    if "foot" in units or "feet" in units:
        return 1.0 / FEET_PER_METER
    return 1.0


def buffer_distance_units(crs, buffer_m: float, lat: float = 0.0) -> float:
    """Return buffer distance in CRS units (meters, feet or degrees)."""
    return float(buffer_m) / meters_per_unit(crs, lat)


def cell_sizes_meters(raster) -> tuple[float, float]:
    """Ground (width, height) of one cell in meters.

    On a geographic grid only the east-west size shrinks with latitude; a
    degree of latitude stays METERS_PER_DEGREE.
    """
    a = abs(raster.transform.a)
    e = abs(raster.transform.e)
    crs = raster.crs
    if crs is not None and CRS.from_user_input(crs).is_geographic:
        _, south, _, north = raster.bounds
        return a * meters_per_unit(crs, 0.5 * (south + north)), e * METERS_PER_DEGREE
    to_m = meters_per_unit(crs)
    return a * to_m, e * to_m
