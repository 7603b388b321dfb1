"""Validation, seed file, schedule parsing and export tests."""
import json

import pytest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
import sys
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import geopandas as gpd
import numpy as np
from rasterio.coords import BoundingBox
from rasterio.transform import from_origin
from shapely.geometry import LineString, box

from lcc.errors import OutOfBoundsError
from lcc.export import export_segment, write_raster
from lcc.flatness import flat_areas_in_corridor, flat_mask
from lcc.models import (
    CorridorResult,
    Raster,
    RefinementStep,
    RoundResult,
    Segment,
    SegmentResult,
    SeedPoint,
)
from lcc.refine import refine_corridor
from lcc.utils import parse_schedule, read_seed_points
from lcc.validation import (
    compare_reference_path,
    load_reference_path,
    print_reference_comparison,
    validate_asset_dem,
    validate_asset_water,
    validate_corridor_output,
    validate_seeds,
)

UTM = "EPSG:32632"


def _utm_raster(data, cell=30.0):
    data = np.asarray(data, dtype=np.float64)
    return Raster(data, from_origin(499000, 4984000, cell, cell), UTM)


def test_validate_asset_dem(tmp_path):
    """A georeferenced DEM with data validates and reports its grid."""
    path = write_raster(_utm_raster(np.full((4, 5), 250.0)), tmp_path / "dem.tif")
    check = validate_asset_dem(path)
    assert check["valid"]
    assert check["has_data"]
    assert check["shape"] == (4, 5)
    assert check["crs"].to_epsg() == 32632


def test_validate_asset_dem_missing(tmp_path):
    check = validate_asset_dem(tmp_path / "nope.tif")
    assert not check["valid"]
    assert "not found" in check["error"]


def test_validate_asset_water(tmp_path):
    """Occurrence must stay within 0-100; alignment with the DEM is reported."""
    dem = write_raster(_utm_raster(np.zeros((4, 5))), tmp_path / "dem.tif")
    good = write_raster(_utm_raster(np.full((4, 5), 80.0)), tmp_path / "occ.tif")
    check = validate_asset_water(good, dem)
    assert check["valid"]
    assert check["aligned_with_dem"]

    bad = write_raster(_utm_raster(np.full((3, 3), 250.0)), tmp_path / "bad.tif")
    check = validate_asset_water(bad, dem)
    assert not check["valid"]
    assert check["aligned_with_dem"] is False


def test_validate_seeds_inside_and_outside():
    bounds = BoundingBox(499000, 4982000, 501000, 4984000)
    validate_seeds([SeedPoint("in", 9.0, 45.0)], UTM, bounds)
    with pytest.raises(OutOfBoundsError):
        validate_seeds([SeedPoint("out", 10.0, 45.0)], UTM, bounds)
    with pytest.raises(ValueError):
        validate_seeds([SeedPoint("in", 9.0, 45.0)], None, bounds)


def test_read_seed_points(tmp_path):
    """Seed file lines are 'name, lat, lon'; comments and blanks are skipped."""
    path = tmp_path / "seeds.txt"
    path.write_text("# waypoints\nstart, 45.5, 9.1\n\nend, 46.0, 10.2  # summit\n")
    points = read_seed_points(path)
    assert points == [SeedPoint("start", 9.1, 45.5), SeedPoint("end", 10.2, 46.0)]


@pytest.mark.parametrize("text", ["only, 45.0, 9.0\n", "a, 95.0, 9.0\nb, 45.0, 9.0\n", "a, 45.0\nb, 1, 2\n"])
def test_read_seed_points_rejects(tmp_path, text):
    path = tmp_path / "seeds.txt"
    path.write_text(text)
    with pytest.raises(ValueError):
        read_seed_points(path)


def test_parse_schedule():
    steps = parse_schedule("50:5%, 25:25, 12:1")
    assert steps == (
        RefinementStep(50, 0.05, True),
        RefinementStep(25, 25.0, False),
        RefinementStep(12, 1.0, False),
    )
    assert [s.label() for s in steps] == ["50:5%", "25:25", "12:1"]


@pytest.mark.parametrize("text", ["", "50", "x:1", "0:5", "10:-1"])
def test_parse_schedule_rejects(text):
    with pytest.raises(ValueError):
        parse_schedule(text)


def test_compare_reference_path():
    """Half of the reference line runs inside the corridor."""
    corridor = gpd.GeoDataFrame(geometry=[box(0, 0, 10, 10)])
    line = LineString([(5, 5), (15, 5)])
    check = compare_reference_path(corridor, line)
    assert check["length"] == pytest.approx(10.0)
    assert check["inside_fraction"] == pytest.approx(0.5)

    ref = gpd.GeoDataFrame(geometry=[line])
    assert compare_reference_path(corridor, ref)["inside_length"] == pytest.approx(5.0)


def test_compare_reference_path_empty_corridor():
    empty = gpd.GeoDataFrame(geometry=gpd.GeoSeries([]))
    check = compare_reference_path(empty, LineString([(0, 0), (1, 0)]))
    assert check["inside_fraction"] == 0.0


def test_export_and_validate_output(tmp_path, capsys):
    """Exported segment folders hold a readable corridor, flat raster and summary."""
    cost = _utm_raster(np.full((20, 20), 0.2))
    start = (499015.0, 4983985.0)
    end = (499585.0, 4983415.0)
    corridor = refine_corridor(
        cost, start, end, (RefinementStep(2, 0.1, True), RefinementStep(1, 0.0)),
        max_distance=5000, keep_rasters=True,
    )
    flat = flat_areas_in_corridor(flat_mask(cost, 0.02), corridor.polygons)
    segment = Segment(SeedPoint("A", 9.0, 45.0), SeedPoint("B", 9.01, 44.99))
    result = SegmentResult(segment, corridor=corridor, flat_areas=flat)

    written = export_segment(result, tmp_path)
    assert "    flat_in_corridor.tif written" in capsys.readouterr().out
    seg_dir = tmp_path / "A-B"
    names = {p.name for p in written}
    assert {"corridor.geojson", "flat_in_corridor.tif", "summary.json",
            "cumulative_from_start.tif", "combined_cost.tif"} <= names

    check = validate_corridor_output(seg_dir)
    assert check["valid"]
    assert check["polygons"] == 1
    assert check["flat_cells"] >= 20

    summary = json.loads((seg_dir / "summary.json").read_text())
    assert summary["segment"] == "A-B"
    assert [r["schedule"] for r in summary["rounds"]] == ["2:10%", "1:0"]
    assert summary["rounds"][-1]["cells"] == 20


def test_validate_missing_output(tmp_path):
    assert not validate_corridor_output(tmp_path)["valid"]


def test_reference_path_report(tmp_path, capsys):
    """A reference path file is read back and compared against each solved segment."""
    path = tmp_path / "reference.geojson"
    gpd.GeoDataFrame(geometry=[LineString([(5, 5), (15, 5)])], crs=UTM).to_file(path, driver="GeoJSON")
    reference = load_reference_path(path)
    assert reference.crs.to_epsg() == 32632

    corridor = CorridorResult([RoundResult(
        step=RefinementStep(1, 0.0), minimum=1.0, threshold=1.0, cell_count=100,
        polygons=gpd.GeoDataFrame(geometry=[box(0, 0, 10, 10)], crs=UTM),
    )])
    ok = SegmentResult(Segment(SeedPoint("A", 9.0, 45.0), SeedPoint("B", 9.1, 45.0)), corridor=corridor)
    failed = SegmentResult(Segment(SeedPoint("B", 9.1, 45.0), SeedPoint("C", 9.2, 45.0)), error="NoPathFoundError")
    report = print_reference_comparison([ok, failed], reference)
    assert list(report) == ["A-B"]
    assert report["A-B"]["inside_fraction"] == pytest.approx(0.5)
    assert "A-B: 50.0%" in capsys.readouterr().out


def test_reference_path_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_reference_path(tmp_path / "none.geojson")
