"""ROI, corridor clipping and seed placement tests."""
import pytest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
import sys
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
from rasterio.transform import from_origin
from shapely.geometry import box

from lcc.clipping import clip_to_geometries, clip_to_roi, roi_box, roi_for_points
from lcc.errors import OutOfBoundsError
from lcc.models import Raster, SeedPoint
from lcc.seeds import check_seeds_on_data, point_cell, project_points, rasterize_seeds


@pytest.fixture
def grid():
    """100x100 cells of 1 m, values row * 100 + col."""
    data = np.arange(100 * 100, dtype=np.float64).reshape(100, 100)
    return Raster(data, from_origin(0, 100, 1, 1))


def test_roi_box_is_buffer_bounds():
    """ROI is the bounding box of the buffered point."""
    roi = roi_box([(50.0, 50.0)], 10.0)
    assert roi.bounds == pytest.approx((40.0, 40.0, 60.0, 60.0))


def test_roi_covers_all_points():
    roi = roi_box([(0.0, 0.0), (100.0, 20.0)], 5.0)
    assert roi.bounds == pytest.approx((-5.0, -5.0, 105.0, 25.0))


def test_roi_buffer_in_meters_for_projected_crs():
    """A metric CRS uses the buffer distance as is."""
    roi = roi_for_points([(500000.0, 5000000.0)], "EPSG:32632", 1000)
    assert roi.bounds == pytest.approx((499000.0, 4999000.0, 501000.0, 5001000.0))


def test_clip_to_roi(grid):
    """Cropping keeps the original cells and shifts the transform."""
    clipped = clip_to_roi(grid, box(10, 20, 30, 40))
    assert clipped.shape == (21, 21)
    assert clipped.transform.c == 10 and clipped.transform.f == 40
    assert np.array_equal(clipped.data, grid.data[60:81, 10:31])


def test_clip_to_roi_clamps_to_raster(grid):
    clipped = clip_to_roi(grid, box(-50, -50, 5, 5))
    assert clipped.shape == (5, 6)
    assert clipped.bounds == pytest.approx((0, 0, 6, 5))


def test_clip_to_roi_outside(grid):
    with pytest.raises(OutOfBoundsError):
        clip_to_roi(grid, box(200, 200, 300, 300))


def test_clip_to_geometries(grid):
    """Cells outside the polygons become no-data unless kept."""
    keep = np.zeros(grid.shape, dtype=bool)
    keep[99, 99] = True
    clipped = clip_to_geometries(grid, [box(0.2, 90.2, 4.8, 99.8)], keep=keep)
    assert np.isfinite(clipped.data[0:10, 0:5]).all()
    assert np.isnan(clipped.data[0:10, 5:]).all()
    assert clipped.data[99, 99] == grid.data[99, 99]
    assert np.isfinite(grid.data).all()


def test_clip_to_no_geometries(grid):
    clipped = clip_to_geometries(grid, [])
    assert np.isnan(clipped.data).all()


def test_rasterize_seeds(grid):
    """Seed cells get 1, everything else no-data."""
    seeds = rasterize_seeds([(2.5, 97.5), (50.1, 0.9)], grid)
    assert seeds.data[2, 2] == 1.0
    assert seeds.data[99, 50] == 1.0
    assert np.count_nonzero(np.isfinite(seeds.data)) == 2


def test_seed_outside_grid(grid):
    with pytest.raises(OutOfBoundsError):
        point_cell(grid, 150.0, 50.0)
    with pytest.raises(OutOfBoundsError):
        rasterize_seeds([(-1.0, 50.0)], grid)


def test_seed_on_nodata(grid):
    data = grid.data.copy()
    data[2, 2] = np.nan
    with pytest.raises(OutOfBoundsError):
        check_seeds_on_data([(2.5, 97.5)], grid.with_data(data))


def test_project_points():
    """WGS84 seeds land on the UTM central meridian easting."""
    xy = project_points([SeedPoint("a", 9.0, 45.0)], "EPSG:32632")
    assert xy[0][0] == pytest.approx(500000.0, abs=1.0)
    assert xy[0][1] == pytest.approx(4982950.0, abs=100.0)
    assert project_points([SeedPoint("b", 1.0, 2.0)], None) == [(1.0, 2.0)]
