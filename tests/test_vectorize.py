"""Vectorizer tests."""
import pytest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
import sys
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
from rasterio.transform import from_origin

from lcc.models import Raster
from lcc.vectorize import vectorize_mask


def _mask(data, cell=10.0, crs=None):
    data = np.asarray(data, dtype=bool)
    return Raster(data, from_origin(100, 500, cell, cell), crs)


def test_empty_mask_gives_no_polygons():
    """All-false mask: empty result, not an error."""
    gdf = vectorize_mask(_mask(np.zeros((4, 5))))
    assert len(gdf) == 0
    assert "geometry" in gdf.columns


def test_full_mask_single_polygon():
    """All-true mask: one polygon covering the full extent."""
    mask = _mask(np.ones((4, 5)))
    gdf = vectorize_mask(mask)
    assert len(gdf) == 1
    geom = gdf.geometry.iloc[0]
    assert geom.area == pytest.approx(4 * 5 * 100.0)
    assert geom.bounds == pytest.approx(mask.bounds)


def test_separate_regions():
    """Two blobs that do not touch become two polygons."""
    data = np.zeros((5, 5))
    data[0:2, 0:2] = 1
    data[3:5, 3:5] = 1
    gdf = vectorize_mask(_mask(data))
    assert len(gdf) == 2
    assert sorted(gdf["area"]) == pytest.approx([400.0, 400.0])


def test_diagonal_cells_are_connected():
    """Cells touching only at a corner merge under 8-connectivity."""
    data = np.eye(3)
    gdf = vectorize_mask(_mask(data))
    assert len(gdf) == 1
    assert gdf.geometry.iloc[0].area == pytest.approx(300.0)


def test_float_mask_ignores_nodata():
    """NaN and zero cells are not part of any polygon."""
    data = np.array([[1.0, np.nan], [0.0, 1.0]])
    mask = Raster(data, from_origin(0, 2, 1, 1))
    gdf = vectorize_mask(mask)
    assert gdf.geometry.area.sum() == pytest.approx(2.0)


def test_crs_is_carried():
    gdf = vectorize_mask(_mask(np.ones((2, 2)), crs="EPSG:32632"))
    assert gdf.crs is not None
    assert gdf.crs.to_epsg() == 32632
