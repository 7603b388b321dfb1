"""Raster mask to polygons."""
import geopandas as gpd
import numpy as np
from rasterio.features import shapes
from shapely.geometry import shape

from .models import Raster


def vectorize_mask(mask: Raster) -> gpd.GeoDataFrame:
    """Merge 8-connected true cells into polygons, one row per connected region.

    An empty mask gives an empty GeoDataFrame.
    """
    data = np.asarray(mask.data)
    selected = np.isfinite(data) & (data != 0) if data.dtype.kind == "f" else data.astype(bool)
    polygons = []
    if selected.any():
        for geom, _ in shapes(
            selected.astype(np.uint8),
            mask=selected,
            connectivity=8,
            transform=mask.transform,
        ):
            poly = shape(geom)
            # diagonal-only contacts give self-touching rings
            if not poly.is_valid:
                poly = poly.buffer(0)
            polygons.append(poly)

    gdf = gpd.GeoDataFrame(
        {"component": list(range(len(polygons)))},
        geometry=gpd.GeoSeries(polygons, crs=mask.crs),
    )
    gdf["area"] = gdf.geometry.area
    return gdf
