"""Raster container, seeds, settings and result records."""
from dataclasses import dataclass, field, replace

import geopandas as gpd
import numpy as np
from rasterio.transform import Affine, array_bounds

from .config import (
    BASE_RESOLUTION_M,
    COST_MODEL,
    DEFAULT_SCHEDULE,
    FLAT_THRESHOLD,
    MAX_DISTANCE_M,
    ROI_BUFFER_M,
    WATER_THRESHOLD,
)
from .errors import DataAlignmentError


@dataclass(frozen=True)
class Raster:
    """2D grid with georeferencing. Float rasters use NaN as no-data.

    Treated as immutable: operations return new rasters instead of writing
    into ``data``.
    """
    data: np.ndarray
    transform: Affine
    crs: object = None

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape

    @property
    def cell_size(self) -> float:
        """Pixel width in CRS units."""
        return abs(self.transform.a)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(left, bottom, right, top) in CRS units."""
        rows, cols = self.data.shape
        west, south, east, north = array_bounds(rows, cols, self.transform)
        return west, south, east, north

    def with_data(self, data: np.ndarray) -> "Raster":
        if data.shape != self.data.shape:
            raise DataAlignmentError(
                f"New data shape {data.shape} does not match grid {self.data.shape}"
            )
        return replace(self, data=data)

    def aligned_with(self, other: "Raster") -> bool:
        return (
            self.data.shape == other.data.shape
            and self.transform.almost_equals(other.transform)
            and _same_crs(self.crs, other.crs)
        )


def _same_crs(a, b) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a == b


def require_aligned(*rasters: Raster | None) -> None:
    """Raise DataAlignmentError unless every raster is present and on one grid."""
    if any(r is None for r in rasters):
        raise DataAlignmentError("Input raster missing")
    first = rasters[0]
    for other in rasters[1:]:
        if not first.aligned_with(other):
            raise DataAlignmentError(
                f"Rasters not aligned: shape {first.shape} vs {other.shape}, "
                f"transform {tuple(first.transform)[:6]} vs {tuple(other.transform)[:6]}, "
                f"crs {first.crs} vs {other.crs}"
            )


@dataclass(frozen=True)
class SeedPoint:
    name: str
    lon: float
    lat: float


@dataclass(frozen=True)
class RefinementStep:
    """One refinement round.

    multiplier : cell size as a multiple of the base resolution.
    tolerance : cost units, or a fraction of the round minimum when ``relative``.
    """
    multiplier: int
    tolerance: float
    relative: bool = False

    def resolve_tolerance(self, minimum: float) -> float:
        return minimum * self.tolerance if self.relative else self.tolerance

    def label(self) -> str:
        tol = f"{self.tolerance * 100:g}%" if self.relative else f"{self.tolerance:g}"
        return f"{self.multiplier}:{tol}"


def _default_schedule() -> tuple[RefinementStep, ...]:
    return tuple(RefinementStep(m, t, rel) for m, t, rel in DEFAULT_SCHEDULE)


@dataclass(frozen=True)
class CorridorSettings:
    cost_model: str = COST_MODEL
    water_threshold: float = WATER_THRESHOLD
    max_distance_m: float = MAX_DISTANCE_M
    schedule: tuple[RefinementStep, ...] = field(default_factory=_default_schedule)
    base_resolution_m: float = BASE_RESOLUTION_M
    roi_buffer_m: float = ROI_BUFFER_M
    flat_threshold: float = FLAT_THRESHOLD
    skip_diagonal_adjustment: bool = False
    land_sea_mask: bool = False
    use_water: bool = True
    keep_diagnostics: bool = False


@dataclass
class CorridorMask:
    mask: Raster
    combined: Raster
    minimum: float
    threshold: float

    @property
    def cell_count(self) -> int:
        return int(np.count_nonzero(self.mask.data))


@dataclass
class RoundResult:
    step: RefinementStep
    minimum: float
    threshold: float
    cell_count: int
    polygons: gpd.GeoDataFrame
    mask: Raster | None = None
    from_start: Raster | None = None
    from_end: Raster | None = None
    combined: Raster | None = None


@dataclass
class CorridorResult:
    rounds: list[RoundResult]

    @property
    def polygons(self) -> gpd.GeoDataFrame | None:
        return self.rounds[-1].polygons if self.rounds else None

    @property
    def is_empty(self) -> bool:
        return self.polygons is None or self.polygons.empty

    @property
    def minimum(self) -> float | None:
        return self.rounds[-1].minimum if self.rounds else None


@dataclass(frozen=True)
class Segment:
    start: SeedPoint
    end: SeedPoint

    @property
    def name(self) -> str:
        return f"{self.start.name}-{self.end.name}"


@dataclass
class SegmentResult:
    segment: Segment
    corridor: CorridorResult | None = None
    flat_areas: Raster | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.corridor is not None
