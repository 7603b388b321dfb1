"""Configuration and paths."""
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

SEEDS_FILE = PROJECT_ROOT / "seeds.txt"
ASSETS_DIR = PROJECT_ROOT / "assets"
# Resolve DEM: use specific file if present, else first *dem*.tif in assets
_DEM_GLOB = sorted(ASSETS_DIR.glob("*dem*.tif")) if ASSETS_DIR.exists() else []
DEM_PATH = ASSETS_DIR / "NASADEM_elevation.tif"
if not DEM_PATH.exists() and _DEM_GLOB:
    DEM_PATH = _DEM_GLOB[0]
WATER_PATH = ASSETS_DIR / "GSW_occurrence.tif"

OUTPUT_DIR = PROJECT_ROOT / "output"

# Cost cap; also the cost assigned to water cells
MAX_COST = 10000.0

COST_MODELS = ("hiking", "quadratic")
COST_MODEL = "hiking"

# Percent occurrence above which a cell is surface water
WATER_THRESHOLD = 90

MAX_DISTANCE_M = 250_000
ROI_BUFFER_M = 200_000
BASE_RESOLUTION_M = 30

FLAT_THRESHOLD = 0.02

# (resolution multiplier, tolerance, tolerance is a fraction of the minimum)
DEFAULT_SCHEDULE = (
    (50, 0.05, True),
    (25, 25.0, False),
    (12, 1.0, False),
)
