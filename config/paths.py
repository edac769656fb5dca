import os
from pathlib import Path

# === Project layout ===
PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# logs land next to the code unless LOG_DIR points elsewhere (e.g. a mounted volume)
LOG_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT)))

# === Files ===
CONSTANTS_PATH = CONFIG_DIR / "constants.json"
DEFAULT_SEED_PATH = DATA_DIR / "seed.json"
LOG_PATH = LOG_DIR / "planning_run.log"
