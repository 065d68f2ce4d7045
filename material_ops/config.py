import os
from pathlib import Path

from .constants import (
    DATA_DIR,
    SETTINGS_FILE_NAME,
    SIGNAL_DIR_NAME,
    LOG_DIR_NAME,
    LOG_FILE_NAME,
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT,
)

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = Path(os.getenv("MATERIAL_OPS_DATA_DIR") or (BASE_DIR / DATA_DIR))
SETTINGS_PATH = DATA_PATH / SETTINGS_FILE_NAME
SIGNAL_DIR = Path(os.getenv("MATERIAL_OPS_SIGNAL_DIR") or (DATA_PATH / SIGNAL_DIR_NAME))
LOG_PATH = DATA_PATH / LOG_DIR_NAME / LOG_FILE_NAME

API_BASE_URL = (os.getenv("MATERIAL_OPS_API_URL") or DEFAULT_API_BASE_URL).rstrip("/")
try:
    API_TIMEOUT = int(os.getenv("MATERIAL_OPS_API_TIMEOUT", str(DEFAULT_API_TIMEOUT)))
except ValueError:
    API_TIMEOUT = DEFAULT_API_TIMEOUT

# ensure data dirs exist early
DATA_PATH.mkdir(parents=True, exist_ok=True)
SIGNAL_DIR.mkdir(parents=True, exist_ok=True)
