"""
Application configuration loaded from environment / .env file.
"""
import os
import sys
from pathlib import Path

# Add project root for source_config / reporting imports
_project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_project_root))

from source_config import SOURCE_API_URL, SOURCE_DATA_DIR  # noqa: E402

PROJECT_ROOT = _project_root

# Where snapshots come from: a directory of <kind>.json exports, or the HTTP source
SOURCE_LABEL = f"file:{SOURCE_DATA_DIR}" if SOURCE_DATA_DIR else SOURCE_API_URL

# CORS allowed origins (comma-separated in env, or default for local dev)
_origins_raw = os.environ.get("ALLOWED_ORIGINS", "")
if _origins_raw:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_raw.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
