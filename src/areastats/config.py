from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Directory holding areas.csv and the StatsWales dataset files.
# Can be pointed elsewhere (or at an http(s) base URL) via AREASTATS_DATA_DIR.
DATA_DIR = os.getenv("AREASTATS_DATA_DIR", "").strip() or str(PROJECT_ROOT / "datasets")

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Area Statistics Explorer"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Remote datasets
#
# When set, the explorer offers this as the default data location and
# dataset files are fetched over HTTP instead of read from disk.
# ---------------------------------------------------------------------------

REMOTE_BASE_URL = os.getenv("AREASTATS_REMOTE_BASE_URL", "").strip()

HTTP_TIMEOUT_SECONDS = int(os.getenv("AREASTATS_HTTP_TIMEOUT", "60"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("AREASTATS_LOG_LEVEL", "WARNING").strip().upper()
