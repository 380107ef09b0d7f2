from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Data directory (the outcome-of-care CSV lives here by default)
DATA_DIR = PROJECT_ROOT / "data"

OUTCOME_CSV_NAME = "outcome-of-care-measures.csv"

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Hospital Compare: 30-Day Mortality Rankings"
APP_VERSION = "0.1.0"

LOG_LEVEL = os.getenv("HOSPITAL_COMPARE_LOG_LEVEL", "INFO").strip().upper() or "INFO"

# ---------------------------------------------------------------------------
# Source file configuration
#
# The outcome-of-care measures come from the Hospital Compare web site
# (http://hospitalcompare.hhs.gov) run by the U.S. Department of Health and
# Human Services. Either point at a local copy or at a download URL:
#   - HOSPITAL_COMPARE_CSV_URL wins when set
#   - otherwise HOSPITAL_COMPARE_CSV_PATH
#   - otherwise data/outcome-of-care-measures.csv
# ---------------------------------------------------------------------------

OUTCOME_CSV_URL = os.getenv("HOSPITAL_COMPARE_CSV_URL", "").strip()

OUTCOME_CSV_PATH = Path(
    os.getenv("HOSPITAL_COMPARE_CSV_PATH", "").strip() or str(DATA_DIR / OUTCOME_CSV_NAME)
)

# The published file spells out missing rates instead of leaving them blank.
NA_TOKEN = os.getenv("HOSPITAL_COMPARE_NA_TOKEN", "Not Available")

# HTTP timeout when the source is a URL
DOWNLOAD_TIMEOUT_SECONDS = int(os.getenv("HOSPITAL_COMPARE_TIMEOUT_SECONDS", "60"))


def default_source() -> str:
    """
    Source used when callers don't pass one explicitly.
    """
    return OUTCOME_CSV_URL or str(OUTCOME_CSV_PATH)
