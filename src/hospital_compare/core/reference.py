from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Tuple


class CauseOfDeath(str, Enum):
    """
    Mortality categories measured by Hospital Compare.

    Values are the outcome strings callers pass to the query functions,
    so ``CauseOfDeath("pneumonia")`` is the parse step.
    """
    HEART_ATTACK = "heart attack"
    HEART_FAILURE = "heart failure"
    PNEUMONIA = "pneumonia"


VALID_OUTCOMES: FrozenSet[str] = frozenset(c.value for c in CauseOfDeath)

# ---------------------------------------------------------------------------
# State / territory codes
# ---------------------------------------------------------------------------

US_STATE_ABBREVIATIONS: Tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)

EXTRA_JURISDICTIONS: Tuple[str, ...] = ("DC", "GU", "PR", "VI")

# Canonical order used by rank_all (alphabetical)
STATE_CODES: Tuple[str, ...] = tuple(sorted(US_STATE_ABBREVIATIONS + EXTRA_JURISDICTIONS))
VALID_STATES: FrozenSet[str] = frozenset(STATE_CODES)

# ---------------------------------------------------------------------------
# Source file columns (outcome-of-care-measures.csv)
#
# Each logical column maps to the short name used inside the outcome table
# builder, the header names we accept, and the 0-based position it has in the
# published file (used only when no header matches).
# ---------------------------------------------------------------------------

STATE_SRC = "State"
HOSPITAL_SRC = "Hospital"
HEART_ATTACK_SRC = "Heart_Attack_Death_Rate"
HEART_FAILURE_SRC = "Heart_Failure_Death_Rate"
PNEUMONIA_SRC = "Pneumonia_Death_Rate"

SOURCE_COLUMNS: Dict[str, Tuple[List[str], int]] = {
    STATE_SRC: (["State"], 6),
    HOSPITAL_SRC: (["Hospital Name", "Hospital"], 1),
    HEART_ATTACK_SRC: (
        ["Hospital 30-Day Death (Mortality) Rates from Heart Attack", "Heart_Attack_Death_Rate"],
        10,
    ),
    HEART_FAILURE_SRC: (
        ["Hospital 30-Day Death (Mortality) Rates from Heart Failure", "Heart_Failure_Death_Rate"],
        16,
    ),
    PNEUMONIA_SRC: (
        ["Hospital 30-Day Death (Mortality) Rates from Pneumonia", "Pneumonia_Death_Rate"],
        22,
    ),
}

RATE_COLUMN_CAUSES: Dict[str, CauseOfDeath] = {
    HEART_ATTACK_SRC: CauseOfDeath.HEART_ATTACK,
    HEART_FAILURE_SRC: CauseOfDeath.HEART_FAILURE,
    PNEUMONIA_SRC: CauseOfDeath.PNEUMONIA,
}
