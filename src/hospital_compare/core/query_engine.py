from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from hospital_compare.core.outcome_table import (
    CAUSE_COL,
    HOSPITAL_COL,
    OUT_OF_COL,
    RANK_BEST_COL,
    RANK_WORST_COL,
    STATE_COL,
)
from hospital_compare.core.reference import (
    STATE_CODES,
    VALID_OUTCOMES,
    VALID_STATES,
    CauseOfDeath,
)

logger = logging.getLogger(__name__)

BEST = "best"
WORST = "worst"

# Column names of the rank_all result
RANK_ALL_HOSPITAL_COL = "hospital"
RANK_ALL_STATE_COL = "state"


class QueryEngineError(Exception):
    """Base class for query validation failures."""


class InvalidState(QueryEngineError):
    """State is not one of the 50 states, DC, GU, PR or VI."""


class InvalidOutcome(QueryEngineError):
    """Outcome is not 'heart attack', 'heart failure' or 'pneumonia'."""


class InvalidRank(QueryEngineError):
    """num is neither a positive integer nor 'best'/'worst'."""


@dataclass(frozen=True)
class RankSelector:
    """
    Which hospital a query asks for.

    Exactly one of three shapes:
      - kind="best"      -> rank 1 on state_rank_best
      - kind="worst"     -> rank 1 on state_rank_worst
      - kind="position"  -> rank N on state_rank_best
    """
    kind: str
    position: int = 1

    @classmethod
    def best(cls) -> "RankSelector":
        return cls(kind=BEST)

    @classmethod
    def worst(cls) -> "RankSelector":
        return cls(kind=WORST)

    @classmethod
    def at(cls, position: int) -> "RankSelector":
        return cls(kind="position", position=int(position))

    @property
    def rank_column(self) -> str:
        return RANK_WORST_COL if self.kind == WORST else RANK_BEST_COL

    @property
    def target_rank(self) -> int:
        return self.position if self.kind == "position" else 1

    @property
    def is_position(self) -> bool:
        return self.kind == "position"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_state(state: Any) -> str:
    if not isinstance(state, str) or state not in VALID_STATES:
        raise InvalidState(f"invalid state: {state!r}")
    return state


def parse_outcome(outcome: Any) -> CauseOfDeath:
    if not isinstance(outcome, str) or outcome not in VALID_OUTCOMES:
        raise InvalidOutcome(f"invalid outcome: {outcome!r}")
    return CauseOfDeath(outcome)


def resolve_rank(num: Any) -> RankSelector:
    """
    Turn the user-facing num argument into a RankSelector.

    Accepts "best", "worst", or a positive integer (an integral float such as
    3.0 counts; bools don't).
    """
    if isinstance(num, str):
        if num == BEST:
            return RankSelector.best()
        if num == WORST:
            return RankSelector.worst()
        raise InvalidRank(f"invalid num input: {num!r}")

    if isinstance(num, bool):
        raise InvalidRank(f"invalid num input: {num!r}")

    if isinstance(num, numbers.Integral):
        value = int(num)
    elif isinstance(num, numbers.Real) and float(num).is_integer():
        value = int(num)
    else:
        raise InvalidRank(f"invalid num input: {num!r}")

    if value < 1:
        raise InvalidRank(f"invalid num input: {num!r} (ranks start at 1)")
    return RankSelector.at(value)


# ---------------------------------------------------------------------------
# Table helpers
# ---------------------------------------------------------------------------

def _subset(table: pd.DataFrame, state: str, cause: CauseOfDeath) -> pd.DataFrame:
    mask = (table[STATE_COL] == state) & (table[CAUSE_COL] == cause.value)
    return table[mask]


def _pick_hospital(subset: pd.DataFrame, selector: RankSelector) -> Optional[str]:
    if subset.empty:
        return None

    # Asking past the end of the list is "no hospital", not an error
    if selector.is_position and selector.target_rank > int(subset[OUT_OF_COL].iloc[0]):
        return None

    hit = subset[subset[selector.rank_column] == selector.target_rank]
    if hit.empty:
        return None
    return str(hit[HOSPITAL_COL].iloc[0])


# ---------------------------------------------------------------------------
# Public queries
# ---------------------------------------------------------------------------

def best(table: pd.DataFrame, state: str, outcome: str) -> Optional[str]:
    """
    Name of the hospital with the lowest 30-day death rate for `outcome` in
    `state`, or None when the state has no data for that outcome.
    """
    state = validate_state(state)
    cause = parse_outcome(outcome)

    logger.info("best state=%s outcome=%s", state, cause.value)
    return _pick_hospital(_subset(table, state, cause), RankSelector.best())


def rank_hospital(table: pd.DataFrame, state: str, outcome: str, num: Any = BEST) -> Optional[str]:
    """
    Name of the hospital at rank `num` for `outcome` in `state`.

    num is "best", "worst" or a positive integer (counted from the best).
    Returns None when num exceeds the number of hospitals compared.
    """
    state = validate_state(state)
    cause = parse_outcome(outcome)
    selector = resolve_rank(num)

    logger.info("rank_hospital state=%s outcome=%s selector=%s", state, cause.value, selector)
    return _pick_hospital(_subset(table, state, cause), selector)


def rank_all(table: pd.DataFrame, outcome: str, num: Any = BEST) -> pd.DataFrame:
    """
    Hospital at rank `num` for `outcome` in every recognized state/territory.

    Always one row per code in STATE_CODES order; hospital is None where the
    state has no hospital at that rank.
    """
    cause = parse_outcome(outcome)
    selector = resolve_rank(num)

    logger.info("rank_all outcome=%s selector=%s", cause.value, selector)

    picked = table[
        (table[CAUSE_COL] == cause.value)
        & (table[selector.rank_column] == selector.target_rank)
    ]
    by_state = dict(zip(picked[STATE_COL], picked[HOSPITAL_COL]))

    # object dtype so absent hospitals stay None
    return pd.DataFrame(
        {
            RANK_ALL_HOSPITAL_COL: pd.Series([by_state.get(s) for s in STATE_CODES], dtype=object),
            RANK_ALL_STATE_COL: pd.Series(list(STATE_CODES), dtype=object),
        }
    )
