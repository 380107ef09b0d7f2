from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from hospital_compare.config import NA_TOKEN, default_source
from hospital_compare.core.data_loader import load_outcome_measures
from hospital_compare.core.reference import (
    HOSPITAL_SRC,
    RATE_COLUMN_CAUSES,
    SOURCE_COLUMNS,
    STATE_SRC,
)

logger = logging.getLogger(__name__)

# Column names of the outcome table
STATE_COL = "state"
HOSPITAL_COL = "hospital"
CAUSE_COL = "cause_of_death"
RATE_COL = "death_rate_30_day"
RANK_BEST_COL = "state_rank_best"
RANK_WORST_COL = "state_rank_worst"
OUT_OF_COL = "out_of"

OUTCOME_COLUMNS = [
    STATE_COL,
    HOSPITAL_COL,
    CAUSE_COL,
    RATE_COL,
    RANK_BEST_COL,
    RANK_WORST_COL,
    OUT_OF_COL,
]

GROUP_COLS = [STATE_COL, CAUSE_COL]

# Same schema whether or not the table has rows. Text stays object dtype so
# pandas versions that infer a string dtype give identical tables.
OUTCOME_DTYPES = {
    STATE_COL: "object",
    HOSPITAL_COL: "object",
    CAUSE_COL: "object",
    RATE_COL: "float64",
    RANK_BEST_COL: "int64",
    RANK_WORST_COL: "int64",
    OUT_OF_COL: "int64",
}

# Position in the canonical ordering; only lives while ranks are assigned
_ORDER_COL = "__canonical_order__"


class OutcomeTableError(Exception):
    """Raised when the raw measures can't be shaped into an outcome table."""


# ---------------------------------------------------------------------------
# Column binding
# ---------------------------------------------------------------------------

def _bind_source_columns(raw_df: pd.DataFrame) -> Dict[str, str]:
    """
    Map each logical column (State, Hospital, the three rates) to a column of
    raw_df. Header names win; the published file's positions are the fallback.
    """
    bound: Dict[str, str] = {}
    missing: List[str] = []

    for short_name, (headers, position) in SOURCE_COLUMNS.items():
        match = next((h for h in headers if h in raw_df.columns), None)
        if match is None and position < raw_df.shape[1]:
            match = raw_df.columns[position]
            logger.warning(
                "No header matched %s; using column %s (%r) by position.",
                short_name, position, match,
            )
        if match is None:
            missing.append(short_name)
            continue
        bound[short_name] = match

    if missing:
        raise OutcomeTableError(
            f"Required columns not found: {missing}. Present columns: {list(raw_df.columns)}"
        )
    return bound


def _strip_text(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _empty_table() -> pd.DataFrame:
    return pd.DataFrame({c: pd.Series(dtype=OUTCOME_DTYPES[c]) for c in OUTCOME_COLUMNS})


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def _assign_best_rank(df: pd.DataFrame) -> pd.Series:
    """
    Rank within (state, cause) by rate ascending, hospital ascending.
    Ties get strictly increasing ranks in name order ("first").
    """
    ordered = df.sort_values([RATE_COL, HOSPITAL_COL, _ORDER_COL], ascending=[True, True, True])
    ranks = ordered.groupby(GROUP_COLS, sort=False).cumcount() + 1
    return ranks.reindex(df.index).astype(int)


def _assign_worst_rank(df: pd.DataFrame) -> pd.Series:
    """
    Rank within (state, cause) by rate descending ("last" tie-break).

    Among hospitals sharing a rate, the one that comes last by name gets the
    smallest worst rank, so the secondary keys are sorted descending too.
    """
    ordered = df.sort_values([RATE_COL, HOSPITAL_COL, _ORDER_COL], ascending=[False, False, False])
    ranks = ordered.groupby(GROUP_COLS, sort=False).cumcount() + 1
    return ranks.reindex(df.index).astype(int)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_outcome_table(raw_df: pd.DataFrame) -> pd.DataFrame:
    """
    Reshape the wide outcome-of-care measures into one row per
    (hospital, cause of death) and rank hospitals within their state.

    Steps:
      - select and rename State / Hospital / the three 30-day death rates
      - melt the rate columns into (cause_of_death, death_rate_30_day)
      - drop rows with a missing or unparseable rate (or missing state/name)
      - order by cause, state, rate, hospital
      - add state_rank_best, state_rank_worst and out_of per (state, cause)
    """
    if raw_df.shape[1] == 0:
        return _empty_table()

    bound = _bind_source_columns(raw_df)
    rate_cols = list(RATE_COLUMN_CAUSES.keys())
    short_names = [STATE_SRC, HOSPITAL_SRC] + rate_cols

    wide = raw_df[[bound[c] for c in short_names]].copy()
    wide.columns = short_names

    long = wide.melt(
        id_vars=[STATE_SRC, HOSPITAL_SRC],
        value_vars=rate_cols,
        var_name=CAUSE_COL,
        value_name=RATE_COL,
    )
    long = long.rename(columns={STATE_SRC: STATE_COL, HOSPITAL_SRC: HOSPITAL_COL})
    long[CAUSE_COL] = long[CAUSE_COL].map({col: cause.value for col, cause in RATE_COLUMN_CAUSES.items()})
    long[RATE_COL] = pd.to_numeric(long[RATE_COL].map(_strip_text), errors="coerce")

    n_melted = len(long)
    long = long.dropna(subset=[STATE_COL, HOSPITAL_COL, RATE_COL])
    if long.empty:
        logger.info("Outcome table is empty (%s melted rows, none with a usable rate).", n_melted)
        return _empty_table()

    long = long.sort_values([CAUSE_COL, STATE_COL, RATE_COL, HOSPITAL_COL]).reset_index(drop=True)
    long[_ORDER_COL] = range(len(long))

    long[RANK_BEST_COL] = _assign_best_rank(long)
    long[RANK_WORST_COL] = _assign_worst_rank(long)
    long[OUT_OF_COL] = long.groupby(GROUP_COLS)[RATE_COL].transform("count").astype(int)

    table = long[OUTCOME_COLUMNS].astype(OUTCOME_DTYPES).reset_index(drop=True)
    logger.info(
        "Built outcome table: %s records (%s dropped) across %s (state, cause) groups.",
        len(table), n_melted - len(table), table.groupby(GROUP_COLS).ngroups,
    )
    return table


_TABLE_CACHE: Dict[Tuple[str, str], pd.DataFrame] = {}


def load_outcome_table(
    source: Optional[Union[str, Path]] = None,
    *,
    na_token: Optional[str] = None,
    refresh: bool = False,
) -> pd.DataFrame:
    """
    Load the raw measures and build the outcome table, cached in memory per
    (source, na_token).
    """
    key = (
        str(source) if source is not None else default_source(),
        NA_TOKEN if na_token is None else na_token,
    )
    # Callers get their own copy; the cached table is never handed out
    if not refresh and key in _TABLE_CACHE:
        return _TABLE_CACHE[key].copy()

    raw_df = load_outcome_measures(key[0], na_token=key[1])
    table = build_outcome_table(raw_df)
    _TABLE_CACHE[key] = table
    return table.copy()
