"""Builders for wide outcome-of-care frames shaped like the published file."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import pandas as pd

HEART_ATTACK_HEADER = "Hospital 30-Day Death (Mortality) Rates from Heart Attack"
HEART_FAILURE_HEADER = "Hospital 30-Day Death (Mortality) Rates from Heart Failure"
PNEUMONIA_HEADER = "Hospital 30-Day Death (Mortality) Rates from Pneumonia"

# (state, hospital, heart attack, heart failure, pneumonia); None = missing
Row = Tuple[str, str, Optional[str], Optional[str], Optional[str]]


def make_raw_measures(rows: Iterable[Row]) -> pd.DataFrame:
    """
    Wide frame with the published headers plus a few unrelated columns,
    the way data_loader returns it (all text, missing as NaN).
    """
    records = []
    for i, (state, hospital, ha, hf, pn) in enumerate(rows):
        records.append(
            {
                "Provider Number": f"{10001 + i:06d}",
                "Hospital Name": hospital,
                "City": "SPRINGFIELD",
                "State": state,
                "ZIP Code": "01101",
                HEART_ATTACK_HEADER: ha,
                HEART_FAILURE_HEADER: hf,
                PNEUMONIA_HEADER: pn,
            }
        )
    columns = [
        "Provider Number",
        "Hospital Name",
        "City",
        "State",
        "ZIP Code",
        HEART_ATTACK_HEADER,
        HEART_FAILURE_HEADER,
        PNEUMONIA_HEADER,
    ]
    return pd.DataFrame.from_records(records, columns=columns)


def write_measures_csv(path: Path, rows: Sequence[Row], na_token: str = "Not Available") -> Path:
    """
    Write rows as a CSV, spelling missing rates with na_token.
    """
    df = make_raw_measures(rows)
    df = df.astype(object).where(df.notna(), na_token)
    df.to_csv(path, index=False)
    return path
