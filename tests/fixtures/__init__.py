"""Synthetic outcome-of-care measures for table and query tests."""

from .measures import (
    HEART_ATTACK_HEADER,
    HEART_FAILURE_HEADER,
    PNEUMONIA_HEADER,
    make_raw_measures,
    write_measures_csv,
)

__all__ = [
    "HEART_ATTACK_HEADER",
    "HEART_FAILURE_HEADER",
    "PNEUMONIA_HEADER",
    "make_raw_measures",
    "write_measures_csv",
]
