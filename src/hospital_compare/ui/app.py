from __future__ import annotations

import time
import traceback
from typing import Any, Optional

import pandas as pd
import streamlit as st

from hospital_compare.config import APP_NAME, APP_VERSION, NA_TOKEN, default_source
from hospital_compare.core.audit import build_audit_snapshot
from hospital_compare.core.data_loader import DataLoaderError
from hospital_compare.core.outcome_table import OutcomeTableError, load_outcome_table
from hospital_compare.core.query_engine import (
    BEST,
    WORST,
    QueryEngineError,
    best,
    rank_all,
    rank_hospital,
)
from hospital_compare.core.reference import STATE_CODES, CauseOfDeath

OUTCOME_CHOICES = [c.value for c in CauseOfDeath]
RANK_MODES = ["best", "worst", "position"]

_TABLE_KEY = "outcome_table"


def _current_table() -> Optional[pd.DataFrame]:
    return st.session_state.get(_TABLE_KEY)


def _num_input(key: str) -> Any:
    """
    Rank selector widgets; returns "best", "worst" or an int.
    """
    mode = st.radio("Rank", RANK_MODES, horizontal=True, key=f"{key}_mode")
    if mode == "position":
        return int(st.number_input("Position", min_value=1, value=1, step=1, key=f"{key}_pos"))
    return BEST if mode == "best" else WORST


def _show_answer(answer: Optional[str], what: str) -> None:
    if answer is None:
        st.info(f"No hospital found for {what}.")
    else:
        st.success(f"{what}: {answer}")


def _render_source_panel() -> None:
    with st.expander("Data source", expanded=_current_table() is None):
        source = st.text_input("CSV path or URL", value=default_source())
        na_token = st.text_input("Missing-value token", value=NA_TOKEN)
        refresh = st.checkbox("Force reload", value=False)

        if st.button("Load outcome table"):
            t0 = time.perf_counter()
            try:
                with st.spinner("Loading and ranking hospitals..."):
                    table = load_outcome_table(source.strip(), na_token=na_token, refresh=bool(refresh))
                st.session_state[_TABLE_KEY] = table
                st.success(f"Loaded {len(table)} records in {time.perf_counter() - t0:0.2f}s.")
            except (DataLoaderError, OutcomeTableError) as exc:
                st.error(f"Could not build the outcome table: {exc}")
            except Exception:
                st.error("Unexpected error while loading the outcome table.")
                st.text_area("Traceback", value=traceback.format_exc(), height=220)


def _render_summary(table: pd.DataFrame) -> None:
    with st.expander("Table summary", expanded=False):
        snapshot = build_audit_snapshot(table)
        st.write(f"Records: {snapshot.n_records}")
        st.write(f"(state, cause) groups: {snapshot.n_groups}")
        st.write(f"Records by cause of death: {snapshot.records_by_cause}")
        if snapshot.unrecognized_states:
            st.write(f"State codes outside the 54 recognized: {snapshot.unrecognized_states}")
        if snapshot.ok:
            st.success("Rank invariants hold for every group.")
        else:
            st.warning(f"{len(snapshot.issues)} group(s) with inconsistent ranks.")
            st.dataframe(pd.DataFrame([vars(i) for i in snapshot.issues]), use_container_width=True)


def _render_best(table: pd.DataFrame) -> None:
    st.subheader("Best hospital in a state")
    col1, col2 = st.columns(2)
    with col1:
        state = st.selectbox("State", STATE_CODES, key="best_state")
    with col2:
        outcome = st.selectbox("Outcome", OUTCOME_CHOICES, key="best_outcome")

    if st.button("Find best", key="best_btn"):
        try:
            _show_answer(best(table, state, outcome), f"Best for {outcome} in {state}")
        except QueryEngineError as qerr:
            st.error(str(qerr))


def _render_rank_hospital(table: pd.DataFrame) -> None:
    st.subheader("Hospital by rank in a state")
    col1, col2 = st.columns(2)
    with col1:
        state = st.selectbox("State", STATE_CODES, key="rank_state")
    with col2:
        outcome = st.selectbox("Outcome", OUTCOME_CHOICES, key="rank_outcome")
    num = _num_input("rank")

    if st.button("Find hospital", key="rank_btn"):
        try:
            _show_answer(rank_hospital(table, state, outcome, num), f"Rank {num} for {outcome} in {state}")
        except QueryEngineError as qerr:
            st.error(str(qerr))


def _render_rank_all(table: pd.DataFrame) -> None:
    st.subheader("Hospital by rank in every state")
    outcome = st.selectbox("Outcome", OUTCOME_CHOICES, key="all_outcome")
    num = _num_input("all")

    if st.button("Rank all states", key="all_btn"):
        try:
            st.dataframe(rank_all(table, outcome, num), use_container_width=True)
        except QueryEngineError as qerr:
            st.error(str(qerr))


def run_app() -> None:
    st.set_page_config(page_title=APP_NAME, layout="wide")
    st.title(APP_NAME)
    st.caption(f"Prototype version {APP_VERSION}")

    _render_source_panel()

    table = _current_table()
    if table is None:
        st.info("Load the outcome-of-care measures to start querying.")
        return

    _render_summary(table)
    _render_best(table)
    _render_rank_hospital(table)
    _render_rank_all(table)
