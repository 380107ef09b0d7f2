from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from hospital_compare.core.outcome_table import (
    CAUSE_COL,
    GROUP_COLS,
    OUT_OF_COL,
    RANK_BEST_COL,
    RANK_WORST_COL,
    STATE_COL,
)
from hospital_compare.core.reference import VALID_STATES


@dataclass
class RankGroupIssue:
    """
    A (state, cause) group whose ranks don't form 1..N.
    """
    state: str
    cause_of_death: str
    size: int
    problem: str  # 'best_ranks', 'worst_ranks' or 'out_of'


@dataclass
class AuditSnapshot:
    """
    Summary facts about a built outcome table.

    These back the record summary in the UI and can be checked after every
    rebuild: with a healthy table `issues` is empty.
    """
    n_records: int
    n_groups: int
    records_by_cause: Dict[str, int]
    unrecognized_states: List[str]
    issues: List[RankGroupIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _is_permutation(values: pd.Series, size: int) -> bool:
    return sorted(int(v) for v in values) == list(range(1, size + 1))


def build_audit_snapshot(table: pd.DataFrame) -> AuditSnapshot:
    """
    Check the per-group rank invariants of an outcome table:
      - state_rank_best is exactly 1..N within each (state, cause) group
      - state_rank_worst likewise
      - out_of equals N on every row of the group
    """
    if table.empty:
        return AuditSnapshot(
            n_records=0,
            n_groups=0,
            records_by_cause={},
            unrecognized_states=[],
        )

    issues: List[RankGroupIssue] = []
    groups = table.groupby(GROUP_COLS, sort=True)
    for (state, cause), grp in groups:
        size = len(grp)
        if not _is_permutation(grp[RANK_BEST_COL], size):
            issues.append(RankGroupIssue(state=state, cause_of_death=cause, size=size, problem="best_ranks"))
        if not _is_permutation(grp[RANK_WORST_COL], size):
            issues.append(RankGroupIssue(state=state, cause_of_death=cause, size=size, problem="worst_ranks"))
        if not (grp[OUT_OF_COL] == size).all():
            issues.append(RankGroupIssue(state=state, cause_of_death=cause, size=size, problem="out_of"))

    records_by_cause = {str(k): int(v) for k, v in table[CAUSE_COL].value_counts().sort_index().items()}
    unrecognized = sorted(set(table[STATE_COL]) - VALID_STATES)

    return AuditSnapshot(
        n_records=len(table),
        n_groups=groups.ngroups,
        records_by_cause=records_by_cause,
        unrecognized_states=unrecognized,
        issues=issues,
    )
