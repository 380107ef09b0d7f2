"""Rank audit snapshot tests."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from hospital_compare.core.audit import build_audit_snapshot  # noqa: E402
from hospital_compare.core.outcome_table import (  # noqa: E402
    HOSPITAL_COL,
    OUT_OF_COL,
    RANK_WORST_COL,
    build_outcome_table,
)
from fixtures import make_raw_measures  # noqa: E402

ROWS = [
    ("TX", "HospA", "10.0", "11.5", None),
    ("TX", "HospB", "10.0", "11.0", None),
    ("TX", "HospC", "9.0", None, "13.1"),
    ("MP", "SAIPAN", "12.0", None, None),
]


class AuditSnapshotTests(unittest.TestCase):
    def setUp(self) -> None:
        self.table = build_outcome_table(make_raw_measures(ROWS))

    def test_healthy_table(self) -> None:
        snapshot = build_audit_snapshot(self.table)
        self.assertTrue(snapshot.ok)
        self.assertEqual(snapshot.n_records, 7)
        self.assertEqual(snapshot.n_groups, 4)
        self.assertEqual(
            snapshot.records_by_cause,
            {"heart attack": 4, "heart failure": 2, "pneumonia": 1},
        )

    def test_unrecognized_states_are_reported(self) -> None:
        snapshot = build_audit_snapshot(self.table)
        self.assertEqual(snapshot.unrecognized_states, ["MP"])

    def test_broken_ranks_are_flagged(self) -> None:
        broken = self.table.copy()
        broken.loc[broken[HOSPITAL_COL] == "HospA", RANK_WORST_COL] = 1
        broken.loc[broken[HOSPITAL_COL] == "SAIPAN", OUT_OF_COL] = 2

        snapshot = build_audit_snapshot(broken)

        self.assertFalse(snapshot.ok)
        problems = {(i.state, i.cause_of_death, i.problem) for i in snapshot.issues}
        self.assertIn(("TX", "heart attack", "worst_ranks"), problems)
        self.assertIn(("MP", "heart attack", "out_of"), problems)
        self.assertNotIn("best_ranks", {p for _, _, p in problems})

    def test_empty_table(self) -> None:
        snapshot = build_audit_snapshot(build_outcome_table(make_raw_measures([])))
        self.assertTrue(snapshot.ok)
        self.assertEqual(snapshot.n_records, 0)
        self.assertEqual(snapshot.records_by_cause, {})


if __name__ == "__main__":
    unittest.main()
