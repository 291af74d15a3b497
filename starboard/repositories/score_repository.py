"""
Score Repository - Starboard Evaluation API
starboard/repositories/score_repository.py

Data access layer for judge scores. A score is written once per
(submission, step, judge) and never updated.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from starboard.repositories.base import BaseRepository


class ScoreRepository(BaseRepository):
    """Repository for judge Score operations."""

    TABLE_NAME = "APPLICATION_SCORES"

    _COLUMNS = "ID, SUBMISSION_ID, STEP_ID, JUDGE_ID, SCORES, TOTAL_SCORE, NOTES, CREATED_AT"

    def create_if_absent(
        self,
        submission_id: str,
        step_id: str,
        judge_id: str,
        scores: Mapping[str, float],
        total_score: float,
        notes: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Insert a judge's score unless one already exists for the triple.

        The existence check and the insert are one statement, so two
        concurrent submissions by the same judge cannot both be stored.

        Args:
            submission_id: Scored submission
            step_id: Evaluation step
            judge_id: Scoring judge
            scores: Criterion id -> value
            total_score: Weighted mean of the criterion values
            notes: Optional judge notes

        Returns:
            Created score dict, or None if the judge had already scored
        """
        score_id = str(uuid4())

        sql, params = self.build_insert_unless_exists(
            self.TABLE_NAME,
            {
                "id": score_id,
                "submission_id": submission_id,
                "step_id": step_id,
                "judge_id": judge_id,
                "scores": json.dumps({str(k): float(v) for k, v in scores.items()}),
                "total_score": float(total_score),
                "notes": notes,
                "created_at": self.format_timestamp(self.now_utc()),
            },
            match_columns=("submission_id", "step_id", "judge_id"),
        )

        inserted = self.execute_query(sql, params, commit=True)
        if not inserted:
            return None

        return self.get_by_id(score_id)

    def get_by_id(self, score_id: str) -> Optional[Dict[str, Any]]:
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE ID = ?"
        row = self.execute_query(sql, (score_id,), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_for_judge(self, submission_id: str, step_id: str, judge_id: str) -> Optional[Dict[str, Any]]:
        """The judge's score for a submission at a step, or None."""
        sql = f"""
            SELECT {self._COLUMNS} FROM {self.TABLE_NAME}
            WHERE SUBMISSION_ID = ? AND STEP_ID = ? AND JUDGE_ID = ?
        """
        row = self.execute_query(sql, (submission_id, step_id, judge_id), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def list_by_step(
        self,
        step_id: str,
        submission_ids: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Scores at a step, oldest first.

        Args:
            step_id: Evaluation step
            submission_ids: Restrict to these submissions (empty list -> no rows)
        """
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE STEP_ID = ?"
        params: List[Any] = [step_id]

        if submission_ids is not None:
            if not submission_ids:
                return []
            sql += f" AND SUBMISSION_ID IN ({self.placeholders(len(submission_ids))})"
            params.extend(submission_ids)

        sql += " ORDER BY CREATED_AT, ID"

        rows = self.execute_query(sql, params, fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def list_by_submission(self, submission_id: str) -> List[Dict[str, Any]]:
        sql = f"""
            SELECT {self._COLUMNS} FROM {self.TABLE_NAME}
            WHERE SUBMISSION_ID = ?
            ORDER BY CREATED_AT, ID
        """
        rows = self.execute_query(sql, (submission_id,), fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        scores = row["SCORES"]
        if isinstance(scores, str):
            scores = json.loads(scores)
        return {
            "id": row["ID"],
            "submission_id": row["SUBMISSION_ID"],
            "step_id": row["STEP_ID"],
            "judge_id": row["JUDGE_ID"],
            "scores": {k: float(v) for k, v in (scores or {}).items()},
            "total_score": float(row["TOTAL_SCORE"]),
            "notes": row["NOTES"],
            "created_at": self.normalize_timestamp(row["CREATED_AT"]),
        }
