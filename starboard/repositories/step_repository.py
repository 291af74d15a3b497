"""
Evaluation Step Repository - Starboard Evaluation API
starboard/repositories/step_repository.py

Data access layer for evaluation steps and their ordered criteria.
"""

import json
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from starboard.core.exceptions import DuplicateEntityException
from starboard.models.enumerations import StepType
from starboard.repositories.base import BaseRepository


class StepRepository(BaseRepository):
    """Repository for EvaluationStep and Criterion operations."""

    TABLE_NAME = "EVALUATION_STEPS"
    CRITERIA_TABLE = "EVALUATION_CRITERIA"

    _COLUMNS = """
        S.ID, S.APPLICATION_ID, S.STEP_NUMBER, S.NAME, S.TYPE, S.IS_ACTIVE,
        S.PINNED_FIELDS, S.CREATED_AT
    """

    def create_steps(self, application_id: str, steps: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Create all steps of an application with their criteria in one transaction.

        Each step is inserted only if the application has no step with the
        same number yet; if any insert is skipped the whole setup is rolled
        back.

        Args:
            application_id: Application ID
            steps: Step configs with step_number, name, type, is_active and
                   criteria (list of {name, weight})

        Returns:
            Created steps with criteria, ordered by step number

        Raises:
            DuplicateEntityException: If steps already exist
        """
        created_at = self.format_timestamp(self.now_utc())

        criterion_sql = f"""
            INSERT INTO {self.CRITERIA_TABLE} (ID, STEP_ID, NAME, WEIGHT, SORT_ORDER)
            VALUES (?, ?, ?, ?, ?)
        """

        with self.transaction() as cursor:
            for step in steps:
                step_id = str(uuid4())
                step_type = StepType(step["type"])
                step_sql, step_params = self.build_insert_unless_exists(
                    self.TABLE_NAME,
                    {
                        "id": step_id,
                        "application_id": application_id,
                        "step_number": step["step_number"],
                        "name": step["name"],
                        "type": step_type.value,
                        "is_active": bool(step.get("is_active", False)),
                        "pinned_fields": json.dumps(list(step.get("pinned_fields") or [])),
                        "created_at": created_at,
                    },
                    match_columns=("application_id", "step_number"),
                )
                cursor.execute(step_sql, step_params)
                if cursor.rowcount == 0:
                    raise DuplicateEntityException("Evaluation steps already exist for this application")

                for order, criterion in enumerate(step["criteria"]):
                    cursor.execute(
                        criterion_sql,
                        (
                            str(uuid4()),
                            step_id,
                            criterion["name"],
                            float(criterion.get("weight") or 1.0),
                            order,
                        ),
                    )

        return self.list_by_application(application_id)

    def has_steps(self, application_id: str) -> bool:
        sql = f"SELECT COUNT(*) AS STEP_COUNT FROM {self.TABLE_NAME} WHERE APPLICATION_ID = ?"
        row = self.execute_query(sql, (application_id,), fetch_one=True)
        return bool(row and row["STEP_COUNT"])

    def list_by_application(self, application_id: str) -> List[Dict[str, Any]]:
        """
        List steps ordered by step number, with criteria and score/slot counts.
        """
        sql = f"""
            SELECT {self._COLUMNS},
                   (SELECT COUNT(*) FROM APPLICATION_SCORES SC WHERE SC.STEP_ID = S.ID) AS SCORE_COUNT,
                   (SELECT COUNT(*) FROM INTERVIEW_SLOTS SL WHERE SL.STEP_ID = S.ID) AS SLOT_COUNT
            FROM {self.TABLE_NAME} S
            WHERE S.APPLICATION_ID = ?
            ORDER BY S.STEP_NUMBER
        """
        rows = self.execute_query(sql, (application_id,), fetch_all=True) or []
        if not rows:
            return []

        criteria = self._criteria_for([row["ID"] for row in rows])

        steps = []
        for row in rows:
            step = self._row_to_dict(row, criteria.get(row["ID"], []))
            step["score_count"] = int(row["SCORE_COUNT"])
            step["slot_count"] = int(row["SLOT_COUNT"])
            steps.append(step)
        return steps

    def get_by_id(self, step_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a step with its ordered criteria, or None."""
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} S WHERE S.ID = ?"
        row = self.execute_query(sql, (step_id,), fetch_one=True)

        if not row:
            return None

        criteria = self._criteria_for([row["ID"]])
        return self._row_to_dict(row, criteria.get(row["ID"], []))

    def get_by_number(self, application_id: str, step_number: int) -> Optional[Dict[str, Any]]:
        """Retrieve the step with `step_number` of an application, or None."""
        sql = f"""
            SELECT {self._COLUMNS} FROM {self.TABLE_NAME} S
            WHERE S.APPLICATION_ID = ? AND S.STEP_NUMBER = ?
        """
        row = self.execute_query(sql, (application_id, step_number), fetch_one=True)

        if not row:
            return None

        criteria = self._criteria_for([row["ID"]])
        return self._row_to_dict(row, criteria.get(row["ID"], []))

    def update_pinned_fields(self, step_id: str, pinned_fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        sql, params = self.build_update_query(
            self.TABLE_NAME, {"PINNED_FIELDS": json.dumps(list(pinned_fields))}, "ID", step_id
        )
        self.execute_query(sql, params, commit=True)
        return self.get_by_id(step_id)

    def set_active(self, step_id: str, is_active: bool = True) -> int:
        sql, params = self.build_update_query(self.TABLE_NAME, {"IS_ACTIVE": is_active}, "ID", step_id)
        return self.execute_query(sql, params, commit=True)

    def _criteria_for(self, step_ids: Sequence[str]) -> Dict[str, List[Dict[str, Any]]]:
        sql = f"""
            SELECT ID, STEP_ID, NAME, WEIGHT, SORT_ORDER
            FROM {self.CRITERIA_TABLE}
            WHERE STEP_ID IN ({self.placeholders(len(step_ids))})
            ORDER BY STEP_ID, SORT_ORDER
        """
        rows = self.execute_query(sql, list(step_ids), fetch_all=True) or []

        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for row in rows:
            grouped.setdefault(row["STEP_ID"], []).append(
                {
                    "id": row["ID"],
                    "name": row["NAME"],
                    "weight": float(row["WEIGHT"]),
                    "order": int(row["SORT_ORDER"]),
                }
            )
        return grouped

    def _row_to_dict(self, row: Dict[str, Any], criteria: List[Dict[str, Any]]) -> Dict[str, Any]:
        pinned = row["PINNED_FIELDS"]
        return {
            "id": row["ID"],
            "application_id": row["APPLICATION_ID"],
            "step_number": int(row["STEP_NUMBER"]),
            "name": row["NAME"],
            "type": StepType(row["TYPE"]),
            "is_active": bool(row["IS_ACTIVE"]),
            "pinned_fields": json.loads(pinned) if pinned else [],
            "created_at": self.normalize_timestamp(row["CREATED_AT"]),
            "criteria": criteria,
        }
