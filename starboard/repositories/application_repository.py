"""
Application Repository - Starboard Evaluation API
starboard/repositories/application_repository.py

Data access layer for applications and their evaluation configuration
(scoring range, required evaluator coverage, per-step cutoffs).
"""

from typing import Any, Dict, Optional
from uuid import uuid4

from starboard.config import get_settings
from starboard.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository):
    """Repository for Application operations."""

    TABLE_NAME = "APPLICATIONS"

    _COLUMNS = """
        ID, WORKSPACE_ID, TITLE, MIN_SCORE, MAX_SCORE,
        REQUIRED_EVALUATOR_PERCENTAGE, STEP1_CUTOFF, STEP2_CUTOFF, CREATED_AT
    """

    def create(
        self,
        workspace_id: str,
        title: str,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
        required_evaluator_percentage: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Create a new application with default evaluation configuration.

        Args:
            workspace_id: Owning workspace
            title: Application title
            min_score: Lowest allowed criterion score (default from settings)
            max_score: Highest allowed criterion score (default from settings)
            required_evaluator_percentage: Coverage needed for a final status

        Returns:
            Created application dict
        """
        settings = get_settings()
        application_id = str(uuid4())

        sql = """
            INSERT INTO APPLICATIONS (ID, WORKSPACE_ID, TITLE, MIN_SCORE, MAX_SCORE,
                                      REQUIRED_EVALUATOR_PERCENTAGE, STEP1_CUTOFF,
                                      STEP2_CUTOFF, CREATED_AT)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            application_id,
            workspace_id,
            title,
            min_score if min_score is not None else settings.DEFAULT_MIN_SCORE,
            max_score if max_score is not None else settings.DEFAULT_MAX_SCORE,
            (
                required_evaluator_percentage
                if required_evaluator_percentage is not None
                else settings.DEFAULT_REQUIRED_EVALUATOR_PERCENTAGE
            ),
            0.0,
            0.0,
            self.format_timestamp(self.now_utc()),
        )

        self.execute_query(sql, params, commit=True)

        return self.get_by_id(application_id)

    def get_by_id(self, application_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve an application by ID, or None."""
        sql = f"SELECT {self._COLUMNS} FROM APPLICATIONS WHERE ID = ?"
        row = self.execute_query(sql, (application_id,), fetch_one=True)

        if not row:
            return None

        return self._row_to_dict(row)

    def update_cutoffs(
        self,
        application_id: str,
        step1: Optional[float] = None,
        step2: Optional[float] = None,
    ) -> Optional[Dict[str, Any]]:
        """Update the cutoff of step 1 and/or step 2."""
        update_data = {}
        if step1 is not None:
            update_data["STEP1_CUTOFF"] = step1
        if step2 is not None:
            update_data["STEP2_CUTOFF"] = step2

        if update_data:
            sql, params = self.build_update_query(self.TABLE_NAME, update_data, "ID", application_id)
            self.execute_query(sql, params, commit=True)

        return self.get_by_id(application_id)

    def update_settings(
        self,
        application_id: str,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
        required_evaluator_percentage: Optional[float] = None,
    ) -> Optional[Dict[str, Any]]:
        """Update the scoring range and coverage requirement."""
        update_data = {}
        if min_score is not None:
            update_data["MIN_SCORE"] = min_score
        if max_score is not None:
            update_data["MAX_SCORE"] = max_score
        if required_evaluator_percentage is not None:
            update_data["REQUIRED_EVALUATOR_PERCENTAGE"] = required_evaluator_percentage

        if update_data:
            sql, params = self.build_update_query(self.TABLE_NAME, update_data, "ID", application_id)
            self.execute_query(sql, params, commit=True)

        return self.get_by_id(application_id)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": row["ID"],
            "workspace_id": row["WORKSPACE_ID"],
            "title": row["TITLE"],
            "min_score": float(row["MIN_SCORE"]),
            "max_score": float(row["MAX_SCORE"]),
            "required_evaluator_percentage": float(row["REQUIRED_EVALUATOR_PERCENTAGE"]),
            "step1_cutoff": float(row["STEP1_CUTOFF"]),
            "step2_cutoff": float(row["STEP2_CUTOFF"]),
            "created_at": self.normalize_timestamp(row["CREATED_AT"]),
        }
