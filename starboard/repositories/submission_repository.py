"""
Submission Repository - Starboard Evaluation API
starboard/repositories/submission_repository.py

Data access layer for application submissions and the bulk step workflow
(advance to the interview round, manual admission).
"""

from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from starboard.models.enumerations import SubmissionStatus
from starboard.repositories.base import BaseRepository


class SubmissionRepository(BaseRepository):
    """Repository for Submission operations."""

    TABLE_NAME = "APPLICATION_SUBMISSIONS"

    _COLUMNS = """
        ID, APPLICATION_ID, APPLICANT_USER_ID, APPLICANT_FIRST_NAME,
        APPLICANT_LAST_NAME, APPLICANT_EMAIL, COMPANY_NAME, CURRENT_STEP,
        STATUS, SUBMITTED_AT
    """

    def create(
        self,
        application_id: str,
        first_name: str,
        last_name: str,
        email: str,
        company_name: Optional[str] = None,
        applicant_user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a submission at step 1 with status `submitted`.

        Args:
            application_id: Application the submission belongs to
            first_name: Applicant first name
            last_name: Applicant last name
            email: Applicant email
            company_name: Startup name
            applicant_user_id: User account of the applicant, if any

        Returns:
            Created submission dict
        """
        submission_id = str(uuid4())

        sql = f"""
            INSERT INTO {self.TABLE_NAME} (ID, APPLICATION_ID, APPLICANT_USER_ID,
                                           APPLICANT_FIRST_NAME, APPLICANT_LAST_NAME,
                                           APPLICANT_EMAIL, COMPANY_NAME, CURRENT_STEP,
                                           STATUS, SUBMITTED_AT)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            submission_id,
            application_id,
            applicant_user_id,
            first_name,
            last_name,
            email,
            company_name,
            1,
            SubmissionStatus.SUBMITTED.value,
            self.format_timestamp(self.now_utc()),
        )

        self.execute_query(sql, params, commit=True)

        return self.get_by_id(submission_id)

    def get_by_id(self, submission_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a submission by ID, or None."""
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE ID = ?"
        row = self.execute_query(sql, (submission_id,), fetch_one=True)

        if not row:
            return None

        return self._row_to_dict(row)

    def list_by_application(
        self,
        application_id: str,
        min_step: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        List submissions of an application, oldest first.

        Args:
            application_id: Application ID
            min_step: Only submissions whose current step is >= this value

        Returns:
            List of submission dicts
        """
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE APPLICATION_ID = ?"
        params: List[Any] = [application_id]

        if min_step is not None:
            sql += " AND CURRENT_STEP >= ?"
            params.append(min_step)

        sql += " ORDER BY SUBMITTED_AT, ID"

        rows = self.execute_query(sql, params, fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def list_by_ids(self, application_id: str, submission_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Submissions among `submission_ids` that belong to the application."""
        if not submission_ids:
            return []

        sql = f"""
            SELECT {self._COLUMNS} FROM {self.TABLE_NAME}
            WHERE APPLICATION_ID = ? AND ID IN ({self.placeholders(len(submission_ids))})
        """
        rows = self.execute_query(sql, [application_id, *submission_ids], fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def has_applicant(self, application_id: str, user_id: str) -> bool:
        """True if `user_id` owns a submission of the application."""
        sql = f"""
            SELECT COUNT(*) AS SUBMISSION_COUNT FROM {self.TABLE_NAME}
            WHERE APPLICATION_ID = ? AND APPLICANT_USER_ID = ?
        """
        row = self.execute_query(sql, (application_id, user_id), fetch_one=True)
        return bool(row and row["SUBMISSION_COUNT"])

    def advance(self, application_id: str, submission_ids: Sequence[str], step_number: int) -> int:
        """
        Move `submitted` submissions of the application to `step_number`.

        Already-advanced rows are rewritten to the same value, so repeated
        calls leave the same state and return the same count.

        Returns:
            Number of matched submissions
        """
        if not submission_ids:
            return 0

        sql = f"""
            UPDATE {self.TABLE_NAME}
            SET CURRENT_STEP = ?
            WHERE APPLICATION_ID = ?
              AND STATUS = ?
              AND ID IN ({self.placeholders(len(submission_ids))})
        """
        params = [step_number, application_id, SubmissionStatus.SUBMITTED.value, *submission_ids]
        return self.execute_query(sql, params, commit=True)

    def admit(self, application_id: str, submission_ids: Sequence[str]) -> int:
        """
        Mark submissions of the application as accepted and leave the pipeline.

        Returns:
            Number of matched submissions
        """
        if not submission_ids:
            return 0

        sql = f"""
            UPDATE {self.TABLE_NAME}
            SET STATUS = ?, CURRENT_STEP = NULL
            WHERE APPLICATION_ID = ?
              AND ID IN ({self.placeholders(len(submission_ids))})
        """
        params = [SubmissionStatus.ACCEPTED.value, application_id, *submission_ids]
        return self.execute_query(sql, params, commit=True)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        current_step = row["CURRENT_STEP"]
        return {
            "id": row["ID"],
            "application_id": row["APPLICATION_ID"],
            "applicant_user_id": row["APPLICANT_USER_ID"],
            "first_name": row["APPLICANT_FIRST_NAME"],
            "last_name": row["APPLICANT_LAST_NAME"],
            "email": row["APPLICANT_EMAIL"],
            "company_name": row["COMPANY_NAME"],
            "current_step": int(current_step) if current_step is not None else None,
            "status": SubmissionStatus(row["STATUS"]),
            "submitted_at": self.normalize_timestamp(row["SUBMITTED_AT"]),
        }
