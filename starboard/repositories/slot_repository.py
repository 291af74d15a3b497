"""
Interview Slot Repository - Starboard Evaluation API
starboard/repositories/slot_repository.py

Data access layer for interview slots. Booking is a single conditional
update: a slot is claimed only while it is free and the submission holds no
other slot.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from starboard.repositories.base import BaseRepository


class SlotRepository(BaseRepository):
    """Repository for InterviewSlot operations."""

    TABLE_NAME = "INTERVIEW_SLOTS"

    _COLUMNS = """
        ID, STEP_ID, SLOT_DATE, START_TIME, END_TIME, MEETING_LINK,
        SUBMISSION_ID, BOOKED_AT, CREATED_AT
    """

    def create_many(self, step_id: str, slots: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Create interview slots for a step in one transaction.

        Args:
            step_id: Interview step
            slots: Dicts with date, start_time, end_time and optional meeting_link

        Returns:
            Created slots in input order
        """
        created_at = self.format_timestamp(self.now_utc())
        sql = f"""
            INSERT INTO {self.TABLE_NAME} (ID, STEP_ID, SLOT_DATE, START_TIME, END_TIME,
                                           MEETING_LINK, CREATED_AT)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """

        slot_ids = []
        with self.transaction() as cursor:
            for slot in slots:
                slot_id = str(uuid4())
                slot_date: date = slot["date"]
                cursor.execute(
                    sql,
                    (
                        slot_id,
                        step_id,
                        slot_date.isoformat(),
                        slot["start_time"],
                        slot["end_time"],
                        slot.get("meeting_link"),
                        created_at,
                    ),
                )
                slot_ids.append(slot_id)

        return [self.get_by_id(slot_id) for slot_id in slot_ids]

    def get_by_id(self, slot_id: str) -> Optional[Dict[str, Any]]:
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE ID = ?"
        row = self.execute_query(sql, (slot_id,), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_by_submission(self, submission_id: str) -> Optional[Dict[str, Any]]:
        """The slot booked by a submission, or None."""
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE SUBMISSION_ID = ?"
        row = self.execute_query(sql, (submission_id,), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def list_by_step(self, step_id: str, available_only: bool = False) -> List[Dict[str, Any]]:
        """Slots of a step ordered by date and start time."""
        sql = f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE STEP_ID = ?"
        if available_only:
            sql += " AND SUBMISSION_ID IS NULL"
        sql += " ORDER BY SLOT_DATE, START_TIME, ID"

        rows = self.execute_query(sql, (step_id,), fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def claim(self, slot_id: str, submission_id: str) -> bool:
        """
        Book a free slot for a submission that holds no slot yet.

        Returns:
            True if this call booked the slot, False otherwise
        """
        sql = f"""
            UPDATE {self.TABLE_NAME}
            SET SUBMISSION_ID = ?, BOOKED_AT = ?
            WHERE ID = ?
              AND SUBMISSION_ID IS NULL
              AND NOT EXISTS (
                  SELECT 1 FROM {self.TABLE_NAME} WHERE SUBMISSION_ID = ?
              )
        """
        params = (
            submission_id,
            self.format_timestamp(self.now_utc()),
            slot_id,
            submission_id,
        )
        return self.execute_query(sql, params, commit=True) == 1

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": row["ID"],
            "step_id": row["STEP_ID"],
            "date": self.normalize_date(row["SLOT_DATE"]),
            "start_time": row["START_TIME"],
            "end_time": row["END_TIME"],
            "meeting_link": row["MEETING_LINK"],
            "submission_id": row["SUBMISSION_ID"],
            "booked_at": self.normalize_timestamp(row["BOOKED_AT"]),
            "created_at": self.normalize_timestamp(row["CREATED_AT"]),
        }
