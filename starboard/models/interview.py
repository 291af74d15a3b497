from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from starboard.models.common import CamelModel
from starboard.models.enumerations import SubmissionStatus
from starboard.models.evaluation import StepStatusEntry

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SlotInput(CamelModel):
    slot_date: date = Field(..., alias="date", description="Interview date (YYYY-MM-DD)")
    start_time: str = Field(..., pattern=_TIME_PATTERN, description="Start time (HH:MM)")
    end_time: str = Field(..., pattern=_TIME_PATTERN, description="End time (HH:MM)")
    meeting_link: Optional[str] = Field(default=None, max_length=2048)

    @model_validator(mode="after")
    def validate_times(self):
        """Zero-padded HH:MM strings compare in clock order."""
        if self.start_time >= self.end_time:
            raise ValueError("Slot start time must be before end time")
        return self


class SlotCreateRequest(CamelModel):
    slots: List[SlotInput] = Field(..., min_length=1, description="Slots to open for booking")


class BookSlotRequest(CamelModel):
    submission_id: str = Field(..., min_length=1, description="Submission booking the slot")


class SlotResponse(CamelModel):
    id: str
    step_id: str
    slot_date: date = Field(..., alias="date")
    start_time: str
    end_time: str
    meeting_link: Optional[str] = None
    submission_id: Optional[str] = None
    booked_at: Optional[datetime] = None
    is_booked: bool = False

    @classmethod
    def from_row(cls, slot: Dict[str, Any]) -> "SlotResponse":
        return cls(
            id=slot["id"],
            step_id=slot["step_id"],
            slot_date=slot["date"],
            start_time=slot["start_time"],
            end_time=slot["end_time"],
            meeting_link=slot["meeting_link"],
            submission_id=slot["submission_id"],
            booked_at=slot["booked_at"],
            is_booked=slot["submission_id"] is not None,
        )


class SlotListResponse(CamelModel):
    slots: List[SlotResponse] = Field(default_factory=list)


class SubmissionStatusResponse(CamelModel):
    submission_id: str
    current_step: Optional[int] = None
    status: SubmissionStatus
    steps: List[StepStatusEntry] = Field(default_factory=list)
    interview_slot: Optional[SlotResponse] = None
