"""
Interview Service - Starboard Evaluation API
starboard/services/interview_service.py

Interview slots of the interview-round step: generation by program
managers, listing, and first-booker-wins booking by applicants.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Union

from starboard.core.context import WorkspaceContext
from starboard.core.exceptions import (
    AlreadyBookedException,
    EntityNotFoundException,
    ForbiddenException,
    ValidationException,
)
from starboard.models.enumerations import Permission, StepType
from starboard.models.interview import SlotInput, SlotListResponse, SlotResponse
from starboard.repositories.slot_repository import SlotRepository
from starboard.services.cache import invalidate, steps_key
from starboard.services.evaluation_service import EvaluationService
from starboard.services.notifications import Notifier

logger = logging.getLogger(__name__)


class InterviewService:
    """Interview slot scheduling for one application at a time."""

    def __init__(
        self,
        evaluation: Optional[EvaluationService] = None,
        slots: Optional[SlotRepository] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.evaluation = evaluation or EvaluationService()
        self.slots = slots or SlotRepository()
        self.notifier = notifier or self.evaluation.notifier

    def _interview_step(self, ctx: WorkspaceContext, step_id: str) -> Dict[str, Any]:
        step = self.evaluation.get_step(ctx, step_id)
        if step["type"] != StepType.INTERVIEW:
            raise ValidationException("Interview slots can only be attached to an interview step")
        return step

    def generate_interview_slots(
        self,
        ctx: WorkspaceContext,
        step_id: str,
        slots: Sequence[Union[SlotInput, Dict[str, Any]]],
    ) -> SlotListResponse:
        """
        Open bookable slots on the interview step.

        Args:
            ctx: Caller context (requires evaluation.manage)
            step_id: Interview step
            slots: SlotInput models or dicts with date, startTime, endTime
                   and optional meetingLink

        Returns:
            The created slots
        """
        ctx.require(Permission.EVALUATION_MANAGE)
        self._interview_step(ctx, step_id)

        if not slots:
            raise ValidationException("At least one slot is required")

        rows = []
        for slot in slots:
            if not isinstance(slot, SlotInput):
                slot = SlotInput.model_validate(slot)
            rows.append(
                {
                    "date": slot.slot_date,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "meeting_link": slot.meeting_link,
                }
            )

        created = self.slots.create_many(step_id, rows)

        invalidate(steps_key(ctx.application_id))
        logger.info("slots_created: step=%s count=%d by=%s", step_id, len(created), ctx.user_id)

        return SlotListResponse(slots=[SlotResponse.from_row(slot) for slot in created])

    def list_slots(self, ctx: WorkspaceContext, step_id: str, available_only: bool = False) -> SlotListResponse:
        """
        Slots of the interview step ordered by date and start time.

        Workspace members see every slot. Applicants of the application who
        are not members only see the free ones.
        """
        if not ctx.is_member:
            if not self.evaluation.submissions.has_applicant(ctx.application_id, ctx.user_id):
                raise ForbiddenException("Not a member of this workspace")
            available_only = True

        self._interview_step(ctx, step_id)

        rows = self.slots.list_by_step(step_id, available_only=available_only)
        return SlotListResponse(slots=[SlotResponse.from_row(slot) for slot in rows])

    def book_interview_slot(self, ctx: WorkspaceContext, slot_id: str, submission_id: str) -> SlotResponse:
        """
        Book a slot for a submission; the first booker wins.

        The claim is one conditional update. When it matches nothing the
        slot is re-read to report why.

        Raises:
            EntityNotFoundException: Unknown slot or submission
            AlreadyBookedException: Slot taken, or submission already booked
        """
        submission = self.evaluation.get_submission(ctx, submission_id)
        ctx.require_self_or(submission["applicant_user_id"], Permission.EVALUATION_MANAGE)

        slot = self.slots.get_by_id(slot_id)
        if not slot:
            raise EntityNotFoundException("Interview slot", slot_id)
        try:
            self.evaluation.get_step(ctx, slot["step_id"])
        except EntityNotFoundException:
            raise EntityNotFoundException("Interview slot", slot_id)

        if not self.slots.claim(slot_id, submission_id):
            current = self.slots.get_by_id(slot_id)
            if current is None:
                raise EntityNotFoundException("Interview slot", slot_id)
            if current["submission_id"] is not None and current["submission_id"] != submission_id:
                raise AlreadyBookedException()
            raise AlreadyBookedException("Submission already has a booked slot")

        booked = self.slots.get_by_id(slot_id)
        application = self.evaluation.get_application(ctx)
        self.notifier.slot_booked(application, submission, booked)

        logger.info("slot_booked: slot=%s submission=%s by=%s", slot_id, submission_id, ctx.user_id)

        return SlotResponse.from_row(booked)
