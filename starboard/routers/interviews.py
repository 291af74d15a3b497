"""
Interview Slots Router - Starboard Evaluation API
starboard/routers/interviews.py

Slot generation, listing and booking for the interview-round step.

/api/v1/applications/{application_id}/evaluation
"""

from fastapi import APIRouter, Depends, Query, status

from starboard.config import get_settings
from starboard.core.context import WorkspaceContext
from starboard.core.dependencies import (
    get_applicant_context,
    get_interview_service,
    get_workspace_context,
)
from starboard.models.common import ApiResponse
from starboard.models.interview import (
    BookSlotRequest,
    SlotCreateRequest,
    SlotListResponse,
    SlotResponse,
)
from starboard.routers.evaluation import FORBIDDEN, INVALID, NOT_FOUND, UNAUTHORIZED, error_example
from starboard.services.interview_service import InterviewService

router = APIRouter(
    prefix=f"{get_settings().API_V1_PREFIX}/applications/{{application_id}}/evaluation",
    tags=["Interview Slots"],
)


@router.post(
    "/steps/{step_id}/slots",
    response_model=ApiResponse[SlotListResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Create interview slots",
)
def create_slots(
    step_id: str,
    payload: SlotCreateRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: InterviewService = Depends(get_interview_service),
):
    return ApiResponse(data=service.generate_interview_slots(ctx, step_id, payload.slots))


@router.get(
    "/steps/{step_id}/slots",
    response_model=ApiResponse[SlotListResponse],
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="List interview slots",
    description="Members see all slots; applicants only see free ones.",
)
def list_slots(
    step_id: str,
    available_only: bool = Query(default=False, alias="availableOnly"),
    ctx: WorkspaceContext = Depends(get_applicant_context),
    service: InterviewService = Depends(get_interview_service),
):
    return ApiResponse(data=service.list_slots(ctx, step_id, available_only=available_only))


@router.post(
    "/slots/{slot_id}/book",
    response_model=ApiResponse[SlotResponse],
    responses={
        400: INVALID,
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        409: error_example("Slot or submission already booked", "ALREADY_BOOKED", "This slot is already booked"),
    },
    summary="Book an interview slot",
    description="The first booking wins; a submission holds at most one slot.",
)
def book_slot(
    slot_id: str,
    payload: BookSlotRequest,
    ctx: WorkspaceContext = Depends(get_applicant_context),
    service: InterviewService = Depends(get_interview_service),
):
    return ApiResponse(data=service.book_interview_slot(ctx, slot_id, payload.submission_id))
