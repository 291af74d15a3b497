"""
Evaluation Router - Starboard Evaluation API
starboard/routers/evaluation.py

Evaluation steps, judge scores, scoreboard, cutoff/settings and the step
workflow of one application.

/api/v1/applications/{application_id}/evaluation
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from starboard.config import get_settings
from starboard.core.context import WorkspaceContext
from starboard.core.dependencies import (
    get_applicant_context,
    get_evaluation_service,
    get_workspace_context,
)
from starboard.models.common import ApiResponse, ErrorResponse
from starboard.models.evaluation import (
    AdmitRequest,
    AdmitResponse,
    AdvanceRequest,
    AdvanceResponse,
    CutoffResponse,
    CutoffUpdateRequest,
    MyScoreResponse,
    PinnedFieldsRequest,
    ScoreboardResponse,
    ScoreResponse,
    ScoreSubmitRequest,
    SettingsUpdateRequest,
    StepListResponse,
    StepResponse,
    StepSetupRequest,
)
from starboard.models.interview import SubmissionStatusResponse
from starboard.services.evaluation_service import EvaluationService

router = APIRouter(
    prefix=f"{get_settings().API_V1_PREFIX}/applications/{{application_id}}/evaluation",
    tags=["Evaluation"],
)


def error_example(description: str, code: str, message: str) -> dict:
    return {
        "model": ErrorResponse,
        "description": description,
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "error": {
                        "message": message,
                        "code": code,
                        "timestamp": "2026-01-28T12:00:00Z",
                    },
                }
            }
        },
    }


UNAUTHORIZED = error_example("Missing caller identity", "UNAUTHORIZED", "Unauthorized")
FORBIDDEN = error_example(
    "Caller lacks membership or permission",
    "FORBIDDEN",
    "Insufficient permissions. Requires evaluation.manage permission.",
)
NOT_FOUND = error_example("Entity not found", "NOT_FOUND", "Evaluation step with ID 1234 not found")
INVALID = error_example("Invalid request", "VALIDATION_ERROR", "At least one submission ID is required")


#  Steps

@router.post(
    "/steps/setup",
    response_model=ApiResponse[StepListResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Create evaluation steps",
    description="Creates the initial review (step 1, active) and interview round (step 2, inactive) "
                "with their weighted criteria. Fails if steps already exist.",
)
def setup_steps(
    payload: StepSetupRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.create_steps(ctx, payload))


@router.get(
    "/steps",
    response_model=ApiResponse[StepListResponse],
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="List evaluation steps",
    description="Steps ordered by number with ordered criteria and score / slot counts.",
)
def list_steps(
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.list_steps(ctx))


@router.patch(
    "/steps/{step_id}/pinned-fields",
    response_model=ApiResponse[StepResponse],
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Update pinned form fields",
)
def update_pinned_fields(
    step_id: str,
    payload: PinnedFieldsRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.update_pinned_fields(ctx, step_id, payload.pinned_fields))


#  Scores

@router.post(
    "/steps/{step_id}/score",
    response_model=ApiResponse[ScoreResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: error_example("Missing or out-of-range score", "MISSING_SCORE", "Missing score for criterion: Team"),
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
        409: error_example("Duplicate score", "ALREADY_SCORED", "Judge has already scored this submission"),
    },
    summary="Submit a judge score",
    description="Records the caller's scores for one submission at one step. "
                "Each judge scores a submission once per step; scores are immutable.",
)
def submit_score(
    step_id: str,
    payload: ScoreSubmitRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    score = service.submit_score(
        ctx,
        step_id,
        submission_id=payload.submission_id,
        criteria_scores=payload.criteria_scores,
        notes=payload.notes,
    )
    return ApiResponse(data=score)


@router.get(
    "/steps/{step_id}/my-score",
    response_model=ApiResponse[MyScoreResponse],
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Get the caller's score",
)
def get_my_score(
    step_id: str,
    submission_id: str = Query(..., alias="submissionId", min_length=1),
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.get_my_score(ctx, step_id, submission_id))


@router.get(
    "/steps/{step_id}/scoreboard",
    response_model=ApiResponse[ScoreboardResponse],
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Step scoreboard",
    description="Aggregate score, evaluator coverage and pass/fail status of every submission "
                "that reached the step, best average first.",
)
def get_scoreboard(
    step_id: str,
    submission_id: Optional[str] = Query(default=None, alias="submissionId"),
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.get_step_scoreboard(ctx, step_id, submission_id=submission_id))


#  Cutoff and settings

@router.get(
    "/cutoff",
    response_model=ApiResponse[CutoffResponse],
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Get cutoff scores and evaluation settings",
)
def get_cutoff(
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.get_cutoff(ctx))


@router.patch(
    "/cutoff",
    response_model=ApiResponse[CutoffResponse],
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Update cutoff scores",
    description="Each cutoff must lie within the application's scoring range.",
)
def update_cutoff(
    payload: CutoffUpdateRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.update_cutoff(ctx, step1=payload.step1, step2=payload.step2))


@router.patch(
    "/settings",
    response_model=ApiResponse[CutoffResponse],
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Update evaluation settings",
    description="Scoring range and the percentage of judges required for a final status.",
)
def update_settings(
    payload: SettingsUpdateRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(
        data=service.update_settings(
            ctx,
            min_score=payload.min_score,
            max_score=payload.max_score,
            required_evaluator_percentage=payload.required_evaluator_percentage,
        )
    )


#  Workflow

@router.post(
    "/steps/{step_id}/advance",
    response_model=ApiResponse[AdvanceResponse],
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Advance submissions to the interview round",
    description="Admin override by default. Set enforceGating to reject the request "
                "unless every submission passed step 1.",
)
def advance_submissions(
    step_id: str,
    payload: AdvanceRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    result = service.advance_to_step2(
        ctx,
        step_id,
        payload.submission_ids,
        enforce_gating=payload.enforce_gating,
    )
    return ApiResponse(data=result)


@router.post(
    "/admit",
    response_model=ApiResponse[AdmitResponse],
    responses={400: INVALID, 401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Admit submissions",
)
def admit_submissions(
    payload: AdmitRequest,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.manually_admit(ctx, payload.submission_ids))


@router.get(
    "/submissions/{submission_id}/status",
    response_model=ApiResponse[SubmissionStatusResponse],
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Submission evaluation status",
    description="Visible to the applicant and to members allowed to view scores.",
)
def get_submission_status(
    submission_id: str,
    ctx: WorkspaceContext = Depends(get_applicant_context),
    service: EvaluationService = Depends(get_evaluation_service),
):
    return ApiResponse(data=service.get_submission_evaluation_status(ctx, submission_id))
