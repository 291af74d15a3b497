"""
Dependencies - Starboard Evaluation API
starboard/core/dependencies.py

FastAPI dependency injection for repositories, services and the caller's
workspace context.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from starboard.core.context import WorkspaceContext
from starboard.core.exceptions import (
    EntityNotFoundException,
    ForbiddenException,
    UnauthorizedException,
)
from starboard.repositories.application_repository import ApplicationRepository
from starboard.repositories.member_repository import MemberRepository
from starboard.repositories.score_repository import ScoreRepository
from starboard.repositories.slot_repository import SlotRepository
from starboard.repositories.step_repository import StepRepository
from starboard.repositories.submission_repository import SubmissionRepository
from starboard.services.evaluation_service import EvaluationService
from starboard.services.interview_service import InterviewService
from starboard.services.notifications import LoggingNotifier, Notifier


@lru_cache()
def get_application_repository() -> ApplicationRepository:
    """Get cached ApplicationRepository instance."""
    return ApplicationRepository()


@lru_cache()
def get_member_repository() -> MemberRepository:
    """Get cached MemberRepository instance."""
    return MemberRepository()


@lru_cache()
def get_submission_repository() -> SubmissionRepository:
    """Get cached SubmissionRepository instance."""
    return SubmissionRepository()


@lru_cache()
def get_step_repository() -> StepRepository:
    """Get cached StepRepository instance."""
    return StepRepository()


@lru_cache()
def get_score_repository() -> ScoreRepository:
    """Get cached ScoreRepository instance."""
    return ScoreRepository()


@lru_cache()
def get_slot_repository() -> SlotRepository:
    """Get cached SlotRepository instance."""
    return SlotRepository()


@lru_cache()
def get_notifier() -> Notifier:
    return LoggingNotifier()


def get_evaluation_service(notifier: Notifier = Depends(get_notifier)) -> EvaluationService:
    return EvaluationService(
        applications=get_application_repository(),
        members=get_member_repository(),
        submissions=get_submission_repository(),
        steps=get_step_repository(),
        scores=get_score_repository(),
        slots=get_slot_repository(),
        notifier=notifier,
    )


def get_interview_service(
    evaluation: EvaluationService = Depends(get_evaluation_service),
) -> InterviewService:
    return InterviewService(evaluation=evaluation, slots=get_slot_repository())


# ---------------------------------------------------------------------------
# Caller identity and workspace context
# ---------------------------------------------------------------------------

def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    """Authenticated user id forwarded by the session layer."""
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedException()
    return x_user_id.strip()


def resolve_context(application_id: str, user_id: str, require_member: bool = True) -> WorkspaceContext:
    """
    Build the caller's context for an application.

    Args:
        application_id: Application addressed by the request
        user_id: Authenticated caller
        require_member: Reject callers outside the application's workspace

    Raises:
        EntityNotFoundException: Unknown application
        ForbiddenException: Caller is not a member and membership is required
    """
    application = get_application_repository().get_by_id(application_id)
    if not application:
        raise EntityNotFoundException("Application", application_id)

    member = get_member_repository().get_member(application["workspace_id"], user_id)
    if member is None:
        if require_member:
            raise ForbiddenException("Not a member of this workspace")
        return WorkspaceContext(
            user_id=user_id,
            workspace_id=application["workspace_id"],
            application_id=application_id,
            is_member=False,
        )

    return WorkspaceContext(
        user_id=user_id,
        workspace_id=application["workspace_id"],
        application_id=application_id,
        capabilities=member["capabilities"],
    )


def get_workspace_context(
    application_id: str,
    user_id: str = Depends(get_current_user_id),
) -> WorkspaceContext:
    """Context for endpoints restricted to workspace members."""
    return resolve_context(application_id, user_id)


def get_applicant_context(
    application_id: str,
    user_id: str = Depends(get_current_user_id),
) -> WorkspaceContext:
    """Context for endpoints an applicant may call without being a member."""
    return resolve_context(application_id, user_id, require_member=False)
