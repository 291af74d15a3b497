"""
Evaluation Service - Starboard Evaluation API
starboard/services/evaluation_service.py

Orchestrates the two-step evaluation of an application's submissions:

  1. Step setup (initial review + interview round, weighted criteria)
  2. Judge score submission (one immutable score per judge per step)
  3. Aggregation + gating per submission -> scoreboard and status
  4. Cutoff / evaluation settings
  5. Bulk advancement to the interview round and manual admission

Every operation takes the caller's WorkspaceContext and checks the
capability it needs before touching the database.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from starboard.core.context import WorkspaceContext
from starboard.core.exceptions import (
    AlreadyScoredException,
    DuplicateEntityException,
    EntityNotFoundException,
    MissingScoreException,
    ValidationException,
)
from starboard.models.enumerations import Permission, StepType, SubmissionStatus
from starboard.models.evaluation import (
    AdmitResponse,
    AdvanceResponse,
    CriterionResponse,
    CutoffResponse,
    CutoffScores,
    EvaluationSettings,
    JudgeScoreEntry,
    MyScoreResponse,
    ScoreboardEntry,
    ScoreboardResponse,
    ScoreResponse,
    StepListResponse,
    StepResponse,
    StepSetupRequest,
    StepStatusEntry,
)
from starboard.models.interview import SlotResponse, SubmissionStatusResponse
from starboard.repositories.application_repository import ApplicationRepository
from starboard.repositories.member_repository import MemberRepository
from starboard.repositories.score_repository import ScoreRepository
from starboard.repositories.slot_repository import SlotRepository
from starboard.repositories.step_repository import StepRepository
from starboard.repositories.submission_repository import SubmissionRepository
from starboard.scoring import (
    AggregateResult,
    JudgeScore,
    aggregate,
    gate_aggregate,
    validity_message,
    weighted_total,
)
from starboard.scoring.utils import quantize, to_decimal
from starboard.services.cache import cached, cutoff_key, invalidate, steps_key, ttl_cutoff, ttl_steps
from starboard.services.notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

DEFAULT_INTERVIEW_STEP_NAME = "Interview Round"


class EvaluationService:
    """
    Evaluation workflow of one application at a time.

    Reads from / writes to:
      - APPLICATIONS (settings, cutoffs)
      - EVALUATION_STEPS + EVALUATION_CRITERIA
      - APPLICATION_SCORES
      - APPLICATION_SUBMISSIONS (current step, status)
      - INTERVIEW_SLOTS (read only, for submission status)
    """

    def __init__(
        self,
        applications: Optional[ApplicationRepository] = None,
        members: Optional[MemberRepository] = None,
        submissions: Optional[SubmissionRepository] = None,
        steps: Optional[StepRepository] = None,
        scores: Optional[ScoreRepository] = None,
        slots: Optional[SlotRepository] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.applications = applications or ApplicationRepository()
        self.members = members or MemberRepository()
        self.submissions = submissions or SubmissionRepository()
        self.steps = steps or StepRepository()
        self.scores = scores or ScoreRepository()
        self.slots = slots or SlotRepository()
        self.notifier = notifier or LoggingNotifier()

    # ------------------------------------------------------------------
    # Lookups scoped to the caller's application
    # ------------------------------------------------------------------

    def get_application(self, ctx: WorkspaceContext) -> Dict[str, Any]:
        application = self.applications.get_by_id(ctx.application_id)
        if not application:
            raise EntityNotFoundException("Application", ctx.application_id)
        return application

    def get_step(self, ctx: WorkspaceContext, step_id: str) -> Dict[str, Any]:
        step = self.steps.get_by_id(step_id)
        if not step or step["application_id"] != ctx.application_id:
            raise EntityNotFoundException("Evaluation step", step_id)
        return step

    def get_submission(self, ctx: WorkspaceContext, submission_id: str) -> Dict[str, Any]:
        submission = self.submissions.get_by_id(submission_id)
        if not submission or submission["application_id"] != ctx.application_id:
            raise EntityNotFoundException("Submission", submission_id)
        return submission

    def total_judges(self, ctx: WorkspaceContext) -> int:
        """Members of the workspace allowed to score."""
        return self.members.count_with_permission(ctx.workspace_id, Permission.EVALUATION_SCORE)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def create_steps(self, ctx: WorkspaceContext, request: StepSetupRequest) -> StepListResponse:
        """
        Create the initial review and interview steps with their criteria.

        Raises:
            ValidationException: If the application already has steps
        """
        ctx.require(Permission.EVALUATION_MANAGE)
        self.get_application(ctx)

        if self.steps.has_steps(ctx.application_id):
            raise ValidationException("Evaluation steps already exist for this application")

        configs = [
            {
                "step_number": 1,
                "name": request.step1.name,
                "type": StepType.INITIAL_REVIEW,
                "is_active": True,
                "criteria": [c.model_dump() for c in request.step1.criteria],
            },
            {
                "step_number": 2,
                "name": request.step2.name,
                "type": StepType.INTERVIEW,
                "is_active": False,
                "criteria": [c.model_dump() for c in request.step2.criteria],
            },
        ]

        try:
            created = self.steps.create_steps(ctx.application_id, configs)
        except DuplicateEntityException:
            raise ValidationException("Evaluation steps already exist for this application")

        invalidate(steps_key(ctx.application_id))
        logger.info("steps_created: application=%s by=%s", ctx.application_id, ctx.user_id)

        return StepListResponse(steps=[self._step_response(step) for step in created])

    def list_steps(self, ctx: WorkspaceContext) -> StepListResponse:
        ctx.require_member()
        self.get_application(ctx)

        def load() -> StepListResponse:
            rows = self.steps.list_by_application(ctx.application_id)
            return StepListResponse(steps=[self._step_response(step) for step in rows])

        return cached(steps_key(ctx.application_id), StepListResponse, ttl_steps(), load)

    def update_pinned_fields(
        self,
        ctx: WorkspaceContext,
        step_id: str,
        pinned_fields: Sequence[str],
    ) -> StepResponse:
        ctx.require(Permission.EVALUATION_MANAGE)
        self.get_step(ctx, step_id)

        # Keep first occurrence order
        fields = list(dict.fromkeys(f for f in pinned_fields if f))
        updated = self.steps.update_pinned_fields(step_id, fields)

        invalidate(steps_key(ctx.application_id))
        return self._step_response(updated)

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def submit_score(
        self,
        ctx: WorkspaceContext,
        step_id: str,
        submission_id: str,
        criteria_scores: Dict[str, float],
        notes: Optional[str] = None,
    ) -> ScoreResponse:
        """
        Record one judge's scores for a submission at a step.

        A duplicate is reported as AlreadyScored whatever its content. The
        final insert is conditional, so a concurrent duplicate that slips
        past the first check is still rejected.

        Raises:
            EntityNotFoundException: Unknown step, submission or criterion
            AlreadyScoredException: The judge already scored this submission
            MissingScoreException: A criterion has no value
            ValidationException: A value is outside the scoring range
        """
        ctx.require(Permission.EVALUATION_SCORE)
        application = self.get_application(ctx)
        step = self.get_step(ctx, step_id)
        self.get_submission(ctx, submission_id)

        if self.scores.get_for_judge(submission_id, step_id, ctx.user_id):
            raise AlreadyScoredException()

        criteria = step["criteria"]
        known = {criterion["id"] for criterion in criteria}
        for criterion_id in criteria_scores:
            if criterion_id not in known:
                raise EntityNotFoundException("Criterion", criterion_id)

        min_score = application["min_score"]
        max_score = application["max_score"]
        for criterion in criteria:
            value = criteria_scores.get(criterion["id"])
            if value is None:
                raise MissingScoreException(criterion["name"])
            if not (min_score <= value <= max_score):
                raise ValidationException(
                    f"Score for {criterion['name']} must be between {min_score:g} and {max_score:g}"
                )

        total = weighted_total(criteria, criteria_scores)

        created = self.scores.create_if_absent(
            submission_id=submission_id,
            step_id=step_id,
            judge_id=ctx.user_id,
            scores={criterion["id"]: criteria_scores[criterion["id"]] for criterion in criteria},
            total_score=float(total),
            notes=notes,
        )
        if created is None:
            raise AlreadyScoredException()

        invalidate(steps_key(ctx.application_id))
        logger.info(
            "score_submitted: submission=%s step=%s judge=%s total=%s",
            submission_id, step_id, ctx.user_id, quantize(total),
        )

        return self._score_response(created)

    def get_my_score(self, ctx: WorkspaceContext, step_id: str, submission_id: str) -> MyScoreResponse:
        ctx.require(Permission.EVALUATION_SCORE)
        self.get_step(ctx, step_id)
        self.get_submission(ctx, submission_id)

        score = self.scores.get_for_judge(submission_id, step_id, ctx.user_id)
        if not score:
            return MyScoreResponse(score=None, has_scored=False)
        return MyScoreResponse(score=self._score_response(score), has_scored=True)

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    @staticmethod
    def aggregate_scores(scores: Sequence[Dict[str, Any]], total_judges: int) -> AggregateResult:
        return aggregate(
            (JudgeScore(judge_id=s["judge_id"], total_score=to_decimal(s["total_score"])) for s in scores),
            total_judges,
        )

    @staticmethod
    def step_cutoff(application: Dict[str, Any], step_number: int) -> float:
        return application["step1_cutoff"] if step_number == 1 else application["step2_cutoff"]

    def get_step_scoreboard(
        self,
        ctx: WorkspaceContext,
        step_id: str,
        submission_id: Optional[str] = None,
    ) -> ScoreboardResponse:
        """
        Aggregate and gate every submission that reached the step.

        Sorted by average score descending; unscored submissions last.
        """
        ctx.require(Permission.EVALUATION_VIEW_SCORES)
        application = self.get_application(ctx)
        step = self.get_step(ctx, step_id)

        submissions = self.submissions.list_by_application(ctx.application_id, min_step=step["step_number"])
        if submission_id is not None:
            self.get_submission(ctx, submission_id)
            submissions = [s for s in submissions if s["id"] == submission_id]

        total_judges = self.total_judges(ctx)
        cutoff = self.step_cutoff(application, step["step_number"])
        required = application["required_evaluator_percentage"]

        by_submission: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for score in self.scores.list_by_step(step_id, [s["id"] for s in submissions]):
            by_submission[score["submission_id"]].append(score)

        entries = []
        for submission in submissions:
            scores = by_submission.get(submission["id"], [])
            result = self.aggregate_scores(scores, total_judges)
            decision = gate_aggregate(result, cutoff, required)

            entries.append(
                ScoreboardEntry(
                    submission_id=submission["id"],
                    first_name=submission["first_name"],
                    last_name=submission["last_name"],
                    email=submission["email"],
                    company_name=submission["company_name"],
                    current_step=submission["current_step"],
                    status=submission["status"],
                    average_score=quantize(result.average_score),
                    evaluator_count=result.evaluator_count,
                    total_judges=result.total_judges,
                    evaluator_percentage=quantize(result.evaluator_percentage),
                    meets_cutoff=decision.meets_cutoff,
                    meets_evaluator_requirement=decision.meets_evaluator_requirement,
                    passed=decision.passed,
                    gate_status=decision.status,
                    submitted_at=submission["submitted_at"],
                    validity_message=validity_message(result, required),
                    judge_scores=[
                        JudgeScoreEntry(
                            judge_id=s["judge_id"],
                            total_score=s["total_score"],
                            notes=s["notes"],
                            created_at=s["created_at"],
                        )
                        for s in scores
                    ],
                )
            )

        entries.sort(key=lambda e: (e.average_score is None, -(e.average_score or 0)))

        return ScoreboardResponse(
            step_id=step["id"],
            step_number=step["step_number"],
            step_name=step["name"],
            cutoff=cutoff,
            required_evaluator_percentage=required,
            total_judges=total_judges,
            pinned_fields=step["pinned_fields"],
            submissions=entries,
        )

    def get_submission_evaluation_status(self, ctx: WorkspaceContext, submission_id: str) -> SubmissionStatusResponse:
        """
        Current step, status, per-step averages and booked interview slot of
        one submission. Visible to the applicant and to score viewers.
        """
        submission = self.get_submission(ctx, submission_id)
        ctx.require_self_or(submission["applicant_user_id"], Permission.EVALUATION_VIEW_SCORES)

        current_step = submission["current_step"]
        by_step: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for score in self.scores.list_by_submission(submission_id):
            by_step[score["step_id"]].append(score)

        step_statuses = []
        for step in self.steps.list_by_application(ctx.application_id):
            scores = by_step.get(step["id"], [])
            judges = {s["judge_id"] for s in scores}
            result = self.aggregate_scores(scores, len(judges))
            step_statuses.append(
                StepStatusEntry(
                    step_id=step["id"],
                    step_number=step["step_number"],
                    name=step["name"],
                    type=step["type"],
                    is_current_step=step["step_number"] == current_step,
                    average_score=quantize(result.average_score),
                    evaluator_count=result.evaluator_count,
                )
            )

        slot = self.slots.get_by_submission(submission_id)

        return SubmissionStatusResponse(
            submission_id=submission["id"],
            current_step=current_step,
            status=submission["status"],
            steps=step_statuses,
            interview_slot=SlotResponse.from_row(slot) if slot else None,
        )

    # ------------------------------------------------------------------
    # Cutoff and settings
    # ------------------------------------------------------------------

    def get_cutoff(self, ctx: WorkspaceContext) -> CutoffResponse:
        ctx.require_member()

        def load() -> CutoffResponse:
            return self._cutoff_response(self.get_application(ctx))

        return cached(cutoff_key(ctx.application_id), CutoffResponse, ttl_cutoff(), load)

    def update_cutoff(
        self,
        ctx: WorkspaceContext,
        step1: Optional[float] = None,
        step2: Optional[float] = None,
    ) -> CutoffResponse:
        """Cutoffs must lie inside the application's scoring range."""
        ctx.require(Permission.EVALUATION_MANAGE)
        application = self.get_application(ctx)

        if step1 is None and step2 is None:
            raise ValidationException("At least one cutoff score must be provided")

        min_score = application["min_score"]
        max_score = application["max_score"]
        for label, value in (("Step 1", step1), ("Step 2", step2)):
            if value is not None and not (min_score <= value <= max_score):
                raise ValidationException(
                    f"{label} cutoff must be between {min_score:g} and {max_score:g}"
                )

        updated = self.applications.update_cutoffs(ctx.application_id, step1=step1, step2=step2)

        invalidate(cutoff_key(ctx.application_id))
        logger.info("cutoff_updated: application=%s step1=%s step2=%s", ctx.application_id, step1, step2)

        return self._cutoff_response(updated)

    def update_settings(
        self,
        ctx: WorkspaceContext,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
        required_evaluator_percentage: Optional[float] = None,
    ) -> CutoffResponse:
        ctx.require(Permission.EVALUATION_MANAGE)
        application = self.get_application(ctx)

        new_min = min_score if min_score is not None else application["min_score"]
        new_max = max_score if max_score is not None else application["max_score"]
        if new_min >= new_max:
            raise ValidationException("Minimum score must be less than maximum score")
        if required_evaluator_percentage is not None and not (0 <= required_evaluator_percentage <= 100):
            raise ValidationException("Required evaluator percentage must be between 0 and 100")

        # A zero cutoff is unset and may sit below the range.
        for label, current in (("Step 1", application["step1_cutoff"]), ("Step 2", application["step2_cutoff"])):
            if current and not (new_min <= current <= new_max):
                raise ValidationException(
                    f"{label} cutoff {current:g} is outside the scoring range {new_min:g} to {new_max:g}"
                )

        updated = self.applications.update_settings(
            ctx.application_id,
            min_score=min_score,
            max_score=max_score,
            required_evaluator_percentage=required_evaluator_percentage,
        )

        invalidate(cutoff_key(ctx.application_id))
        logger.info("settings_updated: application=%s", ctx.application_id)

        return self._cutoff_response(updated)

    # ------------------------------------------------------------------
    # Step workflow
    # ------------------------------------------------------------------

    @staticmethod
    def _clean_ids(submission_ids: Any) -> List[str]:
        if not isinstance(submission_ids, (list, tuple)):
            raise ValidationException("submissionIds must be an array")
        if not submission_ids:
            raise ValidationException("At least one submission ID is required")
        if not all(isinstance(i, str) and i for i in submission_ids):
            raise ValidationException("submissionIds must contain non-empty strings")
        return list(dict.fromkeys(submission_ids))

    def advance_to_step2(
        self,
        ctx: WorkspaceContext,
        step_id: str,
        submission_ids: Sequence[str],
        enforce_gating: bool = False,
    ) -> AdvanceResponse:
        """
        Move submissions of the application to the interview round.

        By default this is an admin override: step-1 gating is not
        re-checked. With enforce_gating the request is rejected unless every
        submission has passed step 1.

        Returns:
            AdvanceResponse with the number of matched submissions
        """
        ctx.require(Permission.EVALUATION_ADVANCE)
        ids = self._clean_ids(submission_ids)
        application = self.get_application(ctx)
        self.get_step(ctx, step_id)

        before = self.submissions.list_by_ids(ctx.application_id, ids)

        if enforce_gating:
            self._require_step1_passed(ctx, application, before)

        changed = [
            s for s in before
            if s["status"] == SubmissionStatus.SUBMITTED and s["current_step"] != 2
        ]

        count = self.submissions.advance(ctx.application_id, ids, 2)

        step2 = self.steps.get_by_number(ctx.application_id, 2)
        if count and step2 and not step2["is_active"]:
            self.steps.set_active(step2["id"], True)
            invalidate(steps_key(ctx.application_id))

        if changed:
            self.notifier.submissions_advanced(
                application,
                changed,
                step_name=step2["name"] if step2 else DEFAULT_INTERVIEW_STEP_NAME,
            )

        logger.info(
            "submissions_advanced: application=%s matched=%d changed=%d enforce_gating=%s by=%s",
            ctx.application_id, count, len(changed), enforce_gating, ctx.user_id,
        )

        return AdvanceResponse(advanced_count=count)

    def _require_step1_passed(
        self,
        ctx: WorkspaceContext,
        application: Dict[str, Any],
        submissions: Sequence[Dict[str, Any]],
    ) -> None:
        step1 = self.steps.get_by_number(ctx.application_id, 1)
        if not step1:
            raise ValidationException("Evaluation steps are not configured for this application")

        total_judges = self.total_judges(ctx)
        cutoff = application["step1_cutoff"]
        required = application["required_evaluator_percentage"]

        by_submission: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for score in self.scores.list_by_step(step1["id"], [s["id"] for s in submissions]):
            by_submission[score["submission_id"]].append(score)

        failing = []
        for submission in submissions:
            result = self.aggregate_scores(by_submission.get(submission["id"], []), total_judges)
            if not gate_aggregate(result, cutoff, required).passed:
                failing.append(submission["id"])

        if failing:
            raise ValidationException(
                f"Submissions have not passed step 1: {', '.join(failing)}",
                details={"submissionIds": failing},
            )

    def manually_admit(self, ctx: WorkspaceContext, submission_ids: Sequence[str]) -> AdmitResponse:
        """
        Accept submissions of the application and take them out of the pipeline.
        """
        ctx.require(Permission.EVALUATION_ADMIT)
        ids = self._clean_ids(submission_ids)
        application = self.get_application(ctx)

        before = self.submissions.list_by_ids(ctx.application_id, ids)
        changed = [
            s for s in before
            if s["status"] != SubmissionStatus.ACCEPTED or s["current_step"] is not None
        ]

        count = self.submissions.admit(ctx.application_id, ids)

        if changed:
            self.notifier.submissions_admitted(application, changed)

        logger.info(
            "submissions_admitted: application=%s matched=%d changed=%d by=%s",
            ctx.application_id, count, len(changed), ctx.user_id,
        )

        return AdmitResponse(admitted_count=count)

    # ------------------------------------------------------------------
    # Response builders
    # ------------------------------------------------------------------

    @staticmethod
    def _step_response(step: Dict[str, Any]) -> StepResponse:
        return StepResponse(
            id=step["id"],
            step_number=step["step_number"],
            name=step["name"],
            type=step["type"],
            is_active=step["is_active"],
            pinned_fields=step["pinned_fields"],
            criteria=[CriterionResponse(**c) for c in step["criteria"]],
            score_count=step.get("score_count", 0),
            slot_count=step.get("slot_count", 0),
        )

    @staticmethod
    def _score_response(score: Dict[str, Any]) -> ScoreResponse:
        return ScoreResponse(
            id=score["id"],
            submission_id=score["submission_id"],
            step_id=score["step_id"],
            judge_id=score["judge_id"],
            scores=score["scores"],
            total_score=quantize(to_decimal(score["total_score"])),
            notes=score["notes"],
            created_at=score["created_at"],
        )

    @staticmethod
    def _cutoff_response(application: Dict[str, Any]) -> CutoffResponse:
        return CutoffResponse(
            cutoff_scores=CutoffScores(
                step1=application["step1_cutoff"],
                step2=application["step2_cutoff"],
            ),
            evaluation_settings=EvaluationSettings(
                min_score=application["min_score"],
                max_score=application["max_score"],
                required_evaluator_percentage=application["required_evaluator_percentage"],
            ),
        )
