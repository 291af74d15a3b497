from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from starboard.models.common import CamelModel
from starboard.models.enumerations import GateStatus, StepType, SubmissionStatus


# ---------------------------------------------------------------------------
# Step setup
# ---------------------------------------------------------------------------

class CriterionInput(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, description="Criterion label")
    weight: float = Field(default=1.0, gt=0, description="Relative weight in the judge total")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Criterion name must not be blank")
        return v


class StepConfigInput(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, description="Step display name")
    criteria: List[CriterionInput] = Field(..., min_length=1, description="Ordered scoring criteria")


class StepSetupRequest(CamelModel):
    """
    Configuration for both evaluation steps of an application.
    """

    step1: StepConfigInput = Field(..., description="Initial review step")
    step2: StepConfigInput = Field(..., description="Interview round step")


class CriterionResponse(CamelModel):
    id: str
    name: str
    weight: float
    order: int


class StepResponse(CamelModel):
    id: str
    step_number: int
    name: str
    type: StepType
    is_active: bool
    pinned_fields: List[str] = Field(default_factory=list)
    criteria: List[CriterionResponse] = Field(default_factory=list)
    score_count: int = 0
    slot_count: int = 0


class StepListResponse(CamelModel):
    steps: List[StepResponse] = Field(default_factory=list)


class PinnedFieldsRequest(CamelModel):
    pinned_fields: List[str] = Field(..., description="Form field ids shown on the scoreboard")


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

class ScoreSubmitRequest(CamelModel):
    """
    One judge's scores for one submission at one step.
    """

    submission_id: str = Field(..., min_length=1, description="Scored submission")
    criteria_scores: Dict[str, float] = Field(..., description="Criterion id -> value")
    notes: Optional[str] = Field(default=None, max_length=5000, description="Judge notes")


class ScoreResponse(CamelModel):
    id: str
    submission_id: str
    step_id: str
    judge_id: str
    scores: Dict[str, float]
    total_score: float
    notes: Optional[str] = None
    created_at: datetime


class MyScoreResponse(CamelModel):
    score: Optional[ScoreResponse] = None
    has_scored: bool = False


# ---------------------------------------------------------------------------
# Cutoff and settings
# ---------------------------------------------------------------------------

class CutoffScores(CamelModel):
    step1: float
    step2: float


class EvaluationSettings(CamelModel):
    min_score: float
    max_score: float
    required_evaluator_percentage: float


class CutoffResponse(CamelModel):
    cutoff_scores: CutoffScores
    evaluation_settings: EvaluationSettings


class CutoffUpdateRequest(CamelModel):
    step1: Optional[float] = Field(default=None, description="New cutoff for step 1")
    step2: Optional[float] = Field(default=None, description="New cutoff for step 2")

    @model_validator(mode="after")
    def require_one(self):
        if self.step1 is None and self.step2 is None:
            raise ValueError("At least one cutoff score must be provided")
        return self


class SettingsUpdateRequest(CamelModel):
    min_score: Optional[float] = Field(default=None, description="Lowest criterion value")
    max_score: Optional[float] = Field(default=None, description="Highest criterion value")
    required_evaluator_percentage: Optional[float] = Field(
        default=None,
        ge=0,
        le=100,
        description="Judge coverage required for a final status",
    )

    @model_validator(mode="after")
    def require_one(self):
        if self.min_score is None and self.max_score is None and self.required_evaluator_percentage is None:
            raise ValueError("At least one setting must be provided")
        return self


# ---------------------------------------------------------------------------
# Scoreboard and status
# ---------------------------------------------------------------------------

class JudgeScoreEntry(CamelModel):
    judge_id: str
    total_score: float
    notes: Optional[str] = None
    created_at: datetime


class ScoreboardEntry(CamelModel):
    submission_id: str
    first_name: str
    last_name: str
    email: str
    company_name: Optional[str] = None
    current_step: Optional[int] = None
    status: SubmissionStatus
    average_score: Optional[float] = None
    evaluator_count: int = 0
    total_judges: int = 0
    evaluator_percentage: Optional[float] = None
    meets_cutoff: bool = False
    meets_evaluator_requirement: bool = False
    passed: bool = False
    gate_status: GateStatus
    submitted_at: Optional[datetime] = None
    validity_message: Optional[str] = None
    judge_scores: List[JudgeScoreEntry] = Field(default_factory=list)


class ScoreboardResponse(CamelModel):
    step_id: str
    step_number: int
    step_name: str
    cutoff: float
    required_evaluator_percentage: float
    total_judges: int
    pinned_fields: List[str] = Field(default_factory=list)
    submissions: List[ScoreboardEntry] = Field(default_factory=list)


class StepStatusEntry(CamelModel):
    step_id: str
    step_number: int
    name: str
    type: StepType
    is_current_step: bool = False
    average_score: Optional[float] = None
    evaluator_count: int = 0


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

class AdmitRequest(CamelModel):
    submission_ids: List[str] = Field(..., min_length=1, description="Submissions to act on")


class AdvanceRequest(AdmitRequest):
    enforce_gating: bool = Field(
        default=False,
        description="Reject the request unless every submission passed step 1",
    )


class AdvanceResponse(CamelModel):
    advanced_count: int


class AdmitResponse(CamelModel):
    admitted_count: int
