from enum import Enum


class StepType(str, Enum):
    INITIAL_REVIEW = "INITIAL_REVIEW"  # Application review by judges
    INTERVIEW = "INTERVIEW"            # Interview round with bookable slots


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class GateStatus(str, Enum):
    UNCONFIGURED = "unconfigured"                    # No eligible judges on the workspace
    PENDING = "pending"                              # Nobody has scored yet
    INSUFFICIENT_COVERAGE = "insufficient-coverage"  # Scored, but below required coverage
    PASSED = "passed"
    FAILED = "failed"


class Permission(str, Enum):
    WORKSPACE_VIEW = "workspace.view"
    APPLICATIONS_VIEW = "applications.view"
    APPLICATIONS_MANAGE = "applications.manage"
    EVALUATION_SCORE = "evaluation.score"
    EVALUATION_VIEW_SCORES = "evaluation.view_scores"
    EVALUATION_MANAGE = "evaluation.manage"
    EVALUATION_ADVANCE = "evaluation.advance"
    EVALUATION_ADMIT = "evaluation.admit"
