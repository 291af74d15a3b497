# starboard/scoring/gating.py
"""
Gating
------
Combines the cutoff rule and the evaluator-coverage rule into a pass/fail
decision for one submission at one step.

    meets_cutoff                = average >= cutoff          (False if average is None)
    meets_evaluator_requirement = coverage >= required_pct   (False if coverage is None)
    passed                      = meets_cutoff AND meets_evaluator_requirement

Status precedence: unconfigured -> pending -> insufficient-coverage -> passed/failed.
"""
import math
import structlog
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from starboard.models.enumerations import GateStatus
from starboard.scoring.aggregation import AggregateResult
from starboard.scoring.utils import Number, to_decimal

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GateResult:
    """Output of gate()."""
    meets_cutoff: bool
    meets_evaluator_requirement: bool
    passed: bool
    status: GateStatus


def gate(
    average_score: Optional[Number],
    cutoff: Number,
    evaluator_percentage: Optional[Number],
    required_evaluator_percentage: Number,
) -> GateResult:
    """
    Decide pass/fail for one submission.

    Args:
        average_score: Aggregate average, None when nobody has scored.
        cutoff: Minimum passing average for the step.
        evaluator_percentage: Coverage in [0, 100], None when no judges are configured.
        required_evaluator_percentage: Minimum coverage in [0, 100].
    """
    meets_cutoff = average_score is not None and to_decimal(average_score) >= to_decimal(cutoff)
    meets_requirement = (
        evaluator_percentage is not None
        and to_decimal(evaluator_percentage) >= to_decimal(required_evaluator_percentage)
    )
    passed = meets_cutoff and meets_requirement

    if evaluator_percentage is None:
        status = GateStatus.UNCONFIGURED
    elif average_score is None:
        status = GateStatus.PENDING
    elif not meets_requirement:
        status = GateStatus.INSUFFICIENT_COVERAGE
    elif meets_cutoff:
        status = GateStatus.PASSED
    else:
        status = GateStatus.FAILED

    return GateResult(
        meets_cutoff=meets_cutoff,
        meets_evaluator_requirement=meets_requirement,
        passed=passed,
        status=status,
    )


def gate_aggregate(
    result: AggregateResult,
    cutoff: Number,
    required_evaluator_percentage: Number,
) -> GateResult:
    """gate() applied to an AggregateResult."""
    decision = gate(
        result.average_score,
        cutoff,
        result.evaluator_percentage,
        required_evaluator_percentage,
    )
    logger.debug(
        "gate_evaluated",
        evaluator_count=result.evaluator_count,
        total_judges=result.total_judges,
        cutoff=float(to_decimal(cutoff)),
        status=decision.status.value,
    )
    return decision


def required_evaluator_count(total_judges: int, required_evaluator_percentage: Number) -> int:
    """Smallest number of judges that satisfies the coverage requirement."""
    needed = to_decimal(total_judges) * to_decimal(required_evaluator_percentage) / Decimal("100")
    return int(math.ceil(needed))


def validity_message(
    result: AggregateResult,
    required_evaluator_percentage: Number,
) -> Optional[str]:
    """Human-readable explanation for a non-final status, None when coverage is met."""
    if result.is_unconfigured:
        return "No evaluators are configured for this workspace"
    if result.evaluator_count == 0:
        return "No evaluators have scored this submission yet"
    if result.evaluator_percentage >= to_decimal(required_evaluator_percentage):
        return None
    required_pct = to_decimal(required_evaluator_percentage).normalize()
    needed = required_evaluator_count(result.total_judges, required_evaluator_percentage)
    return (
        f"Only {result.evaluator_count} of {result.total_judges} evaluators have scored "
        f"(need {required_pct:f}% = {needed} evaluators)"
    )
