# starboard/scoring/aggregation.py
"""
Score Aggregation
-----------------
Turns the individual judge scores of one submission at one step into a
single aggregate.

Formula:
    score_total       = Σ (criterion_value × criterion_weight) / Σ criterion_weight
    average_score     = mean(score_total over distinct judges)      None if no judges scored
    evaluator_pct     = evaluator_count / total_judges × 100         clamped to [0, 100]

total_judges == 0 means no eligible judges are configured for the
workspace; evaluator_pct is then None instead of being computed against a
made-up denominator.
"""
import structlog
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from starboard.scoring.utils import Number, clamp, mean, to_decimal, weighted_mean

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class JudgeScore:
    """One judge's total for a submission at a step."""
    judge_id: str
    total_score: Decimal


@dataclass(frozen=True)
class AggregateResult:
    """Output of aggregate()."""
    average_score: Optional[Decimal]         # None when nobody has scored
    evaluator_count: int                     # Distinct judges who scored
    total_judges: int                        # Eligible judges for the workspace
    evaluator_percentage: Optional[Decimal]  # None when total_judges == 0

    @property
    def is_unconfigured(self) -> bool:
        return self.total_judges == 0


def weighted_total(
    criteria: Sequence[Mapping[str, Any]],
    criteria_scores: Mapping[str, Number],
) -> Decimal:
    """
    Weighted mean of one judge's criterion values.

    Args:
        criteria: The step's criteria; each mapping needs "id" and "weight".
        criteria_scores: Mapping of criterion id -> value. Every criterion
                         in `criteria` must be present.

    Returns:
        Σ(value × weight) / Σ(weight) as Decimal.
    """
    values: List[Decimal] = []
    weights: List[Decimal] = []
    for criterion in criteria:
        values.append(to_decimal(criteria_scores[criterion["id"]]))
        weights.append(to_decimal(criterion.get("weight") or 1))
    return weighted_mean(values, weights)


def aggregate(scores: Iterable[JudgeScore], total_judges: int) -> AggregateResult:
    """
    Aggregate judge scores for one submission at one step.

    Args:
        scores: Judge scores; a judge appearing twice is counted once
                (first occurrence wins).
        total_judges: Number of eligible judges. Must be >= 0.

    Returns:
        AggregateResult.
    """
    if total_judges < 0:
        raise ValueError(f"total_judges must be >= 0, got {total_judges}")

    by_judge: Dict[str, Decimal] = {}
    for score in scores:
        if score.judge_id not in by_judge:
            by_judge[score.judge_id] = to_decimal(score.total_score)

    evaluator_count = len(by_judge)
    average = mean(list(by_judge.values()))

    if total_judges == 0:
        percentage = None
    else:
        percentage = clamp(
            Decimal(evaluator_count) / Decimal(total_judges) * Decimal("100"),
            Decimal("0"),
            Decimal("100"),
        )

    logger.debug(
        "aggregate_calculated",
        evaluator_count=evaluator_count,
        total_judges=total_judges,
        average_score=float(average) if average is not None else None,
        evaluator_percentage=float(percentage) if percentage is not None else None,
    )

    return AggregateResult(
        average_score=average,
        evaluator_count=evaluator_count,
        total_judges=total_judges,
        evaluator_percentage=percentage,
    )
