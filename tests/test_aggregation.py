# tests/test_aggregation.py

"""
Aggregation + Gating Tests - pure scoring functions
"""

from decimal import Decimal

import pytest

from starboard.models.enumerations import GateStatus
from starboard.scoring import (
    AggregateResult,
    JudgeScore,
    aggregate,
    gate,
    gate_aggregate,
    validity_message,
    weighted_total,
)
from starboard.scoring.gating import required_evaluator_count
from starboard.scoring.utils import quantize, weighted_mean


def judge_scores(*totals):
    return [JudgeScore(judge_id=f"judge-{i}", total_score=Decimal(str(t))) for i, t in enumerate(totals)]


# WEIGHTED TOTAL


class TestWeightedTotal:
    """Tests for a single judge's weighted total."""

    def test_equal_weights_is_plain_mean(self):
        criteria = [{"id": "innovation", "weight": 1}, {"id": "execution", "weight": 1}]
        assert weighted_total(criteria, {"innovation": 8, "execution": 6}) == Decimal("7")

    def test_weights_shift_the_total(self):
        criteria = [{"id": "team", "weight": 3}, {"id": "market", "weight": 1}]
        # (9*3 + 5*1) / 4 = 8
        assert weighted_total(criteria, {"team": 9, "market": 5}) == Decimal("8")

    def test_missing_weight_counts_as_one(self):
        criteria = [{"id": "a"}, {"id": "b", "weight": None}]
        assert weighted_total(criteria, {"a": 4, "b": 6}) == Decimal("5")

    def test_missing_criterion_raises(self):
        with pytest.raises(KeyError):
            weighted_total([{"id": "a", "weight": 1}], {})

    def test_weighted_mean_zero_weights(self):
        assert weighted_mean([Decimal("5")], [Decimal("0")]) == Decimal("0")

    def test_weighted_mean_length_mismatch(self):
        with pytest.raises(ValueError):
            weighted_mean([Decimal("1")], [])


# AGGREGATE


class TestAggregate:
    """Tests for aggregate()."""

    def test_three_judges_average(self):
        result = aggregate(judge_scores(6, 8, 9), total_judges=3)
        assert quantize(result.average_score, 3) == 7.667
        assert result.evaluator_count == 3
        assert result.evaluator_percentage == Decimal("100")

    def test_no_scores_gives_no_average(self):
        result = aggregate([], total_judges=4)
        assert result.average_score is None
        assert result.evaluator_count == 0
        assert result.evaluator_percentage == Decimal("0")

    def test_zero_judges_is_unconfigured(self):
        result = aggregate(judge_scores(7), total_judges=0)
        assert result.is_unconfigured
        assert result.evaluator_percentage is None
        assert result.average_score == Decimal("7")

    def test_negative_judges_rejected(self):
        with pytest.raises(ValueError):
            aggregate([], total_judges=-1)

    def test_duplicate_judge_counted_once(self):
        scores = [
            JudgeScore("judge-a", Decimal("8")),
            JudgeScore("judge-a", Decimal("2")),
            JudgeScore("judge-b", Decimal("6")),
        ]
        result = aggregate(scores, total_judges=2)
        assert result.evaluator_count == 2
        assert result.average_score == Decimal("7")

    def test_percentage_clamped_when_more_scores_than_judges(self):
        result = aggregate(judge_scores(5, 6, 7), total_judges=2)
        assert result.evaluator_percentage == Decimal("100")

    @pytest.mark.parametrize(
        "count,total,expected",
        [(3, 4, Decimal("75")), (2, 4, Decimal("50")), (1, 3, Decimal("100") / 3)],
    )
    def test_percentage(self, count, total, expected):
        result = aggregate(judge_scores(*([5] * count)), total_judges=total)
        assert result.evaluator_percentage == expected


# GATE


class TestGate:
    """Tests for gate() and status precedence."""

    def test_average_above_cutoff_meets_cutoff(self):
        result = aggregate(judge_scores(6, 8, 9), total_judges=3)
        decision = gate_aggregate(result, cutoff=7, required_evaluator_percentage=75)
        assert decision.meets_cutoff is True
        assert decision.passed is True
        assert decision.status == GateStatus.PASSED

    def test_no_scores_never_meets_cutoff(self):
        decision = gate(None, cutoff=0, evaluator_percentage=Decimal("0"), required_evaluator_percentage=0)
        assert decision.meets_cutoff is False
        assert decision.passed is False
        assert decision.status == GateStatus.PENDING

    def test_three_of_four_meets_75_percent(self):
        result = aggregate(judge_scores(7, 7, 7), total_judges=4)
        decision = gate_aggregate(result, cutoff=5, required_evaluator_percentage=75)
        assert result.evaluator_percentage == Decimal("75")
        assert decision.meets_evaluator_requirement is True

    def test_two_of_four_misses_75_percent(self):
        result = aggregate(judge_scores(7, 7), total_judges=4)
        decision = gate_aggregate(result, cutoff=5, required_evaluator_percentage=75)
        assert result.evaluator_percentage == Decimal("50")
        assert decision.meets_evaluator_requirement is False
        assert decision.passed is False
        assert decision.status == GateStatus.INSUFFICIENT_COVERAGE

    def test_below_cutoff_fails(self):
        result = aggregate(judge_scores(4, 5), total_judges=2)
        decision = gate_aggregate(result, cutoff=6, required_evaluator_percentage=75)
        assert decision.status == GateStatus.FAILED
        assert decision.meets_evaluator_requirement is True

    def test_unconfigured_never_passes(self):
        result = aggregate(judge_scores(10, 10), total_judges=0)
        decision = gate_aggregate(result, cutoff=0, required_evaluator_percentage=0)
        assert decision.passed is False
        assert decision.status == GateStatus.UNCONFIGURED

    def test_unconfigured_takes_precedence_over_pending(self):
        decision = gate(None, cutoff=5, evaluator_percentage=None, required_evaluator_percentage=75)
        assert decision.status == GateStatus.UNCONFIGURED

    def test_cutoff_boundary_is_inclusive(self):
        decision = gate(Decimal("6.5"), cutoff=6.5, evaluator_percentage=100, required_evaluator_percentage=100)
        assert decision.meets_cutoff is True
        assert decision.passed is True


# VALIDITY MESSAGE


class TestValidityMessage:
    def test_insufficient_coverage_message(self):
        result = aggregate(judge_scores(7, 7), total_judges=4)
        assert validity_message(result, 75) == "Only 2 of 4 evaluators have scored (need 75% = 3 evaluators)"

    def test_coverage_met_has_no_message(self):
        result = aggregate(judge_scores(7, 7, 7), total_judges=4)
        assert validity_message(result, 75) is None

    def test_unscored_message(self):
        assert validity_message(aggregate([], 4), 75) == "No evaluators have scored this submission yet"

    def test_unconfigured_message(self):
        result = AggregateResult(None, 0, 0, None)
        assert validity_message(result, 75) == "No evaluators are configured for this workspace"

    @pytest.mark.parametrize("total,pct,expected", [(4, 75, 3), (3, 75, 3), (5, 50, 3), (4, 0, 0), (7, 100, 7)])
    def test_required_evaluator_count_rounds_up(self, total, pct, expected):
        assert required_evaluator_count(total, pct) == expected
