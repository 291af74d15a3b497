"""
scoring/ - Evaluation aggregation and gating

Modules:
    utils.py        - Decimal utilities
    aggregation.py  - Judge score aggregation (average, coverage)
    gating.py       - Cutoff + coverage pass/fail decision
"""
from starboard.scoring.aggregation import AggregateResult, JudgeScore, aggregate, weighted_total
from starboard.scoring.gating import GateResult, gate, gate_aggregate, validity_message

__all__ = [
    "AggregateResult",
    "JudgeScore",
    "aggregate",
    "weighted_total",
    "GateResult",
    "gate",
    "gate_aggregate",
    "validity_message",
]
