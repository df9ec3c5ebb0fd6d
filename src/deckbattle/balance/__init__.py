"""Balance analysis: metrics and reports over simulation telemetry."""

from deckbattle.balance.metrics import (
    compute_card_metrics,
    compute_global_metrics,
    compute_stage_metrics,
)
from deckbattle.balance.models import CardMetrics, GlobalMetrics, StageMetrics
from deckbattle.balance.report import generate_text_report

__all__ = [
    "CardMetrics",
    "GlobalMetrics",
    "StageMetrics",
    "compute_card_metrics",
    "compute_global_metrics",
    "compute_stage_metrics",
    "generate_text_report",
]
