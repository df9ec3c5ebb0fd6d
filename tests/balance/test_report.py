"""Tests for the plain-text report."""

from __future__ import annotations

from deckbattle.balance.models import CardMetrics, GlobalMetrics, StageMetrics
from deckbattle.balance.report import generate_text_report


def _global() -> GlobalMetrics:
    return GlobalMetrics(
        total_runs=10, wins=4, losses=6, win_rate=0.4,
        avg_stages_cleared=3.5, avg_battles_won=3.5, avg_deck_size=10.2,
    )


def _card(card_id: str, delta: float) -> CardMetrics:
    return CardMetrics(
        card_id=card_id, times_in_deck=5, wins_with=2, win_rate_with=0.4 + delta,
        win_rate_delta=delta, times_offered=4, times_picked=2, pick_rate=0.5,
        times_played=12, play_rate=0.3,
    )


class TestTextReport:
    def test_global_section(self) -> None:
        text = generate_text_report(_global(), title="Stage 1")
        assert "Stage 1" in text
        assert "40.0% (4/10)" in text
        assert "## Stages" not in text
        assert "## Cards" not in text

    def test_cards_ranked_by_delta(self) -> None:
        text = generate_text_report(_global(), card_metrics=[_card("strike", -0.1), _card("fireball", 0.2)])
        assert text.index("fireball") < text.index("strike")
        assert "+0.200" in text

    def test_stage_section(self) -> None:
        stage = StageMetrics(
            stage_id="4", times_fought=8, wins=2, win_rate=0.25, avg_turns=7.5, avg_hp_lost=41.0,
        )
        text = generate_text_report(_global(), stage_metrics=[stage])
        assert "## Stages" in text
        assert "wr=0.25" in text
