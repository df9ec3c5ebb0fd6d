"""Tests for balance output models."""

from __future__ import annotations

import json

from deckbattle.balance.models import GlobalMetrics, StageMetrics


class TestModels:
    def test_global_json(self) -> None:
        gm = GlobalMetrics(
            total_runs=2, wins=1, losses=1, win_rate=0.5,
            avg_stages_cleared=4.0, avg_battles_won=4.0, avg_deck_size=9.5,
        )
        restored = GlobalMetrics.model_validate(json.loads(gm.model_dump_json()))
        assert restored == gm

    def test_stage_fields(self) -> None:
        stage = StageMetrics(
            stage_id="7", times_fought=3, wins=1, win_rate=1 / 3, avg_turns=8.0, avg_hp_lost=30.0,
        )
        assert stage.model_dump()["stage_id"] == "7"
