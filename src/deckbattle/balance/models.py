"""Pydantic v2 models for balance analysis output.

Per-card metrics, per-stage metrics, and global run statistics.  All
serialize to and from JSON.
"""

from __future__ import annotations

from pydantic import BaseModel


class CardMetrics(BaseModel):
    """Per-card balance metrics computed from batch run telemetry."""

    card_id: str
    # Presence metrics
    times_in_deck: int
    """Runs where this card was in the final deck."""
    wins_with: int
    win_rate_with: float
    win_rate_delta: float
    """win_rate_with - global win rate."""
    # Pick metrics
    times_offered: int
    times_picked: int
    pick_rate: float
    """times_picked / times_offered."""
    # Play metrics
    times_played: int
    play_rate: float
    """times_played / player turns in runs holding the card."""


class StageMetrics(BaseModel):
    """How often a stage is won when it is fought."""

    stage_id: str
    times_fought: int
    wins: int
    win_rate: float
    avg_turns: float
    avg_hp_lost: float


class GlobalMetrics(BaseModel):
    """Aggregate run statistics."""

    total_runs: int
    wins: int
    losses: int
    win_rate: float
    avg_stages_cleared: float
    avg_battles_won: float
    avg_deck_size: float
