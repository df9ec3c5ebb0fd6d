"""Combat mechanics for the battle engine.

Re-exports the primary functions from each mechanics module.

Usage::

    from deckbattle.sim.mechanics import (
        deal_damage,
        gain_block, clear_block,
        reset_energy, can_afford, pay_energy, gain_energy, lower_max_energy,
        draw_cards, discard_card, discard_hand, shuffle_deck,
        resolve_targets,
    )
"""

# -- damage ------------------------------------------------------------------
from .damage import deal_damage, total_applied, total_blocked

# -- block -------------------------------------------------------------------
from .block import clear_block, gain_block

# -- energy ------------------------------------------------------------------
from .energy import can_afford, gain_energy, lower_max_energy, pay_energy, reset_energy

# -- card piles --------------------------------------------------------------
from .card_piles import discard_card, discard_hand, draw_cards, shuffle_deck

# -- targeting ---------------------------------------------------------------
from .targeting import resolve_targets

__all__ = [
    # damage
    "deal_damage",
    "total_applied",
    "total_blocked",
    # block
    "gain_block",
    "clear_block",
    # energy
    "reset_energy",
    "can_afford",
    "pay_energy",
    "gain_energy",
    "lower_max_energy",
    # card piles
    "draw_cards",
    "discard_card",
    "discard_hand",
    "shuffle_deck",
    # targeting
    "resolve_targets",
]
