"""Content registry -- loads and serves cards, enemies, boss patterns and
stages for the battle engine.

The shipped tables live in ``deckbattle/data/``.  Each loader takes an
optional path so a host can point it at its own tables instead.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from deckbattle.ir.cards import CardDefinition
from deckbattle.ir.enemies import BossPatternEntry, EnemyDefinition
from deckbattle.ir.stages import StageDefinition
from deckbattle.sim.core.entities import Enemy
from deckbattle.sim.core.game_state import CardInstance

logger = logging.getLogger(__name__)

# Default paths inside the installed package.
_DATA_DIR = Path(__file__).resolve().parents[2] / "data"  # sim/content -> deckbattle
_DEFAULT_CARDS_PATH = _DATA_DIR / "cards.json"
_DEFAULT_CARD_POOLS_PATH = _DATA_DIR / "card_pools.json"
_DEFAULT_ENEMIES_PATH = _DATA_DIR / "enemies.json"
_DEFAULT_BOSS_PATTERNS_PATH = _DATA_DIR / "boss_patterns.json"
_DEFAULT_STAGES_PATH = _DATA_DIR / "stages.json"


def _read_json(path: str | Path) -> Any:
    with open(Path(path), encoding="utf-8") as f:
        return json.load(f)


def _keyed_entries(raw: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    """Turn ``{id: fields}`` into a list of field dicts carrying their id."""
    return [{**fields, "id": key} for key, fields in raw.items()]


def _scale(value: int, multiplier: float) -> int:
    return int(round(value * multiplier))


class ContentRegistry:
    """Loads and serves the static tables the engine reads.

    Usage::

        registry = ContentRegistry()
        registry.load_all()

        card = registry.get_card("strike")
        stage = registry.get_stage("1")
        enemy = registry.build_enemy("goblin_warrior", difficulty=1.25)
    """

    def __init__(self) -> None:
        self.cards: dict[str, CardDefinition] = {}
        self.enemies: dict[str, EnemyDefinition] = {}
        self.boss_patterns: dict[str, list[BossPatternEntry]] = {}
        self.stages: dict[str, StageDefinition] = {}
        self.start_deck: dict[str, int] = {}
        self.reward_pool: list[str] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_cards(self, path: str | Path | None = None) -> None:
        """Load card definitions from a JSON object keyed by card id."""
        raw = _read_json(path or _DEFAULT_CARDS_PATH)
        for fields in _keyed_entries(raw):
            card = CardDefinition.model_validate(fields)
            self.cards[card.id] = card

    def load_card_pools(self, path: str | Path | None = None) -> None:
        """Load the starting deck recipe and the reward pool."""
        raw = _read_json(path or _DEFAULT_CARD_POOLS_PATH)
        self.start_deck = dict(raw.get("start_deck", {}))
        self.reward_pool = list(raw.get("rewards", []))

    def load_enemies(self, path: str | Path | None = None) -> None:
        raw = _read_json(path or _DEFAULT_ENEMIES_PATH)
        for fields in _keyed_entries(raw):
            enemy = EnemyDefinition.model_validate(fields)
            self.enemies[enemy.id] = enemy

    def load_boss_patterns(self, path: str | Path | None = None) -> None:
        """Load boss scripts.  Steps are kept in their ``turn`` order."""
        raw = _read_json(path or _DEFAULT_BOSS_PATTERNS_PATH)
        for boss_id, steps in raw.items():
            entries = [BossPatternEntry.model_validate(s) for s in steps]
            entries.sort(key=lambda e: e.turn)
            if not entries:
                raise ValueError(f"Boss pattern for {boss_id!r} is empty")
            self.boss_patterns[boss_id] = entries

    def load_stages(self, path: str | Path | None = None) -> None:
        raw = _read_json(path or _DEFAULT_STAGES_PATH)
        for fields in _keyed_entries(raw):
            stage = StageDefinition.model_validate(fields)
            self.stages[stage.id] = stage

    def load_all(self) -> None:
        """Load every shipped table and check their cross-references."""
        self.load_cards()
        self.load_card_pools()
        self.load_enemies()
        self.load_boss_patterns()
        self.load_stages()
        self.validate()

    def validate(self) -> None:
        """Check that every id one table names exists in the table it points at.

        Raises
        ------
        ValueError
            Listing every dangling reference found.
        """
        problems: list[str] = []
        for card_id in [*self.start_deck, *self.reward_pool]:
            if card_id not in self.cards:
                problems.append(f"card pool references unknown card {card_id!r}")
        for stage in self.stages.values():
            for enemy_id in stage.enemy_ids:
                if enemy_id not in self.enemies:
                    problems.append(
                        f"stage {stage.id!r} references unknown enemy {enemy_id!r}"
                    )
            for next_id in stage.next_stage_ids:
                if next_id not in self.stages:
                    problems.append(
                        f"stage {stage.id!r} unlocks unknown stage {next_id!r}"
                    )
        for boss_id, entries in self.boss_patterns.items():
            if boss_id not in self.enemies:
                problems.append(f"boss pattern for unknown enemy {boss_id!r}")
            for entry in entries:
                if entry.summon is not None and entry.summon not in self.enemies:
                    problems.append(
                        f"boss {boss_id!r} summons unknown enemy {entry.summon!r}"
                    )
        if problems:
            raise ValueError("Invalid content tables:\n  " + "\n  ".join(problems))

    # ------------------------------------------------------------------
    # Card queries
    # ------------------------------------------------------------------

    def get_card(self, card_id: str) -> CardDefinition | None:
        """Return the :class:`CardDefinition` for *card_id*, or ``None``."""
        return self.cards.get(card_id)

    def build_card(self, card_id: str) -> CardInstance:
        """Create a fresh physical copy of *card_id*.

        Raises
        ------
        KeyError
            If *card_id* is not a known card.
        """
        card = self.get_card(card_id)
        if card is None:
            raise KeyError(f"Unknown card id {card_id!r}")
        return CardInstance(definition=card)

    def get_starter_deck(self) -> list[str]:
        """Return the card ids of the starting deck, duplicates expanded."""
        deck: list[str] = []
        for card_id, count in self.start_deck.items():
            deck.extend([card_id] * count)
        return deck

    def get_reward_pool(self) -> list[str]:
        """Return the ids of cards that can be offered after a battle."""
        return list(self.reward_pool)

    # ------------------------------------------------------------------
    # Enemy queries
    # ------------------------------------------------------------------

    def get_enemy(self, enemy_id: str) -> EnemyDefinition | None:
        return self.enemies.get(enemy_id)

    def get_boss_pattern(self, enemy_id: str) -> list[BossPatternEntry] | None:
        return self.boss_patterns.get(enemy_id)

    def list_enemy_ids(self) -> list[str]:
        return list(self.enemies.keys())

    def build_enemy(self, enemy_id: str, difficulty: float = 1.0) -> Enemy:
        """Create a battle-ready :class:`Enemy` from the enemy table.

        Health, attack and defense (including every step of a boss script)
        are multiplied by *difficulty* and rounded.  Health never drops
        below 1.

        Raises
        ------
        KeyError
            If *enemy_id* is not a known enemy.
        """
        definition = self.get_enemy(enemy_id)
        if definition is None:
            raise KeyError(f"Unknown enemy id {enemy_id!r}")

        health = max(1, _scale(definition.health, difficulty))
        attack = None if definition.attack is None else _scale(definition.attack, difficulty)
        defense = None if definition.defense is None else _scale(definition.defense, difficulty)

        pattern = None
        raw_pattern = self.get_boss_pattern(enemy_id)
        if raw_pattern:
            pattern = [
                entry.model_copy(update={
                    "damage": _scale(entry.damage, difficulty),
                    "defense": _scale(entry.defense, difficulty),
                })
                for entry in raw_pattern
            ]
        elif definition.is_boss:
            logger.warning(
                "Boss %r has no pattern; it will act like a normal enemy", enemy_id,
            )

        return Enemy(
            enemy_id=definition.id,
            name=definition.name,
            max_health=health,
            health=health,
            base_attack=attack,
            base_defense=defense,
            is_boss=definition.is_boss,
            boss_pattern=pattern,
        )

    # ------------------------------------------------------------------
    # Stage queries
    # ------------------------------------------------------------------

    def get_stage(self, stage_id: str) -> StageDefinition | None:
        return self.stages.get(stage_id)

    def list_stage_ids(self) -> list[str]:
        return list(self.stages.keys())

    @property
    def first_stage_id(self) -> str | None:
        """The stage a fresh run starts from: one that no stage unlocks."""
        unlocked = {s for stage in self.stages.values() for s in stage.next_stage_ids}
        for stage_id in self.stages:
            if stage_id not in unlocked:
                return stage_id
        return None
