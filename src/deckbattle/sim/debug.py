"""Developer console for poking at a live battle.

Every command goes through the :class:`BattleController`, so observers
see debug edits the same way they see normal play.

Usage::

    console = DebugConsole(controller, registry)
    console.execute("damage 10")
    console.execute("enemydamage 0 25")
    console.execute("addcard Storm Blade")
"""

from __future__ import annotations

import logging
import shlex
from typing import Callable

from deckbattle.sim.battle import BattleController
from deckbattle.sim.content.registry import ContentRegistry
from deckbattle.sim.core.game_state import BattlePhase, BattleSession, CardInstance

logger = logging.getLogger(__name__)


class DebugConsole:
    """Cheat commands for a running battle."""

    def __init__(self, controller: BattleController, registry: ContentRegistry) -> None:
        self.controller = controller
        self.registry = registry
        self._commands: dict[str, tuple[Callable[[list[str]], str], str]] = {
            "help": (self._cmd_help, "help -- list commands"),
            "health": (self._cmd_health, "health <n> -- set player health"),
            "damage": (self._cmd_damage, "damage <n> -- damage the player"),
            "heal": (self._cmd_heal, "heal <n> -- heal the player"),
            "energy": (self._cmd_energy, "energy <n> -- set player energy"),
            "defense": (self._cmd_defense, "defense <n> -- set player defense"),
            "addcard": (self._cmd_addcard, "addcard <name or id> -- put a card in hand"),
            "drawcards": (self._cmd_drawcards, "drawcards <n> -- draw cards"),
            "enemydamage": (self._cmd_enemydamage, "enemydamage <index> <n> -- damage an enemy"),
            "enemyheal": (self._cmd_enemyheal, "enemyheal <index> <n> -- heal an enemy"),
            "nextturn": (self._cmd_nextturn, "nextturn -- advance to the next turn"),
            "win": (self._cmd_win, "win -- win the battle"),
            "lose": (self._cmd_lose, "lose -- lose the battle"),
        }

    @property
    def session(self) -> BattleSession:
        return self.controller.session

    # ------------------------------------------------------------------
    # Direct API
    # ------------------------------------------------------------------

    def set_health(self, value: int) -> None:
        self.session.player.health = value
        self.controller.refresh()

    def set_energy(self, value: int) -> None:
        self.session.player.energy = value
        self.controller.refresh()

    def set_defense(self, value: int) -> None:
        self.session.player.defense = value
        self.controller.refresh()

    def damage_player(self, amount: int) -> None:
        self.controller.damage_player(amount)

    def heal_player(self, amount: int) -> int:
        return self.controller.heal_player(amount)

    def add_card(self, name: str) -> CardInstance | None:
        """Put a new copy of the card named *name* (or with that id) in hand."""
        wanted = name.strip().lower()
        for card in self.registry.cards.values():
            if card.id == wanted or card.name.lower() == wanted:
                instance = self.registry.build_card(card.id)
                self.controller.inject_card(instance)
                return instance
        logger.warning("Debug console: card not found: %s", name)
        return None

    def draw_cards(self, n: int) -> int:
        return len(self.controller.draw(n))

    def damage_enemy(self, index: int, amount: int) -> bool:
        return self.controller.damage_enemy(index, amount) is not None

    def heal_enemy(self, index: int, amount: int) -> bool:
        return self.controller.heal_enemy(index, amount) is not None

    def next_turn(self) -> bool:
        """End the player turn, or skip the rest of the enemy turn."""
        if self.session.phase == BattlePhase.PLAYER_TURN:
            return self.controller.end_turn().ok
        return self.controller.force_player_turn()

    def win(self) -> bool:
        return self.controller.force_outcome(BattlePhase.VICTORY)

    def lose(self) -> bool:
        return self.controller.force_outcome(BattlePhase.DEFEAT)

    # ------------------------------------------------------------------
    # Line commands
    # ------------------------------------------------------------------

    def execute(self, line: str) -> str:
        """Run one console line and return the text to show."""
        try:
            parts = shlex.split(line)
        except ValueError as exc:
            return f"Parse error: {exc}"
        if not parts:
            return ""

        name, args = parts[0].lower(), parts[1:]
        entry = self._commands.get(name)
        if entry is None:
            return f"Unknown command: {name}. Type 'help' for a list."
        handler, usage = entry
        try:
            return handler(args)
        except (ValueError, IndexError):
            return f"Usage: {usage}"

    def _cmd_help(self, args: list[str]) -> str:
        return "\n".join(usage for _, usage in self._commands.values())

    def _cmd_health(self, args: list[str]) -> str:
        self.set_health(int(args[0]))
        return f"Player health: {self.session.player.health}"

    def _cmd_damage(self, args: list[str]) -> str:
        self.damage_player(int(args[0]))
        return f"Player health: {self.session.player.health}"

    def _cmd_heal(self, args: list[str]) -> str:
        healed = self.heal_player(int(args[0]))
        return f"Healed {healed}; player health: {self.session.player.health}"

    def _cmd_energy(self, args: list[str]) -> str:
        self.set_energy(int(args[0]))
        return f"Player energy: {self.session.player.energy}"

    def _cmd_defense(self, args: list[str]) -> str:
        self.set_defense(int(args[0]))
        return f"Player defense: {self.session.player.defense}"

    def _cmd_addcard(self, args: list[str]) -> str:
        if not args:
            raise ValueError("card name required")
        card = self.add_card(" ".join(args))
        if card is None:
            return f"Card not found: {' '.join(args)}"
        return f"Added {card.name} to hand"

    def _cmd_drawcards(self, args: list[str]) -> str:
        drawn = self.draw_cards(int(args[0]))
        return f"Drew {drawn} card(s)"

    def _cmd_enemydamage(self, args: list[str]) -> str:
        index, amount = int(args[0]), int(args[1])
        if not self.damage_enemy(index, amount):
            return f"No living enemy at index {index}"
        return f"Enemy {index} health: {self.session.enemies[index].health}"

    def _cmd_enemyheal(self, args: list[str]) -> str:
        index, amount = int(args[0]), int(args[1])
        if not self.heal_enemy(index, amount):
            return f"No living enemy at index {index}"
        return f"Enemy {index} health: {self.session.enemies[index].health}"

    def _cmd_nextturn(self, args: list[str]) -> str:
        if not self.next_turn():
            return f"Cannot advance the turn during {self.session.phase.value}"
        return f"Phase: {self.session.phase.value}"

    def _cmd_win(self, args: list[str]) -> str:
        return "Battle won" if self.win() else "Battle is already over"

    def _cmd_lose(self, args: list[str]) -> str:
        return "Battle lost" if self.lose() else "Battle is already over"
