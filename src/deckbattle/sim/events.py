"""Battle events, observers, and the presentation sink.

The engine reports everything that happens as a ``BattleEvent``.  Two
kinds of consumer receive them:

- **Observers** subscribed on an ``EventBus``.  They read the event (and,
  if they like, the session) and react.  They never write battle state.
- **A presentation sink** that is asked to *play* each event (an
  animation, a sound, a floating number).  Playing is fire-and-forget,
  except where the engine passes ``on_complete``: at those points the
  battle waits for the sink to call it back before moving on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class BattleEventType(str, Enum):
    BATTLE_STARTED = "battle_started"
    PLAYER_TURN_STARTED = "player_turn_started"
    CARDS_DRAWN = "cards_drawn"
    DECK_RESHUFFLED = "deck_reshuffled"
    CARD_PLAYED = "card_played"
    DAMAGE_DEALT = "damage_dealt"
    BLOCK_GAINED = "block_gained"
    HEALED = "healed"
    ENERGY_GAINED = "energy_gained"
    HAND_DISCARDED = "hand_discarded"
    ENEMY_TURN_STARTED = "enemy_turn_started"
    ENEMY_ACTED = "enemy_acted"
    INTENT_CHANGED = "intent_changed"
    ENEMY_KILLED = "enemy_killed"
    ENEMY_DEFEATED = "enemy_defeated"
    ENEMY_SUMMONED = "enemy_summoned"
    PLAYER_CURSED = "player_cursed"
    STATE_CHANGED = "state_changed"
    BATTLE_ENDED = "battle_ended"


class BattleEvent(BaseModel):
    """Something that happened in a battle.

    ``payload`` carries event-specific details (target index, amounts,
    card ids, ...) as plain JSON-friendly values.
    """

    type: BattleEventType
    payload: dict[str, Any] = Field(default_factory=dict)


Listener = Callable[[BattleEvent], None]


class EventBus:
    """Synchronous publish/subscribe for battle events."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*.  Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: BattleEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def __len__(self) -> int:
        return len(self._listeners)


class PresentationSink(ABC):
    """Plays battle events for the player to see and hear."""

    @abstractmethod
    def play(
        self,
        event: BattleEvent,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        """Play *event*.  If *on_complete* is given it must be called
        exactly once when the effect has finished."""


class NullSink(PresentationSink):
    """Sink with no presentation: every effect completes immediately."""

    def play(
        self,
        event: BattleEvent,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        if on_complete is not None:
            on_complete()


class DeferredSink(PresentationSink):
    """Sink that holds completions until ``complete_all`` is called.

    Records every event it is asked to play.  Useful for hosts that
    finish animations on their own frame loop, and for tests that need
    to observe the battle while an effect is still "playing".
    """

    def __init__(self) -> None:
        self.played: list[BattleEvent] = []
        self._waiting: list[Callable[[], None]] = []

    def play(
        self,
        event: BattleEvent,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self.played.append(event)
        if on_complete is not None:
            self._waiting.append(on_complete)

    @property
    def waiting(self) -> int:
        return len(self._waiting)

    def complete_all(self) -> int:
        """Fire every held completion, including ones queued while firing."""
        fired = 0
        while self._waiting:
            callback = self._waiting.pop(0)
            callback()
            fired += 1
        logger.debug("DeferredSink completed %d effects", fired)
        return fired
