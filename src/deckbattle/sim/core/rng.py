"""Seeded random source for reproducible battles and campaigns.

A campaign owns one root ``GameRNG``.  ``Campaign`` forks a ``rewards``
stream for card offers and one ``battle:<n>:<stage>`` stream per fight;
``create_battle`` splits each battle stream into ``deck`` (shuffles and
reshuffles) and ``intents`` (enemy AI rolls).  Agents get their own
``agent`` stream in the runner.  Because every stream is derived from a
name, playing one more card never changes what the next reward offer
or enemy roll will be.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """One named random stream.

    Parameters
    ----------
    seed:
        Integer seed.  Battles built from the same seed replay the same
        shuffles, intents and rewards.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    # -- draws ---------------------------------------------------------------

    def random_int(self, low: int, high: int) -> int:
        """Inclusive on both ends, as used for the 5..10 fallback attack."""
        return self._rng.randint(low, high)

    def random_float(self) -> float:
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """Roll against *probability*, e.g. the 30% defend chance."""
        return self._rng.random() < probability

    def random_choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def sample(self, seq: Sequence[T], k: int) -> list[T]:
        """Distinct picks for a reward offer.  A short pool yields all of it."""
        return self._rng.sample(list(seq), min(k, len(seq)))

    def shuffle(self, lst: list[T]) -> None:
        """Shuffle a draw pile in place."""
        self._rng.shuffle(lst)

    # -- forking -------------------------------------------------------------

    def fork(self, name: str) -> GameRNG:
        """Derive the child stream called *name*.

        The child seed is a hash of this seed and *name*, so the same
        campaign seed always gives the same ``deck`` or ``rewards`` stream
        regardless of how many values the parent has handed out.
        """
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        return GameRNG(int.from_bytes(digest[:8], "big"))

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
