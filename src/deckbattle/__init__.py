"""Headless deck-building card battle engine.

``deckbattle.ir`` holds the static content schema (cards, enemies, boss
patterns, stages); ``deckbattle.sim`` holds the battle engine that runs
that content.
"""

__version__ = "0.1.0"
