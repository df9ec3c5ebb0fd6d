"""Play agent implementations for headless battle simulation.

Re-exports the base class and the concrete agents so consumers can do::

    from deckbattle.sim.play_agents import HeuristicAgent, PlayAgent, RandomAgent
"""

from .base import PlayAgent
from .heuristic_agent import HeuristicAgent
from .random_agent import RandomAgent

__all__ = ["HeuristicAgent", "PlayAgent", "RandomAgent"]
