"""World state management module."""

from game_state.state import WorldState
from game_state.initialization import build_initial_state

__all__ = [
    'WorldState',
    'build_initial_state',
]
