"""
Engine package initialization
"""

from .board import GameEngine, GamePhase, CellState, Cell, CellView
from .config import GameConfig
from .errors import (MinesweeperError, InvalidConfiguration, InvalidCoordinate,
                     IllegalStateTransition, GameAlreadyEnded)
from .placement import RandomMinePlacer, PresetMinePlacer

__all__ = [
    'GameEngine', 'GamePhase', 'CellState', 'Cell', 'CellView',
    'GameConfig',
    'MinesweeperError', 'InvalidConfiguration', 'InvalidCoordinate',
    'IllegalStateTransition', 'GameAlreadyEnded',
    'RandomMinePlacer', 'PresetMinePlacer',
]
