"""
API Package for Minesweeper
Facade used by UI, CLI and agent collaborators
"""

from .game_api import MinesweeperAPI, Action

__all__ = ['MinesweeperAPI', 'Action']
