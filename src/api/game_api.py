"""
Minesweeper Game API
Provides a single entry point for UI, CLI and agent collaborators to drive
an engine and read its observable state
"""

import logging
import numbers
import random
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from engine import (CellState, GameEngine, GamePhase, IllegalStateTransition,
                    RandomMinePlacer)

logger = logging.getLogger(__name__)

# Values used in visible_board and channel 0 of get_board_array()
HIDDEN = -3
FLAG = -2
QUESTION = -4
MINE = -1
WRONG_FLAG = -5

_VISIBLE_VALUES = {
    CellState.DEFAULT: HIDDEN,
    CellState.FLAGGED: FLAG,
    CellState.QUESTION_MARKED: QUESTION,
    CellState.EXPLODED_MINE: MINE,
    CellState.UNFLAGGED_MINE: MINE,
    CellState.CORRECT_MINE: FLAG,
    CellState.INCORRECT_FLAG: WRONG_FLAG,
}


class Action(Enum):
    """Available actions"""
    REVEAL = "reveal"
    TOGGLE = "toggle"
    CHORD = "chord"


class MinesweeperAPI:
    """
    API for collaborators to interact with a Minesweeper engine
    Handles coordinate validation, action history and board state exports
    """

    def __init__(self, width: int = 9, height: int = 9, num_mines: int = 10,
                 seed: Optional[int] = None, strict: bool = False):
        """
        Initialize the game API

        Args:
            width: Number of columns in the game board
            height: Number of rows in the game board
            num_mines: Number of mines to place
            seed: Seed for mine placement; successive games draw from one stream
            strict: Passed through to the engine

        Raises:
            InvalidConfiguration: the board cannot be built
        """
        self.width = width
        self.height = height
        self.num_mines = num_mines
        self.strict = strict
        self._rng = random.Random(seed)
        self.engine = self._new_engine()
        self.action_history: List[Dict[str, Any]] = []

    def _new_engine(self) -> GameEngine:
        return GameEngine(self.width, self.height, self.num_mines,
                          mine_placer=RandomMinePlacer(self._rng), strict=self.strict)

    def reset_game(self) -> Dict[str, Any]:
        """
        Start a new game with the same dimensions

        Returns:
            Initial game state
        """
        self.engine = self._new_engine()
        self.action_history.clear()
        return self.get_game_state()

    def take_action(self, x: int, y: int, action: Action) -> Dict[str, Any]:
        """
        Take an action at the specified coordinates

        Args:
            x: Column coordinate (0-indexed)
            y: Row coordinate (0-indexed)
            action: Action to take (REVEAL, TOGGLE, CHORD)

        Returns:
            Result with success flag, optional error and the updated state
        """
        if not self._is_valid_coordinate(x, y):
            return {
                'success': False,
                'error': f'Invalid coordinates: ({x}, {y})',
                'state': self.get_game_state()
            }
        # numpy integers from array indexing become plain ints
        x, y = int(x), int(y)

        action_record = {
            'x': x,
            'y': y,
            'action': action.value,
            'phase_before': self.engine.get_phase().value
        }

        success = False
        error = None

        try:
            if action == Action.REVEAL:
                success = self.engine.reveal(x, y)
            elif action == Action.TOGGLE:
                success = self.engine.toggle_covered_state(x, y)
            elif action == Action.CHORD:
                success = self.engine.reveal_adjacent(x, y)
            else:
                error = f"Unknown action: {action}"
        except IllegalStateTransition as e:
            # Only raised by strict engines
            error = str(e)

        if error:
            logger.debug("Action %s at (%d, %d) failed: %s", action.value, x, y, error)

        action_record.update({
            'success': success,
            'error': error,
            'phase_after': self.engine.get_phase().value
        })
        self.action_history.append(action_record)

        result = {
            'success': success,
            'action': action.value,
            'coordinates': (x, y),
            'state': self.get_game_state()
        }
        if error:
            result['error'] = error
        return result

    def get_game_state(self) -> Dict[str, Any]:
        """
        Get the current observable game state

        Returns:
            Dictionary of counters, phase flags and the visible board
        """
        phase = self.engine.get_phase()
        return {
            'board_size': (self.width, self.height),
            'total_mines': self.num_mines,
            'phase': phase.value,
            'mines_placed': self.engine.mines_placed(),
            'covered_safe_cells': self.engine.covered_safe_cell_count(),
            'flags_used': self.engine.flags_used(),
            'flags_remaining': self.engine.flags_remaining(),
            'visible_board': self.get_visible_board(),
            'action_count': len(self.action_history),
            'is_game_over': self.engine.is_done(),
            'is_won': phase == GamePhase.WON,
            'is_lost': phase == GamePhase.LOST,
            'elapsed_time': self.engine.elapsed_time(),
        }

    def get_visible_board(self) -> List[List[int]]:
        """Board as nested lists indexed [y][x], numbers 0-8 or a marker value"""
        visible = []
        for row in self.engine.get_board_snapshot():
            visible_row = []
            for view in row:
                if view.state == CellState.NUMBER:
                    visible_row.append(view.adjacent_mine_count)
                else:
                    visible_row.append(_VISIBLE_VALUES[view.state])
            visible.append(visible_row)
        return visible

    def get_board_array(self) -> np.ndarray:
        """
        Get the board as a numpy array

        Returns:
            3D numpy array: [height, width, channels]
            Channels:
            0: Visible value (see get_visible_board)
            1: Is uncovered (0 or 1)
            2: Is flagged (0 or 1)
        """
        snapshot = self.engine.get_board_snapshot()
        visible = np.array(self.get_visible_board(), dtype=np.float32)
        uncovered = np.array([[0.0 if view.state.is_covered else 1.0 for view in row]
                              for row in snapshot], dtype=np.float32)
        flagged = np.array([[1.0 if view.state == CellState.FLAGGED else 0.0 for view in row]
                            for row in snapshot], dtype=np.float32)
        return np.stack([visible, uncovered, flagged], axis=-1)

    def get_valid_actions(self) -> List[Tuple[int, int, Action]]:
        """
        Get the useful actions in the current state

        Covered-Default cells offer REVEAL and TOGGLE, flagged and
        question-marked cells offer TOGGLE, and number cells offer CHORD only
        when their flagged-neighbor count matches and a covered-Default
        neighbor remains to be revealed.

        Returns:
            List of (x, y, action) tuples
        """
        if self.engine.is_done():
            return []

        valid_actions = []
        for row in self.engine.get_board_snapshot():
            for view in row:
                if view.state == CellState.DEFAULT:
                    valid_actions.append((view.x, view.y, Action.REVEAL))
                    valid_actions.append((view.x, view.y, Action.TOGGLE))
                elif view.state.is_covered:
                    valid_actions.append((view.x, view.y, Action.TOGGLE))
                elif self._can_chord(view.x, view.y, view.adjacent_mine_count):
                    valid_actions.append((view.x, view.y, Action.CHORD))
        return valid_actions

    def get_action_history(self) -> List[Dict[str, Any]]:
        """
        Get the history of all actions taken

        Returns:
            List of action records
        """
        return self.action_history.copy()

    def _can_chord(self, x: int, y: int, adjacent_mine_count: Optional[int]) -> bool:
        flagged = 0
        has_default = False
        for nx, ny in self.engine.neighbors(x, y):
            state = self.engine.get_cell_state(nx, ny)
            if state == CellState.FLAGGED:
                flagged += 1
            elif state == CellState.DEFAULT:
                has_default = True
        return has_default and flagged == adjacent_mine_count

    def _is_valid_coordinate(self, x: int, y: int) -> bool:
        """Check if coordinates are valid"""
        for value in (x, y):
            if not isinstance(value, numbers.Integral) or isinstance(value, bool):
                return False
        return 0 <= x < self.width and 0 <= y < self.height
