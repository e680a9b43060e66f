"""
Minesweeper Engine - Core Game Logic
Implements the board, per-cell state machine, deferred mine placement,
flood-fill reveal, chording and end-of-game reclassification
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
import logging
import numbers
import random
import time
from typing import Callable, Deque, FrozenSet, Iterator, List, Optional, Tuple

from .config import GameConfig
from .errors import (GameAlreadyEnded, IllegalStateTransition, InvalidConfiguration,
                     InvalidCoordinate)
from .placement import Coordinate, RandomMinePlacer

logger = logging.getLogger(__name__)


def _is_coordinate(value) -> bool:
    """Integral values, numpy integers included; bools are not coordinates"""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class GamePhase(Enum):
    """Enumeration for game phases; WON and LOST are terminal"""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.WON, GamePhase.LOST)


class CellState(Enum):
    """Enumeration for cell states"""
    # Covered
    DEFAULT = "default"
    FLAGGED = "flagged"
    QUESTION_MARKED = "question_marked"
    # Uncovered
    NUMBER = "number"
    # Assigned only by end-of-game evaluation (or an explosion)
    EXPLODED_MINE = "exploded_mine"
    INCORRECT_FLAG = "incorrect_flag"
    UNFLAGGED_MINE = "unflagged_mine"
    CORRECT_MINE = "correct_mine"

    @property
    def is_covered(self) -> bool:
        return self in _COVERED_STATES


_COVERED_STATES = frozenset([CellState.DEFAULT, CellState.FLAGGED, CellState.QUESTION_MARKED])

# Default -> Flagged -> QuestionMarked -> Default
_TOGGLE_CYCLE = {
    CellState.DEFAULT: CellState.FLAGGED,
    CellState.FLAGGED: CellState.QUESTION_MARKED,
    CellState.QUESTION_MARKED: CellState.DEFAULT,
}


class Cell:
    """Represents a single cell on the minesweeper board"""

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y
        self.has_mine = False
        self.state = CellState.DEFAULT
        self.adjacent_mines: Optional[int] = None

    @property
    def position(self) -> Coordinate:
        return (self.x, self.y)

    def place_mine(self):
        """Place a mine in this cell"""
        self.has_mine = True

    def is_covered(self) -> bool:
        return self.state.is_covered

    def is_flagged(self) -> bool:
        return self.state == CellState.FLAGGED

    def toggle_covered_state(self) -> CellState:
        """Advance the flag cycle and return the new state"""
        if self.state not in _TOGGLE_CYCLE:
            raise IllegalStateTransition(f"cell ({self.x}, {self.y}) is not covered")
        self.state = _TOGGLE_CYCLE[self.state]
        return self.state

    def uncover(self, adjacent_mines: int):
        """Turn a covered, mine-free cell into a number"""
        if self.state != CellState.DEFAULT or self.has_mine:
            raise IllegalStateTransition(f"cell ({self.x}, {self.y}) cannot be uncovered as a number")
        self.state = CellState.NUMBER
        self.adjacent_mines = adjacent_mines

    def explode(self):
        if self.state != CellState.DEFAULT or not self.has_mine:
            raise IllegalStateTransition(f"cell ({self.x}, {self.y}) cannot explode")
        self.state = CellState.EXPLODED_MINE

    def reclassify(self):
        """Assign the final classification shown once the game is over"""
        if self.state == CellState.EXPLODED_MINE:
            return
        if self.has_mine:
            self.state = CellState.CORRECT_MINE if self.is_flagged() else CellState.UNFLAGGED_MINE
        elif self.is_flagged():
            self.state = CellState.INCORRECT_FLAG


@dataclass(frozen=True)
class CellView:
    """Read-only view of a cell handed out to consumers"""
    x: int
    y: int
    state: CellState
    adjacent_mine_count: Optional[int]
    has_mine: Optional[bool]


class GameEngine:
    """Manages the minesweeper board and game logic"""

    def __init__(self, width: int, height: int, num_mines: int,
                 mine_placer=None, clock: Optional[Callable[[], float]] = None,
                 strict: bool = False):
        """
        Create a game with all cells covered and no mines placed yet

        Args:
            width: Number of columns
            height: Number of rows
            num_mines: Number of mines placed on the first reveal
            mine_placer: Object with a place(width, height, num_mines, exclude)
                method; defaults to uniform random placement
            clock: Zero-argument callable returning seconds, read at game
                start and end
            strict: Raise IllegalStateTransition/GameAlreadyEnded on rejected
                moves instead of returning False

        Raises:
            InvalidConfiguration: the board cannot hold a safe first cell
        """
        config = GameConfig(width, height, num_mines, strict=strict).validate()
        self._width = config.width
        self._height = config.height
        self._num_mines = config.num_mines
        self.strict = strict
        self._clock = clock if clock is not None else time.monotonic
        self._mine_placer = mine_placer if mine_placer is not None else RandomMinePlacer()
        self._board: List[List[Cell]] = [
            [Cell(x, y) for x in range(self._width)] for y in range(self._height)
        ]
        self._mines: FrozenSet[Coordinate] = frozenset()
        self._exploded: List[Coordinate] = []
        self._phase = GamePhase.NOT_STARTED
        self._covered_safe_cells = self._width * self._height - self._num_mines
        self._flags_used = 0
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    @classmethod
    def create(cls, width: int, height: int, num_mines: int, **kwargs) -> "GameEngine":
        return cls(width, height, num_mines, **kwargs)

    @classmethod
    def from_config(cls, config: GameConfig, clock: Optional[Callable[[], float]] = None,
                    mine_placer=None) -> "GameEngine":
        """Build an engine from a GameConfig; the seed drives the default placer"""
        if mine_placer is None and config.seed is not None:
            mine_placer = RandomMinePlacer(random.Random(config.seed))
        return cls(config.width, config.height, config.num_mines,
                   mine_placer=mine_placer, clock=clock, strict=config.strict)

    # Mutating operations

    def reveal(self, x: int, y: int) -> bool:
        """
        Uncover a covered-Default cell

        The first accepted reveal places the mines (never under the clicked
        cell) and starts the game. A mine ends the game as a loss; a safe cell
        flood-fills through zero-adjacency regions.

        Returns:
            True if the move was applied, False if it was rejected
        """
        cell = self._get_cell(x, y)
        if self._phase.is_terminal:
            return self._reject(GameAlreadyEnded(f"cannot reveal ({x}, {y}): game is {self._phase.value}"))
        if cell.state != CellState.DEFAULT:
            return self._reject(IllegalStateTransition(
                f"cannot reveal ({x}, {y}): cell is {cell.state.value}"))

        if self._mine_placer is not None:
            self._start_game(cell.position)

        self._reveal_single(cell)
        self._finish_if_done()
        return True

    def toggle_covered_state(self, x: int, y: int) -> bool:
        """Cycle a covered cell through Default -> Flagged -> QuestionMarked"""
        cell = self._get_cell(x, y)
        if self._phase.is_terminal:
            return self._reject(GameAlreadyEnded(f"cannot toggle ({x}, {y}): game is {self._phase.value}"))
        if not cell.is_covered():
            return self._reject(IllegalStateTransition(f"cannot toggle ({x}, {y}): cell is uncovered"))

        old_state = cell.state
        new_state = cell.toggle_covered_state()
        if new_state == CellState.FLAGGED:
            self._flags_used += 1
        elif old_state == CellState.FLAGGED:
            self._flags_used -= 1
        return True

    def reveal_adjacent(self, x: int, y: int) -> bool:
        """
        Chord: reveal every covered-Default neighbor of a number cell whose
        flagged-neighbor count matches its adjacent mine count
        """
        cell = self._get_cell(x, y)
        if self._phase.is_terminal:
            return self._reject(GameAlreadyEnded(f"cannot chord ({x}, {y}): game is {self._phase.value}"))
        if cell.state != CellState.NUMBER:
            return self._reject(IllegalStateTransition(
                f"cannot chord ({x}, {y}): cell is {cell.state.value}"))

        neighbors = list(self._neighbor_cells(cell))
        flagged = sum(1 for neighbor in neighbors if neighbor.is_flagged())
        if flagged != cell.adjacent_mines:
            return self._reject(IllegalStateTransition(
                f"cannot chord ({x}, {y}): {flagged} flags around a {cell.adjacent_mines}"))

        for neighbor in neighbors:
            # An earlier neighbor's flood-fill may already have uncovered this one
            if neighbor.state == CellState.DEFAULT:
                self._reveal_single(neighbor)
        self._finish_if_done()
        return True

    # Queries

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def num_mines(self) -> int:
        return self._num_mines

    def get_phase(self) -> GamePhase:
        return self._phase

    def mines_placed(self) -> bool:
        return self._mine_placer is None

    def flags_used(self) -> int:
        return self._flags_used

    def flags_remaining(self) -> int:
        """Mines minus flags; negative when the player over-flags"""
        return self._num_mines - self._flags_used

    def covered_safe_cell_count(self) -> int:
        return self._covered_safe_cells

    def is_done(self) -> bool:
        return self._phase.is_terminal

    def is_win(self) -> bool:
        return self._phase == GamePhase.WON

    def is_lost(self) -> bool:
        return self._phase == GamePhase.LOST

    def get_cell_state(self, x: int, y: int) -> CellState:
        return self._get_cell(x, y).state

    def get_adjacent_mine_count(self, x: int, y: int) -> Optional[int]:
        """Adjacent mine count of an uncovered number cell, else None"""
        return self._get_cell(x, y).adjacent_mines

    def get_mine_positions(self) -> FrozenSet[Coordinate]:
        return self._mines

    def get_exploded_positions(self) -> Tuple[Coordinate, ...]:
        return tuple(self._exploded)

    def neighbors(self, x: int, y: int) -> List[Coordinate]:
        """Coordinates of the Moore neighborhood of (x, y) inside the board"""
        return [neighbor.position for neighbor in self._neighbor_cells(self._get_cell(x, y))]

    def get_board_snapshot(self) -> Tuple[Tuple[CellView, ...], ...]:
        """
        Read-only copy of the board, indexed [y][x]

        Mine locations are withheld (has_mine is None) until the game ends.
        """
        show_mines = self._phase.is_terminal
        return tuple(
            tuple(
                CellView(cell.x, cell.y, cell.state, cell.adjacent_mines,
                         cell.has_mine if show_mines else None)
                for cell in row
            )
            for row in self._board
        )

    def elapsed_time(self) -> float:
        """Seconds since the first reveal, frozen once the game ends"""
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else self._clock()
        return end - self._start_time

    # Internals

    def _reject(self, error: IllegalStateTransition) -> bool:
        if self.strict:
            raise error
        logger.debug("Rejected move: %s", error)
        return False

    def _get_cell(self, x: int, y: int) -> Cell:
        if not (_is_coordinate(x) and _is_coordinate(y)):
            raise InvalidCoordinate(x, y, self._width, self._height)
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise InvalidCoordinate(x, y, self._width, self._height)
        return self._board[int(y)][int(x)]

    def _neighbor_cells(self, cell: Cell) -> Iterator[Cell]:
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = cell.x + dx, cell.y + dy
                if 0 <= nx < self._width and 0 <= ny < self._height:
                    yield self._board[ny][nx]

    def _start_game(self, first_click: Coordinate):
        """Place mines once, away from the first click, and start the clock"""
        mines = self._check_mines(
            self._mine_placer.place(self._width, self._height, self._num_mines, first_click),
            first_click)
        self._mine_placer = None
        for x, y in mines:
            self._board[y][x].place_mine()
        self._mines = mines
        self._phase = GamePhase.IN_PROGRESS
        self._start_time = self._clock()
        logger.info("Game started on %dx%d board with %d mines",
                    self._width, self._height, self._num_mines)

    def _check_mines(self, mines, first_click: Coordinate) -> FrozenSet[Coordinate]:
        """Validate a placer's result before any cell is touched"""
        checked = set()
        for position in mines:
            try:
                x, y = position
            except (TypeError, ValueError):
                raise InvalidConfiguration(f"placer returned malformed mine {position!r}") from None
            if not (_is_coordinate(x) and _is_coordinate(y)
                    and 0 <= x < self._width and 0 <= y < self._height):
                raise InvalidConfiguration(f"placer returned off-board mine {position!r}")
            checked.add((int(x), int(y)))
        if len(checked) != self._num_mines:
            raise InvalidConfiguration(
                f"placer returned {len(checked)} distinct mines, game expects {self._num_mines}")
        if first_click in checked:
            raise InvalidConfiguration(f"placer mined the first-click cell {first_click}")
        return frozenset(checked)

    def _reveal_single(self, cell: Cell):
        if cell.has_mine:
            cell.explode()
            self._exploded.append(cell.position)
            return
        self._flood_fill(cell)

    def _flood_fill(self, start: Cell):
        """Uncover start and every cell reachable through zero-adjacency cells"""
        queue: Deque[Cell] = deque([start])
        uncovered = 0
        while queue:
            cell = queue.popleft()
            # Queued more than once via different zero neighbors
            if cell.state != CellState.DEFAULT:
                continue
            neighbors = list(self._neighbor_cells(cell))
            count = sum(1 for neighbor in neighbors if neighbor.has_mine)
            cell.uncover(count)
            self._covered_safe_cells -= 1
            uncovered += 1
            if count == 0:
                queue.extend(neighbor for neighbor in neighbors
                             if neighbor.state == CellState.DEFAULT)
        logger.debug("Flood-fill from (%d, %d) uncovered %d cells", start.x, start.y, uncovered)

    def _finish_if_done(self):
        if self._exploded:
            self._end_game(won=False)
        elif self._covered_safe_cells == 0:
            self._end_game(won=True)

    def _end_game(self, won: bool):
        """Reclassify every cell and freeze the game"""
        for row in self._board:
            for cell in row:
                cell.reclassify()
        self._phase = GamePhase.WON if won else GamePhase.LOST
        self._end_time = self._clock()
        logger.info("Game %s after %.1f seconds", self._phase.value, self.elapsed_time())
