"""
Minesweeper Engine - Mine Placement
Placers run once per game, on the first reveal, and never mine the clicked cell
"""

import logging
import random
from typing import FrozenSet, Iterable, Optional, Tuple

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]


class RandomMinePlacer:
    """Places mines uniformly at random among all cells except the excluded one"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def place(self, width: int, height: int, num_mines: int,
              exclude: Coordinate) -> FrozenSet[Coordinate]:
        """
        Choose mine positions

        Args:
            width: Board width
            height: Board height
            num_mines: Number of mines to place
            exclude: Coordinate that must stay mine-free (the first click)

        Returns:
            Set of (x, y) mine coordinates, exactly num_mines long
        """
        candidates = [(x, y) for y in range(height) for x in range(width)
                      if (x, y) != exclude]
        if num_mines > len(candidates):
            raise InvalidConfiguration(
                f"cannot place {num_mines} mines in {len(candidates)} free cells"
            )
        mines = frozenset(self.rng.sample(candidates, num_mines))
        logger.debug("Placed %d mines avoiding %s", len(mines), exclude)
        return mines


class PresetMinePlacer:
    """Places mines at fixed positions, for tests and replays"""

    def __init__(self, positions: Iterable[Coordinate]):
        self.positions = frozenset((int(x), int(y)) for x, y in positions)

    def place(self, width: int, height: int, num_mines: int,
              exclude: Coordinate) -> FrozenSet[Coordinate]:
        if len(self.positions) != num_mines:
            raise InvalidConfiguration(
                f"preset has {len(self.positions)} mines, game expects {num_mines}"
            )
        for x, y in self.positions:
            if not (0 <= x < width and 0 <= y < height):
                raise InvalidConfiguration(f"preset mine ({x}, {y}) is off the board")
        if exclude in self.positions:
            raise InvalidConfiguration(f"preset mine at first-click cell {exclude}")
        return self.positions
