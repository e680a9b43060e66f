"""
Minesweeper Engine - Game Configuration
"""

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidConfiguration


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class GameConfig:
    """Parameters for a single game"""
    width: int
    height: int
    num_mines: int
    seed: Optional[int] = None
    strict: bool = False

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    def validate(self) -> "GameConfig":
        """
        Check that the configuration describes a playable board

        Returns:
            The configuration itself, for chaining

        Raises:
            InvalidConfiguration: dimensions are not positive integers, the
                mine count is negative, or no safe cell would remain
        """
        if not _is_int(self.width) or self.width <= 0:
            raise InvalidConfiguration(f"width must be a positive integer, got {self.width!r}")
        if not _is_int(self.height) or self.height <= 0:
            raise InvalidConfiguration(f"height must be a positive integer, got {self.height!r}")
        if not _is_int(self.num_mines) or self.num_mines < 0:
            raise InvalidConfiguration(f"num_mines must be a non-negative integer, got {self.num_mines!r}")
        if self.num_mines >= self.total_cells:
            raise InvalidConfiguration(
                f"num_mines ({self.num_mines}) must be less than the number of cells ({self.total_cells})"
            )
        return self
