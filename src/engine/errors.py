"""
Minesweeper Engine - Error Taxonomy
Exceptions raised by the engine and its collaborators
"""


class MinesweeperError(Exception):
    """Base class for all engine errors"""


class InvalidConfiguration(MinesweeperError, ValueError):
    """Board dimensions or mine count cannot produce a playable game"""


class InvalidCoordinate(MinesweeperError, IndexError):
    """Coordinate lies outside the board"""

    def __init__(self, x, y, width: int, height: int):
        super().__init__(f"Invalid coordinates: ({x}, {y}) on a {width}x{height} board")
        self.x = x
        self.y = y


class IllegalStateTransition(MinesweeperError):
    """Operation requested on a cell or game in the wrong state"""


class GameAlreadyEnded(IllegalStateTransition):
    """Mutating operation requested after the game was won or lost"""
