"""
Shared fixtures for engine tests
"""

import pytest
from engine import GameEngine, PresetMinePlacer


@pytest.fixture
def preset_engine():
    """Factory for engines with mines at known positions"""
    def _make(width, height, mines, **kwargs):
        return GameEngine(width, height, len(mines),
                          mine_placer=PresetMinePlacer(mines), **kwargs)
    return _make
