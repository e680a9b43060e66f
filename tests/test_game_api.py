"""
Unit tests for the MinesweeperAPI facade
"""

import numpy as np
import pytest
from api import MinesweeperAPI, Action
from api.game_api import HIDDEN, FLAG, QUESTION, MINE, WRONG_FLAG
from engine import GameEngine, GamePhase, PresetMinePlacer, InvalidConfiguration


@pytest.fixture
def api():
    """API on a 3x3 board with mines at two opposite corners"""
    api = MinesweeperAPI(3, 3, 2)
    api.engine = GameEngine(3, 3, 2, mine_placer=PresetMinePlacer([(0, 0), (2, 2)]))
    return api


class TestInitialization:

    def test_initial_state(self):
        api = MinesweeperAPI(4, 3, 2)
        state = api.get_game_state()

        assert state['board_size'] == (4, 3)
        assert state['total_mines'] == 2
        assert state['phase'] == GamePhase.NOT_STARTED.value
        assert state['mines_placed'] is False
        assert state['covered_safe_cells'] == 10
        assert state['flags_remaining'] == 2
        assert state['visible_board'] == [[HIDDEN] * 4 for _ in range(3)]
        assert state['is_game_over'] is False
        assert state['elapsed_time'] == 0.0

    def test_invalid_configuration(self):
        with pytest.raises(InvalidConfiguration):
            MinesweeperAPI(2, 2, 4)

    def test_reset_game(self, api):
        api.take_action(2, 0, Action.REVEAL)
        state = api.reset_game()

        assert state['phase'] == GamePhase.NOT_STARTED.value
        assert state['action_count'] == 0
        assert api.get_action_history() == []


class TestTakeAction:

    def test_reveal(self, api):
        result = api.take_action(2, 0, Action.REVEAL)

        assert result['success'] is True
        assert result['coordinates'] == (2, 0)
        assert result['state']['visible_board'] == [
            [HIDDEN, 1, 0],
            [HIDDEN, 2, 1],
            [HIDDEN, HIDDEN, HIDDEN],
        ]
        assert result['state']['covered_safe_cells'] == 3

    def test_invalid_coordinates(self, api):
        result = api.take_action(3, 0, Action.REVEAL)

        assert result['success'] is False
        assert 'Invalid coordinates' in result['error']
        assert api.get_action_history() == []

    def test_numpy_coordinates(self, api):
        """Test coordinates computed from a flat numpy index"""
        y, x = divmod(np.int64(2), 3)
        result = api.take_action(x, y, Action.REVEAL)

        assert result['success'] is True
        assert result['coordinates'] == (2, 0)
        assert type(result['coordinates'][0]) is int
        assert api.get_action_history()[-1]['x'] == 2
        assert result['state']['covered_safe_cells'] == 3

    @pytest.mark.parametrize("x,y", [(1.0, 0), (True, 0), (0, "1")])
    def test_non_integer_coordinates(self, api, x, y):
        result = api.take_action(x, y, Action.REVEAL)

        assert result['success'] is False
        assert 'Invalid coordinates' in result['error']

    def test_toggle_cycle_visible_values(self, api):
        api.take_action(0, 2, Action.TOGGLE)
        assert api.get_visible_board()[2][0] == FLAG
        api.take_action(0, 2, Action.TOGGLE)
        assert api.get_visible_board()[2][0] == QUESTION
        api.take_action(0, 2, Action.TOGGLE)
        assert api.get_visible_board()[2][0] == HIDDEN

    def test_rejected_action_recorded(self, api):
        api.take_action(2, 0, Action.REVEAL)
        result = api.take_action(1, 1, Action.CHORD)

        assert result['success'] is False
        record = api.get_action_history()[-1]
        assert record['action'] == 'chord'
        assert record['success'] is False
        assert record['phase_before'] == record['phase_after'] == 'in_progress'

    def test_strict_engine_error_reported(self):
        api = MinesweeperAPI(3, 3, 2, strict=True)
        api.engine = GameEngine(3, 3, 2, mine_placer=PresetMinePlacer([(0, 0), (2, 2)]),
                                strict=True)
        api.take_action(2, 0, Action.REVEAL)
        result = api.take_action(2, 0, Action.REVEAL)

        assert result['success'] is False
        assert 'cannot reveal' in result['error']

    def test_loss_visible_board(self, api):
        api.take_action(2, 0, Action.REVEAL)
        api.take_action(0, 1, Action.TOGGLE)
        result = api.take_action(0, 0, Action.REVEAL)

        state = result['state']
        assert state['is_lost'] is True
        assert state['visible_board'][0][0] == MINE
        assert state['visible_board'][1][0] == WRONG_FLAG
        assert state['visible_board'][2][2] == MINE


class TestBoardArray:

    def test_shape_and_channels(self, api):
        api.take_action(2, 0, Action.REVEAL)
        api.take_action(0, 0, Action.TOGGLE)
        array = api.get_board_array()

        assert array.shape == (3, 3, 3)
        assert array.dtype == np.float32
        assert array[1, 1, 0] == 2.0
        assert array[0, 0, 0] == FLAG
        assert array[0, 2, 1] == 1.0
        assert array[2, 0, 1] == 0.0
        assert array[0, 0, 2] == 1.0
        assert array[:, :, 1].sum() == 4


class TestValidActions:

    def test_initial_actions(self):
        api = MinesweeperAPI(2, 2, 1)
        actions = api.get_valid_actions()

        assert len(actions) == 8
        assert (0, 0, Action.REVEAL) in actions
        assert (1, 1, Action.TOGGLE) in actions

    def test_chord_offered_when_flags_match(self, api):
        api.take_action(2, 0, Action.REVEAL)
        assert (1, 0, Action.CHORD) not in api.get_valid_actions()

        api.take_action(0, 0, Action.TOGGLE)
        actions = api.get_valid_actions()
        assert (1, 0, Action.CHORD) in actions
        assert (0, 0, Action.REVEAL) not in actions
        assert (0, 0, Action.TOGGLE) in actions

    def test_chord_not_offered_without_default_neighbor(self, api):
        """Test that a satisfied number with nothing left to open offers no chord"""
        api.take_action(2, 0, Action.REVEAL)
        api.take_action(0, 0, Action.TOGGLE)
        api.take_action(0, 1, Action.TOGGLE)
        api.take_action(0, 1, Action.TOGGLE)

        actions = api.get_valid_actions()
        assert (1, 0, Action.CHORD) not in actions
        assert (0, 1, Action.TOGGLE) in actions

    def test_no_actions_after_game_end(self, api):
        api.take_action(2, 0, Action.REVEAL)
        api.take_action(2, 2, Action.REVEAL)
        assert api.get_valid_actions() == []
