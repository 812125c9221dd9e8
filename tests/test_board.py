import random

import pytest

from mathdoku.board import Cage, Op, make_board, is_latin_square, transpose, format_board


class TestMakeBoard:
    """Latin square generation"""

    def test_canonical_board_without_shuffles(self):
        assert make_board(3, shuffle_rounds=0) == [[1, 2, 3], [2, 3, 1], [3, 1, 2]]

    def test_single_cell_board(self, rng):
        assert make_board(1, shuffle_rounds=100, rng=rng) == [[1]]

    @pytest.mark.parametrize("size", range(1, 10))
    def test_rows_and_columns_are_permutations(self, size):
        for seed in range(5):
            board = make_board(size, shuffle_rounds=101, rng=random.Random(seed))
            assert is_latin_square(board)

    def test_same_seed_same_board(self):
        first = make_board(6, shuffle_rounds=500, rng=random.Random(42))
        second = make_board(6, shuffle_rounds=500, rng=random.Random(42))
        assert first == second

    def test_shuffling_moves_rows(self):
        boards = {tuple(map(tuple, make_board(5, 50, random.Random(seed)))) for seed in range(10)}
        assert len(boards) > 1

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            make_board(0)


class TestBoardHelpers:

    def test_transpose(self):
        assert transpose([[1, 2], [3, 4]]) == [[1, 3], [2, 4]]

    def test_is_latin_square_rejects_duplicates(self):
        assert not is_latin_square([[1, 2], [1, 2]])
        assert not is_latin_square([[1, 2], [2, 2]])
        assert not is_latin_square([[1, 2, 3], [2, 3, 1]])

    def test_format_board(self):
        assert format_board([[1, 2], [2, 1]]) == "1 2\n2 1"


class TestCage:

    def test_subtract_holds_in_either_order(self):
        cage = Cage(Op.SUBTRACT, 3, [(0, 0), (0, 1)])
        assert cage.evaluate([[5, 2]])
        assert cage.evaluate([[2, 5]])
        assert not cage.evaluate([[5, 3]])

    def test_divide_holds_in_either_order(self):
        cage = Cage(Op.DIVIDE, 2, [(0, 0), (1, 0)])
        assert cage.evaluate([[2], [4]])
        assert cage.evaluate([[4], [2]])
        assert not cage.evaluate([[3], [4]])

    def test_three_box_clues(self):
        board = [[6, 1, 2]]
        boxes = [(0, 0), (0, 1), (0, 2)]
        assert Cage(Op.ADD, 9, boxes).evaluate(board)
        assert Cage(Op.MULTIPLY, 12, boxes).evaluate(board)
        assert Cage(Op.SUBTRACT, 3, boxes).evaluate(board)
        assert Cage(Op.DIVIDE, 3, boxes).evaluate(board)

    def test_equals_needs_single_box(self):
        assert Cage(Op.EQUALS, 4, [(0, 0)]).evaluate([[4]])
        assert not Cage(Op.EQUALS, 4, [(0, 0), (0, 1)]).evaluate([[4, 4]])

    def test_dict_round_trip(self):
        cage = Cage(Op.MULTIPLY, 12, [(0, 0), (0, 1), (1, 1)])
        data = cage.to_dict()
        assert data == {"op": "*", "val": 12, "boxes": [[0, 0], [0, 1], [1, 1]]}
        assert Cage.from_dict(data) == cage

    def test_unknown_op(self):
        with pytest.raises(ValueError):
            Op.parse("%")
        with pytest.raises(ValueError):
            Cage.from_dict({"op": "^", "val": 1, "boxes": [[0, 0]]})

    def test_empty_cage_rejected(self):
        with pytest.raises(ValueError):
            Cage.from_dict({"op": "+", "val": 1, "boxes": []})

    @pytest.mark.parametrize("data", [
        {"op": "+", "val": 3.7, "boxes": [[0, 0], [0, 1]]},
        {"op": "+", "val": "3", "boxes": [[0, 0], [0, 1]]},
        {"op": "+", "val": 3, "boxes": [[0, 0], [0, 0.9]]},
        {"op": "+", "val": 3, "boxes": [[0, 0], [True, 1]]},
    ])
    def test_fractional_or_non_numeric_fields_rejected(self, data):
        with pytest.raises(ValueError, match="whole number"):
            Cage.from_dict(data)

    def test_duplicate_boxes_rejected(self):
        with pytest.raises(ValueError, match="twice"):
            Cage.from_dict({"op": "+", "val": 2, "boxes": [[0, 0], [0, 0]]})

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            Cage.from_dict({"op": "-", "val": -1, "boxes": [[0, 0], [0, 1]]})

    def test_zero_value_accepted(self):
        assert Cage.from_dict({"op": "-", "val": 0, "boxes": [[0, 0], [0, 1]]}).val == 0
