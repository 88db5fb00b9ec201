"""Tests for the player-facing board and its save file."""

import pytest

from board import Board, Cell, SaveFileError


@pytest.fixture
def puzzle(solved):
    grid = [row[:] for row in solved]
    for r, c in [(0, 0), (0, 1), (4, 4), (8, 8)]:
        grid[r][c] = 0
    return grid


class TestSetup:
    def test_new_board_is_empty(self):
        board = Board()
        assert board.current_grid() == [[0] * 9 for _ in range(9)]
        assert not board.is_cell_fixed(0, 0)
        assert board.cells[0][0] == Cell(0, False)

    def test_fixed_cells_follow_puzzle(self, puzzle):
        board = Board.from_puzzle(puzzle)
        assert not board.is_cell_fixed(0, 0)
        assert board.is_cell_fixed(0, 2)
        assert board.cells[0][2].fixed
        assert board.fixed_mask()[4][4] is False
        assert board.current_grid() == puzzle

    def test_puzzle_is_copied(self, puzzle):
        board = Board.from_puzzle(puzzle)
        puzzle[0][2] = 0
        assert board.get_cell_value(0, 2) == 4

    @pytest.mark.parametrize(
        "bad",
        [
            None,
            [[0] * 9] * 8,
            [[0] * 8 for _ in range(9)],
            [[0] * 9 for _ in range(8)] + [[0] * 8 + [10]],
            [[0] * 9 for _ in range(8)] + [[0] * 8 + ["1"]],
        ],
    )
    def test_rejects_malformed_puzzle(self, bad):
        with pytest.raises(ValueError, match="9x9|integer 0-9"):
            Board().set_initial_puzzle(bad)


class TestMoves:
    def test_fixed_cell_is_not_changed(self, puzzle):
        board = Board.from_puzzle(puzzle)
        assert not board.set_cell_value(0, 2, 9)
        assert board.get_cell_value(0, 2) == 4

    def test_editable_cell(self, puzzle):
        board = Board.from_puzzle(puzzle)
        assert board.set_cell_value(0, 0, 5)
        assert board.get_cell_value(0, 0) == 5
        assert board.set_cell_value(0, 0, 0)
        assert board.get_cell_value(0, 0) == 0

    def test_value_out_of_range(self, puzzle):
        with pytest.raises(ValueError):
            Board.from_puzzle(puzzle).set_cell_value(0, 0, 10)

    def test_is_valid_move(self, puzzle):
        board = Board.from_puzzle(puzzle)
        assert board.is_valid_move(0, 0, 5)
        assert not board.is_valid_move(0, 0, 4)  # row
        assert not board.is_valid_move(0, 0, 8)  # column
        assert not board.is_valid_move(0, 1, 9)  # column and box
        assert board.is_valid_move(0, 0, 0)

    def test_move_ignores_own_cell(self, solved):
        board = Board.from_puzzle(solved)
        assert board.is_valid_move(4, 4, 5)

    def test_solved(self, puzzle, solved):
        board = Board.from_puzzle(puzzle)
        assert not board.is_solved()
        for r, c in [(0, 0), (0, 1), (4, 4), (8, 8)]:
            board.set_cell_value(r, c, solved[r][c])
        assert board.is_solved()

    def test_not_solved_with_conflict(self, puzzle):
        board = Board.from_puzzle(puzzle)
        for r, c in [(0, 0), (0, 1), (4, 4), (8, 8)]:
            board.set_cell_value(r, c, 1)
        assert not board.is_solved()


class TestPersistence:
    def test_dumps_format(self, puzzle):
        board = Board.from_puzzle(puzzle)
        board.set_cell_value(0, 0, 5)
        lines = board.dumps().splitlines()
        assert len(lines) == 19
        assert lines[0] == "0,0,4,6,7,8,9,1,2"
        assert lines[9] == ""
        assert lines[10] == "5,0,4,6,7,8,9,1,2"

    def test_save_and_load(self, puzzle, tmp_path):
        board = Board.from_puzzle(puzzle)
        board.set_cell_value(4, 4, 5)
        path = str(tmp_path / "game.txt")
        board.save_game(path)

        loaded = Board()
        loaded.load_game(path)
        assert loaded.initial_grid() == puzzle
        assert loaded.get_cell_value(4, 4) == 5
        assert not loaded.is_cell_fixed(4, 4)
        assert loaded.is_cell_fixed(0, 2)
        assert not loaded.set_cell_value(0, 2, 1)

    def test_session_form(self, puzzle):
        board = Board.from_puzzle(puzzle)
        board.set_cell_value(8, 8, 9)
        copy = Board.from_dict(board.to_dict())
        assert copy.current_grid() == board.current_grid()
        assert copy.fixed_mask() == board.fixed_mask()

    def test_incomplete_file(self, puzzle):
        text = Board.from_puzzle(puzzle).dumps()
        with pytest.raises(SaveFileError, match="incomplete \\(current values\\)"):
            Board.loads("\n".join(text.splitlines()[:15]))
        with pytest.raises(SaveFileError, match="incomplete \\(initial values\\)"):
            Board.loads("1,2,3,4,5,6,7,8,9\n")

    def test_bad_line(self, puzzle):
        lines = Board.from_puzzle(puzzle).dumps().splitlines()
        lines[2] = "1,2,3"
        with pytest.raises(SaveFileError, match="initial values\\) on line 3"):
            Board.loads("\n".join(lines))

    def test_bad_value(self, puzzle):
        lines = Board.from_puzzle(puzzle).dumps().splitlines()
        lines[11] = "1,2,x,4,5,6,7,8,9"
        with pytest.raises(SaveFileError, match="current values on line 2, column 3"):
            Board.loads("\n".join(lines))

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Board().load_game(str(tmp_path / "missing.txt"))
