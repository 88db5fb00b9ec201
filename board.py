import logging
from dataclasses import dataclass
from typing import Any

from sudoku_generator import BOX, SIZE, Grid, copy_grid, empty_grid

log = logging.getLogger(__name__)


class SaveFileError(ValueError):
    """Raised when a saved game cannot be parsed."""


@dataclass
class Cell:
    value: int = 0
    fixed: bool = False


def _check_grid(grid: Any, name: str = "puzzle") -> Grid:
    if not isinstance(grid, (list, tuple)) or len(grid) != SIZE:
        raise ValueError(f"The {name} must be a 9x9 matrix.")
    rows = []
    for r, row in enumerate(grid):
        if not isinstance(row, (list, tuple)) or len(row) != SIZE:
            raise ValueError(f"The {name} must be a 9x9 matrix (row {r + 1}).")
        for c, v in enumerate(row):
            if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= 9:
                raise ValueError(
                    f"The {name} holds {v!r} at row {r + 1}, column {c + 1}; "
                    "expected an integer 0-9."
                )
        rows.append(list(row))
    return rows


def _check_digit(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 9:
        raise ValueError(f"Cell value must be an integer 0-9, got {value!r}.")
    return value


class Board:
    """A game in progress: the generated puzzle plus the player's entries.

    A cell is fixed when the puzzle it was built from had a clue there.
    """

    def __init__(self):
        self.cells: list[list[Cell]] = [[Cell() for _ in range(SIZE)] for _ in range(SIZE)]
        self.initial: Grid = empty_grid()

    @classmethod
    def from_puzzle(cls, puzzle: Grid) -> "Board":
        board = cls()
        board.set_initial_puzzle(puzzle)
        return board

    def set_initial_puzzle(self, puzzle: Grid) -> None:
        puzzle = _check_grid(puzzle)
        self.initial = copy_grid(puzzle)
        self.cells = [[Cell(v, v != 0) for v in row] for row in puzzle]

    def get_cell_value(self, row: int, col: int) -> int:
        return self.cells[row][col].value

    def set_cell_value(self, row: int, col: int, value: int) -> bool:
        """Store ``value`` unless the cell is fixed. Returns whether it was stored."""
        value = _check_digit(value)
        cell = self.cells[row][col]
        if cell.fixed:
            return False
        cell.value = value
        return True

    def is_cell_fixed(self, row: int, col: int) -> bool:
        return self.initial[row][col] != 0

    def is_valid_move(self, row: int, col: int, value: int) -> bool:
        if value == 0:
            return True

        for i in range(SIZE):
            if i != col and self.cells[row][i].value == value:
                return False
        for i in range(SIZE):
            if i != row and self.cells[i][col].value == value:
                return False

        br, bc = BOX * (row // BOX), BOX * (col // BOX)
        for i in range(br, br + BOX):
            for j in range(bc, bc + BOX):
                if (i != row or j != col) and self.cells[i][j].value == value:
                    return False
        return True

    def is_solved(self) -> bool:
        for r in range(SIZE):
            for c in range(SIZE):
                value = self.get_cell_value(r, c)
                if value == 0 or not self.is_valid_move(r, c, value):
                    return False
        return True

    def initial_grid(self) -> Grid:
        return copy_grid(self.initial)

    def current_grid(self) -> Grid:
        return [[cell.value for cell in row] for row in self.cells]

    def fixed_mask(self) -> list[list[bool]]:
        return [[v != 0 for v in row] for row in self.initial]

    # ---- session form ----
    def to_dict(self) -> dict[str, Grid]:
        return {"initial": self.initial_grid(), "current": self.current_grid()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        board = cls()
        board._restore(_check_grid(data["initial"], "initial grid"),
                       _check_grid(data["current"], "current grid"))
        return board

    def _restore(self, initial: Grid, current: Grid) -> None:
        self.initial = initial
        self.cells = [
            [Cell(current[r][c], initial[r][c] != 0) for c in range(SIZE)]
            for r in range(SIZE)
        ]

    # ---- save file ----
    def dumps(self) -> str:
        lines = [",".join(str(v) for v in row) for row in self.initial]
        lines.append("")
        lines += [",".join(str(v) for v in row) for row in self.current_grid()]
        return "\n".join(lines) + "\n"

    @classmethod
    def loads(cls, text: str) -> "Board":
        lines = text.splitlines()
        initial = _parse_block(lines, 0, "initial values")
        # lines[9] is the blank separator
        current = _parse_block(lines, SIZE + 1, "current values")
        board = cls()
        board._restore(initial, current)
        return board

    def save_game(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.dumps())
        log.debug("Saved game to %s", path)

    def load_game(self, path: str) -> None:
        with open(path, "r", encoding="utf-8") as f:
            loaded = self.loads(f.read())
        self.initial, self.cells = loaded.initial, loaded.cells
        log.debug("Loaded game from %s", path)


def _parse_block(lines: list[str], start: int, name: str) -> Grid:
    grid = []
    for i in range(SIZE):
        if start + i >= len(lines):
            raise SaveFileError(f"Save file incomplete ({name}).")
        fields = lines[start + i].split(",")
        if len(fields) != SIZE:
            raise SaveFileError(f"Invalid line format ({name}) on line {i + 1}")
        row = []
        for j, field in enumerate(fields):
            try:
                value = int(field.strip())
            except ValueError:
                raise SaveFileError(
                    f"Invalid value in {name} on line {i + 1}, column {j + 1}"
                ) from None
            if not 0 <= value <= 9:
                raise SaveFileError(
                    f"Value out of range in {name} on line {i + 1}, column {j + 1}"
                )
            row.append(value)
        grid.append(row)
    return grid
