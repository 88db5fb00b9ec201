import logging
import random
from dataclasses import dataclass
from enum import Enum

log = logging.getLogger(__name__)

Grid = list[list[int]]

SIZE = 9
BOX = 3
DIGITS = list(range(1, 10))

# Upper bound on random cell picks made by remove_numbers.
MAX_REMOVAL_ATTEMPTS = 20000


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, text: str) -> "Difficulty":
        try:
            return cls(str(text).strip().lower())
        except ValueError:
            raise ValueError(
                f"unknown difficulty {text!r}, expected one of: "
                + ", ".join(d.value for d in cls)
            ) from None

    @property
    def removals(self) -> int:
        return REMOVAL_TARGETS[self]

    @property
    def clues(self) -> int:
        return SIZE * SIZE - self.removals


# Cells cleared per tier. This is the only table consulted; clue counts are
# derived from it.
REMOVAL_TARGETS = {
    Difficulty.EASY: 40,
    Difficulty.MEDIUM: 50,
    Difficulty.HARD: 60,
}


@dataclass
class SolutionCounter:
    """Solutions found so far by one count_solutions run."""

    count: int = 0


def empty_grid() -> Grid:
    return [[0] * SIZE for _ in range(SIZE)]


def copy_grid(grid: Grid) -> Grid:
    return [row[:] for row in grid]


def is_empty_grid(grid: Grid) -> bool:
    return not any(any(row) for row in grid)


def is_valid(grid: Grid, row: int, col: int, value: int) -> bool:
    if any(grid[row][j] == value for j in range(SIZE)):
        return False
    if any(grid[i][col] == value for i in range(SIZE)):
        return False
    br, bc = BOX * (row // BOX), BOX * (col // BOX)
    for i in range(br, br + BOX):
        for j in range(bc, bc + BOX):
            if grid[i][j] == value:
                return False
    return True


def is_complete_solution(grid: Grid) -> bool:
    """True if every row, column and box holds 1..9 exactly once."""
    digits = set(DIGITS)
    for r in range(SIZE):
        if set(grid[r]) != digits:
            return False
    for c in range(SIZE):
        if {grid[r][c] for r in range(SIZE)} != digits:
            return False
    for br in range(0, SIZE, BOX):
        for bc in range(0, SIZE, BOX):
            box = {grid[r][c] for r in range(br, br + BOX) for c in range(bc, bc + BOX)}
            if box != digits:
                return False
    return True


def _next_cell(row: int, col: int) -> tuple[int, int]:
    if col == SIZE - 1:
        return row + 1, 0
    return row, col + 1


def fill_board(grid: Grid, row: int = 0, col: int = 0,
               rng: random.Random | None = None) -> bool:
    """Fill the empty cells of ``grid`` in place with a random valid solution.

    Cells are visited in row-major order starting at (row, col). Candidate
    digits for each empty cell are tried in a freshly shuffled order, so
    repeated calls on an empty grid produce different solutions.
    Returns False if no completion exists from this position.
    """
    if col == SIZE:
        row, col = row + 1, 0
    if row == SIZE:
        return True

    if grid[row][col] != 0:
        return fill_board(grid, row, col + 1, rng)

    nums = DIGITS[:]
    (rng or random).shuffle(nums)
    for n in nums:
        if is_valid(grid, row, col, n):
            grid[row][col] = n
            if fill_board(grid, row, col + 1, rng):
                return True
            grid[row][col] = 0
    return False


def count_solutions(grid: Grid, row: int, col: int,
                    counter: SolutionCounter, limit: int = 2) -> bool:
    """Count completions of ``grid`` into ``counter``, stopping at ``limit``.

    Digits are tried in ascending order and every placement is undone, so the
    grid is unchanged on return. The return value only drives the recursion
    and is always False.
    """
    if counter.count >= limit:
        return False

    if row == SIZE:
        counter.count += 1
        return False

    next_row, next_col = _next_cell(row, col)

    if grid[row][col] != 0:
        return count_solutions(grid, next_row, next_col, counter, limit)

    for n in DIGITS:
        if is_valid(grid, row, col, n):
            grid[row][col] = n
            count_solutions(grid, next_row, next_col, counter, limit)
            grid[row][col] = 0
    return False


def remove_number_if_unique(grid: Grid, row: int, col: int) -> bool:
    if grid[row][col] == 0:
        return False

    backup = grid[row][col]
    grid[row][col] = 0

    counter = SolutionCounter()
    count_solutions(grid, 0, 0, counter, limit=2)
    if counter.count != 1:
        grid[row][col] = backup
        return False
    return True


def remove_numbers(grid: Grid, difficulty: Difficulty,
                   rng: random.Random | None = None,
                   max_attempts: int = MAX_REMOVAL_ATTEMPTS) -> int:
    """Clear random cells of a solved ``grid`` while the solution stays unique.

    Stops once ``difficulty.removals`` cells are cleared, once every remaining
    clue is known to be required, or after ``max_attempts`` random picks. In
    the last two cases the puzzle has fewer removals than requested. Returns
    the number of cells cleared.
    """
    rng = rng or random
    target = difficulty.removals
    filled = sum(1 for row in grid for v in row if v != 0)
    # A clue that could not be removed stays required as more cells are cleared.
    required: set[tuple[int, int]] = set()

    removed = 0
    attempts = 0
    while removed < target:
        if filled - len(required) == 0:
            log.warning("No removable clues left after %d removals (wanted %d)",
                        removed, target)
            break
        if attempts >= max_attempts:
            log.warning("Gave up after %d attempts with %d of %d removals",
                        attempts, removed, target)
            break
        attempts += 1

        r, c = rng.randrange(SIZE), rng.randrange(SIZE)
        if grid[r][c] == 0 or (r, c) in required:
            continue
        if remove_number_if_unique(grid, r, c):
            removed += 1
            filled -= 1
        else:
            required.add((r, c))

    log.debug("Removed %d cells for %s in %d attempts",
              removed, difficulty.value, attempts)
    return removed


def generate_with_solution(difficulty: Difficulty | str = Difficulty.EASY,
                           rng: random.Random | None = None,
                           max_attempts: int = MAX_REMOVAL_ATTEMPTS) -> tuple[Grid, Grid]:
    if not isinstance(difficulty, Difficulty):
        difficulty = Difficulty.parse(difficulty)

    board = empty_grid()
    if not fill_board(board, 0, 0, rng):
        log.error("Could not fill an empty grid; returning a blank puzzle")
        return empty_grid(), empty_grid()

    solution = copy_grid(board)
    remove_numbers(board, difficulty, rng, max_attempts)
    return board, solution


def generate(difficulty: Difficulty | str = Difficulty.EASY,
             rng: random.Random | None = None,
             max_attempts: int = MAX_REMOVAL_ATTEMPTS) -> Grid:
    """Return a uniquely solvable puzzle for ``difficulty``.

    An all-zero grid means the solver failed to build a solution and must
    not be offered as a playable puzzle.
    """
    puzzle, _ = generate_with_solution(difficulty, rng, max_attempts)
    return puzzle
