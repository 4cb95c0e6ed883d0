"""
Stateless 2048 Game Implementation
Pure functions over plain list-of-lists grids. Every operation returns a
new grid; the caller owns the authoritative grid and score.
"""

import random
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple, Union


Grid = List[List[int]]

GRID_SIZE = 4
WIN_TILE = 2048
FOUR_PROBABILITY = 0.1  # 90% chance of 2, 10% chance of 4


class Direction(str, Enum):
    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'


class MoveOutcome(NamedTuple):
    grid: Grid
    moved: bool
    score_gained: int


def parse_direction(value: Union[Direction, str]) -> Direction:
    """
    Convert a direction name into a Direction.

    Args:
        value: Direction member or one of 'up', 'down', 'left', 'right' (any case)

    Returns:
        The matching Direction

    Raises:
        ValueError: if the value names no direction
    """
    if isinstance(value, Direction):
        return value
    if isinstance(value, str):
        try:
            return Direction(value.strip().lower())
        except ValueError:
            pass
    raise ValueError(f"Invalid direction: {value!r}. Must be 'left', 'right', 'up', or 'down'")


def _is_tile_value(value: int) -> bool:
    # 2^k with k >= 1
    return value >= 2 and value & (value - 1) == 0


def validate_grid(grid: Grid) -> None:
    """
    Check that a grid is a non-empty square of empty cells and power-of-two tiles.

    Raises:
        ValueError: describing the first problem found
    """
    if not grid:
        raise ValueError("Grid must have at least one row")
    size = len(grid)
    for i, row in enumerate(grid):
        if len(row) != size:
            raise ValueError(f"Grid must be square: row {i} has {len(row)} cells, expected {size}")
        for j, value in enumerate(row):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Cell ({i}, {j}) holds non-integer value {value!r}")
            if value != 0 and not _is_tile_value(value):
                raise ValueError(f"Cell ({i}, {j}) holds {value}, which is not 0 or a power of two >= 2")


def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def transpose(grid: Grid) -> Grid:
    """Swap cell (row, col) with (col, row). Square grids only."""
    return [list(column) for column in zip(*grid)]


def _reverse_rows(grid: Grid) -> Grid:
    return [row[::-1] for row in grid]


# Steps that turn each direction into a leftward shift, applied in order.
# from_canonical runs the same steps backwards; both steps are self-inverse.
_CANONICAL_STEPS = {
    Direction.LEFT: (),
    Direction.RIGHT: (_reverse_rows,),
    Direction.UP: (transpose,),
    Direction.DOWN: (transpose, _reverse_rows),
}


def to_canonical(grid: Grid, direction: Union[Direction, str]) -> Grid:
    """
    Reorient the grid so that a move in `direction` becomes a move to the left.

    Args:
        grid: Square grid in its natural orientation
        direction: Direction of the move

    Returns:
        New grid in canonical orientation
    """
    validate_grid(grid)
    result = copy_grid(grid)
    for step in _CANONICAL_STEPS[parse_direction(direction)]:
        result = step(result)
    return result


def from_canonical(grid: Grid, direction: Union[Direction, str]) -> Grid:
    """
    Undo to_canonical for the same direction.

    Args:
        grid: Square grid in canonical orientation
        direction: Direction passed to to_canonical

    Returns:
        New grid in natural orientation
    """
    validate_grid(grid)
    result = copy_grid(grid)
    for step in reversed(_CANONICAL_STEPS[parse_direction(direction)]):
        result = step(result)
    return result


def merge_line(line: List[int]) -> Tuple[List[int], int]:
    """
    Merge a single line (row or column) to the left.

    A tile merges at most once per move: [2, 2, 2, 0] becomes [4, 2, 0, 0].

    Args:
        line: Cells of one canonical row

    Returns:
        Tuple of (merged line padded with zeros to the same length, score gained)
    """
    # Remove zeros
    non_zero = [val for val in line if val != 0]

    # Merge adjacent equal values
    merged = []
    score = 0
    i = 0
    while i < len(non_zero):
        if i + 1 < len(non_zero) and non_zero[i] == non_zero[i + 1]:
            merged.append(non_zero[i] * 2)
            score += non_zero[i] * 2
            i += 2
        else:
            merged.append(non_zero[i])
            i += 1

    merged.extend([0] * (len(line) - len(merged)))
    return merged, score


def resolve_move(grid: Grid, direction: Union[Direction, str]) -> MoveOutcome:
    """
    Shift all tiles in the given direction, merging equal neighbours.

    Args:
        grid: Current square grid (not modified)
        direction: One of 'left', 'right', 'up', 'down'

    Returns:
        MoveOutcome with the new grid, whether any cell changed and the
        sum of the merged tile values
    """
    direction = parse_direction(direction)
    canonical = to_canonical(grid, direction)

    moved = False
    score_gained = 0
    merged_rows = []
    for row in canonical:
        merged, score = merge_line(row)
        # Compared against the canonical row, before orientation is restored
        if merged != row:
            moved = True
        score_gained += score
        merged_rows.append(merged)

    if not moved:
        return MoveOutcome(copy_grid(grid), False, 0)
    return MoveOutcome(from_canonical(merged_rows, direction), True, score_gained)


def is_terminal(grid: Grid) -> bool:
    """
    Check if the game is over: no empty cell and no equal neighbours.

    Args:
        grid: Current square grid

    Returns:
        True if no move can change the grid, False otherwise
    """
    validate_grid(grid)
    size = len(grid)

    for row in grid:
        if 0 in row:
            return False

    for i in range(size):
        for j in range(size - 1):
            if grid[i][j] == grid[i][j + 1]:
                return False

    for i in range(size - 1):
        for j in range(size):
            if grid[i][j] == grid[i + 1][j]:
                return False

    return True


def empty_grid(size: int = GRID_SIZE) -> Grid:
    return [[0] * size for _ in range(size)]


def empty_cells(grid: Grid) -> List[Tuple[int, int]]:
    return [
        (i, j) for i, row in enumerate(grid) for j, value in enumerate(row) if value == 0
    ]


def add_random_tile(grid: Grid, rng: random.Random) -> Grid:
    """
    Place a new tile (2 with 90% probability or 4 with 10% probability)
    on a random empty cell.

    Args:
        grid: Grid to add the tile to (not modified)
        rng: Random source

    Returns:
        New grid with the tile placed; an unchanged copy if the grid is full
    """
    new_grid = copy_grid(grid)
    cells = empty_cells(new_grid)
    if cells:
        i, j = rng.choice(cells)
        new_grid[i][j] = 4 if rng.random() < FOUR_PROBABILITY else 2
    return new_grid


def init_grid(rng: Optional[random.Random] = None) -> Grid:
    """
    Initialize a new 4x4 grid with two random tiles (2 or 4).

    Args:
        rng: Random source, a fresh unseeded one if omitted

    Returns:
        4x4 grid (list of lists) with two random tiles placed
    """
    if rng is None:
        rng = random.Random()
    grid = empty_grid()
    grid = add_random_tile(grid, rng)
    return add_random_tile(grid, rng)


def max_tile(grid: Grid) -> int:
    return max(max(row) for row in grid)


def has_won(grid: Grid, target: int = WIN_TILE) -> bool:
    """Return True once any tile has reached `target`."""
    return max_tile(grid) >= target


def display(grid: Grid, score: Optional[int] = None) -> str:
    """
    Display the grid as a markdown table.

    Args:
        grid: Grid to display
        score: Cumulative score to print under the table, if given
    """
    res = ''
    for row in grid:
        res += "| " + " | ".join(f"{val if val else '':^4}" for val in row) + " |\n"

    if score is not None:
        res += f"\nScore: {score}"

    return res
