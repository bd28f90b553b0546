# core.py
# This file is the stateless rule engine for a 2048 game.
# Boards are immutable tuples of row tuples; every operation returns a new board.

import logging
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union

from rng import RandomSource, SystemRandom

logger = logging.getLogger(__name__)

Row = Tuple[int, ...]
Board = Tuple[Row, ...]

MIN_BOARD_SIZE = 2
DEFAULT_WIN_TILE = 2048
FOUR_TILE_THRESHOLD = 0.9  # rng() below this spawns a 2, otherwise a 4


class InvalidBoardError(ValueError):
    """Raised when a board or board size breaks the square N x N invariant."""


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    PLAYING = "playing"
    WON = "won"
    OVER = "over"  # Lost


class DIRECTION(Enum):
    """Represents the possible move directions."""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class MoveResult(NamedTuple):
    """Outcome of a single move: the new board, score gained, and whether anything changed."""
    board: Board
    gained: int
    moved: bool


# --- Board Helper Functions ---

def _freeze(rows: Iterable[Iterable[int]]) -> Board:
    return tuple(tuple(row) for row in rows)


def _is_tile_value(value: int) -> bool:
    return value == 0 or (value >= 2 and value & (value - 1) == 0)


def get_board_size(board: Board) -> int:
    """
    Gets the size (N) of an N x N board.
    Args:
        board (Board): The game board.
    Returns:
        int: The dimension of the board.
    Raises:
        InvalidBoardError: If the board is not square or empty.
    """
    if not board or not all(len(row) == len(board) for row in board):
        raise InvalidBoardError("Board must be a non-empty square matrix.")
    return len(board)


def make_board(rows: Iterable[Iterable[int]]) -> Board:
    """
    Validates raw rows and freezes them into a Board.
    This is the creation boundary: moves never re-check the shape afterwards.
    Args:
        rows (Iterable[Iterable[int]]): Rows as lists, tuples or any iterable of ints.
    Returns:
        Board: The validated immutable board.
    Raises:
        InvalidBoardError: If the grid is not square, smaller than 2 x 2, or holds
                           a value that is neither 0 nor a power of two.
    """
    board = _freeze(rows)
    size = get_board_size(board)
    if size < MIN_BOARD_SIZE:
        raise InvalidBoardError(f"Board size must be at least {MIN_BOARD_SIZE}, got {size}.")
    for row in board:
        for value in row:
            if isinstance(value, bool) or not isinstance(value, int) or not _is_tile_value(value):
                raise InvalidBoardError(f"Invalid tile value {value!r}; expected 0 or a power of two.")
    return board


def create_empty_board(size: int) -> Board:
    """
    Builds an all-zero size x size board.
    Raises:
        InvalidBoardError: If size is not an integer of at least 2.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < MIN_BOARD_SIZE:
        raise InvalidBoardError(f"Board size must be an integer >= {MIN_BOARD_SIZE}, got {size!r}.")
    return tuple((0,) * size for _ in range(size))


def get_empty_cells(board: Board) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty (0-value) cells in row-major order.
    Args:
        board (Board): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    return [
        (r, c)
        for r, row in enumerate(board)
        for c, value in enumerate(row)
        if value == 0
    ]


def spawn_random_tile(board: Board, rng: RandomSource) -> Board:
    """
    Places a new tile (90% chance of 2, 10% chance of 4) on a random empty cell.
    The cell is picked with one rng call and the value with a second one.
    Args:
        board (Board): The current game board.
        rng (RandomSource): Source of floats in [0, 1).
    Returns:
        Board: A new board with the added tile, or the input board itself when
               there is no empty cell.
    """
    empty_cells = get_empty_cells(board)
    if not empty_cells:
        return board

    row, col = empty_cells[int(rng.next_float() * len(empty_cells))]
    value = 2 if rng.next_float() < FOUR_TILE_THRESHOLD else 4
    logger.debug("Spawning %d at (%d, %d)", value, row, col)

    new_rows = [list(r) for r in board]
    new_rows[row][col] = value
    return _freeze(new_rows)


def initialize_board(size: int = 4, rng: Optional[RandomSource] = None) -> Board:
    """
    Initializes a new game board with two random tiles.
    The second spawn sees the board produced by the first, so both tiles land
    on different cells.
    Args:
        size (int): The dimension of the N x N game board. Default is 4.
        rng (Optional[RandomSource]): Random source; an unseeded one if omitted.
    Returns:
        Board: The initial board.
    Raises:
        InvalidBoardError: If board size is not an integer of at least 2.
    """
    if rng is None:
        rng = SystemRandom()
    board = create_empty_board(size)
    board = spawn_random_tile(board, rng)
    board = spawn_random_tile(board, rng)
    return board


# --- Line Manipulation (Core Move Logic) ---

def slide_and_merge_line(line: Row) -> Tuple[Row, int, bool]:
    """
    Slides a single line towards index 0 and merges equal neighbours.
    A single left-to-right pass that skips the consumed tile guarantees each
    tile merges at most once per move.
    Args:
        line (Row): The line to process.
    Returns:
        Tuple[Row, int, bool]: The processed line, score increase, and whether
                               the line differs from the input.
    """
    tiles = [value for value in line if value != 0]
    merged: List[int] = []
    score_increase = 0

    read_idx = 0
    while read_idx < len(tiles):
        current_val = tiles[read_idx]
        if read_idx + 1 < len(tiles) and tiles[read_idx + 1] == current_val:
            merged_value = current_val * 2
            merged.append(merged_value)
            score_increase += merged_value
            read_idx += 2  # Skip the tile that was merged in
        else:
            merged.append(current_val)
            read_idx += 1

    result = tuple(merged) + (0,) * (len(line) - len(merged))
    return result, score_increase, result != tuple(line)


# --- Board Transformations ---

def transpose_board(board: Board) -> Board:
    """
    Transposes a given board (swaps rows and columns).
    Args:
        board (Board): The board to transpose.
    Returns:
        Board: A new transposed board.
    """
    return tuple(zip(*board))


def reverse_rows(board: Board) -> Board:
    """Returns a new board with every row reversed."""
    return tuple(tuple(row[::-1]) for row in board)


# --- Core Game Move Processing ---

def _apply_left_processing_to_all_lines(board: Board) -> MoveResult:
    total_gained = 0
    any_moved = False
    processed = []
    for line in board:
        new_line, gained, moved = slide_and_merge_line(line)
        processed.append(new_line)
        total_gained += gained
        any_moved = any_moved or moved
    return MoveResult(tuple(processed), total_gained, any_moved)


def move(board: Board, direction: Union[DIRECTION, str]) -> MoveResult:
    """
    Slides and merges every line of the board in the given direction.
    Right, up and down are reduced to a left move with row reversal and
    transposition, undone in reverse order afterwards.
    Args:
        board (Board): The current game board. Never mutated.
        direction (Union[DIRECTION, str]): The direction to move.
    Returns:
        MoveResult:
            - The new board state after the move (always a new object).
            - The score gained from this move.
            - Whether the board changed. When False no tile should be spawned.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    direction = DIRECTION(direction)
    working = _freeze(board)

    if direction == DIRECTION.LEFT:
        result = _apply_left_processing_to_all_lines(working)
        new_board = result.board

    elif direction == DIRECTION.RIGHT:
        result = _apply_left_processing_to_all_lines(reverse_rows(working))
        new_board = reverse_rows(result.board)

    elif direction == DIRECTION.UP:
        result = _apply_left_processing_to_all_lines(transpose_board(working))
        new_board = transpose_board(result.board)

    else:
        result = _apply_left_processing_to_all_lines(reverse_rows(transpose_board(working)))
        new_board = transpose_board(reverse_rows(result.board))

    logger.debug("Move %s: gained=%d moved=%s", direction.value, result.gained, result.moved)
    return MoveResult(new_board, result.gained, result.moved)


# --- Game State Checks ---

def has_2048(board: Board, win_tile: int = DEFAULT_WIN_TILE) -> bool:
    """
    Check if the game is won. Uses >= because tiles beyond the win tile exist.
    Args:
        board (Board): The game board.
        win_tile (int): The tile value that signifies a win. Default is 2048.
    Returns:
        bool: True if any tile has reached win_tile.
    """
    return any(value >= win_tile for row in board for value in row)


def has_moves(board: Board) -> bool:
    """
    Checks if any move is possible in any direction on the board.
    Only right and down neighbours are compared; that covers every adjacent pair.
    Args:
        board (Board): The game board.
    Returns:
        bool: True if there is an empty cell or two equal adjacent tiles.
    """
    if get_empty_cells(board):
        return True
    n = len(board)
    for r in range(n):
        for c in range(n):
            value = board[r][c]
            if c + 1 < n and board[r][c + 1] == value:
                return True
            if r + 1 < n and board[r + 1][c] == value:
                return True
    return False


def determine_game_status(board: Board, win_tile: int = DEFAULT_WIN_TILE) -> GameProgressState:
    """
    Determines the current progress state of the game based on the board.
    The win check runs before the loss check.
    Args:
        board (Board): The current game board.
        win_tile (int): The tile value that signifies a win. Default is 2048.
    Returns:
        GameProgressState: PLAYING, WON or OVER.
    """
    if has_2048(board, win_tile):
        return GameProgressState.WON
    if not has_moves(board):
        return GameProgressState.OVER
    return GameProgressState.PLAYING
