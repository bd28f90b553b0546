# session.py
# Caller-side game state built on the stateless engine in core.py.
# The engine never sees this object; it only receives boards and directions.

import logging
import os
from typing import List, Optional, Tuple, Union

import core
from config import Settings, load_settings
from rng import RandomSource, rng_from_seed_text

logger = logging.getLogger(__name__)


class BestScoreStore:
    """
    Persists the single best score as a plain integer in a text file.
    Args:
        path (str): File location; "~" is expanded.
    """

    def __init__(self, path: str):
        self.path = os.path.expanduser(path)

    def load(self) -> int:
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                return int(handle.read().strip())
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable best score file %s: %s", self.path, e)
            return 0

    def record(self, score: int) -> int:
        """
        Stores `score` if it beats the saved best. Returns the best score.
        A failed write is logged and the new best is still returned.
        """
        best = self.load()
        if score <= best:
            return best
        try:
            with open(self.path, "w", encoding="utf-8") as handle:
                handle.write(str(score))
        except OSError as e:
            logger.warning("Could not save best score to %s: %s", self.path, e)
            return score
        logger.info("New best score %d", score)
        return score


class GameSession:
    """
    One player's game: board, score, move count, status, undo history.

    Status transitions: PLAYING -> WON when a move produces the win tile,
    PLAYING -> OVER when no move remains. Only restart() (or undo) returns to
    PLAYING.
    """

    def __init__(
        self,
        size: Optional[int] = None,
        seed: Optional[str] = None,
        win_tile: Optional[int] = None,
        best_store: Optional[BestScoreStore] = None,
        undo_limit: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings if settings is not None else load_settings()
        self.win_tile = win_tile if win_tile is not None else self.settings.win_tile
        self.undo_limit = undo_limit if undo_limit is not None else self.settings.undo_limit
        self.seed = seed or ""
        self.best_store = best_store
        self.best = best_store.load() if best_store is not None else 0
        self.paused = False

        self.size = 0
        self.board: core.Board = ()
        self.score = 0
        self.moves = 0
        self.status = core.GameProgressState.PLAYING
        self.rng: Optional[RandomSource] = None
        self._undo_stack: List[Tuple[core.Board, int]] = []

        self.restart(size if size is not None else self.settings.default_size)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def restart(self, size: Optional[int] = None) -> None:
        """
        Starts a new game. Re-seeding from the stored seed text means the same
        seed always replays the same game.
        Raises:
            core.InvalidBoardError: If size is outside the configured range.
        """
        new_size = size if size is not None else self.size
        if not self.settings.min_size <= new_size <= self.settings.max_size:
            raise core.InvalidBoardError(
                f"Board size must be between {self.settings.min_size} and {self.settings.max_size}."
            )
        self.size = new_size
        self.rng = rng_from_seed_text(self.seed)
        self.board = core.initialize_board(new_size, self.rng)
        self.score = 0
        self.moves = 0
        self._undo_stack = []
        self.status = core.GameProgressState.PLAYING
        logger.info("Started %dx%d game (seed=%r)", new_size, new_size, self.seed or None)

    def apply_move(self, direction: Union[core.DIRECTION, str]) -> bool:
        """
        Plays one turn.
        Returns:
            bool: True if the board changed. Blocked moves, finished games and
                  paused sessions return False without consuming a turn.
        """
        if self.status != core.GameProgressState.PLAYING or self.paused:
            return False

        result = core.move(self.board, direction)
        if not result.moved:
            return False

        self._undo_stack.insert(0, (self.board, self.score))
        del self._undo_stack[self.undo_limit:]

        self.board = core.spawn_random_tile(result.board, self.rng)
        self.score += result.gained
        self.moves += 1
        self.status = core.determine_game_status(self.board, self.win_tile)
        self._update_best()

        if self.status != core.GameProgressState.PLAYING:
            logger.info("Game finished: %s with score %d after %d moves", self.status.value, self.score, self.moves)
        return True

    def undo(self) -> bool:
        """Restores the previous board and score. False if there is nothing to undo."""
        if not self._undo_stack:
            return False
        self.board, self.score = self._undo_stack.pop(0)
        self.status = core.GameProgressState.PLAYING
        return True

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def _update_best(self) -> None:
        if self.score <= self.best:
            return
        if self.best_store is not None:
            self.best = self.best_store.record(self.score)
        else:
            self.best = self.score
