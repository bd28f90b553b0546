import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from config import load_settings
from rng import SeededRandom, SystemRandom, create_seeded_rng, parse_seed

API_VERSION = "1.1.0"

logger = logging.getLogger(__name__)
settings = load_settings()

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game. "\
                "Manage your game state (board, score, win_tile, rng_state) on the client side.",
    version=API_VERSION
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    size: int = Field(
        default=settings.default_size,
        ge=settings.min_size,
        le=settings.max_size,
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )
    win_tile: int = Field(
        default=settings.win_tile,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    seed: Optional[str] = Field(
        default=None,
        description="Optional seed; the same seed always deals the same opening board."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The N x N game board, represented as a list of lists.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (playing, won, over)."
    )
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")
    rng_state: Optional[int] = Field(
        default=None,
        description="State of the seeded generator; send it back with the next move to keep the game reproducible."
    )


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current N x N game board state before the move.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    direction: core.DIRECTION = Field(
        ...,
        description="Direction of the move (left, right, up, down)."
    )
    win_tile: int = Field(default=settings.win_tile, gt=0, description="The win condition tile for this game instance.")
    rng_state: Optional[int] = Field(
        default=None,
        ge=0,
        le=0xFFFFFFFF,
        description="Seeded generator state returned by the previous call, if the game is seeded."
    )

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    gained: int = Field(default=0, ge=0, description="Score gained by this move.")
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )

def _board_to_lists(board: core.Board) -> List[List[int]]:
    return [list(row) for row in board]

# --- API Endpoints ---

@app.get("/health", summary="Service health check")
async def health():
    return {"status": "ok", "version": API_VERSION}


@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(settings.rate_limit)
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game based on the provided settings.

    - **size**: Dimension of the N x N board (e.g., 4 for 4x4).
    - **win_tile**: Tile value to reach to win (e.g., 2048).
    - **seed**: Optional integer seed for a reproducible game.

    Returns the initial board with two random tiles, score 0, progress
    `playing`, and `rng_state` when the game is seeded.
    """
    try:
        seed = parse_seed(settings.seed)
        if settings.seed and settings.seed.strip() and seed is None:
            raise ValueError(f"Seed must be an integer, got {settings.seed!r}.")
        rng = create_seeded_rng(seed) if seed is not None else SystemRandom()

        initial_board = core.initialize_board(settings.size, rng)
        current_progress = core.determine_game_status(initial_board, settings.win_tile)

        return GameStateData(
            board=_board_to_lists(initial_board),
            score=0,
            progress=current_progress,
            win_tile=settings.win_tile,
            board_size=settings.size,
            rng_state=rng.state if isinstance(rng, SeededRandom) else None
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error in /game/new: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(settings.rate_limit)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Slide and merge tiles in the requested direction.
    2. If the move changed the board, add a new random tile (2 or 4), drawn
       from the seeded generator when `rng_state` is given.
    3. Determine the new game status (playing, won, over).
    """
    try:
        current_board = core.make_board(request_data.board)
    except core.InvalidBoardError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    rng_state = request_data.rng_state
    message_for_client: Optional[str] = None

    try:
        result = core.move(current_board, request_data.direction)

        final_board = result.board
        final_score = request_data.score
        if result.moved:
            rng = SeededRandom.from_state(rng_state) if rng_state is not None else SystemRandom()
            final_board = core.spawn_random_tile(result.board, rng)
            final_score += result.gained
            if isinstance(rng, SeededRandom):
                rng_state = rng.state
        else:
            message_for_client = "Move was not effective; board state unchanged by slide."

        current_progress = core.determine_game_status(final_board, request_data.win_tile)

        if current_progress == core.GameProgressState.WON:
            message_for_client = "Congratulations! You won!"
        elif current_progress == core.GameProgressState.OVER:
            message_for_client = "Game Over. No more valid moves."

        return MoveResponseData(
            board=_board_to_lists(final_board),
            score=final_score,
            progress=current_progress,
            win_tile=request_data.win_tile,
            board_size=len(final_board),
            rng_state=rng_state,
            move_was_effective=result.moved,
            gained=result.gained,
            message=message_for_client
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/move: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")
