# cli_driver.py
# This file is intended to be run to play the 2048 game on the CLI

import argparse
from typing import Callable, Optional, Sequence

from config import load_settings
from core import DIRECTION, Board, GameProgressState, InvalidBoardError
from logging_config import setup_logging
from session import BestScoreStore, GameSession

DIRECTION_KEYS = {'W': DIRECTION.UP, 'A': DIRECTION.LEFT, 'S': DIRECTION.DOWN, 'D': DIRECTION.RIGHT}
PROMPT = "Move (W/A/S/D), U undo, P pause, R restart, Q quit: "


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Play 2048 in the terminal.")
    parser.add_argument("--size", type=int, default=settings.default_size,
                        help=f"Board size ({settings.min_size}-{settings.max_size})")
    parser.add_argument("--seed", type=str, default="", help="Seed for a reproducible game")
    parser.add_argument("--win-tile", type=int, default=settings.win_tile, help="Tile value that wins")
    parser.add_argument("--best-file", type=str, default=settings.best_score_path,
                        help="Where the best score is kept")
    parser.add_argument("--log-level", type=str, default=settings.log_level, help="Logging level")
    return parser


def main(argv: Optional[Sequence[str]] = None, input_fn: Callable[[str], str] = input) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(args.log_level, settings.log_format)

    try:
        session = GameSession(
            size=args.size,
            seed=args.seed,
            win_tile=args.win_tile,
            best_store=BestScoreStore(args.best_file),
            settings=settings,
        )
    except InvalidBoardError as e:
        print(f"Cannot start game: {e}")
        raise SystemExit(2)

    play(session, input_fn)


def play(session: GameSession, input_fn: Callable[[str], str] = input) -> GameSession:
    """Runs the read-move-print loop until the player quits."""
    display_board_state(session)

    while True:
        move_input = input_fn(PROMPT).strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break
        if move_input == 'R':
            session.restart()
        elif move_input == 'U':
            if not session.undo():
                print("Nothing to undo.")
        elif move_input == 'P':
            if session.paused:
                session.resume()
            else:
                session.pause()
                print("Paused. Press P to resume.")
        elif move_input in DIRECTION_KEYS:
            if session.status != GameProgressState.PLAYING:
                print("Game has ended. Press R to restart, U to undo or Q to quit.")
                continue
            if session.paused:
                print("Game is paused. Press P to resume.")
                continue
            if not session.apply_move(DIRECTION_KEYS[move_input]):
                print("Move did not change the board. Try a different direction.")
                continue
        else:
            print("Invalid input. Use W, A, S, D, U, P, R or Q.")
            continue

        display_board_state(session)
        if session.status == GameProgressState.WON:
            print(f"Congratulations! You reached the {session.win_tile} tile!")
        elif session.status == GameProgressState.OVER:
            print("No more moves possible. Better luck next time!")

    return session


# --- Display Functions ---

def format_board(board: Board) -> str:
    """Renders the board as tab separated rows, blanks shown as '.'."""
    return "\n".join("\t".join(str(v) if v else "." for v in row) for row in board)


def display_board_state(session: GameSession):
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {session.score}\tBest: {session.best}\tMoves: {session.moves}")
    status_message = {
        GameProgressState.PLAYING: "Status: PAUSED" if session.paused else "Status: PLAYING",
        GameProgressState.WON: "YOU WON!",
        GameProgressState.OVER: "GAME OVER!"
    }
    print(status_message[session.status])
    print(format_board(session.board))
    print("-" * (len(session.board) * 6))


if __name__ == "__main__":
    main()
