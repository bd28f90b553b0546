import pytest

import core
from core import GameProgressState, InvalidBoardError
from rng import SeededRandom, SystemRandom
from session import BestScoreStore, GameSession

SEED_42_MOVES = ['left', 'up', 'right', 'down', 'left', 'up', 'right', 'down', 'left', 'left', 'up', 'up']


def _session(settings, **kwargs):
    kwargs.setdefault("best_store", BestScoreStore(settings.best_score_path))
    return GameSession(settings=settings, **kwargs)


def test_new_session_defaults(settings):
    session = _session(settings)
    assert session.size == 4
    assert session.score == 0
    assert session.moves == 0
    assert session.status == GameProgressState.PLAYING
    assert isinstance(session.rng, SystemRandom)
    assert sum(1 for row in session.board for v in row if v) == 2


def test_seeded_session_replays_known_game(settings):
    session = _session(settings, seed="42")
    assert isinstance(session.rng, SeededRandom)
    for direction in SEED_42_MOVES:
        assert session.apply_move(direction)
    assert session.board == ((2, 8, 4, 4), (8, 0, 0, 2), (0, 0, 0, 0), (0, 0, 0, 0))
    assert session.score == 40
    assert session.moves == 12
    assert session.best == 40


def test_seeded_three_by_three_game(settings):
    session = _session(settings, seed="7", size=3)
    played = [session.apply_move(d) for d in ['down', 'left', 'down', 'right', 'up', 'left']]
    assert all(played)
    assert session.board == ((2, 4, 2), (4, 2, 0), (2, 0, 0))
    assert session.score == 8


def test_restart_with_seed_deals_same_board(settings):
    session = _session(settings, seed="42")
    opening = session.board
    session.apply_move("left")
    session.restart()
    assert session.board == opening
    assert session.score == 0
    assert session.moves == 0
    assert not session.can_undo


def test_restart_validates_size(settings):
    session = _session(settings)
    with pytest.raises(InvalidBoardError):
        session.restart(2)
    with pytest.raises(InvalidBoardError):
        session.restart(9)
    session.restart(8)
    assert len(session.board) == 8


def test_blocked_move_does_not_consume_turn(settings):
    session = _session(settings)
    session.board = ((2, 4, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0))
    assert not session.apply_move("left")
    assert not session.apply_move("up")
    assert session.moves == 0
    assert session.board == ((2, 4, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0))
    assert not session.can_undo


def test_reaching_win_tile(settings):
    session = _session(settings)
    session.board = ((1024, 1024, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0))
    assert session.apply_move("left")
    assert session.board[0][0] == 2048
    assert session.score == 2048
    assert session.status == GameProgressState.WON
    assert not session.apply_move("down")


def test_custom_win_tile(settings):
    session = _session(settings, win_tile=16)
    session.board = ((8, 8, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0))
    session.apply_move("right")
    assert session.status == GameProgressState.WON


def test_game_over_after_last_move(settings):
    session = _session(settings)
    session.board = (
        (2, 4, 2, 4),
        (4, 2, 4, 2),
        (2, 4, 2, 8),
        (4, 2, 32, 32),
    )
    assert session.apply_move("left")
    assert session.board[3][:3] == (4, 2, 64)
    assert session.status == GameProgressState.OVER
    assert not session.apply_move("up")

    assert session.undo()
    assert session.status == GameProgressState.PLAYING
    assert session.board[3] == (4, 2, 32, 32)


def test_undo_restores_board_and_score(settings):
    session = _session(settings, seed="42")
    before = session.board
    session.apply_move("left")
    session.apply_move("up")
    assert session.undo()
    assert session.undo()
    assert session.board == before
    assert session.score == 0
    assert not session.undo()


def test_undo_history_is_bounded(settings):
    session = _session(settings, seed="42", undo_limit=2)
    for direction in SEED_42_MOVES[:3]:
        assert session.apply_move(direction)
    assert session.undo()
    assert session.undo()
    assert not session.undo()


def test_paused_session_ignores_moves(settings):
    session = _session(settings, seed="42")
    session.pause()
    assert not session.apply_move("left")
    session.resume()
    assert session.apply_move("left")


def test_best_score_persists_between_sessions(settings):
    session = _session(settings, seed="42")
    for direction in SEED_42_MOVES:
        session.apply_move(direction)
    assert BestScoreStore(settings.best_score_path).load() == 40
    assert _session(settings).best == 40


def test_session_without_store_tracks_best_in_memory(settings):
    session = GameSession(seed="42", settings=settings)
    for direction in SEED_42_MOVES:
        session.apply_move(direction)
    assert session.best == 40
    session.restart()
    assert session.best == 40


def test_best_score_store(tmp_path):
    store = BestScoreStore(str(tmp_path / "best"))
    assert store.load() == 0
    assert store.record(100) == 100
    assert store.record(50) == 100
    assert store.load() == 100
    assert (tmp_path / "best").read_text() == "100"


def test_best_score_store_ignores_garbage(tmp_path, caplog):
    path = tmp_path / "best"
    path.write_text("not a number")
    assert BestScoreStore(str(path)).load() == 0
    assert "Ignoring unreadable best score file" in caplog.text


def test_session_board_is_core_board(settings):
    session = _session(settings)
    assert core.get_board_size(session.board) == 4


def test_unwritable_best_score_file_does_not_break_move(tmp_path, settings, caplog):
    store = BestScoreStore(str(tmp_path / "missing_dir" / "best"))
    session = GameSession(best_store=store, settings=settings)
    session.board = ((2, 2, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0))
    assert session.apply_move("left")
    assert session.score == 4
    assert session.moves == 1
    assert session.best == 4
    assert "Could not save best score" in caplog.text


def test_best_score_store_record_survives_write_error(tmp_path):
    store = BestScoreStore(str(tmp_path / "missing_dir" / "best"))
    assert store.record(100) == 100
    assert store.load() == 0
