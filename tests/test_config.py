import pytest
from pydantic import ValidationError

from config import Settings, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings == Settings()
    assert (settings.default_size, settings.min_size, settings.max_size) == (4, 3, 8)
    assert settings.win_tile == 2048
    assert settings.undo_limit == 10
    assert settings.rate_limit == "100/minute"


def test_environment_overrides():
    settings = load_settings({
        "PY2048_DEFAULT_SIZE": "5",
        "PY2048_WIN_TILE": "512",
        "PY2048_LOG_LEVEL": "DEBUG",
        "UNRELATED": "x",
    })
    assert settings.default_size == 5
    assert settings.win_tile == 512
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("environ", [
    {"PY2048_WIN_TILE": "lots"},
    {"PY2048_MIN_SIZE": "6", "PY2048_MAX_SIZE": "5"},
    {"PY2048_DEFAULT_SIZE": "12"},
    {"PY2048_UNDO_LIMIT": "-1"},
])
def test_invalid_environment(environ):
    with pytest.raises(ValidationError):
        load_settings(environ)
