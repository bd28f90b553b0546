# config.py
# Runtime settings shared by the session, API and CLI driver.
# Every field can be overridden with a PY2048_<FIELD> environment variable.

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, model_validator

ENV_PREFIX = "PY2048_"


class Settings(BaseModel):
    """Game and service settings."""
    default_size: int = Field(default=4, description="Board dimension used when none is given.")
    min_size: int = Field(default=3, ge=2, description="Smallest board a session may be restarted with.")
    max_size: int = Field(default=8, ge=2, description="Largest board a session may be restarted with.")
    win_tile: int = Field(default=2048, gt=0, description="Tile value that wins the game.")
    undo_limit: int = Field(default=10, ge=0, description="How many prior snapshots a session keeps.")
    best_score_path: str = Field(default="~/.py2048_best", description="File holding the best score.")
    rate_limit: str = Field(default="100/minute", description="slowapi limit applied to game endpoints.")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="simple")

    @model_validator(mode="after")
    def check_size_range(self) -> "Settings":
        if self.min_size > self.max_size:
            raise ValueError("min_size must not exceed max_size")
        if not self.min_size <= self.default_size <= self.max_size:
            raise ValueError("default_size must lie within [min_size, max_size]")
        return self


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Builds Settings from PY2048_* environment variables.
    Args:
        environ (Optional[Mapping[str, str]]): Variables to read; os.environ if omitted.
    Returns:
        Settings: Validated settings.
    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    if environ is None:
        environ = os.environ
    overrides = {}
    for name in Settings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            overrides[name] = environ[key]
    return Settings(**overrides)
