import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

import pytest

from config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(best_score_path=str(tmp_path / "best"))
