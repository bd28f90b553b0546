import logging

from logging_config import FORMATS, setup_logging


def test_setup_logging_configures_root():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug", "detailed")
        assert root.level == logging.DEBUG
        assert root.handlers[-1].formatter._fmt == FORMATS["detailed"]

        setup_logging("nonsense", "unknown")
        assert root.level == logging.INFO
        assert root.handlers[-1].formatter._fmt == FORMATS["simple"]
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
