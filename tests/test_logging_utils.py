"""Tests for the shared logging setup."""

from __future__ import annotations

import logging

import pytest

from gramchain.logging_utils import configure_root_logger, get_logger


@pytest.fixture
def root_level():
    root_logger = logging.getLogger()
    original = root_logger.level
    yield root_logger
    root_logger.setLevel(original)


def test_configured_level_applies_after_modules_import_loggers(root_level) -> None:
    get_logger("gramchain.ledger.mutator")
    handlers = list(root_level.handlers)

    configure_root_logger("debug")
    assert root_level.level == logging.DEBUG

    configure_root_logger(logging.WARNING)
    assert root_level.level == logging.WARNING
    assert root_level.handlers == handlers
