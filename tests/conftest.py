from __future__ import annotations

import logging

import pytest

from config import Settings, reset_settings_cache
from logs import get_logger
from table_engine import Table


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    for name in Settings.model_fields:
        monkeypatch.delenv(f"{Settings.ENV_PREFIX}{name.upper()}", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def parts() -> Table:
    return Table.from_rows(["PartNo", "Name"], [("1", "Bolt"), ("2", "Screw")])


@pytest.fixture
def depts() -> Table:
    return Table.from_rows(["PartNo", "Dept"], [("1", "23"), ("1", "07"), ("3", "12")])
