import datetime as dt
import os
import sys

import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

import task_deadline as td  # noqa: E402


# 2025-10-25 12:00 JST
FIXED_NOW = dt.datetime(2025, 10, 25, 3, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Injectable clock pinned to FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def temp_log_path(tmp_path):
    path = tmp_path / "task_deadline.log"
    yield path
    for h in list(td.logger.handlers):
        td.logger.removeHandler(h)
        h.close()
