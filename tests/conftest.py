"""Pytest configuration: deterministic clocks and stores for planner tests."""

import os
import sys
import tempfile
from datetime import date
from pathlib import Path

_SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))

# planner.main はインポート時にアプリを組み立てるため、作業ツリーに DB を作らないよう
# 一時ディレクトリへ向けておく。
os.environ.setdefault(
    "STORAGE_DB_PATH",
    str(Path(tempfile.mkdtemp(prefix="planner-tests-")) / "planner.sqlite3"),
)

import pytest  # noqa: E402

from planner.clock import FixedClock  # noqa: E402
from tests.fakes import FlakyStore  # noqa: E402


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(date(2024, 1, 1))


@pytest.fixture()
def kv() -> FlakyStore:
    return FlakyStore()
