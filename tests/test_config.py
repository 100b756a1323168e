"""設定値（環境変数）の読み込みと検証を確認するテスト群。"""

import pytest
from pydantic import ValidationError

from planner.config import DEFAULT_LEITNER_INTERVALS, Settings


def test_defaults_match_six_box_queue(monkeypatch):
    monkeypatch.delenv("LEITNER_INTERVALS", raising=False)

    config = Settings(_env_file=None)

    assert config.leitner_intervals == DEFAULT_LEITNER_INTERVALS == (0, 1, 3, 7, 15, 30)
    assert config.cards_key == "jee_cards"
    assert config.plan_task_count == 6
    assert config.focus_minutes == 50


def test_intervals_are_read_from_comma_separated_env(monkeypatch):
    """`LEITNER_INTERVALS` はカンマ区切りで、空要素と空白は無視する。"""

    monkeypatch.setenv("LEITNER_INTERVALS", " 0, 2 ,5,, ")

    config = Settings(_env_file=None)

    assert config.leitner_intervals == (0, 2, 5)


@pytest.mark.parametrize("raw", ["0,-1,3", ""])
def test_invalid_intervals_are_rejected(monkeypatch, raw):
    monkeypatch.setenv("LEITNER_INTERVALS", raw)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_legacy_db_path_alias_is_accepted(monkeypatch, tmp_path):
    monkeypatch.delenv("STORAGE_DB_PATH", raising=False)
    monkeypatch.setenv("PLANNER_DB_PATH", str(tmp_path / "legacy.sqlite3"))

    config = Settings(_env_file=None)

    assert config.storage_db_path == str(tmp_path / "legacy.sqlite3")


def test_unknown_timezone_is_rejected(monkeypatch):
    monkeypatch.setenv("TIMEZONE", "Mars/Olympus")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("count", ["2", "13"])
def test_plan_task_count_is_bounded(monkeypatch, count):
    monkeypatch.setenv("PLAN_TASK_COUNT", count)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
