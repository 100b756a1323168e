from __future__ import annotations

from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current calendar day.

    「今日」の判定は利用者の暦に依存するため、スケジューラへ注入して
    テストでは固定日付を使えるようにする。
    """

    def today(self) -> date: ...


class SystemClock:
    """Wall clock evaluated in a fixed IANA time zone."""

    def __init__(self, tz_name: str = "UTC") -> None:
        self.tz = ZoneInfo(tz_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Clock pinned to one day; `set` moves it for scenario tests."""

    def __init__(self, day: date) -> None:
        self.day = day

    def today(self) -> date:
        return self.day

    def set(self, day: date) -> None:
        self.day = day
