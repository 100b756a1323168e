from __future__ import annotations

import threading
import time
from typing import Callable


class FocusTimer:
    """Pomodoro-style countdown (50/10 deep work cycles by default).

    経過時間は注入された単調増加クロック（既定は time.monotonic）で計測する。
    - toggle: 開始/一時停止の切り替え
    - reset: 一時停止状態で残り時間を満タンに戻す
    - 残り時間が0になると自動で停止する
    - 状態の読み書きはロック下で行う（複数スレッドから呼ばれてよい）
    """

    def __init__(self, minutes: int = 50, clock: Callable[[], float] = time.monotonic) -> None:
        if minutes <= 0:
            raise ValueError("minutes must be positive")
        self.duration_seconds = minutes * 60
        self._clock = clock
        self._remaining = float(self.duration_seconds)
        self._started_at: float | None = None
        # toggle → running → _settle のように入れ子で取得するため RLock
        self._lock = threading.RLock()

    def _settle(self) -> None:
        """Fold running time into the remaining budget; stop at zero."""
        with self._lock:
            if self._started_at is None:
                return
            now = self._clock()
            self._remaining = max(0.0, self._remaining - max(0.0, now - self._started_at))
            self._started_at = None if self._remaining == 0 else now

    @property
    def running(self) -> bool:
        with self._lock:
            self._settle()
            return self._started_at is not None

    @property
    def finished(self) -> bool:
        return self.remaining_seconds() == 0

    def start(self) -> None:
        with self._lock:
            self._settle()
            if self._started_at is None and self._remaining > 0:
                self._started_at = self._clock()

    def pause(self) -> None:
        with self._lock:
            self._settle()
            self._started_at = None

    def toggle(self) -> bool:
        """Start when paused, pause when running. Returns the new running state."""
        with self._lock:
            if self.running:
                self.pause()
            else:
                self.start()
            return self.running

    def reset(self) -> None:
        with self._lock:
            self._started_at = None
            self._remaining = float(self.duration_seconds)

    def remaining_seconds(self) -> int:
        with self._lock:
            self._settle()
            remaining = self._remaining
        # 表示は秒単位の切り上げ（開始直後に 49:59 へ即座に落ちないように）
        whole = int(remaining)
        return whole if whole == remaining else whole + 1

    def display(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds(), 60)
        return f"{minutes:02d}:{seconds:02d}"
