from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode


DEFAULT_DB_PATH = ".data/planner.sqlite3"
DEFAULT_LEITNER_INTERVALS: tuple[int, ...] = (0, 1, 3, 7, 15, 30)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - environment: 実行環境（development/staging/production など）
    - storage_db_path: キー・バリューストア（SQLite）の保存先
    - leitner_intervals: 復習箱ごとの待機日数
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )

    # --- 永続化（キー・バリューストア） ---
    storage_db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="Path to the key-value SQLite database / キー・バリュー保存用SQLite DBパス",
        validation_alias=AliasChoices("storage_db_path", "planner_db_path"),
    )
    cards_key: str = Field(
        default="jee_cards",
        description="Storage key for review cards / 復習カードの保存キー",
    )
    tasks_key: str = Field(
        default="jee_tasks",
        description="Storage key for daily tasks / 日次タスクの保存キー",
    )
    history_key: str = Field(
        default="jee_history",
        description="Storage key for progress history / 進捗履歴の保存キー",
    )
    goals_key: str = Field(
        default="jee_goals",
        description="Storage key for goals / 目標の保存キー",
    )

    # --- 復習スケジュール ---
    leitner_intervals: Annotated[tuple[int, ...], NoDecode] = Field(
        default=DEFAULT_LEITNER_INTERVALS,
        description=(
            "Review interval in days per Leitner box (comma separated) / "
            "Leitner 箱ごとの復習間隔（日, カンマ区切り）"
        ),
    )
    timezone: str = Field(
        default="UTC",
        description="IANA time zone used to decide 'today' / 「今日」を決める IANA タイムゾーン",
    )

    # --- 学習計画・タイマー ---
    plan_task_count: int = Field(
        default=6,
        ge=3,
        le=12,
        description="Default number of tasks shown per day / 1日に表示するタスク数の既定値",
    )
    focus_minutes: int = Field(
        default=50,
        ge=1,
        description="Focus timer length in minutes / 集中タイマーの長さ（分）",
    )

    sentry_dsn: str | None = Field(default=None, description="Sentry DSN (enable if set)")

    # Pydantic v2 settings config
    # - env_file: .env を読み込む
    # - extra: 未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("leitner_intervals", mode="before")
    @classmethod
    def _normalise_leitner_intervals(
        cls, raw_intervals: object
    ) -> tuple[int, ...] | object:  # pragma: no cover - pydantic handles typing
        """Convert `"0,1,3"` style input into an int tuple.

        空要素は無視する。数値でない値は後段の型検証に任せる。
        """

        if raw_intervals is None:
            return DEFAULT_LEITNER_INTERVALS
        if isinstance(raw_intervals, str):
            return tuple(part.strip() for part in raw_intervals.split(",") if part.strip())
        return raw_intervals

    @field_validator("leitner_intervals")
    @classmethod
    def _validate_leitner_intervals(cls, intervals: tuple[int, ...]) -> tuple[int, ...]:
        """箱が1つ以上あり、間隔がすべて0日以上であることを保証する。"""

        if not intervals:
            raise ValueError("LEITNER_INTERVALS must contain at least one interval")
        if any(days < 0 for days in intervals):
            raise ValueError("LEITNER_INTERVALS must be non-negative day counts")
        return intervals

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA zone names at startup instead of on first use."""

        name = (value or "").strip() or "UTC"
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown TIMEZONE: {name}") from exc
        return name


settings = Settings()
