"""Domain errors raised by the planner services.

HTTP 層（``planner.main``）で 404/422 などへ変換する。
"""


class PlannerError(Exception):
    """Base exception for all planner errors."""


class ValidationError(PlannerError):
    """Raised when a card, task or goal payload is malformed."""


class NotFoundError(PlannerError):
    """Raised when a referenced card, task or goal does not exist."""


class PersistenceError(PlannerError):
    """Raised by a key-value store when a read or write fails.

    スケジューラはこれを警告として扱い、メモリ上の状態は巻き戻さない。
    """

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key
