"""ID 生成ユーティリティ。

カード・タスク・目標の ID はいずれも不透明な文字列で、衝突しないよう
UUID4 の hex を用いる。種類が分かるよう短い prefix を付ける。
"""

from __future__ import annotations

import uuid


def generate_card_id() -> str:
    """Return a new review card ID (``c:<hex>``)."""

    return f"c:{uuid.uuid4().hex}"


def generate_task_id() -> str:
    return f"t:{uuid.uuid4().hex}"


def generate_goal_id() -> str:
    return f"g:{uuid.uuid4().hex}"
