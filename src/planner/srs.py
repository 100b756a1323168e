from __future__ import annotations

import json
import threading
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from .clock import Clock
from .config import DEFAULT_LEITNER_INTERVALS
from .errors import NotFoundError, PersistenceError, ValidationError
from .id_factory import generate_card_id
from .logging import logger
from .store import KeyValueStore

# 箱 n に入ったカードを次に出題するまでの日数（箱0は当日中に再出題）
LEITNER_INTERVALS: tuple[int, ...] = DEFAULT_LEITNER_INTERVALS
CARDS_KEY = "jee_cards"

_TEXT_FIELDS = ("subject", "topic", "front", "back")


@dataclass(frozen=True)
class Flashcard:
    """A review card in the Leitner queue.

    - box: 記憶の強さ（0..K-1）。大きいほど次回までの間隔が長い
    - next: 次に出題可能になる日付（日単位）
    """

    id: str
    subject: str
    topic: str
    front: str
    back: str
    next: date
    box: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "topic": self.topic,
            "front": self.front,
            "back": self.back,
            "box": self.box,
            "next": self.next.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Flashcard:
        """Build a card from its stored form.

        保存済みデータで box が欠けている場合は 0 とみなす。整数以外の box は
        切り捨てずに ValidationError とする（そのカードは読み飛ばされる）。
        next が日付として解釈できない場合は ValidationError。
        """
        if not isinstance(raw, dict):
            raise ValidationError(f"card must be an object, got {type(raw).__name__}")
        try:
            card_id = str(raw["id"])
            next_day = date.fromisoformat(str(raw["next"]))
        except KeyError as exc:
            raise ValidationError(f"card is missing field {exc.args[0]!r}") from exc
        except ValueError as exc:
            raise ValidationError(f"card {raw.get('id')!r} has invalid next date: {raw.get('next')!r}") from exc
        box = raw.get("box")
        if box is None:
            box = 0
        if isinstance(box, bool) or not isinstance(box, int):
            raise ValidationError(f"card {card_id!r} has non-integer box: {box!r}")
        return cls(
            id=card_id,
            subject=str(raw.get("subject") or ""),
            topic=str(raw.get("topic") or ""),
            front=str(raw.get("front") or ""),
            back=str(raw.get("back") or ""),
            next=next_day,
            box=box,
        )


def new_card(
    subject: str,
    topic: str,
    front: str,
    back: str,
    next_day: date,
    box: int = 0,
    card_id: str | None = None,
) -> Flashcard:
    """Create a card with a fresh ID. Defaults to box 0, i.e. due on ``next_day``."""
    return Flashcard(
        id=card_id or generate_card_id(),
        subject=subject,
        topic=topic,
        front=front,
        back=back,
        next=next_day,
        box=box,
    )


def clamp_box(box: int, intervals: Sequence[int] = LEITNER_INTERVALS) -> int:
    return max(0, min(len(intervals) - 1, box))


def schedule_next(
    box: int,
    success: bool,
    as_of: date,
    intervals: Sequence[int] = LEITNER_INTERVALS,
) -> tuple[int, date]:
    """Return ``(new_box, next_day)`` after one pass/fail review.

    正解で1箱上げ、不正解で1箱下げる（いずれも 0..K-1 に丸める）。
    次回日付は採点日 + intervals[new_box] 日。
    """
    new_box = clamp_box(box + 1 if success else box - 1, intervals)
    return new_box, as_of + timedelta(days=intervals[new_box])


def encode_cards(cards: Iterable[Flashcard]) -> str:
    return json.dumps([card.to_dict() for card in cards], ensure_ascii=False)


def decode_cards(blob: str) -> list[Flashcard]:
    """Decode a stored card collection.

    JSON 自体が壊れている場合は ValidationError。個々のカードが不正な場合は
    そのカードだけを読み飛ばし、ログに残す。
    """
    try:
        raw = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"stored cards are not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise ValidationError("stored cards must be a JSON array")
    cards: list[Flashcard] = []
    for item in raw:
        try:
            cards.append(Flashcard.from_dict(item))
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("card_decode_skipped", error=str(exc))
    return cards


class ReviewScheduler:
    """Leitner review queue persisted to a key-value store.

    - カード一覧はこのオブジェクトが所有し、変更のたびに全件を1つの blob として保存する
    - 保存失敗はメモリ上の変更を巻き戻さない（警告ログ + dirty フラグ）
    - 未知の card_id の採点は何もしない（None を返す）。厳密に扱いたい場合は require_card を使う
    - 同日に期限が来たカードはコレクション順（新しく追加したもの優先）で返す
    """

    def __init__(
        self,
        kv: KeyValueStore,
        clock: Clock,
        intervals: Sequence[int] = LEITNER_INTERVALS,
        key: str = CARDS_KEY,
    ) -> None:
        intervals = tuple(intervals)
        if not intervals or any(days < 0 for days in intervals):
            raise ValidationError("intervals must be a non-empty sequence of non-negative day counts")
        self.kv = kv
        self.clock = clock
        self.intervals = intervals
        self.key = key
        self._lock = threading.Lock()
        self._dirty = False
        self._cards: list[Flashcard] = self._load()

    # --- low-level helpers ---
    def _load(self) -> list[Flashcard]:
        try:
            blob = self.kv.load(self.key)
            if blob is None:
                return []
            cards = decode_cards(blob)
        except (PersistenceError, ValidationError) as exc:
            # 読めない・壊れた保存値は空コレクションとして扱う（次回保存で上書きされる）
            logger.warning("cards_load_failed", key=self.key, error=str(exc))
            return []
        seen: set[str] = set()
        unique: list[Flashcard] = []
        for card in cards:
            if card.id in seen:
                logger.warning("card_duplicate_id_dropped", card_id=card.id)
                continue
            seen.add(card.id)
            unique.append(replace(card, box=self.clamp(card.box)))
        return unique

    def _persist(self) -> bool:
        try:
            self.kv.save(self.key, encode_cards(self._cards))
        except PersistenceError as exc:
            self._dirty = True
            logger.warning("cards_persist_failed", key=self.key, error=str(exc), cards=len(self._cards))
            return False
        self._dirty = False
        return True

    def _index_of(self, card_id: str) -> int | None:
        for idx, card in enumerate(self._cards):
            if card.id == card_id:
                return idx
        return None

    def _day(self, as_of: date | None) -> date:
        # datetime は date のサブクラスなので、暦日に落としてから比較・加算する
        day = as_of or self.clock.today()
        if isinstance(day, datetime):
            day = day.date()
        return day

    def _validate(self, card: Flashcard) -> None:
        if not isinstance(card.id, str) or not card.id.strip():
            raise ValidationError("card id must be a non-empty string")
        for name in _TEXT_FIELDS:
            value = getattr(card, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"card {name} must be a non-empty string")
        if isinstance(card.box, bool) or not isinstance(card.box, int):
            raise ValidationError("card box must be an integer")
        if not 0 <= card.box <= self.max_box:
            raise ValidationError(f"card box {card.box} is outside 0..{self.max_box}")
        if isinstance(card.next, datetime) or not isinstance(card.next, date):
            raise ValidationError("card next must be a date")

    # --- public API ---
    @property
    def max_box(self) -> int:
        return len(self.intervals) - 1

    @property
    def dirty(self) -> bool:
        """True while the latest in-memory state has not reached the store."""
        return self._dirty

    def clamp(self, box: int) -> int:
        return clamp_box(box, self.intervals)

    def cards(self) -> list[Flashcard]:
        return list(self._cards)

    def get_card(self, card_id: str) -> Flashcard | None:
        idx = self._index_of(card_id)
        return None if idx is None else self._cards[idx]

    def require_card(self, card_id: str) -> Flashcard:
        card = self.get_card(card_id)
        if card is None:
            raise NotFoundError(f"card not found: {card_id}")
        return card

    def due_cards(self, as_of: date | None = None) -> list[Flashcard]:
        """Return cards whose next day is on or before ``as_of`` (default: today)."""
        day = self._day(as_of)
        return [card for card in self._cards if card.next <= day]

    def due_count(self, as_of: date | None = None) -> int:
        return len(self.due_cards(as_of))

    def grade(self, card_id: str, success: bool, as_of: date | None = None) -> Flashcard | None:
        """Move a card one box up (success) or down (failure) and reschedule it.

        box と next は同時に置き換わる。更新後はコレクション全体を同期的に保存する。
        """
        day = self._day(as_of)
        with self._lock:
            idx = self._index_of(card_id)
            if idx is None:
                logger.warning("card_grade_unknown", card_id=card_id)
                return None
            card = self._cards[idx]
            new_box, next_day = schedule_next(card.box, success, day, self.intervals)
            updated = replace(card, box=new_box, next=next_day)
            self._cards[idx] = updated
            self._persist()
        logger.info(
            "card_graded",
            card_id=card_id,
            success=success,
            box_before=card.box,
            box=new_box,
            next=next_day.isoformat(),
        )
        return updated

    def add_card(self, card: Flashcard) -> Flashcard:
        """Insert a fully formed card at the front of the collection."""
        self._validate(card)
        with self._lock:
            if self._index_of(card.id) is not None:
                raise ValidationError(f"duplicate card id: {card.id}")
            self._cards.insert(0, card)
            self._persist()
        logger.info("card_added", card_id=card.id, subject=card.subject, box=card.box, next=card.next.isoformat())
        return card

    def flush(self) -> None:
        """Write the current collection, raising PersistenceError on failure."""
        with self._lock:
            self.kv.save(self.key, encode_cards(self._cards))
            self._dirty = False
