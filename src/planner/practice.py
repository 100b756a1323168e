"""Quick-practice question bank and its hand-off to the review queue.

練習問題の解答結果を復習カードに変換する「カード供給元」。
正解でも保存でき、その場合は箱2（早めに一度見直す）、不正解は箱0（当日中）に入る。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .errors import NotFoundError
from .srs import Flashcard, new_card

CORRECT_BOX = 2
INCORRECT_BOX = 0


@dataclass(frozen=True)
class Question:
    id: str
    subject: str
    topic: str
    text: str
    options: tuple[str, ...]
    answer: str
    solution: str


SAMPLE_QUESTIONS: tuple[Question, ...] = (
    Question(
        id="q:math:quadratic",
        subject="math",
        topic="Quadratic",
        text="If α and β are roots of x^2 - 5x + 6 = 0, find α^2 + β^2.",
        options=("10", "13", "25", "37"),
        answer="13",
        solution="For ax^2+bx+c: α+β=5, αβ=6 ⇒ α^2+β^2=(α+β)^2-2αβ=25-12=13.",
    ),
    Question(
        id="q:phy:kinematics",
        subject="phy",
        topic="Kinematics",
        text="A particle starts with u=5 m/s and a=2 m/s². Distance in 4 s?",
        options=("28 m", "36 m", "44 m", "48 m"),
        answer="36 m",
        solution="s = ut + 1/2 a t^2 = 5*4 + 0.5*2*16 = 20 + 16 = 36 m.",
    ),
    Question(
        id="q:chem:mole-concept",
        subject="chem",
        topic="Mole Concept",
        text="Moles in 11 g of CO2? (M=44 g/mol)",
        options=("0.125", "0.25", "0.5", "2"),
        answer="0.25",
        solution="n = m/M = 11/44 = 0.25 mol.",
    ),
)


def question_at(index: int, bank: tuple[Question, ...] = SAMPLE_QUESTIONS) -> Question:
    """Return the question for a running index; the bank repeats."""
    if not bank:
        raise NotFoundError("question bank is empty")
    return bank[index % len(bank)]


def find_question(question_id: str, bank: tuple[Question, ...] = SAMPLE_QUESTIONS) -> Question:
    for question in bank:
        if question.id == question_id:
            return question
    raise NotFoundError(f"question not found: {question_id}")


def check_answer(question: Question, picked: str) -> bool:
    return str(picked).strip() == question.answer.strip()


def capture(
    question: Question,
    picked: str,
    today: date,
    card_id: str | None = None,
    max_box: int | None = None,
) -> Flashcard:
    """Turn a practice attempt into a review card due ``today``.

    max_box を渡すと、箱の数が少ない設定でも初期の箱がその範囲に収まる。
    """
    box = CORRECT_BOX if check_answer(question, picked) else INCORRECT_BOX
    if max_box is not None:
        box = min(box, max_box)
    return new_card(
        subject=question.subject,
        topic=question.topic,
        front=question.text,
        back=question.solution,
        next_day=today,
        box=box,
        card_id=card_id,
    )
