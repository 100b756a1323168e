from datetime import date

from pydantic import BaseModel, Field

from ..practice import Question


class QuestionItem(BaseModel):
    """A practice question without its answer."""

    id: str
    index: int
    subject: str
    topic: str
    text: str
    options: list[str]

    @classmethod
    def from_question(cls, question: Question, index: int) -> "QuestionItem":
        return cls(
            id=question.id,
            index=index,
            subject=question.subject,
            topic=question.topic,
            text=question.text,
            options=list(question.options),
        )


class PracticeSubmitRequest(BaseModel):
    """解答を送信し、復習キューへ保存するリクエスト。"""

    question_id: str = Field(min_length=1)
    picked: str = Field(min_length=1)


class PracticeSubmitResponse(BaseModel):
    correct: bool
    solution: str
    card_id: str
    box: int
    next_due: date
