from datetime import date

from pydantic import BaseModel, Field

from ..srs import Flashcard


class ReviewCard(BaseModel):
    """A single review card to display on the frontend."""

    id: str
    subject: str
    topic: str
    front: str
    back: str
    box: int
    next: date

    @classmethod
    def from_card(cls, card: Flashcard) -> "ReviewCard":
        return cls(
            id=card.id,
            subject=card.subject,
            topic=card.topic,
            front=card.front,
            back=card.back,
            box=card.box,
            next=card.next,
        )


class ReviewTodayResponse(BaseModel):
    """Response model for today's review items.

    今日の復習対象（next が今日以前のカード）。並びはコレクション順。
    """

    date: date
    count: int
    items: list[ReviewCard]


class ReviewCardsResponse(BaseModel):
    items: list[ReviewCard]


class ReviewCardCreateRequest(BaseModel):
    """Request model for adding a card directly.

    box/next を省略すると箱0・今日が期限（すぐに出題）になる。
    """

    subject: str = Field(min_length=1, max_length=64)
    topic: str = Field(min_length=1, max_length=128)
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    box: int = Field(default=0, ge=0)
    next: date | None = None


class ReviewGradeRequest(BaseModel):
    """Request model for submitting a pass/fail grade.

    success=true は「思い出せた」、false は「忘れていた」。
    """

    card_id: str = Field(min_length=1)
    success: bool


class ReviewGradeResponse(BaseModel):
    ok: bool
    card_id: str
    box: int
    next_due: date
