from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_scheduler
from ..models.review import (
    ReviewCard,
    ReviewCardCreateRequest,
    ReviewCardsResponse,
    ReviewGradeRequest,
    ReviewGradeResponse,
    ReviewTodayResponse,
)
from ..srs import ReviewScheduler, new_card

router = APIRouter(tags=["review"])


@router.get("/today", response_model=ReviewTodayResponse, summary="本日の復習カードを取得")
def review_today(scheduler: ReviewScheduler = Depends(get_scheduler)) -> ReviewTodayResponse:
    """Return every card due today, in collection order."""
    today = scheduler.clock.today()
    items = [ReviewCard.from_card(card) for card in scheduler.due_cards(today)]
    return ReviewTodayResponse(date=today, count=len(items), items=items)


@router.get("/cards", response_model=ReviewCardsResponse, summary="全カード一覧（新しい順）")
def review_cards(scheduler: ReviewScheduler = Depends(get_scheduler)) -> ReviewCardsResponse:
    return ReviewCardsResponse(items=[ReviewCard.from_card(card) for card in scheduler.cards()])


@router.post(
    "/cards",
    response_model=ReviewCard,
    status_code=status.HTTP_201_CREATED,
    summary="カードを直接追加",
)
def review_add_card(
    req: ReviewCardCreateRequest, scheduler: ReviewScheduler = Depends(get_scheduler)
) -> ReviewCard:
    """Add a card; box/next default to 0/today (due immediately).

    箱の範囲外などは ValidationError として 422 になる。
    """
    card = new_card(
        subject=req.subject,
        topic=req.topic,
        front=req.front,
        back=req.back,
        next_day=req.next or scheduler.clock.today(),
        box=req.box,
    )
    return ReviewCard.from_card(scheduler.add_card(card))


@router.post("/grade", response_model=ReviewGradeResponse, summary="正誤で採点して次回出題日を更新")
def review_grade(
    req: ReviewGradeRequest, scheduler: ReviewScheduler = Depends(get_scheduler)
) -> ReviewGradeResponse:
    """Grade a card pass/fail and return its new box and due date.

    ライブラリ側の grade は未知 ID を無視するが、API では 404 を返して呼び出し側に知らせる。
    """
    updated = scheduler.grade(req.card_id, req.success)
    if updated is None:
        raise HTTPException(status_code=404, detail="card not found")
    return ReviewGradeResponse(ok=True, card_id=updated.id, box=updated.box, next_due=updated.next)
