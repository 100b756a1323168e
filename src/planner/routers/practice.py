from fastapi import APIRouter, Depends

from ..deps import get_scheduler
from ..models.practice import PracticeSubmitRequest, PracticeSubmitResponse, QuestionItem
from ..practice import SAMPLE_QUESTIONS, capture, check_answer, find_question, question_at
from ..srs import ReviewScheduler

router = APIRouter(tags=["practice"])


@router.get("/questions/{index}", response_model=QuestionItem, summary="練習問題を取得（番号は循環）")
def practice_question(index: int) -> QuestionItem:
    question = question_at(index)
    return QuestionItem.from_question(question, index % len(SAMPLE_QUESTIONS))


@router.post("/submit", response_model=PracticeSubmitResponse, summary="解答して復習キューへ保存")
def practice_submit(
    req: PracticeSubmitRequest, scheduler: ReviewScheduler = Depends(get_scheduler)
) -> PracticeSubmitResponse:
    """Check the answer and save the question as a review card due today.

    正解なら箱2、不正解なら箱0で登録する。
    """
    question = find_question(req.question_id)
    card = capture(question, req.picked, scheduler.clock.today(), max_box=scheduler.max_box)
    scheduler.add_card(card)
    return PracticeSubmitResponse(
        correct=check_answer(question, req.picked),
        solution=question.solution,
        card_id=card.id,
        box=card.box,
        next_due=card.next,
    )
