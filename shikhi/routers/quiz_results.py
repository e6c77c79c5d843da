from typing import Optional

from fastapi import APIRouter, Depends

from shikhi.auth.dependencies import get_current_user
from shikhi.crud.quiz_results import quiz_result_crud
from shikhi.schemas.quiz_results import QuizResultCreate

router = APIRouter(prefix="/quiz-results", tags=["Quiz Results"])


@router.post("")
async def save_quiz_result(data: QuizResultCreate, current_user=Depends(get_current_user)):
    """Record an attempt. The stored result is always the best score so far."""
    result = await quiz_result_crud.save_result(current_user["user_id"], data)
    return {"success": True, **result}


@router.get("")
async def list_quiz_results(
    courseId: Optional[str] = None,
    quizId: Optional[str] = None,
    current_user=Depends(get_current_user),
):
    results = await quiz_result_crud.list_results(current_user["user_id"], courseId, quizId)
    return {"success": True, "results": results}
