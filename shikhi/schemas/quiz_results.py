from typing import Dict

from pydantic import BaseModel, Field


class QuizResultCreate(BaseModel):
    courseId: str = Field(..., min_length=1)
    quizId: str = Field(..., min_length=1)
    quizTitle: str = Field(..., min_length=1)
    # questionIndex -> selectedOptionIndex; JSON object keys arrive as strings
    answers: Dict[int, int]
    score: int = Field(..., ge=0, le=100)
    totalQuestions: int = Field(0, ge=0)
    correctAnswers: int = Field(0, ge=0)
    timeSpent: int = Field(0, ge=0)  # seconds
