import asyncio
import time
from typing import Callable

import aiohttp

from shikhi.client.api import ApiError, ShikhiClient
from shikhi.client.completion import CompletionStore
from shikhi.services.quiz_scoring import QuizScore, score_mcq
from shikhi.utils.logger import get_logger

logger = get_logger("QuizAttempt")


class QuizLockedError(Exception):
    pass


class QuizAttempt:
    """
    One learner's pass through an MCQ quiz item.

    Scoring happens locally so the learner always gets a result; posting it to
    the server is best-effort. Once submitted, the quiz is locked for the user
    unless the quiz allows multiple attempts.
    """

    def __init__(
        self,
        api: ShikhiClient,
        store: CompletionStore,
        course_id: str,
        user_id: str,
        quiz: dict,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.store = store
        self.course_id = course_id
        self.user_id = user_id
        self.quiz = quiz
        self.quiz_id = str(quiz.get("_id") or quiz.get("id"))
        self.settings = quiz.get("quizData") or {}
        self.questions = self.settings.get("mcqQuestions") or []
        self.answers = {}
        self.submitted = False
        self._clock = clock
        self._started = clock()

        if self.is_locked():
            raise QuizLockedError(f"Quiz '{quiz.get('title')}' has already been completed")

    def is_locked(self) -> bool:
        if self.settings.get("allowMultipleAttempts"):
            return False
        return self.store.is_completed(self.course_id, self.user_id, self.quiz_id)

    def select(self, question_index: int, option_index: int):
        if self.submitted:
            raise QuizLockedError("Quiz already submitted")
        if not 0 <= question_index < len(self.questions):
            raise ValueError(f"No question at index {question_index}")
        options = self.questions[question_index].get("options") or []
        if not 0 <= option_index < len(options):
            raise ValueError(f"No option {option_index} for question {question_index}")
        self.answers[question_index] = option_index

    async def submit(self) -> QuizScore:
        if self.submitted:
            raise QuizLockedError("Quiz already submitted")

        outcome = score_mcq(self.questions, self.answers)
        payload = {
            "courseId": self.course_id,
            "quizId": self.quiz_id,
            "quizTitle": self.quiz.get("title") or "Quiz",
            "answers": {str(k): v for k, v in self.answers.items()},
            "score": outcome.score,
            "totalQuestions": outcome.total_questions,
            "correctAnswers": outcome.correct_answers,
            "timeSpent": int(self._clock() - self._started),
        }

        try:
            response = await self.api.post_quiz_result(payload)
            # The server re-scores against its own answer key
            attempt = response.get("attempt")
            if attempt:
                outcome = QuizScore(
                    correct_answers=attempt["correctAnswers"],
                    total_questions=attempt["totalQuestions"],
                    score=attempt["score"],
                )
        except (ApiError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Saving result for quiz {self.quiz_id} failed; keeping local score: {e}")

        self.store.mark_completed(self.course_id, self.user_id, self.quiz_id, outcome.score)
        self.submitted = True
        return outcome
