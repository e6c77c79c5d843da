from dataclasses import dataclass
from fractions import Fraction
from math import floor
from typing import Mapping, Sequence


@dataclass(frozen=True)
class QuizScore:
    correct_answers: int
    total_questions: int
    score: int


def normalise_answers(answers: Mapping) -> dict:
    """Coerce ``{"0": "2"}`` style JSON answer maps to ``{0: 2}``; drops junk keys."""
    normalised = {}
    for key, value in (answers or {}).items():
        try:
            normalised[int(key)] = int(value)
        except (TypeError, ValueError):
            continue
    return normalised


def percent(correct: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when there is nothing to score."""
    if total <= 0:
        return 0
    return floor(Fraction(correct * 100, total) + Fraction(1, 2))


def score_mcq(questions: Sequence[Mapping], answers: Mapping) -> QuizScore:
    """
    Score a multiple-choice attempt.

    A question counts when the learner picked an option and that option is
    flagged ``isCorrect``. No partial credit and no negative marking; a
    question with several correct options is satisfied by any one of them.
    """
    selected = normalise_answers(answers)
    questions = list(questions or [])
    correct = 0

    for index, question in enumerate(questions):
        choice = selected.get(index)
        if choice is None or choice < 0:
            continue
        options = question.get("options") or []
        if choice < len(options) and options[choice].get("isCorrect"):
            correct += 1

    return QuizScore(
        correct_answers=correct,
        total_questions=len(questions),
        score=percent(correct, len(questions)),
    )
