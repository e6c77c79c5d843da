from datetime import timedelta

from shikhi.utils.mongo import utcnow


def live_class(title, when, link="https://zoom.us/j/123", published=True, **extra):
    return {
        "type": "live-class",
        "title": title,
        "scheduledDate": when,
        "meetingLink": link,
        "isPublished": published,
        **extra,
    }


def announcement(title, when=None, pinned=True, valid_until=None, **extra):
    return {
        "type": "announcement",
        "title": title,
        "scheduledDate": when or utcnow(),
        "isPinned": pinned,
        "validUntil": valid_until,
        **extra,
    }


def mcq_quiz(title="Kana quiz", correct=(0, 0, 0, 0), allow_retake=False, **extra):
    """Quiz item whose question ``i`` has its correct answer at ``correct[i]``."""
    questions = [
        {
            "question": f"Question {i + 1}",
            "options": [{"text": f"Option {j}", "isCorrect": j == answer} for j in range(3)],
        }
        for i, answer in enumerate(correct)
    ]
    return {
        "type": "quiz",
        "title": title,
        "scheduledDate": utcnow() + timedelta(days=1),
        "quizData": {"mcqQuestions": questions, "allowMultipleAttempts": allow_retake},
        **extra,
    }


def module(name="Module 1", items=(), published=True, order=0):
    return {"name": name, "items": list(items), "isPublished": published, "order": order}
