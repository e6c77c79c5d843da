import argparse
import asyncio
from datetime import timedelta

from shikhi.db import database
from shikhi.schemas.courses import CourseCreate
from shikhi.schemas.curriculum import Curriculum
from shikhi.utils.logger import get_logger, setup_logging
from shikhi.utils.mongo import utcnow

logger = get_logger("Setup")


def sample_course() -> dict:
    now = utcnow()
    course = CourseCreate(
        title="Japanese for Beginners",
        titleJp="はじめての日本語",
        description="Hiragana, katakana and everyday phrases for absolute beginners.",
        level="beginner",
        category="conversation",
        tags=["hiragana", "katakana"],
        estimatedDuration=90,
        isPublished=True,
        totalLessons=12,
    ).model_dump()

    curriculum = Curriculum.model_validate(
        {
            "modules": [
                {
                    "name": "Module 1",
                    "description": "Getting started",
                    "isPublished": True,
                    "order": 0,
                    "items": [
                        {
                            "type": "announcement",
                            "title": "Welcome!",
                            "scheduledDate": now,
                            "isPinned": True,
                        },
                        {
                            "type": "live-class",
                            "title": "Hiragana basics",
                            "scheduledDate": now + timedelta(days=2),
                            "meetingLink": "https://zoom.us/j/000000000",
                        },
                        {
                            "type": "quiz",
                            "title": "Hiragana check",
                            "scheduledDate": now + timedelta(days=3),
                            "quizData": {
                                "mcqQuestions": [
                                    {
                                        "question": "Which is 'a'?",
                                        "options": [
                                            {"text": "あ", "isCorrect": True},
                                            {"text": "い"},
                                        ],
                                    }
                                ]
                            },
                        },
                    ],
                }
            ]
        }
    )

    course.update(
        {
            "averageRating": 0,
            "totalRatings": 0,
            "enrolledStudents": 0,
            "curriculum": curriculum.to_document(),
            "metadata": {"version": 1, "lastUpdated": now, "createdBy": "setup"},
            "createdAt": now,
            "updatedAt": now,
        }
    )
    return course


async def main(seed: bool):
    setup_logging()
    await database.ensure_indexes()

    if seed:
        course = sample_course()
        existing = await database.db.courses.find_one({"title": course["title"]})
        if existing:
            logger.info(f"Sample course already present ({existing['_id']})")
        else:
            result = await database.db.courses.insert_one(course)
            logger.info(f"Seeded sample course {result.inserted_id}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create indexes and optionally seed sample data")
    parser.add_argument("--seed", action="store_true", help="insert a sample published course")
    args = parser.parse_args()
    asyncio.run(main(args.seed))
