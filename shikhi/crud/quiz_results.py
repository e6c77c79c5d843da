from typing import Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from shikhi.crud.courses import course_crud
from shikhi.db import database
from shikhi.schemas.quiz_results import QuizResultCreate
from shikhi.services.curriculum import find_item
from shikhi.services.quiz_scoring import score_mcq
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("QuizResults")


class QuizResultCRUD:

    @property
    def collection(self):
        return database.db.quiz_results

    async def _server_score(self, course_id: str, quiz_id: str, answers: dict):
        """Recompute the score from the stored answer key when the quiz can be found."""
        course = await course_crud.get_course(course_id, projection={"curriculum.modules": 1})
        modules = (course.get("curriculum") or {}).get("modules") or []
        item = find_item(modules, quiz_id)
        if not item or item.get("type") != "quiz":
            return None
        questions = (item.get("quizData") or {}).get("mcqQuestions") or []
        if not questions:
            return None
        return score_mcq(questions, answers)

    # ---------------------------
    # SAVE RESULT (best score kept)
    # ---------------------------
    async def save_result(self, user_id: str, data: QuizResultCreate) -> dict:
        score = data.score
        total_questions = data.totalQuestions
        correct_answers = data.correctAnswers

        computed = await self._server_score(data.courseId, data.quizId, data.answers)
        if computed is not None:
            if computed.score != data.score:
                logger.warning(
                    f"Client score {data.score} for quiz {data.quizId} differs from server score {computed.score}"
                )
            score = computed.score
            total_questions = computed.total_questions
            correct_answers = computed.correct_answers

        now = utcnow()
        fields = {
            "quizTitle": data.quizTitle,
            "answers": {str(k): v for k, v in data.answers.items()},
            "score": score,
            "totalQuestions": total_questions,
            "correctAnswers": correct_answers,
            "timeSpent": data.timeSpent,
            "completedAt": now,
            "updatedAt": now,
        }
        key = {"userId": user_id, "courseId": data.courseId, "quizId": data.quizId}
        latest = {"score": score, "totalQuestions": total_questions, "correctAnswers": correct_answers}

        existing = await self.collection.find_one(key)
        if existing is None:
            try:
                doc = {**key, **fields, "attempts": 1}
                result = await self.collection.insert_one(doc)
                doc["_id"] = result.inserted_id
                return {"message": "Quiz result saved", "improved": True, "attempt": latest, "data": serialize_doc(doc)}
            except DuplicateKeyError:
                existing = await self.collection.find_one(key)

        if score > existing.get("score", 0):
            updated = await self.collection.find_one_and_update(
                key,
                {"$set": fields, "$inc": {"attempts": 1}},
                return_document=ReturnDocument.AFTER,
            )
            logger.info(f"Improved score for quiz {data.quizId}: {existing.get('score', 0)} -> {score}")
            return {
                "message": "Quiz result updated with a better score",
                "improved": True,
                "attempt": latest,
                "data": serialize_doc(updated),
            }

        updated = await self.collection.find_one_and_update(
            key,
            {"$inc": {"attempts": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return {
            "message": "Previous best score kept",
            "improved": False,
            "attempt": latest,
            "data": serialize_doc(updated),
        }

    async def list_results(self, user_id: str, course_id: Optional[str] = None, quiz_id: Optional[str] = None) -> list:
        query = {"userId": user_id}
        if course_id:
            query["courseId"] = course_id
        if quiz_id:
            query["quizId"] = quiz_id
        cursor = self.collection.find(query).sort("completedAt", -1)
        return [serialize_doc(r) for r in await cursor.to_list(length=None)]


quiz_result_crud = QuizResultCRUD()
