from typing import Optional

from shikhi.db import database
from shikhi.schemas.assignment_submissions import AssignmentSubmissionCreate
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("Submissions")


class AssignmentSubmissionCRUD:

    @property
    def collection(self):
        return database.db.assignment_submissions

    async def submit(self, data: AssignmentSubmissionCreate, student: dict) -> dict:
        """Store a submission attributed to the caller; every call is a new record."""
        name = " ".join(filter(None, [student.get("first_name"), student.get("last_name")])).strip()
        doc = {
            "courseId": data.courseId,
            "assignmentId": data.assignmentId,
            "assignmentTitle": data.assignmentTitle,
            "studentId": student["user_id"],
            "studentEmail": student.get("email"),
            "studentName": name or student.get("username") or "Student",
            "textAnswer": (data.textAnswer or "").strip(),
            "fileUrl": data.fileUrl or "",
            "fileName": data.fileName or "",
            "submittedAt": utcnow(),
            "status": "submitted",
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Submission stored for assignment {data.assignmentId} by {student['user_id']}")
        return serialize_doc(doc)

    async def list_for_student(
        self,
        student_id: str,
        course_id: Optional[str] = None,
        assignment_id: Optional[str] = None,
    ) -> list:
        query = {"studentId": student_id}
        if course_id:
            query["courseId"] = course_id
        if assignment_id:
            query["assignmentId"] = assignment_id

        cursor = self.collection.find(query).sort("submittedAt", -1)
        return [serialize_doc(s) for s in await cursor.to_list(length=None)]


submission_crud = AssignmentSubmissionCRUD()
