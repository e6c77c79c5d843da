from typing import Optional

from pymongo import ReturnDocument

from shikhi.crud.courses import course_crud
from shikhi.db import database
from shikhi.schemas.assignments import AssignmentCreate, AssignmentUpdate
from shikhi.utils.exceptions import not_found, to_oid
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("Assignments")


class AssignmentCRUD:

    @property
    def collection(self):
        return database.db.assignments

    # ---------------------------
    # CREATE ASSIGNMENT
    # ---------------------------
    async def create_assignment(self, course_id: str, data: AssignmentCreate, created_by: str) -> dict:
        course = await course_crud.get_course(course_id, projection={"title": 1})

        now = utcnow()
        doc = data.model_dump()
        doc.update(
            {
                "courseId": course_id,
                "courseName": course.get("title", ""),
                "createdBy": created_by,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Assignment '{doc['title']}' created for course {course_id} (week {doc['week']})")
        return serialize_doc(doc)

    # ---------------------------
    # GET ASSIGNMENTS BY COURSE
    # ---------------------------
    async def list_by_course(self, course_id: str, week: Optional[int] = None) -> list:
        query = {"courseId": course_id}
        if week is not None:
            query["week"] = week

        cursor = self.collection.find(query).sort([("week", 1), ("dueDate", 1)])
        return [serialize_doc(a) for a in await cursor.to_list(length=None)]

    async def get_assignment(self, assignment_id: str) -> dict:
        assignment = await self.collection.find_one({"_id": to_oid(assignment_id, "assignment id")})
        if not assignment:
            not_found("Assignment")
        return serialize_doc(assignment)

    # ---------------------------
    # UPDATE ASSIGNMENT
    # ---------------------------
    async def update_assignment(self, assignment_id: str, updates: AssignmentUpdate) -> dict:
        update_data = {k: v for k, v in updates.model_dump(exclude_unset=True).items() if v is not None}
        if not update_data:
            return await self.get_assignment(assignment_id)

        update_data["updatedAt"] = utcnow()
        updated = await self.collection.find_one_and_update(
            {"_id": to_oid(assignment_id, "assignment id")},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            not_found("Assignment")
        return serialize_doc(updated)

    # ---------------------------
    # DELETE ASSIGNMENT
    # ---------------------------
    async def delete_assignment(self, assignment_id: str) -> dict:
        result = await self.collection.delete_one({"_id": to_oid(assignment_id, "assignment id")})
        if result.deleted_count == 0:
            not_found("Assignment")
        return {"success": True, "message": "Assignment deleted"}


assignment_crud = AssignmentCRUD()
