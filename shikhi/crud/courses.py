import re
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from shikhi.db import database
from shikhi.schemas.courses import SUMMARY_FIELDS, CourseCreate, CourseUpdate
from shikhi.schemas.curriculum import Curriculum, default_curriculum
from shikhi.services.curriculum import ensure_item_ids
from shikhi.utils.cache import course_cache
from shikhi.utils.exceptions import NotFoundError, ValidationError, to_oid
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("Courses")

SUMMARY_PROJECTION = {field: 1 for field in SUMMARY_FIELDS}


class CourseCRUD:

    @property
    def collection(self):
        return database.db.courses

    def clean_update_data(self, update_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Drops nulls, Swagger 'string' placeholders and blank strings so a
        partial update never wipes a field by accident.
        """
        cleaned = {}
        for key, value in update_dict.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip().lower() == "string":
                continue
            # thumbnailUrl may be cleared explicitly
            if isinstance(value, str) and value.strip() == "" and key != "thumbnailUrl":
                continue
            cleaned[key] = value
        return cleaned

    def invalidate(self, course_id: str = None):
        if course_id:
            course_cache.delete(f"course:{course_id}")
        else:
            course_cache.clear()

    # ---------------------------
    # CREATE COURSE
    # ---------------------------
    async def create_course(self, course_data: CourseCreate, created_by: str) -> dict:
        now = utcnow()
        course_dict = course_data.model_dump()
        course_dict.update(
            {
                "averageRating": 0,
                "totalRatings": 0,
                "enrolledStudents": 0,
                "curriculum": {"modules": []},
                "metadata": {"version": 1, "lastUpdated": now, "createdBy": created_by},
                "createdAt": now,
                "updatedAt": now,
            }
        )

        result = await self.collection.insert_one(course_dict)
        course_dict["_id"] = result.inserted_id
        logger.info(f"Course created: {course_dict['title']} ({result.inserted_id})")
        return serialize_doc(course_dict)

    # ---------------------------
    # LIST / GET
    # ---------------------------
    async def list_courses(
        self,
        level: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        published_only: bool = True,
        skip: int = 0,
        limit: int = 20,
    ) -> dict:
        query: Dict[str, Any] = {}
        if published_only:
            query["isPublished"] = True
        if level:
            query["level"] = level
        if category:
            query["category"] = category
        if search and search.strip():
            pattern = re.escape(search.strip())
            query["$or"] = [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"titleJp": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
                {"tags": {"$regex": pattern, "$options": "i"}},
            ]

        total = await self.collection.count_documents(query)
        cursor = self.collection.find(query, {"curriculum": 0}).sort("createdAt", -1).skip(skip).limit(limit)
        courses = [serialize_doc(c) for c in await cursor.to_list(length=limit)]

        return {
            "success": True,
            "courses": courses,
            "total": total,
            "skip": skip,
            "limit": limit,
        }

    async def get_course(self, course_id: str, published_only: bool = False, projection: dict = None) -> dict:
        query = {"_id": to_oid(course_id, "course id")}
        if published_only:
            query["isPublished"] = True
        course = await self.collection.find_one(query, projection)
        if not course:
            raise NotFoundError("Course")
        return course

    async def get_public_course(self, course_id: str) -> dict:
        """Published course without its curriculum; cached per process."""

        async def load():
            course = await self.collection.find_one(
                {"_id": to_oid(course_id, "course id"), "isPublished": True},
                {"curriculum": 0},
            )
            return serialize_doc(course)

        course = await course_cache.get_or_set(f"course:{course_id}", load)
        if course is None:
            raise NotFoundError("Course")
        return course

    async def get_summaries(self, course_ids: List[str]) -> Dict[str, dict]:
        """Batch load summary projections keyed by string id. Invalid ids are skipped."""
        oids = []
        for course_id in course_ids:
            try:
                oids.append(to_oid(course_id, "course id"))
            except ValidationError:
                logger.warning(f"Skipping malformed course id in enrollment: {course_id}")
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, SUMMARY_PROJECTION)
        return {str(c["_id"]): c for c in await cursor.to_list(length=None)}

    async def get_curricula(self, course_ids: List[str]) -> Dict[str, list]:
        oids = [to_oid(cid, "course id") for cid in course_ids]
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, {"curriculum.modules": 1})
        return {str(c["_id"]): (c.get("curriculum") or {}).get("modules") or [] for c in await cursor.to_list(length=None)}

    # ---------------------------
    # UPDATE / UNPUBLISH
    # ---------------------------
    async def update_course(self, course_id: str, course_update: CourseUpdate) -> dict:
        existing = await self.get_course(course_id)
        cleaned = self.clean_update_data(course_update.model_dump(exclude_unset=True))
        if not cleaned:
            return serialize_doc(existing)

        actual = cleaned.get("actualPrice", existing.get("actualPrice"))
        discounted = cleaned.get("discountedPrice", existing.get("discountedPrice"))
        if actual is not None and discounted is not None and discounted > actual:
            raise ValidationError("Discounted price cannot be higher than actual price")

        now = utcnow()
        cleaned["updatedAt"] = now
        cleaned["metadata.lastUpdated"] = now

        result = await self.collection.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": cleaned, "$inc": {"metadata.version": 1}},
            return_document=ReturnDocument.AFTER,
        )
        self.invalidate(course_id)
        return serialize_doc(result)

    async def unpublish_course(self, course_id: str) -> dict:
        result = await self.collection.find_one_and_update(
            {"_id": to_oid(course_id, "course id")},
            {"$set": {"isPublished": False, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFoundError("Course")
        self.invalidate(course_id)
        logger.info(f"Course unpublished: {course_id}")
        return {"success": True, "message": "Course unpublished"}

    async def increment_enrolled(self, course_id: str, amount: int = 1):
        await self.collection.update_one({"_id": to_oid(course_id, "course id")}, {"$inc": {"enrolledStudents": amount}})
        self.invalidate(course_id)

    # ---------------------------
    # CURRICULUM
    # ---------------------------
    async def get_curriculum(self, course_id: str) -> dict:
        """
        Admin view of the curriculum.

        A course without modules gets a default unpublished "Module 1" and
        legacy items without ids are given one; both are persisted so the ids
        stay stable across reads.
        """
        course = await self.get_course(course_id, projection={"curriculum": 1, "title": 1})
        modules = (course.get("curriculum") or {}).get("modules") or []

        if not modules:
            modules = default_curriculum().to_document()["modules"]
            changed = True
        else:
            changed = ensure_item_ids(modules)

        if changed:
            await self.collection.update_one(
                {"_id": course["_id"]},
                {"$set": {"curriculum.modules": modules, "updatedAt": utcnow()}},
            )

        modules = sorted(modules, key=lambda m: m.get("order", 0))
        return {"courseId": course_id, "title": course.get("title"), "curriculum": {"modules": modules}}

    async def replace_curriculum(self, course_id: str, curriculum: Curriculum) -> dict:
        document = curriculum.to_document()
        now = utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": to_oid(course_id, "course id")},
            {
                "$set": {"curriculum": document, "updatedAt": now, "metadata.lastUpdated": now},
                "$inc": {"metadata.version": 1},
            },
            projection={"curriculum": 1},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFoundError("Course")
        self.invalidate(course_id)
        logger.info(f"Curriculum saved for course {course_id}: {len(document['modules'])} modules")
        return {"courseId": course_id, "curriculum": result["curriculum"]}


course_crud = CourseCRUD()
