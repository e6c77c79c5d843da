from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from shikhi.crud.courses import course_crud
from shikhi.db import database
from shikhi.schemas.course_management import ClassLinkCreate, ManagementSettings, WeeklyContentCreate
from shikhi.schemas.curriculum import new_id
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("CourseManagement")


def compute_statistics(doc: dict) -> dict:
    weekly = doc.get("weeklyContent") or []
    return {
        "totalVideos": sum(len(w.get("videoLinks") or []) for w in weekly),
        "totalDocuments": sum(len(w.get("documents") or []) for w in weekly),
        "totalClasses": len(doc.get("classLinks") or []),
        "totalBlogs": len(doc.get("blogPosts") or []),
        "totalStudents": len(doc.get("enrolledStudents") or []),
    }


class CourseManagementCRUD:
    """
    Admin-side companion document per course (weekly content, class links,
    settings). Statistics are recomputed from the arrays on every write.
    """

    @property
    def collection(self):
        return database.db.course_management

    async def _save(self, doc: dict) -> dict:
        doc["statistics"] = compute_statistics(doc)
        doc["updatedAt"] = utcnow()
        updated = await self.collection.find_one_and_replace(
            {"_id": doc["_id"]}, doc, return_document=ReturnDocument.AFTER
        )
        return serialize_doc(updated)

    async def get_or_create(self, course_id: str) -> dict:
        existing = await self.collection.find_one({"courseId": course_id})
        if existing:
            return existing

        course = await course_crud.get_course(course_id, projection={"title": 1})
        now = utcnow()
        doc = {
            "courseId": course_id,
            "courseName": course.get("title", ""),
            "weeklyContent": [],
            "classLinks": [],
            "blogPosts": [],
            "enrolledStudents": [],
            "settings": ManagementSettings().model_dump(),
            "createdAt": now,
            "updatedAt": now,
        }
        doc["statistics"] = compute_statistics(doc)
        try:
            result = await self.collection.insert_one(doc)
            doc["_id"] = result.inserted_id
            logger.info(f"Management record created for course {course_id}")
        except DuplicateKeyError:
            doc = await self.collection.find_one({"courseId": course_id})
        return doc

    async def get_management(self, course_id: str) -> dict:
        return serialize_doc(await self.get_or_create(course_id))

    # ---------------------------
    # SETTINGS
    # ---------------------------
    async def update_settings(self, course_id: str, settings: ManagementSettings) -> dict:
        doc = await self.get_or_create(course_id)
        doc["settings"] = settings.model_dump()
        return await self._save(doc)

    # ---------------------------
    # WEEKLY CONTENT
    # ---------------------------
    async def upsert_weekly_content(self, course_id: str, content: WeeklyContentCreate) -> dict:
        """Add the week's content, replacing an existing entry for the same week."""
        doc = await self.get_or_create(course_id)
        weekly = [w for w in doc.get("weeklyContent") or [] if w.get("week") != content.week]

        entry = content.model_dump()
        entry["id"] = new_id()
        if entry.get("title") is None:
            entry["title"] = f"Week {content.week}"
        if doc.get("settings", {}).get("autoPublishContent"):
            entry["isPublished"] = True
        entry["createdAt"] = utcnow()

        weekly.append(entry)
        doc["weeklyContent"] = sorted(weekly, key=lambda w: w.get("week", 0))
        return await self._save(doc)

    # ---------------------------
    # CLASS LINKS
    # ---------------------------
    async def add_class_link(self, course_id: str, link: ClassLinkCreate) -> dict:
        doc = await self.get_or_create(course_id)
        entry = link.model_dump()
        entry["id"] = new_id()
        entry["createdAt"] = utcnow()
        doc["classLinks"] = (doc.get("classLinks") or []) + [entry]
        return await self._save(doc)

    # ---------------------------
    # ENROLLED STUDENTS MIRROR
    # ---------------------------
    async def record_enrollment(self, course_id: str, student: dict):
        """Mirror an enrollment into an existing management record; no-op otherwise."""
        doc = await self.collection.find_one({"courseId": course_id})
        if not doc:
            return
        students = doc.get("enrolledStudents") or []
        if any(s.get("userId") == student["authUserId"] for s in students):
            return
        students.append(
            {
                "userId": student["authUserId"],
                "email": student.get("email") or "",
                "enrolledAt": utcnow(),
            }
        )
        doc["enrolledStudents"] = students
        await self._save(doc)


course_management_crud = CourseManagementCRUD()
