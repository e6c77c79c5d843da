from datetime import datetime
from typing import Optional
from uuid import uuid4

from pymongo.errors import DuplicateKeyError

from shikhi.auth.identity import IdentityLookupError, identity_client
from shikhi.crud.courses import course_crud
from shikhi.db import database
from shikhi.services.curriculum import next_upcoming_class
from shikhi.services.quiz_scoring import percent
from shikhi.utils.exceptions import ConflictError, NotFoundError
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("Users")


class UserCRUD:

    @property
    def collection(self):
        return database.db.users

    async def get_by_auth_id(self, auth_user_id: str) -> Optional[dict]:
        return await self.collection.find_one({"authUserId": auth_user_id})

    # ---------------------------
    # AUTO-PROVISION
    # ---------------------------
    async def get_or_provision(self, auth_user_id: str) -> Optional[dict]:
        """
        Return the local user record, creating it from the identity provider
        profile on first sight. None when the provider cannot supply a profile.
        """
        user = await self.get_by_auth_id(auth_user_id)
        if user:
            return user

        try:
            profile = await identity_client.fetch_user(auth_user_id)
        except IdentityLookupError as e:
            logger.error(f"Could not provision user {auth_user_id}: {e}")
            return None

        now = utcnow()
        user = {
            "authUserId": auth_user_id,
            "email": profile.get("email") or "",
            "username": profile.get("username"),
            "firstName": profile.get("first_name"),
            "lastName": profile.get("last_name"),
            "profileImageUrl": profile.get("image_url"),
            "role": profile.get("role") if profile.get("role") in ("student", "admin") else "student",
            "enrolledCourses": [],
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = await self.collection.insert_one(user)
            user["_id"] = result.inserted_id
            logger.info(f"Provisioned user {auth_user_id}")
        except DuplicateKeyError:
            # A concurrent request created it first
            user = await self.get_by_auth_id(auth_user_id)
        return user

    async def list_admins(self) -> list:
        cursor = self.collection.find({"role": "admin"}, {"authUserId": 1, "email": 1, "firstName": 1, "lastName": 1})
        return await cursor.to_list(length=None)

    # ---------------------------
    # ENROLLED COURSES (dashboard)
    # ---------------------------
    async def enrolled_courses(self, user: dict, now: datetime = None) -> list:
        """
        Enrolled courses with progress and the next upcoming live class.

        Course summaries and curricula are each loaded in one batch. Enrollments
        whose course no longer resolves are dropped from the result.
        """
        now = now or utcnow()
        enrollments = user.get("enrolledCourses") or []
        course_ids = [str(e.get("courseId")) for e in enrollments if e.get("courseId")]
        if not course_ids:
            return []

        summaries = await course_crud.get_summaries(course_ids)
        curricula = await course_crud.get_curricula(list(summaries))

        courses = []
        for enrollment in enrollments:
            course_id = str(enrollment.get("courseId"))
            summary = summaries.get(course_id)
            if summary is None:
                logger.warning(f"Enrolled course {course_id} not found for user {user.get('authUserId')}")
                continue

            view = serialize_doc(summary)
            view["enrolledAt"] = enrollment.get("enrolledAt")
            view["progress"] = enrollment.get("progress") or {}
            view["completedAt"] = enrollment.get("completedAt")
            view["certificateId"] = enrollment.get("certificateId")
            view["nextClass"] = next_upcoming_class(curricula.get(course_id, []), now)
            courses.append(view)

        return courses

    # ---------------------------
    # ENROLL
    # ---------------------------
    async def add_enrollment(self, user: dict, course: dict) -> dict:
        course_id = str(course["_id"])
        if any(str(e.get("courseId")) == course_id for e in user.get("enrolledCourses") or []):
            raise ConflictError("Already enrolled in this course")

        now = utcnow()
        enrollment = {
            "courseId": course_id,
            "enrolledAt": now,
            "progress": {
                "completedLessons": 0,
                "totalLessons": course.get("totalLessons", 0),
                "progressPercentage": 0,
                "lastAccessedAt": now,
            },
        }
        result = await self.collection.update_one(
            {"_id": user["_id"], "enrolledCourses.courseId": {"$ne": course_id}},
            {"$push": {"enrolledCourses": enrollment}, "$set": {"updatedAt": now}},
        )
        if result.modified_count == 0:
            raise ConflictError("Already enrolled in this course")

        logger.info(f"User {user['authUserId']} enrolled in {course_id}")
        return enrollment

    # ---------------------------
    # PROGRESS
    # ---------------------------
    async def update_progress(self, user: dict, course: dict, completed_lessons: int) -> dict:
        course_id = str(course["_id"])
        enrollments = user.get("enrolledCourses") or []
        index = next((i for i, e in enumerate(enrollments) if str(e.get("courseId")) == course_id), None)
        if index is None:
            raise NotFoundError("Enrollment")

        enrollment = dict(enrollments[index])
        total = course.get("totalLessons", 0)
        completed = min(completed_lessons, total) if total else completed_lessons
        now = utcnow()

        enrollment["progress"] = {
            "completedLessons": completed,
            "totalLessons": total,
            "progressPercentage": min(percent(completed, total), 100),
            "lastAccessedAt": now,
        }
        if enrollment["progress"]["progressPercentage"] == 100 and not enrollment.get("completedAt"):
            enrollment["completedAt"] = now
            enrollment["certificateId"] = f"CERT-{uuid4().hex[:12].upper()}"
            logger.info(f"User {user['authUserId']} completed course {course_id}")

        await self.collection.update_one(
            {"_id": user["_id"]},
            {"$set": {f"enrolledCourses.{index}": enrollment, "updatedAt": now}},
        )
        return enrollment

    # ---------------------------
    # CERTIFICATES
    # ---------------------------
    async def verify_certificate(self, certificate_id: str) -> dict:
        """Resolve a certificate id to the student and course it was issued for."""
        user = await self.collection.find_one({"enrolledCourses.certificateId": certificate_id})
        enrollment = next(
            (e for e in (user or {}).get("enrolledCourses") or [] if e.get("certificateId") == certificate_id),
            None,
        )
        if enrollment is None:
            raise NotFoundError("Certificate")

        course_id = str(enrollment.get("courseId"))
        summaries = await course_crud.get_summaries([course_id])
        course = summaries.get(course_id) or {}
        full_name = " ".join(p for p in (user.get("firstName"), user.get("lastName")) if p)

        return {
            "certificateId": certificate_id,
            "studentName": full_name or user.get("username") or user.get("email"),
            "courseId": course_id,
            "courseName": course.get("title"),
            "completedAt": enrollment.get("completedAt"),
            "progressPercentage": (enrollment.get("progress") or {}).get("progressPercentage", 0),
        }


user_crud = UserCRUD()
