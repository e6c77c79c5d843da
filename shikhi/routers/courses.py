from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Query

from shikhi.auth.dependencies import get_current_user
from shikhi.crud.course_management import course_management_crud
from shikhi.crud.courses import course_crud
from shikhi.crud.users import user_crud
from shikhi.routers.users import load_user
from shikhi.schemas.courses import Category, CourseEnrollment, Level
from shikhi.services.curriculum import learner_module_view, published_modules
from shikhi.utils.exceptions import NotFoundError, ValidationError

router = APIRouter(prefix="/courses", tags=["Courses"])


def parse_timezone(name: Optional[str]):
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Invalid time zone: {name}")


# ---------------------------
# CATALOG
# ---------------------------
@router.get("")
async def list_courses(
    level: Optional[Level] = None,
    category: Optional[Category] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    return await course_crud.list_courses(level=level, category=category, search=search, skip=skip, limit=limit)


@router.get("/{course_id}")
async def get_course(course_id: str):
    course = await course_crud.get_public_course(course_id)
    return {"success": True, "course": course}


# ---------------------------
# ENROLL
# ---------------------------
@router.post("/enroll", status_code=201)
async def enroll(data: CourseEnrollment, current_user=Depends(get_current_user)):
    user = await load_user(current_user)
    course = await course_crud.get_course(data.courseId, published_only=True, projection={"title": 1, "totalLessons": 1})

    enrollment = await user_crud.add_enrollment(user, course)
    await course_crud.increment_enrolled(data.courseId)
    await course_management_crud.record_enrollment(data.courseId, user)

    return {"success": True, "message": f"Enrolled in {course.get('title', 'course')}", "enrollment": enrollment}


# ---------------------------
# LEARNER CURRICULUM
# ---------------------------
@router.get("/{course_id}/curriculum")
async def get_curriculum(
    course_id: str,
    module: Optional[str] = Query(None, description="Module id to expand; defaults to the first module"),
    tz: Optional[str] = Query(None, description="IANA time zone used to group items by date"),
    current_user=Depends(get_current_user),
):
    """
    Learner view of a published course.

    Only published modules and items are returned. Items are locked for
    callers who are neither enrolled nor admins, except free previews.
    """
    zone = parse_timezone(tz)
    course = await course_crud.get_course(course_id, published_only=True, projection={"title": 1, "curriculum": 1})
    modules = published_modules((course.get("curriculum") or {}).get("modules"))

    has_access = current_user.get("role") == "admin"
    if not has_access:
        user = await user_crud.get_by_auth_id(current_user["user_id"])
        enrolled = (user or {}).get("enrolledCourses") or []
        has_access = any(str(e.get("courseId")) == course_id for e in enrolled)

    active = None
    if modules:
        if module:
            active = next((m for m in modules if str(m.get("_id")) == module), None)
            if active is None:
                raise NotFoundError("Module")
        else:
            active = modules[0]

    return {
        "success": True,
        "courseId": course_id,
        "title": course.get("title"),
        "hasAccess": has_access,
        "modules": [
            {
                "_id": m.get("_id"),
                "name": m.get("name"),
                "order": m.get("order", 0),
                "itemCount": sum(1 for i in m.get("items") or [] if i.get("isPublished")),
            }
            for m in modules
        ],
        "activeModule": learner_module_view(active, has_access, zone) if active else None,
    }
