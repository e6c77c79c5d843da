from typing import Optional

from fastapi import APIRouter, Depends, Query

from shikhi.auth.dependencies import require_role
from shikhi.crud.course_management import course_management_crud
from shikhi.crud.courses import course_crud
from shikhi.schemas.course_management import ClassLinkCreate, ManagementSettings, WeeklyContentCreate
from shikhi.schemas.courses import Category, CourseCreate, CourseUpdate, Level
from shikhi.schemas.curriculum import CurriculumUpdate
from shikhi.utils.mongo import serialize_doc

router = APIRouter(prefix="/admin/courses", tags=["Admin Courses"], dependencies=[Depends(require_role("admin"))])


# ------------------ Courses ------------------

@router.post("", status_code=201)
async def create_course(data: CourseCreate, current_user=Depends(require_role("admin"))):
    course = await course_crud.create_course(data, created_by=current_user["user_id"])
    return {"success": True, "message": "Course created", "course": course}


@router.get("")
async def list_courses(
    level: Optional[Level] = None,
    category: Optional[Category] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    return await course_crud.list_courses(
        level=level, category=category, search=search, published_only=False, skip=skip, limit=limit
    )


@router.get("/{course_id}")
async def get_course(course_id: str):
    course = await course_crud.get_course(course_id)
    return {"success": True, "course": serialize_doc(course)}


@router.patch("/{course_id}")
async def update_course(course_id: str, data: CourseUpdate):
    course = await course_crud.update_course(course_id, data)
    return {"success": True, "message": "Course updated", "course": course}


@router.delete("/{course_id}")
async def delete_course(course_id: str):
    # Courses are never hard-deleted; enrollments keep pointing at them
    return await course_crud.unpublish_course(course_id)


# ------------------ Curriculum ------------------

@router.get("/{course_id}/curriculum")
async def get_curriculum(course_id: str):
    return {"success": True, **await course_crud.get_curriculum(course_id)}


@router.put("/{course_id}/curriculum")
async def save_curriculum(course_id: str, data: CurriculumUpdate):
    result = await course_crud.replace_curriculum(course_id, data.curriculum)
    return {"success": True, "message": "Curriculum saved", **result}


# ------------------ Management ------------------

@router.get("/{course_id}/management")
async def get_management(course_id: str):
    return {"success": True, "management": await course_management_crud.get_management(course_id)}


@router.put("/{course_id}/management/settings")
async def update_settings(course_id: str, settings: ManagementSettings):
    management = await course_management_crud.update_settings(course_id, settings)
    return {"success": True, "message": "Settings updated", "management": management}


@router.post("/{course_id}/management/weekly-content", status_code=201)
async def add_weekly_content(course_id: str, content: WeeklyContentCreate):
    management = await course_management_crud.upsert_weekly_content(course_id, content)
    return {"success": True, "message": f"Week {content.week} content saved", "management": management}


@router.post("/{course_id}/management/class-links", status_code=201)
async def add_class_link(course_id: str, link: ClassLinkCreate):
    management = await course_management_crud.add_class_link(course_id, link)
    return {"success": True, "message": "Class link added", "management": management}
