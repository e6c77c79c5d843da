from fastapi import APIRouter, Depends

from shikhi.auth.dependencies import get_current_user
from shikhi.crud.courses import course_crud
from shikhi.crud.users import user_crud
from shikhi.schemas.users import ProgressUpdate
from shikhi.utils.exceptions import AppError, NotFoundError
from shikhi.utils.logger import get_logger, timed
from shikhi.utils.mongo import serialize_doc

router = APIRouter(prefix="/users", tags=["Users"])

logger = get_logger("API:/api/users")


async def load_user(current_user: dict) -> dict:
    user = await user_crud.get_or_provision(current_user["user_id"])
    if not user:
        raise NotFoundError(message="User not found and could not be created")
    return user


@router.get("/me")
async def get_me(current_user=Depends(get_current_user)):
    user = await load_user(current_user)
    return {"success": True, "user": serialize_doc(user)}


@router.get("/me/courses")
async def get_my_courses(current_user=Depends(get_current_user)):
    """Enrolled courses with progress and the next upcoming live class."""
    user = await load_user(current_user)
    try:
        async with timed("GET /api/users/me/courses"):
            courses = await user_crud.enrolled_courses(user)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Failed to load enrolled courses: {e}", exc_info=e)
        raise AppError("Internal server error")

    return {"success": True, "data": courses}


@router.post("/me/courses/{course_id}/progress")
async def update_my_progress(course_id: str, data: ProgressUpdate, current_user=Depends(get_current_user)):
    user = await load_user(current_user)
    course = await course_crud.get_course(course_id, projection={"totalLessons": 1})
    enrollment = await user_crud.update_progress(user, course, data.completedLessons)
    return {"success": True, "enrollment": enrollment}
