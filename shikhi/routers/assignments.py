from typing import Optional

from fastapi import APIRouter, Depends, Query

from shikhi.auth.dependencies import get_current_user, require_role
from shikhi.crud.assignment_submissions import submission_crud
from shikhi.crud.assignments import assignment_crud
from shikhi.schemas.assignment_submissions import AssignmentSubmissionCreate
from shikhi.schemas.assignments import AssignmentCreate, AssignmentUpdate

router = APIRouter(tags=["Assignments"])


# ---------------------------
# COURSE ASSIGNMENTS
# ---------------------------
@router.get("/courses/{course_id}/assignments")
async def list_assignments(
    course_id: str,
    week: Optional[int] = Query(None, ge=1, le=52),
    current_user=Depends(get_current_user),
):
    assignments = await assignment_crud.list_by_course(course_id, week)
    return {"success": True, "total": len(assignments), "assignments": assignments}


@router.post("/courses/{course_id}/assignments", status_code=201)
async def create_assignment(course_id: str, data: AssignmentCreate, current_user=Depends(require_role("admin"))):
    assignment = await assignment_crud.create_assignment(course_id, data, created_by=current_user["user_id"])
    return {"success": True, "message": "Assignment created", "assignment": assignment}


# ---------------------------
# SUBMISSIONS
# ---------------------------
@router.post("/assignments/submit", status_code=201)
async def submit_assignment(data: AssignmentSubmissionCreate, current_user=Depends(get_current_user)):
    submission = await submission_crud.submit(data, current_user)
    return {"success": True, "message": "Assignment submitted", "submission": submission}


@router.get("/assignments/submit")
async def my_submissions(
    courseId: Optional[str] = None,
    assignmentId: Optional[str] = None,
    current_user=Depends(get_current_user),
):
    submissions = await submission_crud.list_for_student(current_user["user_id"], courseId, assignmentId)
    return {"success": True, "submissions": submissions}


# ---------------------------
# SINGLE ASSIGNMENT (admin)
# ---------------------------
@router.patch("/assignments/{assignment_id}")
async def update_assignment(assignment_id: str, updates: AssignmentUpdate, current_user=Depends(require_role("admin"))):
    assignment = await assignment_crud.update_assignment(assignment_id, updates)
    return {"success": True, "message": "Assignment updated", "assignment": assignment}


@router.delete("/assignments/{assignment_id}")
async def delete_assignment(assignment_id: str, current_user=Depends(require_role("admin"))):
    return await assignment_crud.delete_assignment(assignment_id)
