from typing import Optional

from pydantic import BaseModel, model_validator


class AssignmentSubmissionCreate(BaseModel):
    courseId: str = ""
    assignmentId: str = ""
    assignmentTitle: Optional[str] = None
    textAnswer: Optional[str] = None
    fileUrl: Optional[str] = None
    fileName: Optional[str] = None

    @model_validator(mode="after")
    def validate_submission(cls, values):
        for field in ["courseId", "assignmentId"]:
            if not getattr(values, field):
                raise ValueError("Missing required fields")
        has_text = bool(values.textAnswer and values.textAnswer.strip())
        if not has_text and not values.fileUrl:
            raise ValueError("Provide a text answer or a file")
        return values
