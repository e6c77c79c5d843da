from pydantic import BaseModel, Field


class ProgressUpdate(BaseModel):
    completedLessons: int = Field(..., ge=0)
