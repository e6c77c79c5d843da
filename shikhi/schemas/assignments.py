from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class AssignmentAttachment(BaseModel):
    type: Literal["drive", "youtube", "file", "link"]
    url: str = Field(..., min_length=1)
    name: Optional[str] = None


class AssignmentCreate(BaseModel):
    week: int = Field(..., ge=1, le=52)
    title: str = Field(..., min_length=1, max_length=200)
    instructions: Optional[str] = Field(None, max_length=5000)
    dueDate: Optional[datetime] = None
    points: int = Field(100, ge=0, le=1000)
    attachments: List[AssignmentAttachment] = Field(default_factory=list)


class AssignmentUpdate(BaseModel):
    week: Optional[int] = Field(None, ge=1, le=52)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    instructions: Optional[str] = Field(None, max_length=5000)
    dueDate: Optional[datetime] = None
    points: Optional[int] = Field(None, ge=0, le=1000)
    attachments: Optional[List[AssignmentAttachment]] = None

    @model_validator(mode="before")
    def convert_empty_strings_to_none(cls, data):
        if isinstance(data, dict):
            for key, value in data.items():
                if value == "":
                    data[key] = None
        return data
