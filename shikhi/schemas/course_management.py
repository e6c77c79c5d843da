from datetime import datetime, timezone
from typing import List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, Field


def _id() -> str:
    return str(ObjectId())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class VideoLink(BaseModel):
    id: str = Field(default_factory=_id)
    title: str
    url: str
    description: str = ""
    duration: Optional[int] = None  # seconds
    videoType: Literal["youtube", "drive", "vimeo", "direct", "other"] = "youtube"
    isPreview: bool = False


class DocumentFile(BaseModel):
    id: str = Field(default_factory=_id)
    title: str
    fileName: str
    fileUrl: str
    fileType: Literal["pdf", "doc", "docx", "txt", "other"] = "pdf"
    fileSize: Optional[int] = None
    uploadedAt: datetime = Field(default_factory=_now)


class WeeklyContentCreate(BaseModel):
    week: int = Field(..., ge=1, le=52)
    title: Optional[str] = None
    description: Optional[str] = None
    videoLinks: List[VideoLink] = []
    documents: List[DocumentFile] = []
    comments: str = ""
    isPublished: bool = False


class RecurringPattern(BaseModel):
    frequency: Literal["daily", "weekly", "monthly"]
    interval: int = Field(1, ge=1)
    endDate: Optional[datetime] = None


class ClassLinkCreate(BaseModel):
    title: str = Field(..., min_length=1)
    meetingUrl: str = Field(..., min_length=1)
    schedule: datetime
    description: str = ""
    duration: Optional[int] = Field(None, ge=0)  # minutes
    meetingId: Optional[str] = None
    password: Optional[str] = None
    platform: Literal["zoom", "google-meet", "teams", "other"] = "zoom"
    isRecurring: bool = False
    recurringPattern: Optional[RecurringPattern] = None
    maxParticipants: Optional[int] = Field(None, ge=1)
    isActive: bool = True


class ManagementSettings(BaseModel):
    allowStudentComments: bool = True
    autoPublishContent: bool = False
    requireInstructorApproval: bool = False
    emailNotifications: bool = True
    maxStudentsPerClass: int = Field(50, ge=1)
