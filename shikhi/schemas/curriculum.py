from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


def new_id() -> str:
    return str(ObjectId())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ItemAttachment(BaseModel):
    name: str
    url: str
    type: Optional[str] = None


class DriveLink(BaseModel):
    title: str
    link: str


# ---------------------------
# QUIZ / ASSIGNMENT SETTINGS
# ---------------------------
class McqOption(BaseModel):
    text: str
    isCorrect: bool = False


class McqQuestion(BaseModel):
    question: str
    options: List[McqOption] = []
    points: int = 1
    explanation: Optional[str] = ""


class QuizData(BaseModel):
    quizType: Literal["mcq", "open-ended"] = "mcq"
    timeLimit: int = Field(30, ge=0)
    totalPoints: int = Field(0, ge=0)
    passingScore: int = Field(60, ge=0, le=100)
    allowMultipleAttempts: bool = False
    showAnswersAfterSubmission: bool = True
    randomizeQuestions: bool = False
    randomizeOptions: bool = False
    mcqQuestions: List[McqQuestion] = []
    openEndedQuestion: Optional[str] = None
    openEndedQuestionFile: Optional[str] = None
    acceptFileUpload: bool = True
    acceptTextAnswer: bool = True


class AssignmentSettings(BaseModel):
    totalPoints: int = Field(100, ge=0)
    acceptTextAnswer: bool = True
    acceptFileUpload: bool = True


# ---------------------------
# CURRICULUM ITEMS (tagged by `type`)
# ---------------------------
class CurriculumItemBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    scheduledDate: datetime
    isPublished: bool = True
    isFreePreview: bool = False
    attachments: List[ItemAttachment] = []
    driveLinks: List[DriveLink] = []
    createdAt: datetime = Field(default_factory=_now)


class LiveClassItem(CurriculumItemBase):
    type: Literal["live-class"]
    meetingLink: Optional[str] = None
    meetingPlatform: Literal["zoom", "google-meet", "other"] = "zoom"
    duration: Optional[int] = Field(None, ge=0)


class AnnouncementItem(CurriculumItemBase):
    type: Literal["announcement"]
    announcementType: Literal["important", "cancellation", "general"] = "general"
    isPinned: bool = False
    validUntil: Optional[datetime] = None


class ResourceItem(CurriculumItemBase):
    type: Literal["resource"]
    resourceType: Literal["pdf", "image", "video", "youtube", "recording", "drive", "other"] = "other"
    resourceUrl: Optional[str] = None
    resourceFile: Optional[str] = None


class AssignmentItem(CurriculumItemBase):
    type: Literal["assignment"]
    dueDate: Optional[datetime] = None
    resourceUrl: Optional[str] = None
    resourceFile: Optional[str] = None
    quizData: AssignmentSettings = Field(default_factory=AssignmentSettings)


class QuizItem(CurriculumItemBase):
    type: Literal["quiz"]
    dueDate: Optional[datetime] = None
    quizData: QuizData = Field(default_factory=QuizData)


CurriculumItem = Annotated[
    Union[LiveClassItem, AnnouncementItem, ResourceItem, AssignmentItem, QuizItem],
    Field(discriminator="type"),
]


class Module(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = ""
    items: List[CurriculumItem] = []
    isPublished: bool = False
    order: int = 0


class Curriculum(BaseModel):
    modules: List[Module] = []

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class CurriculumUpdate(BaseModel):
    curriculum: Curriculum


def default_curriculum() -> Curriculum:
    return Curriculum(modules=[Module(name="Module 1", description="", items=[], isPublished=False, order=0)])
