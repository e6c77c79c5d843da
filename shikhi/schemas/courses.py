from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

Level = Literal["beginner", "intermediate", "advanced"]
Category = Literal["vocabulary", "grammar", "conversation", "reading", "writing", "culture", "kanji"]

# Fields shown on catalog cards and the enrolled-courses dashboard
SUMMARY_FIELDS = [
    "title",
    "description",
    "level",
    "category",
    "estimatedDuration",
    "thumbnailUrl",
    "totalLessons",
    "enrolledStudents",
    "averageRating",
    "totalRatings",
]


class CourseLanguage(BaseModel):
    primary: str = "japanese"
    secondary: str = "english"


# Base schema containing shared fields for all course-related operations
class CourseBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    titleJp: Optional[str] = Field(None, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    descriptionJp: Optional[str] = Field(None, max_length=2000)
    level: Level = "beginner"
    category: Category
    tags: List[str] = Field(default_factory=list, max_length=10)
    estimatedDuration: int = Field(60, ge=5, le=600)  # minutes
    difficulty: int = Field(1, ge=1, le=10)
    isPremium: bool = False
    isPublished: bool = False
    thumbnailUrl: Optional[str] = None
    actualPrice: Optional[float] = Field(None, ge=0)
    discountedPrice: Optional[float] = Field(None, ge=0)
    instructorNotes: Optional[str] = Field(None, max_length=1000)
    learningObjectives: List[str] = Field(default_factory=list, max_length=10)
    prerequisites: List[str] = []
    totalLessons: int = Field(0, ge=0)
    courseLanguage: CourseLanguage = Field(default_factory=CourseLanguage)


class CourseCreate(CourseBase):
    @model_validator(mode="after")
    def validate_pricing(cls, values):
        if values.isPremium and not values.actualPrice:
            raise ValueError("Premium courses must have a price")
        if (
            values.actualPrice is not None
            and values.discountedPrice is not None
            and values.discountedPrice > values.actualPrice
        ):
            raise ValueError("Discounted price cannot be higher than actual price")
        return values


# Schema for updating an existing course (all fields are optional)
class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    titleJp: Optional[str] = None
    description: Optional[str] = Field(None, max_length=2000)
    descriptionJp: Optional[str] = None
    level: Optional[Level] = None
    category: Optional[Category] = None
    tags: Optional[List[str]] = Field(None, max_length=10)
    estimatedDuration: Optional[int] = Field(None, ge=5, le=600)
    difficulty: Optional[int] = Field(None, ge=1, le=10)
    isPremium: Optional[bool] = None
    isPublished: Optional[bool] = None
    thumbnailUrl: Optional[str] = None
    actualPrice: Optional[float] = Field(None, ge=0)
    discountedPrice: Optional[float] = Field(None, ge=0)
    instructorNotes: Optional[str] = None
    learningObjectives: Optional[List[str]] = None
    prerequisites: Optional[List[str]] = None
    totalLessons: Optional[int] = Field(None, ge=0)

    @model_validator(mode="before")
    def convert_empty_strings_to_none(cls, data):
        if isinstance(data, dict):
            for key, value in data.items():
                if value == "":
                    data[key] = None
        return data


class CourseEnrollment(BaseModel):
    courseId: str
