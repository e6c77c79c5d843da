from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class MessageAttachment(BaseModel):
    type: Literal["file", "link", "image", "video", "audio", "document"]
    url: str
    name: str
    size: Optional[int] = None
    mimeType: Optional[str] = None


class MessageCreate(BaseModel):
    # A specific user id, or "admin" to reach every admin
    receiverId: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    messageType: Literal["text", "image", "video", "audio", "file", "voice"] = "text"
    contextType: Optional[Literal["course", "assignment", "quiz", "general"]] = None
    contextId: Optional[str] = None
    contextTitle: Optional[str] = None
    replyToId: Optional[str] = None
    attachments: List[MessageAttachment] = []


class MarkReadRequest(BaseModel):
    messageId: str = Field(..., min_length=1)
