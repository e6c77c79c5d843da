import base64
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, UploadFile

from shikhi.auth.dependencies import get_current_user
from shikhi.utils.exceptions import ValidationError
from shikhi.utils.logger import get_logger
from shikhi.utils.rate_limit import rate_limited

router = APIRouter(prefix="/upload", tags=["Uploads"])

logger = get_logger("API:/api/upload")

MB = 1024 * 1024

IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]

# upload type -> (allowed MIME types, max bytes)
UPLOAD_RULES = {
    "image": (IMAGE_TYPES, 5 * MB),
    "video": (["video/mp4", "video/webm", "video/ogg", "video/quicktime"], 100 * MB),
    "document": (
        [
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.ms-powerpoint",
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            "text/plain",
        ],
        10 * MB,
    ),
    "course-thumbnail": (IMAGE_TYPES, 3 * MB),
}


def validate_upload(upload_type: str, content_type: str, size: int):
    allowed, max_size = UPLOAD_RULES[upload_type]
    if content_type not in allowed:
        raise ValidationError(f"Invalid file type. Allowed types: {', '.join(allowed)}")
    if size > max_size:
        raise ValidationError(f"File size exceeds {max_size // MB}MB limit")


@router.post("", dependencies=[Depends(rate_limited())])
async def upload_file(
    file: UploadFile = File(...),
    type: Literal["image", "video", "document", "course-thumbnail"] = Form("image"),
    current_user=Depends(get_current_user),
):
    """
    Validate a file and hand it back inline as a ``data:`` URI.

    Nothing is written to disk; the caller stores the returned URL.
    """
    content = await file.read()
    content_type = file.content_type or ""
    validate_upload(type, content_type, len(content))

    data_url = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
    logger.info(f"Converted {type}: {file.filename} ({len(content) / 1024:.2f} KB) for {current_user['user_id']}")

    return {"success": True, "url": data_url, "filename": file.filename, "type": type}
