import asyncio
from typing import Optional

import aiohttp

from shikhi.client.api import ApiError, ShikhiClient
from shikhi.utils.logger import get_logger

logger = get_logger("Submission")


class SubmissionError(Exception):
    pass


async def submit_assignment(
    api: ShikhiClient,
    course_id: str,
    assignment: dict,
    text_answer: str = "",
    file_content: Optional[bytes] = None,
    file_name: Optional[str] = None,
    content_type: str = "application/octet-stream",
) -> dict:
    """
    Submit an assignment item: upload the file first (if any), then post the
    submission.

    Nothing touches the network when the submission is empty or uses a kind
    the assignment does not accept. A failed upload aborts before the
    submission call.
    """
    settings = assignment.get("quizData") or {}
    has_text = bool(text_answer and text_answer.strip())
    has_file = file_content is not None

    if not has_text and not has_file:
        raise SubmissionError("Please provide a text answer or upload a file")
    if has_text and not settings.get("acceptTextAnswer", True):
        raise SubmissionError("This assignment does not accept text answers")
    if has_file and not settings.get("acceptFileUpload", True):
        raise SubmissionError("This assignment does not accept file uploads")

    file_url = ""
    if has_file:
        try:
            uploaded = await api.upload_file(file_content, file_name or "submission", content_type, "document")
        except (ApiError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Upload failed for assignment {assignment.get('_id')}: {e}")
            raise SubmissionError(f"File upload failed: {str(e) or type(e).__name__}") from e
        file_url = uploaded.get("url", "")

    payload = {
        "courseId": course_id,
        "assignmentId": str(assignment.get("_id") or assignment.get("id")),
        "assignmentTitle": assignment.get("title"),
        "textAnswer": text_answer.strip() if has_text else "",
        "fileUrl": file_url,
        "fileName": (file_name or "submission") if has_file else "",
    }
    try:
        response = await api.submit_assignment(payload)
    except (ApiError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Submission failed for assignment {payload['assignmentId']}: {e}")
        raise SubmissionError(str(e) or "Submission failed, please try again") from e

    return response.get("submission", response)
