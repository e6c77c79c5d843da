from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from shikhi.auth.dependencies import get_current_user
from shikhi.crud.messages import message_crud
from shikhi.routers.users import load_user
from shikhi.schemas.messages import MarkReadRequest, MessageCreate

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", status_code=201)
async def send_message(data: MessageCreate, current_user=Depends(get_current_user)):
    sender = await load_user(current_user)
    messages = await message_crud.send(sender, data)
    return {"success": True, "message": "Message sent", "data": messages}


@router.get("")
async def list_messages(
    type: Literal["inbox", "sent", "thread"] = "inbox",
    threadId: Optional[str] = None,
    studentId: Optional[str] = Query(None, description="Admins only: restrict to one student's conversations"),
    current_user=Depends(get_current_user),
):
    user = await load_user(current_user)
    result = await message_crud.list_messages(user, type, threadId, studentId)
    return {"success": True, **result}


@router.patch("")
async def mark_read(data: MarkReadRequest, current_user=Depends(get_current_user)):
    user = await load_user(current_user)
    message = await message_crud.mark_read(user, data.messageId)
    return {"success": True, "data": message}


@router.delete("")
async def delete_message(messageId: str, current_user=Depends(get_current_user)):
    user = await load_user(current_user)
    return await message_crud.soft_delete(user, messageId)
