from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument

from shikhi.crud.users import user_crud
from shikhi.db import database
from shikhi.schemas.messages import MessageCreate
from shikhi.utils.exceptions import AuthorizationError, NotFoundError, ValidationError, to_oid
from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import serialize_doc, utcnow

logger = get_logger("Messages")

ADMIN_TEAM_ID = "ADMIN_TEAM"
MESSAGE_LIST_LIMIT = 100


def display_name(user: dict) -> str:
    name = " ".join(filter(None, [user.get("firstName"), user.get("lastName")])).strip()
    return name or user.get("username") or user.get("email") or "User"


class MessageCRUD:

    @property
    def collection(self):
        return database.db.messages

    def _inbox_ids(self, user: dict) -> list:
        ids = [user["authUserId"]]
        if user.get("role") == "admin":
            ids.append(ADMIN_TEAM_ID)
        return ids

    # ---------------------------
    # SEND
    # ---------------------------
    async def send(self, sender: dict, data: MessageCreate) -> list:
        """
        Store a message and return the stored copies.

        ``receiverId == "admin"`` fans out one copy per admin sharing a thread
        id. Students may only write to admins.
        """
        is_admin = sender.get("role") == "admin"

        if data.receiverId == "admin":
            receivers = await user_crud.list_admins()
        else:
            receiver = await user_crud.get_by_auth_id(data.receiverId)
            if not receiver:
                raise NotFoundError("Recipient")
            if not is_admin and receiver.get("role") != "admin":
                raise AuthorizationError("Students can only message admins")
            receivers = [receiver]

        thread_id = str(ObjectId())
        if data.replyToId:
            original = await self.collection.find_one({"_id": to_oid(data.replyToId, "replyToId")})
            if not original:
                raise NotFoundError("Original message")
            thread_id = original.get("threadId") or str(original["_id"])

        now = utcnow()
        base = {
            "senderId": sender["authUserId"],
            "senderName": display_name(sender),
            "senderEmail": sender.get("email") or "",
            "subject": data.subject.strip(),
            "message": data.message.strip(),
            "messageType": data.messageType,
            "contextType": data.contextType,
            "contextId": data.contextId,
            "contextTitle": data.contextTitle,
            "isRead": False,
            "readAt": None,
            "isDeleted": False,
            "threadId": thread_id,
            "replyToId": data.replyToId,
            "sentAt": now,
            "attachments": [a.model_dump() for a in data.attachments],
        }

        if not receivers:
            logger.warning("No admin accounts found; storing message for the admin team")
            docs = [{**base, "receiverId": ADMIN_TEAM_ID, "receiverName": "Admin Team", "receiverEmail": ""}]
        else:
            docs = [
                {
                    **base,
                    "receiverId": r["authUserId"],
                    "receiverName": display_name(r),
                    "receiverEmail": r.get("email") or "",
                }
                for r in receivers
            ]

        result = await self.collection.insert_many(docs)
        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc["_id"] = inserted_id
        logger.info(f"Message from {sender['authUserId']} delivered to {len(docs)} recipient(s)")
        return [serialize_doc(d) for d in docs]

    # ---------------------------
    # LIST
    # ---------------------------
    async def list_messages(
        self,
        user: dict,
        box: str = "inbox",
        thread_id: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> dict:
        user_id = user["authUserId"]
        is_admin = user.get("role") == "admin"
        inbox_ids = self._inbox_ids(user)
        query = {"isDeleted": False}

        if box == "inbox":
            query["receiverId"] = {"$in": inbox_ids}
        elif box == "sent":
            query["senderId"] = user_id
        elif box == "thread":
            if not thread_id:
                raise ValidationError("threadId is required for thread view")
            query["threadId"] = thread_id
            if not is_admin:
                query["$or"] = [{"senderId": user_id}, {"receiverId": user_id}]
        else:
            raise ValidationError("type must be one of inbox, sent, thread")

        if student_id and is_admin:
            query.setdefault("$and", []).append({"$or": [{"senderId": student_id}, {"receiverId": student_id}]})

        cursor = self.collection.find(query).sort("sentAt", -1).limit(MESSAGE_LIST_LIMIT)
        messages = [serialize_doc(m) for m in await cursor.to_list(length=MESSAGE_LIST_LIMIT)]
        unread = await self.collection.count_documents(
            {"receiverId": {"$in": inbox_ids}, "isRead": False, "isDeleted": False}
        )
        return {"messages": messages, "unreadCount": unread}

    # ---------------------------
    # MARK READ / DELETE
    # ---------------------------
    async def mark_read(self, user: dict, message_id: str) -> dict:
        updated = await self.collection.find_one_and_update(
            {"_id": to_oid(message_id, "messageId"), "receiverId": {"$in": self._inbox_ids(user)}},
            {"$set": {"isRead": True, "readAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFoundError("Message")
        return serialize_doc(updated)

    async def soft_delete(self, user: dict, message_id: str) -> dict:
        oid = to_oid(message_id, "messageId")
        message = await self.collection.find_one({"_id": oid})
        if not message:
            raise NotFoundError("Message")

        parties = {message.get("senderId"), message.get("receiverId")}
        if not parties.intersection(self._inbox_ids(user)):
            raise AuthorizationError("You can only delete your own messages")

        await self.collection.update_one(
            {"_id": oid},
            {"$set": {"isDeleted": True, "deletedAt": utcnow(), "deletedBy": user["authUserId"]}},
        )
        return {"success": True, "message": "Message deleted"}


message_crud = MessageCRUD()
