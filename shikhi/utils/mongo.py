# shikhi/utils/mongo.py
from datetime import datetime, timezone

from bson import ObjectId


def fix_object_ids(doc):
    """
    Recursively convert ObjectId fields in a dict or list to strings.
    """
    if isinstance(doc, list):
        return [fix_object_ids(d) for d in doc]
    if isinstance(doc, dict):
        return {k: fix_object_ids(v) for k, v in doc.items()}
    if isinstance(doc, ObjectId):
        return str(doc)
    return doc


def serialize_doc(doc: dict | None) -> dict | None:
    """Stringify ids and expose ``_id`` as ``id`` as well."""
    if not doc:
        return None
    doc = fix_object_ids(doc)
    if "_id" in doc:
        doc["id"] = doc["_id"]
    return doc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value):
    """
    Normalise a stored date to an aware UTC datetime.

    MongoDB hands back naive UTC datetimes; request payloads may still carry
    ISO strings. Returns None for anything that is not a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
