"""
Curriculum traversal and shaping.

Works on plain curriculum documents (dicts as stored in the ``courses``
collection) so the same helpers serve the API handlers and the client flows.
"""
from copy import deepcopy
from datetime import datetime, timedelta, tzinfo, timezone
from typing import Iterable, Iterator, List, Optional, Tuple

from bson import ObjectId

from shikhi.utils.mongo import as_utc, utcnow

# Fields a learner without access may still see on a locked item
LOCKED_ITEM_FIELDS = ("_id", "type", "title", "scheduledDate", "isFreePreview", "isPublished")
# Announcements also keep what pinning needs
LOCKED_ANNOUNCEMENT_FIELDS = LOCKED_ITEM_FIELDS + ("isPinned", "validUntil", "announcementType")


def item_id(item: dict) -> Optional[str]:
    value = item.get("_id") or item.get("id")
    return str(value) if value is not None else None


def iter_items(modules: Iterable[dict]) -> Iterator[Tuple[int, dict]]:
    """Yield ``(module_index, item)`` in stored module order, then item order."""
    for index, module in enumerate(modules or []):
        for item in module.get("items") or []:
            yield index, item


def ensure_item_ids(modules: List[dict]) -> bool:
    """Give every module and item a stable id. Returns True if anything changed."""
    changed = False
    for module in modules or []:
        if not module.get("_id"):
            module["_id"] = str(ObjectId())
            changed = True
        for item in module.get("items") or []:
            if not item_id(item):
                item["_id"] = str(ObjectId())
                changed = True
    return changed


def find_item(modules: List[dict], wanted_id: str) -> Optional[dict]:
    for _, item in iter_items(modules):
        if item_id(item) == str(wanted_id):
            return item
    return None


# ---------------------------
# NEXT LIVE CLASS
# ---------------------------
def next_upcoming_class(modules: List[dict], now: datetime = None) -> Optional[dict]:
    """
    Nearest published live class with a meeting link scheduled after ``now``.

    Past classes are never returned. On equal start times the first item in
    module/item order wins.
    """
    now = as_utc(now) or utcnow()
    best = None
    best_delta = None

    for _, item in iter_items(modules):
        if item.get("type") != "live-class":
            continue
        if not item.get("isPublished") or not item.get("meetingLink"):
            continue
        scheduled = as_utc(item.get("scheduledDate"))
        if scheduled is None:
            continue
        delta = scheduled - now
        if delta <= timedelta(0):
            continue
        if best_delta is None or delta < best_delta:
            best, best_delta = item, delta

    if best is None:
        return None

    return {
        "date": as_utc(best["scheduledDate"]),
        "meetingLink": best["meetingLink"],
        "title": best.get("title"),
        "meetingPlatform": best.get("meetingPlatform"),
    }


# ---------------------------
# DATE GROUPING
# ---------------------------
def group_items_by_date(items: Iterable[dict], tz: tzinfo = timezone.utc) -> List[Tuple[str, List[dict]]]:
    """
    Published items bucketed by the viewer-local calendar date of ``scheduledDate``.

    Keys are ``YYYY-MM-DD`` strings sorted ascending; items keep their
    original relative order inside a bucket.
    """
    groups = {}
    for item in items or []:
        if not item.get("isPublished"):
            continue
        scheduled = as_utc(item.get("scheduledDate"))
        if scheduled is None:
            continue
        key = scheduled.astimezone(tz).date().isoformat()
        groups.setdefault(key, []).append(item)

    return [(key, groups[key]) for key in sorted(groups)]


def pinned_announcements(items: Iterable[dict], now: datetime = None) -> List[dict]:
    now = as_utc(now) or utcnow()
    pinned = []
    for item in items or []:
        if item.get("type") != "announcement":
            continue
        if not (item.get("isPinned") and item.get("isPublished")):
            continue
        valid_until = as_utc(item.get("validUntil"))
        if valid_until is not None and valid_until <= now:
            continue
        pinned.append(item)
    return pinned


# ---------------------------
# LEARNER VIEW
# ---------------------------
def strip_answer_keys(item: dict) -> dict:
    quiz = item.get("quizData")
    if item.get("type") == "quiz" and isinstance(quiz, dict):
        for question in quiz.get("mcqQuestions") or []:
            for option in question.get("options") or []:
                option.pop("isCorrect", None)
            question.pop("explanation", None)
    return item


def learner_item(item: dict, has_access: bool) -> dict:
    item = deepcopy(item)
    if has_access or item.get("isFreePreview"):
        item["isLocked"] = False
        return strip_answer_keys(item)
    fields = LOCKED_ANNOUNCEMENT_FIELDS if item.get("type") == "announcement" else LOCKED_ITEM_FIELDS
    locked = {key: item.get(key) for key in fields if key in item}
    locked["isLocked"] = True
    return locked


def learner_module_view(module: dict, has_access: bool, tz: tzinfo = timezone.utc, now: datetime = None) -> dict:
    items = [learner_item(item, has_access) for item in module.get("items") or [] if item.get("isPublished")]
    schedule = group_items_by_date(items, tz)
    return {
        "_id": module.get("_id"),
        "name": module.get("name"),
        "description": module.get("description", ""),
        "order": module.get("order", 0),
        "isEmpty": not items,
        "pinnedAnnouncements": pinned_announcements(items, now),
        "schedule": [{"date": date, "items": grouped} for date, grouped in schedule],
    }


def published_modules(modules: List[dict]) -> List[dict]:
    return sorted(
        (m for m in modules or [] if m.get("isPublished")),
        key=lambda m: m.get("order", 0),
    )
