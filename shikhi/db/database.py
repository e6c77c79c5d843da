# shikhi/db/database.py
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING

from shikhi import config
from shikhi.utils.logger import get_logger

logger = get_logger("MongoDB")

client = AsyncIOMotorClient(
    config.MONGODB_URI,
    maxPoolSize=config.MONGODB_MAX_POOL_SIZE,
    minPoolSize=config.MONGODB_MIN_POOL_SIZE,
    maxIdleTimeMS=config.MONGODB_MAX_IDLE_TIME_MS,
    serverSelectionTimeoutMS=config.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    retryWrites=True,
)

# CRUD classes look this attribute up on every call, so swapping it
# (tests, scripts) redirects every collection at once.
db = client[config.MONGODB_DB]


INDEXES = {
    "users": [
        ([("authUserId", ASCENDING)], {"unique": True}),
        ([("email", ASCENDING)], {}),
        ([("role", ASCENDING)], {}),
        ([("enrolledCourses.certificateId", ASCENDING)], {"sparse": True}),
    ],
    "courses": [
        ([("isPublished", ASCENDING), ("level", ASCENDING), ("category", ASCENDING)], {}),
        ([("enrolledStudents", DESCENDING)], {}),
    ],
    "assignments": [
        ([("courseId", ASCENDING), ("week", ASCENDING)], {}),
        ([("dueDate", ASCENDING)], {}),
    ],
    "assignment_submissions": [
        ([("studentId", ASCENDING), ("submittedAt", DESCENDING)], {}),
        ([("courseId", ASCENDING), ("assignmentId", ASCENDING)], {}),
    ],
    "quiz_results": [
        ([("userId", ASCENDING), ("courseId", ASCENDING), ("quizId", ASCENDING)], {"unique": True}),
    ],
    "messages": [
        ([("senderId", ASCENDING), ("sentAt", DESCENDING)], {}),
        ([("receiverId", ASCENDING), ("sentAt", DESCENDING)], {}),
        ([("threadId", ASCENDING), ("sentAt", ASCENDING)], {}),
        ([("receiverId", ASCENDING), ("isRead", ASCENDING)], {}),
    ],
    "course_management": [
        ([("courseId", ASCENDING)], {"unique": True}),
    ],
}


async def ensure_indexes(database=None):
    database = database if database is not None else db
    for collection, indexes in INDEXES.items():
        for keys, options in indexes:
            await database[collection].create_index(keys, **options)
    logger.info(f"Ensured indexes on {len(INDEXES)} collections")


async def ping() -> bool:
    try:
        await client.admin.command("ping")
        return True
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        return False
