import os
import time

# Settings are read at import time, so they have to be in place first
TEST_JWT_KEY = "shikhi-test-signing-key-0123456789abcdef"
os.environ["AUTH_JWT_KEY"] = TEST_JWT_KEY
os.environ["AUTH_JWT_ALGORITHMS"] = "HS256"
os.environ["AUTH_JWT_ISSUER"] = ""
os.environ["IDENTITY_API_KEY"] = "test-identity-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["AGORA_APP_ID"] = ""
os.environ["AGORA_APP_CERTIFICATE"] = ""

import httpx
import jwt
import pytest
from mongomock_motor import AsyncMongoMockClient

from shikhi.auth.identity import IdentityLookupError
from shikhi.crud import users as users_crud_module
from shikhi.db import database
from shikhi.main import app
from shikhi.schemas.curriculum import Curriculum
from shikhi.utils.cache import course_cache
from shikhi.utils.mongo import utcnow
from shikhi.utils.rate_limit import default_limiter


class FakeIdentity:
    """Stands in for the identity provider's user API."""

    def __init__(self):
        self.profiles = {}
        self.calls = []

    def add(self, user_id, role="student", email=None, first_name="Test", last_name="User"):
        self.profiles[user_id] = {
            "user_id": user_id,
            "email": email or f"{user_id}@example.com",
            "first_name": first_name,
            "last_name": last_name,
            "username": user_id,
            "image_url": None,
            "role": role,
        }

    async def fetch_user(self, user_id):
        self.calls.append(user_id)
        if user_id not in self.profiles:
            raise IdentityLookupError("Identity provider returned 404")
        return self.profiles[user_id]


@pytest.fixture(autouse=True)
def reset_process_state():
    course_cache.clear()
    default_limiter._records.clear()
    yield
    course_cache.clear()


@pytest.fixture
def mongo_db(monkeypatch):
    db = AsyncMongoMockClient()["shikhi_test"]
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def identity(monkeypatch):
    fake = FakeIdentity()
    monkeypatch.setattr(users_crud_module, "identity_client", fake)
    return fake


@pytest.fixture
def make_token():
    def _make(user_id="student_1", role="student", expires_in=3600, **claims):
        payload = {
            "sub": user_id,
            "exp": int(time.time()) + expires_in,
            "metadata": {"role": role},
            **claims,
        }
        return jwt.encode(payload, TEST_JWT_KEY, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(user_id="student_1", role="student"):
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return _headers


@pytest.fixture
async def client(mongo_db, identity):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ---------------------------
# SEED HELPERS
# ---------------------------
@pytest.fixture
def seed_user(mongo_db):
    async def _seed(auth_user_id="student_1", role="student", enrolled=(), **fields):
        now = utcnow()
        doc = {
            "authUserId": auth_user_id,
            "email": f"{auth_user_id}@example.com",
            "firstName": fields.pop("firstName", "Test"),
            "lastName": fields.pop("lastName", "User"),
            "role": role,
            "enrolledCourses": [
                {
                    "courseId": course_id,
                    "enrolledAt": now,
                    "progress": {"completedLessons": 0, "totalLessons": 10, "progressPercentage": 0},
                }
                for course_id in enrolled
            ],
            "createdAt": now,
            "updatedAt": now,
            **fields,
        }
        result = await mongo_db.users.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    return _seed


@pytest.fixture
def seed_course(mongo_db):
    async def _seed(modules=(), **fields):
        now = utcnow()
        curriculum = Curriculum.model_validate({"modules": list(modules)}).to_document()
        doc = {
            "title": "Japanese for Beginners",
            "description": "Kana and greetings",
            "level": "beginner",
            "category": "conversation",
            "tags": ["kana"],
            "estimatedDuration": 60,
            "isPremium": False,
            "isPublished": True,
            "totalLessons": 10,
            "averageRating": 0,
            "totalRatings": 0,
            "enrolledStudents": 0,
            "curriculum": curriculum,
            "metadata": {"version": 1, "lastUpdated": now, "createdBy": "admin_1"},
            "createdAt": now,
            "updatedAt": now,
            **fields,
        }
        result = await mongo_db.courses.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    return _seed
