"""
blog-service 단위 테스트를 위한 pytest fixtures
"""
import base64
import os
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

# 프로젝트 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault('ALLOWED_ORIGINS', 'http://localhost:3000')
os.environ.setdefault('TEST_DATABASE_URL', 'mongodb://localhost:27017/test-blog-app')

from blog_service import create_app
from blogapi.auth import LocalAuthenticator
from blogapi.context import AppContext
from blogapi.errors import DuplicateUsername, HashingError, UnexpectedStorageError
from blogapi.models.entities import Author, BlogPost, User
from blogapi.repositories.base import BaseRepository, CredentialStore
from blogapi.repositories.post_repository import UPDATABLE_FIELDS, parse_object_id


class InMemoryUserRepository(CredentialStore):
    """Credential store double; the dict key plays the unique index."""

    def __init__(self):
        self.users: Dict[str, User] = {}

    async def create(self, username, digest, first_name=None, last_name=None) -> User:
        if username in self.users:
            raise DuplicateUsername()
        user = User(
            id=str(ObjectId()),
            username=username,
            password_digest=digest,
            first_name=first_name,
            last_name=last_name,
        )
        self.users[username] = user
        return user

    async def find_by_username(self, username: str) -> Optional[User]:
        return self.users.get(username)

    async def count(self) -> int:
        return len(self.users)


class InMemoryPostRepository(BaseRepository[BlogPost]):
    def __init__(self):
        self.posts: Dict[str, BlogPost] = {}

    def seed(self, title, content, first_name, last_name, created=None) -> BlogPost:
        post = BlogPost(
            id=str(ObjectId()),
            title=title,
            content=content,
            author=Author(first_name=first_name, last_name=last_name),
            created=created or datetime.now(timezone.utc),
        )
        self.posts[post.id] = post
        return post

    async def get_by_id(self, post_id: str) -> Optional[BlogPost]:
        parse_object_id(post_id)
        return self.posts.get(post_id)

    async def get_all(self) -> List[BlogPost]:
        return list(self.posts.values())

    async def create(self, data) -> BlogPost:
        author = Author.model_validate(data["author"])
        return self.seed(data["title"], data["content"], author.first_name, author.last_name)

    async def update(self, post_id: str, data) -> Optional[BlogPost]:
        parse_object_id(post_id)
        post = self.posts.get(post_id)
        if post is None:
            return None
        changes = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        if "author" in changes:
            changes["author"] = Author.model_validate(changes["author"])
        updated = post.model_copy(update=changes)
        self.posts[post_id] = updated
        return updated

    async def delete(self, post_id: str) -> bool:
        parse_object_id(post_id)
        return self.posts.pop(post_id, None) is not None

    async def count(self) -> int:
        return len(self.posts)


class BrokenPostRepository(InMemoryPostRepository):
    """Every call fails the way an unreachable database does."""

    async def get_by_id(self, post_id):
        raise UnexpectedStorageError()

    async def get_all(self):
        raise UnexpectedStorageError()

    async def create(self, data):
        raise UnexpectedStorageError()

    async def update(self, post_id, data):
        raise UnexpectedStorageError()

    async def delete(self, post_id):
        raise UnexpectedStorageError()

    async def count(self):
        raise UnexpectedStorageError()


class BrokenUserRepository(InMemoryUserRepository):
    """Registration fails after hashing, as on a lost database connection."""

    async def create(self, username, digest, first_name=None, last_name=None):
        raise UnexpectedStorageError()


class FailingHasherUserRepository(InMemoryUserRepository):
    async def hash_password(self, password):
        raise HashingError()


def basic_auth_header(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def user_store():
    return InMemoryUserRepository()


@pytest.fixture
def post_store():
    return InMemoryPostRepository()


@pytest.fixture
def app_context(user_store, post_store):
    return AppContext(
        users=user_store,
        posts=post_store,
        authenticator=LocalAuthenticator(user_store),
    )


@pytest.fixture
def client(app_context):
    with TestClient(create_app(app_context)) as test_client:
        yield test_client


@pytest.fixture
def sample_user():
    """테스트용 사용자 데이터"""
    return {
        'username': 'testuser123',
        'password': 'TestPassword123!',
        'firstName': 'Ada',
        'lastName': 'Lovelace',
    }


@pytest.fixture
def registered_user(client, sample_user):
    """API로 등록된 사용자"""
    response = client.post('/users', json=sample_user)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth_headers(registered_user, sample_user):
    return basic_auth_header(sample_user['username'], sample_user['password'])


@pytest.fixture
def seeded_post(post_store):
    return post_store.seed('A', 'B', 'X', 'Y')


@pytest.fixture
def sample_posts(post_store):
    """테스트용 다중 게시물 데이터"""
    return [
        post_store.seed('Post 1', 'Content 1', 'Grace', 'Hopper'),
        post_store.seed('Post 2', 'Content 2', 'Alan', 'Turing'),
        post_store.seed('Post 3', 'Content 3', 'Grace', 'Hopper'),
    ]
