# blogapi/repositories/__init__.py
from blogapi.repositories.base import BaseRepository, CredentialStore
from blogapi.repositories.post_repository import PostRepository
from blogapi.repositories.user_repository import UserRepository

__all__ = ["BaseRepository", "CredentialStore", "PostRepository", "UserRepository"]
