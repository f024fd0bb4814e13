# blogapi/repositories/base.py
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Generic, TypeVar

from fastapi.concurrency import run_in_threadpool

from blogapi import passwords
from blogapi.models.entities import User

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository class defining the standard CRUD interface."""

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> Optional[T]:
        """Retrieve a single entity by its ID.

        Returns None for a well-formed but unmatched ID and raises
        InvalidIdentifier for an ID that can never match.
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """Retrieve every entity, in insertion order."""
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> T:
        """Create a new entity and return it."""
        pass

    @abstractmethod
    async def update(
        self, entity_id: str, data: Dict[str, Any]
    ) -> Optional[T]:
        """Apply the given fields only and return the updated entity."""
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Delete an entity. Returns True if something was removed."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count stored entities."""
        pass


class CredentialStore(ABC):
    """Persistence and password primitives for registered users."""

    async def hash_password(self, plain: str) -> str:
        # argon2 is CPU bound; keep it off the event loop
        return await run_in_threadpool(passwords.hash_password, plain)

    async def verify_password(self, plain: str, digest: str) -> bool:
        return await run_in_threadpool(passwords.verify_password, plain, digest)

    @abstractmethod
    async def create(
        self,
        username: str,
        digest: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Insert a user; raises DuplicateUsername when the name is taken."""
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass
