# blogapi/repositories/user_repository.py
import logging
from typing import Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from blogapi.errors import DuplicateUsername, UnexpectedStorageError
from blogapi.models.documents import UserDocument
from blogapi.models.entities import User
from blogapi.repositories.base import CredentialStore

logger = logging.getLogger(__name__)


class UserRepository(CredentialStore):
    """Credential store backed by the users collection.

    Username uniqueness relies on the unique index declared on
    ``UserDocument.username``; there is no lookup before the insert.
    """

    async def create(
        self,
        username: str,
        digest: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        doc = UserDocument(
            username=username,
            password_digest=digest,
            first_name=first_name,
            last_name=last_name,
        )
        try:
            await doc.insert()
        except DuplicateKeyError:
            logger.warning(f"User '{username}' already exists")
            raise DuplicateUsername()
        except PyMongoError as e:
            logger.error(f"Error adding user: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        logger.info(f"User '{username}' added with ID {doc.id}")
        return doc.to_entity()

    async def find_by_username(self, username: str) -> Optional[User]:
        try:
            doc = await UserDocument.find_one(UserDocument.username == username)
        except PyMongoError as e:
            logger.error(f"Error getting user by username: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        return doc.to_entity() if doc else None

    async def count(self) -> int:
        try:
            return await UserDocument.find_all().count()
        except PyMongoError as e:
            logger.error(f"Error counting users: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
