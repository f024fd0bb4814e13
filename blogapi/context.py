# blogapi/context.py
from dataclasses import dataclass
from typing import Optional

from blogapi.auth import Authenticator, LocalAuthenticator
from blogapi.database import BlogDatabase
from blogapi.models.entities import BlogPost
from blogapi.repositories import BaseRepository, CredentialStore, PostRepository, UserRepository


@dataclass
class AppContext:
    """Everything a request handler needs: the stores and the authenticator."""
    users: CredentialStore
    posts: BaseRepository[BlogPost]
    authenticator: Authenticator
    database: Optional[BlogDatabase] = None

    @classmethod
    def from_database(cls, database: BlogDatabase) -> "AppContext":
        users = UserRepository()
        return cls(
            users=users,
            posts=PostRepository(),
            authenticator=LocalAuthenticator(users),
            database=database,
        )

    async def health_check(self) -> bool:
        if self.database is None:
            return True
        return await self.database.health_check()
