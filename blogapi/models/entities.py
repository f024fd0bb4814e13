# blogapi/models/entities.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Author(BaseModel):
    first_name: str = ""
    last_name: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class User(BaseModel):
    """Registered user as returned by the credential store."""
    id: str
    username: str
    password_digest: str = Field(repr=False)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def author(self) -> Author:
        return Author(first_name=self.first_name or "", last_name=self.last_name or "")

    def api_repr(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "firstName": self.first_name or "",
            "lastName": self.last_name or "",
        }


class BlogPost(BaseModel):
    id: str
    title: str
    content: str
    author: Author
    created: datetime = Field(default_factory=utcnow)

    def api_repr(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author.full_name,
            "created": self.created.isoformat(),
        }
