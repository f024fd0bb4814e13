# blogapi/models/documents.py
"""MongoDB collection schemas.

Documents never leave the repositories; they are converted into the plain
entities of ``blogapi.models.entities`` before being returned.
"""
from datetime import datetime
from typing import Annotated, Optional

from beanie import Document, Indexed
from pydantic import Field

from blogapi.models.entities import Author, BlogPost, User, utcnow


class UserDocument(Document):
    username: Annotated[str, Indexed(unique=True)]
    password_digest: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Settings:
        name = "users"
        use_cache = False

    def to_entity(self) -> User:
        return User(
            id=str(self.id),
            username=self.username,
            password_digest=self.password_digest,
            first_name=self.first_name,
            last_name=self.last_name,
        )


class BlogPostDocument(Document):
    title: str
    content: str
    author: Author
    created: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "blogposts"
        use_cache = False

    def to_entity(self) -> BlogPost:
        return BlogPost(
            id=str(self.id),
            title=self.title,
            content=self.content,
            author=self.author,
            created=self.created,
        )


DOCUMENT_MODELS = [UserDocument, BlogPostDocument]
