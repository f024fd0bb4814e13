# blogapi/models/schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)
    first_name: Optional[str] = Field(None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=100)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("username must not be blank")
        return v


class AuthorIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field("", alias="firstName", max_length=100)
    last_name: str = Field("", alias="lastName", max_length=100)


class PostCreate(BaseModel):
    # author is always taken from the authenticated user
    title: str
    content: str


class PostUpdate(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[AuthorIn] = None

    def changes(self) -> dict:
        """Fields the client actually sent, minus the identifier."""
        return self.model_dump(exclude={"id"}, exclude_unset=True, exclude_none=True)
