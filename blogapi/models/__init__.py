from blogapi.models.entities import Author, BlogPost, User
from blogapi.models.schemas import AuthorIn, PostCreate, PostUpdate, UserIn

__all__ = ["Author", "AuthorIn", "BlogPost", "PostCreate", "PostUpdate", "User", "UserIn"]
