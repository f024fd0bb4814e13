# blogapi/repositories/post_repository.py
import logging
from typing import Optional, List, Dict, Any

from beanie import PydanticObjectId
from beanie.odm.queries.update import UpdateResponse
from bson import ObjectId
from pymongo.errors import PyMongoError

from blogapi.errors import InvalidIdentifier, UnexpectedStorageError
from blogapi.models.documents import BlogPostDocument
from blogapi.models.entities import Author, BlogPost
from blogapi.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "content", "author")


def parse_object_id(entity_id: str) -> PydanticObjectId:
    if not entity_id or not ObjectId.is_valid(entity_id):
        raise InvalidIdentifier()
    return PydanticObjectId(entity_id)


class PostRepository(BaseRepository[BlogPost]):
    """Repository for BlogPost entity operations backed by the blogposts collection."""

    async def get_by_id(self, post_id: str) -> Optional[BlogPost]:
        oid = parse_object_id(post_id)
        try:
            doc = await BlogPostDocument.get(oid)
        except PyMongoError as e:
            logger.error(f"Error fetching post {post_id}: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        return doc.to_entity() if doc else None

    async def get_all(self) -> List[BlogPost]:
        try:
            docs = await BlogPostDocument.find_all().sort("+_id").to_list()
        except PyMongoError as e:
            logger.error(f"Error listing posts: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        return [doc.to_entity() for doc in docs]

    async def create(self, data: Dict[str, Any]) -> BlogPost:
        doc = BlogPostDocument(
            title=data["title"],
            content=data["content"],
            author=Author.model_validate(data["author"]),
        )
        try:
            await doc.insert()
        except PyMongoError as e:
            logger.error(f"Error creating post: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        logger.info(f"Post {doc.id} created by '{doc.author.full_name}'")
        return doc.to_entity()

    async def update(self, post_id: str, data: Dict[str, Any]) -> Optional[BlogPost]:
        oid = parse_object_id(post_id)
        changes = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        if "author" in changes:
            changes["author"] = Author.model_validate(changes["author"]).model_dump()
        if not changes:
            # $set with an empty document is rejected by the server
            return await self.get_by_id(post_id)

        try:
            doc = await BlogPostDocument.find_one(BlogPostDocument.id == oid).update(
                {"$set": changes},
                response_type=UpdateResponse.NEW_DOCUMENT,
            )
        except PyMongoError as e:
            logger.error(f"Error updating post {post_id}: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        if doc is None:
            return None
        logger.info(f"Post {post_id} updated: {sorted(changes)}")
        return doc.to_entity()

    async def delete(self, post_id: str) -> bool:
        oid = parse_object_id(post_id)
        try:
            result = await BlogPostDocument.find_one(BlogPostDocument.id == oid).delete()
        except PyMongoError as e:
            logger.error(f"Error deleting post {post_id}: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
        deleted = bool(result and result.deleted_count)
        if deleted:
            logger.info(f"Deleted blog post with id `{post_id}`")
        return deleted

    async def count(self) -> int:
        try:
            return await BlogPostDocument.find_all().count()
        except PyMongoError as e:
            logger.error(f"Error counting posts: {e}", exc_info=True)
            raise UnexpectedStorageError() from e
