"""
Blog service: published listings, tag and category clouds, and post management.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from fastapi import UploadFile
from propertyhub.repositories.content import BlogRepository
from propertyhub.repositories.user import UserRepository
from propertyhub.models.blog import BlogPost, BlogStatus
from propertyhub.schemas.blog import BlogListParams, BlogPostResponse, BlogPostWrite, TermCount
from propertyhub.services.enrichment import RelatedEntityEnricher, RelationSpec, summary_loader
from propertyhub.services.storage import ObjectStorage
from propertyhub.utils.exceptions import ConflictError, MissingFieldsError, NotFoundError
from propertyhub.utils.formatting import slugify
import logging

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "blog"


def count_terms(values: Iterable[Optional[str]]) -> List[Dict[str, Any]]:
    """Count non-blank terms, most frequent first, ties by name."""
    counts = Counter(value.strip() for value in values if value and value.strip())
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TermCount(name=name, count=count).model_dump() for name, count in ranked]


class BlogService:

    def __init__(
        self,
        db_session: AsyncSession,
        session_factory: Optional[async_sessionmaker] = None,
        storage: Optional[ObjectStorage] = None
    ):
        self.storage = storage
        self.blog_repo = BlogRepository(db_session, session_factory)
        self.user_repo = UserRepository(db_session, session_factory)
        self.enricher = RelatedEntityEnricher(concurrent=session_factory is not None)

    async def present(self, posts: List[BlogPost]) -> List[Dict[str, Any]]:
        """Attach authors in one batch and serialize."""
        rows = await self.enricher.enrich(
            [post.to_dict() for post in posts],
            [RelationSpec("author", "author_id", summary_loader(self.user_repo, ("id", "name", "email")))]
        )
        return [BlogPostResponse.model_validate(row).to_response() for row in rows]

    async def list_posts(self, params: BlogListParams) -> Tuple[List[Dict[str, Any]], int]:
        posts, total = await self.blog_repo.list_published(params)
        return await self.present(posts), total

    async def get_recent_posts(self, limit: int = 5) -> List[Dict[str, Any]]:
        return await self.present(await self.blog_repo.get_recent(limit))

    async def get_featured_posts(self, limit: int = 3) -> List[Dict[str, Any]]:
        return await self.present(await self.blog_repo.get_featured(limit))

    async def get_tags(self) -> List[Dict[str, Any]]:
        """Tags of published posts with how many posts use each."""
        raw = await self.blog_repo.published_tags()
        return count_terms(tag for text in raw if text for tag in text.split(","))

    async def get_categories(self) -> List[Dict[str, Any]]:
        return count_terms(await self.blog_repo.published_categories())

    async def get_post(self, post_id: int) -> Dict[str, Any]:
        return (await self.present([await self._get(post_id)]))[0]

    async def create_post(
        self,
        post_data: BlogPostWrite,
        author_id: Optional[int] = None,
        image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        """
        Create a post. The slug comes from the title.

        Args:
            post_data: Validated form fields
            author_id: Signed-in author, if any
            image: Optional featured image upload

        Raises:
            ConflictError: If another post already uses the slug
        """
        create_data = post_data.model_dump(exclude_none=True)
        create_data["slug"] = await self._unique_slug(post_data.title)
        create_data["author_id"] = author_id
        if post_data.status == BlogStatus.PUBLISHED:
            create_data["published_at"] = datetime.now(timezone.utc)

        uploaded = await self._upload(create_data, image)
        try:
            post = await self.blog_repo.create(create_data)
        except Exception:
            await self._discard(uploaded)
            raise

        logger.info(f"Blog post created: {post.title} (ID: {post.id})", extra={"status": post.status.value})
        return (await self.present([post]))[0]

    async def update_post(
        self,
        post_id: int,
        post_data: BlogPostWrite,
        image: Optional[UploadFile] = None
    ) -> Dict[str, Any]:
        """
        Update a post. The slug is regenerated from the title, and `published_at`
        is stamped the first time the post is published.

        Raises:
            NotFoundError: If the post doesn't exist
            ConflictError: If another post already uses the new slug
        """
        post = await self._get(post_id)
        previous_image = post.image

        update_data = post_data.model_dump(exclude_unset=True, exclude_none=True)
        update_data["slug"] = await self._unique_slug(post_data.title, exclude_id=post_id)
        if post_data.status == BlogStatus.PUBLISHED and not post.published_at:
            update_data["published_at"] = datetime.now(timezone.utc)

        uploaded = await self._upload(update_data, image)
        try:
            post = await self.blog_repo.update(post_id, update_data)
        except Exception:
            await self._discard(uploaded)
            raise

        if previous_image and previous_image != post.image:
            await self._discard([previous_image])

        logger.info(f"Blog post updated: {post_id}", extra={"fields": sorted(update_data)})
        return (await self.present([post]))[0]

    async def delete_post(self, post_id: int) -> None:
        post = await self._get(post_id)
        await self.blog_repo.delete(post_id)
        if post.image:
            await self._discard([post.image])
        logger.info(f"Blog post deleted: {post_id}")

    async def _get(self, post_id: int) -> BlogPost:
        post = await self.blog_repo.get_by_id(post_id)
        if not post:
            raise NotFoundError("Blog post", post_id)
        return post

    async def _unique_slug(self, title: str, exclude_id: Optional[int] = None) -> str:
        slug = slugify(title)
        if not slug:
            raise MissingFieldsError(["title"])
        existing = await self.blog_repo.get_by_field("slug", slug)
        if existing and existing.id != exclude_id:
            raise ConflictError("A blog post with this title already exists")
        return slug

    async def _upload(self, data: Dict[str, Any], image: Optional[UploadFile]) -> List[str]:
        if not image:
            return []
        data["image"] = await self.storage.upload(IMAGE_FOLDER, image)
        return [data["image"]]

    async def _discard(self, urls: List[str]) -> None:
        if urls and self.storage:
            await self.storage.delete_many(urls)
