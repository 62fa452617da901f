"""
Pydantic schemas for blog posts.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import ClassVar, List, Optional, Tuple
from datetime import datetime

from propertyhub.models.blog import BlogStatus
from propertyhub.schemas.common import CamelModel
from propertyhub.utils.formatting import format_long_date, reading_time
from propertyhub.utils.validators import parse_bool, parse_int, parse_string_list

BLOG_SORT_FIELDS = ("published_at", "title", "view_count")


class AuthorSummary(BaseModel):
    id: int
    name: str
    email: str


class BlogPostResponse(CamelModel):
    """Blog post with display fields derived from its content and publish date."""

    id: int
    title: str
    slug: str
    content: str
    excerpt: str
    category: Optional[str] = None
    tags: List[str] = []
    status: str
    featured: bool
    image: Optional[str] = None
    view_count: int = 0
    published_at: Optional[datetime] = None
    author_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    author: Optional[AuthorSummary] = None

    @computed_field(alias="featuredImage")
    @property
    def featured_image(self) -> Optional[str]:
        return self.image

    @computed_field(alias="readingTime")
    @property
    def reading_time(self) -> str:
        return reading_time(self.content)

    @computed_field(alias="publishedAtFormatted")
    @property
    def published_at_formatted(self) -> Optional[str]:
        return format_long_date(self.published_at)


class BlogListParams(BaseModel):
    """Public blog listing query. Only published posts are ever listed."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int = 10
    featured: Optional[bool] = None
    search: Optional[str] = None
    sort_by: str = Field("published_at", alias="sortBy")
    sort_order: str = Field("desc", alias="sortOrder")

    @field_validator("page", mode="before")
    @classmethod
    def parse_page(cls, v):
        page = parse_int(v)
        return page if page and page > 0 else 1

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, v):
        limit = parse_int(v)
        if not limit or limit < 1:
            return 10
        return min(limit, 100)

    @field_validator("featured", mode="before")
    @classmethod
    def parse_featured(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return parse_bool(v)

    @field_validator("search", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        return str(v).strip() or None

    @field_validator("sort_by", mode="before")
    @classmethod
    def normalize_sort_by(cls, v):
        field = "".join(f"_{c.lower()}" if c.isupper() else c for c in str(v or "").strip())
        return field if field in BLOG_SORT_FIELDS else "published_at"

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v):
        return "asc" if str(v or "").strip().lower() == "asc" else "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class BlogPostWrite(BaseModel):
    """Blog form fields. Create and update both require title, content and excerpt."""

    model_config = ConfigDict(populate_by_name=True)

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("title", "content", "excerpt")

    title: str = Field(..., max_length=255)
    content: str
    excerpt: str
    category: Optional[str] = None
    tags: Optional[str] = None
    status: BlogStatus = BlogStatus.DRAFT
    featured: bool = False
    image: Optional[str] = Field(None, alias="featuredImage")

    @field_validator("tags", mode="before")
    @classmethod
    def join_tags(cls, v):
        """Stored as comma-separated text; a JSON array is accepted too."""
        if v is None:
            return None
        return ", ".join(parse_string_list(v)) or None

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return BlogStatus.DRAFT
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("featured", mode="before")
    @classmethod
    def parse_featured(cls, v):
        return bool(parse_bool(v))


class TermCount(BaseModel):
    name: str
    count: int
