"""
Shared schema configuration and pagination helpers.
"""

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Dict, Optional
import math

from propertyhub.utils.validators import parse_int

# Required text field: blank submissions are reported under missingFields
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalStr = Optional[Annotated[str, StringConstraints(strip_whitespace=True)]]


class CamelModel(BaseModel):
    """Response model read from snake_case storage dicts and serialized in camelCase."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class AdminListParams(BaseModel):
    """Query parameters shared by back-office list routes."""

    page: int = 1
    limit: int = 10
    status: Optional[str] = None
    search: Optional[str] = None

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

    @field_validator("status", "search", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class AdminPagination(BaseModel):
    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")
    total_items: int = Field(serialization_alias="totalItems")
    items_per_page: int = Field(serialization_alias="itemsPerPage")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> Dict[str, Any]:
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total_items=total,
            items_per_page=limit,
        ).model_dump(by_alias=True)


def listing_pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    """Pagination block used by public listings."""
    offset = (page - 1) * limit
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
        "hasNext": offset + limit < total,
        "hasPrev": page > 1,
    }
