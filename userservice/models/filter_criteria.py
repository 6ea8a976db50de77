"""Search request and page result models for userservice."""

import math
from enum import Enum
from typing import Generic, List, Optional, TypeVar, Union
from pydantic import BaseModel, Field, field_validator

from userservice.exceptions import InvalidRequestArgumentError
from userservice.models.constants import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
)

T = TypeVar("T")


class SortDirection(str, Enum):
    """Sort direction enumeration."""
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_string(cls, direction: Optional[str]) -> "SortDirection":
        """Descending iff the text contains "desc"; anything else (None included) is ascending."""
        if direction is not None and "desc" in direction:
            return cls.DESC
        return cls.ASC


class FilterCriteria(BaseModel):
    """Normalized user search request.

    An empty or missing list means "no constraint on that field".
    """

    user_ids: Optional[List[Union[int, str]]] = Field(None, description="IDs to match (exact or substring)")
    first_names: Optional[List[str]] = Field(None, description="First-name substrings (OR-combined)")
    last_names: Optional[List[str]] = Field(None, description="Last-name substrings (OR-combined)")
    emails: Optional[List[str]] = Field(None, description="Email substrings (OR-combined)")
    phone_numbers: Optional[List[str]] = Field(None, description="Phone number substrings (OR-combined)")
    exact_user_ids_flag: bool = Field(False, description="Match user IDs by equality instead of substring")
    search_text: Optional[str] = Field(None, description="Free text matched against name, email and phone")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def has_search_text(self) -> bool:
        return bool(self.search_text and self.search_text.strip())


class Pagination(BaseModel):
    """Page request: page number, page size and sort key."""

    page_number: int = Field(DEFAULT_PAGE_NUMBER, description="Zero-based page index")
    page_size: int = Field(DEFAULT_PAGE_SIZE, description="Maximum rows per page")
    sort_field: str = Field(DEFAULT_SORT_FIELD, description="Attribute to sort by")
    direction: Optional[str] = Field(DEFAULT_SORT_DIRECTION, description="Raw direction text from the client")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def __init__(self, **data):
        page_number = data.get("page_number", DEFAULT_PAGE_NUMBER)
        page_size = data.get("page_size", DEFAULT_PAGE_SIZE)
        if isinstance(page_number, int) and page_number < 0:
            raise InvalidRequestArgumentError("Page index must not be less than zero")
        if isinstance(page_size, int) and page_size < 1:
            raise InvalidRequestArgumentError("Page size must not be less than one")
        super().__init__(**data)

    @field_validator("sort_field")
    @classmethod
    def _sort_field_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("sort field must not be blank")
        return value.strip()

    @property
    def sort_direction(self) -> SortDirection:
        return SortDirection.from_string(self.direction)

    @property
    def offset(self) -> int:
        return self.page_number * self.page_size


class PageResult(BaseModel, Generic[T]):
    """One page of results plus totals."""

    content: List[T] = Field(default_factory=list, description="Rows on the current page")
    total_elements: int = Field(0, alias="totalElements", description="Rows matching across all pages")
    total_pages: int = Field(0, alias="totalPages", description="Number of pages at this page size")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    @classmethod
    def of(cls, content: List[T], total_elements: int, page_size: int) -> "PageResult[T]":
        total_pages = math.ceil(total_elements / page_size) if page_size > 0 else 0
        return cls(content=content, total_elements=total_elements, total_pages=total_pages)
