"""Request/response models for the users API."""

from typing import List, Optional, Union
from pydantic import BaseModel, Field

from userservice.models.filter_criteria import PageResult
from userservice.models.user import UserRecord


class UserFilterRequest(BaseModel):
    """Request body for POST /api/v1/users/search."""

    user_ids: Optional[List[Union[int, str]]] = Field(None, alias="userIds")
    first_names: Optional[List[str]] = Field(None, alias="firstNames")
    last_names: Optional[List[str]] = Field(None, alias="lastNames")
    emails: Optional[List[str]] = Field(None, alias="emails")
    phone_numbers: Optional[List[str]] = Field(None, alias="phoneNumbers")
    exact_user_ids_flag: Optional[bool] = Field(False, alias="exactUserIdsFlag")
    search_text: Optional[str] = Field(None, alias="searchText")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class UsersPage(PageResult[UserRecord]):
    """Response for paged user listings."""


class HealthResponse(BaseModel):
    status: str
    version: str
