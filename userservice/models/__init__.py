"""Data models for userservice."""

from userservice.models.user import User, UserRequest, UserRecord
from userservice.models.filter_criteria import FilterCriteria, Pagination, PageResult, SortDirection
from userservice.models.events import UserEmailUpdatedEvent

__all__ = [
    "User",
    "UserRequest",
    "UserRecord",
    "FilterCriteria",
    "Pagination",
    "PageResult",
    "SortDirection",
    "UserEmailUpdatedEvent",
]
