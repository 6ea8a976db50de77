"""Searching and filtering of users."""

import logging
from typing import Optional

from userservice.database.user_repository import UserRepository
from userservice.models.filter_criteria import FilterCriteria, PageResult, Pagination
from userservice.models.mappers import to_user_record
from userservice.models.user import UserRecord
from userservice.search.filter_predicate import build_filter_predicate
from userservice.search.predicates import Predicate
from userservice.search.search_text_predicate import build_search_text_predicate

logger = logging.getLogger(__name__)


def build_search_predicate(criteria: Optional[FilterCriteria]) -> Predicate:
    """Filter predicate, AND-ed with the free-text predicate when search text is present."""
    filter_predicate = build_filter_predicate(criteria)
    if criteria is not None and criteria.has_search_text():
        return filter_predicate.and_(build_search_text_predicate(criteria))
    return filter_predicate


class UserSearchService:
    """Search users by filter criteria with pagination and sorting."""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    def search_users(self, criteria: Optional[FilterCriteria], pagination: Pagination) -> PageResult[UserRecord]:
        """Return one page of users matching `criteria`.

        Page number, page size and sort key are passed to the repository
        unchanged; an unknown sort field raises InvalidSortFieldError.
        """
        logger.info(f"Search users with criteria: {criteria}, pagination: {pagination}")

        predicate = build_search_predicate(criteria)
        logger.debug(f"Search predicate: {predicate.to_dict()}")

        users, total = self.repository.query(
            predicate,
            pagination.page_number,
            pagination.page_size,
            pagination.sort_field,
            pagination.sort_direction,
        )
        return PageResult[UserRecord].of(
            [to_user_record(user) for user in users],
            total,
            pagination.page_size,
        )

    def search_users_paged(
        self,
        criteria: Optional[FilterCriteria],
        page_no: int,
        page_size: int,
        direction: Optional[str],
        sort_by: str,
    ) -> PageResult[UserRecord]:
        """search_users() with loose pagination parameters."""
        pagination = Pagination(page_number=page_no, page_size=page_size, sort_field=sort_by, direction=direction)
        return self.search_users(criteria, pagination)
