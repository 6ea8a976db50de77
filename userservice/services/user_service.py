"""CRUD operations on single users, with caching and email-change events."""

import logging
from typing import Optional

from userservice.cache.user_cache import UserCache
from userservice.database.user_repository import UserRepository
from userservice.events.publisher import EventPublisher
from userservice.exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from userservice.models.constants import USER_ALREADY_EXISTS_MESSAGE, USER_NOT_FOUND_MESSAGE
from userservice.models.events import UserEmailUpdatedEvent
from userservice.models.filter_criteria import PageResult, Pagination
from userservice.models.mappers import apply_user_request, to_new_user, to_user_record
from userservice.models.user import User, UserRecord, UserRequest
from userservice.services.validation import validate_email

logger = logging.getLogger(__name__)


class UserService:
    """Get, list, create, update and delete users.

    Single-user reads go through the cache keyed by id or email; updates
    refresh the id entry and deletes evict it. Listing is never cached.
    """

    def __init__(self, repository: UserRepository, cache: UserCache, publisher: EventPublisher):
        self.repository = repository
        self.cache = cache
        self.publisher = publisher

    def get_all_users(self, pagination: Pagination) -> PageResult[UserRecord]:
        logger.info(
            f"Get all users with pageNo '{pagination.page_number}', pageSize '{pagination.page_size}', "
            f"direction '{pagination.direction}' and orderBy '{pagination.sort_field}'"
        )
        users, total = self.repository.find_all(
            pagination.page_number,
            pagination.page_size,
            pagination.sort_field,
            pagination.sort_direction,
        )
        return PageResult[UserRecord].of([to_user_record(user) for user in users], total, pagination.page_size)

    def get_user_by_id(self, user_id: int) -> UserRecord:
        logger.info(f"Get user by id '{user_id}'")

        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        user = self.repository.get(user_id)
        if user is None:
            logger.info(f"User with id {user_id} not found")
            raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)

        record = to_user_record(user)
        self.cache.put(user_id, record)
        return record

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Case-insensitive lookup; returns None when no user has this email."""
        logger.info(f"Get user by userEmail '{email}'")

        validate_email(email)
        cached = self.cache.get(email)
        if cached is not None:
            return cached

        user = self.repository.get_by_email_ci(email.lower())
        if user is None:
            return None

        record = to_user_record(user)
        self.cache.put(email, record)
        return record

    def create_user(self, request: UserRequest) -> UserRecord:
        logger.info(f"Create user '{request.email}'")

        validate_email(request.email)
        if self.repository.exists_by_email_ci(request.email):
            logger.info(f"User [user email: {request.email}] already exists")
            raise ResourceAlreadyExistsError(USER_ALREADY_EXISTS_MESSAGE)

        saved = self.repository.create(to_new_user(request))
        logger.info(f"User [id: {saved.id}] created successfully")
        return to_user_record(saved)

    def update_user(self, user_id: int, request: UserRequest) -> UserRecord:
        """Overwrite all editable fields of a user.

        Raises:
            ResourceNotFoundError: If the user does not exist
            ResourceAlreadyExistsError: If the new email belongs to another user
            UserOptimisticLockError: If the user changed since it was read
            EventPublishingError: If the email-change event could not be enqueued
        """
        logger.info(f"Update user with id '{user_id}'")

        validate_email(request.email)
        existing = self._get_existing_user(user_id)

        if request.email.lower() != existing.email.lower():
            owner = self.repository.get_by_email_ci(request.email)
            if owner is not None and owner.id != user_id:
                logger.info(f"User [user email: {request.email}] already exists")
                raise ResourceAlreadyExistsError(USER_ALREADY_EXISTS_MESSAGE)

        updated = self.repository.update(apply_user_request(existing, request))
        record = to_user_record(updated)
        logger.info(f"User [id: {user_id}] updated successfully")

        self.cache.put(user_id, record)
        self.cache.evict(existing.email)

        if updated.email != existing.email:
            self.publisher.publish_email_updated(
                UserEmailUpdatedEvent(
                    user_id=user_id,
                    old_email=existing.email,
                    new_email=updated.email,
                    updated_at=updated.updated_on,
                )
            )
        return record

    def delete_user(self, user_id: int) -> None:
        logger.info(f"Delete user with id '{user_id}'")

        existing = self._get_existing_user(user_id)
        if not self.repository.delete(user_id):
            raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)

        self.cache.evict(user_id)
        self.cache.evict(existing.email)
        logger.info(f"User with id '{user_id}' deleted successfully")

    def _get_existing_user(self, user_id: int) -> User:
        user = self.repository.get(user_id)
        if user is None:
            logger.info(f"User with id '{user_id}' not found")
            raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)
        return user
