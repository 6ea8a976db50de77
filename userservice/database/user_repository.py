"""Repository for User database operations."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from userservice.database.models import UserDB
from userservice.exceptions import (
    InvalidSortFieldError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    StorageUnavailableError,
    UserOptimisticLockError,
)
from userservice.models.constants import (
    CONCURRENT_MODIFICATION_MESSAGE,
    ID_FIELD,
    SORTABLE_FIELDS,
    USER_ALREADY_EXISTS_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)
from userservice.models.filter_criteria import SortDirection
from userservice.models.user import User
from userservice.search.predicates import Always, Predicate
from userservice.search.sql import to_sqlalchemy

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        user_db = self._read(lambda: self.db.query(UserDB).filter(UserDB.id == user_id).first())
        return user_db.to_pydantic() if user_db else None

    def get_by_email_ci(self, email: str) -> Optional[User]:
        """Get user by email, ignoring case."""
        user_db = self._read(
            lambda: self.db.query(UserDB).filter(func.lower(UserDB.email) == email.lower()).first()
        )
        return user_db.to_pydantic() if user_db else None

    def exists_by_email_ci(self, email: str) -> bool:
        """Whether any user has this email, ignoring case."""
        count = self._read(
            lambda: self.db.query(func.count(UserDB.id)).filter(func.lower(UserDB.email) == email.lower()).scalar()
        )
        return bool(count)

    def create(self, user: User) -> User:
        """Create a new user; the database assigns the ID."""
        try:
            user_db = UserDB.from_pydantic(user)
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user_db.id}: {user_db.email}")
            return user_db.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"User with email {user.email} already exists: {type(e).__name__}")
            raise ResourceAlreadyExistsError(USER_ALREADY_EXISTS_MESSAGE) from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {user.email}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, user: User) -> User:
        """Overwrite a user's fields if its stored version still equals `user.version`.

        The write is a compare-and-swap on the version column: it only applies
        when nobody else has updated the row since it was read, and it bumps
        the version by one.

        Raises:
            ResourceNotFoundError: If the user no longer exists
            UserOptimisticLockError: If the stored version has advanced
            ResourceAlreadyExistsError: If the new email belongs to another user
        """
        try:
            affected = (
                self.db.query(UserDB)
                .filter(UserDB.id == user.id, UserDB.version == user.version)
                .update(
                    {
                        UserDB.email: user.email,
                        UserDB.first_name: user.first_name,
                        UserDB.last_name: user.last_name,
                        UserDB.phone_number: user.phone_number,
                        UserDB.updated_on: datetime.utcnow(),
                        UserDB.version: UserDB.version + 1,
                    },
                    synchronize_session=False,
                )
            )
            if affected == 0:
                self.db.rollback()
                if self.get(user.id) is None:
                    raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)
                logger.error(f"Optimistic lock conflict for user {user.id} at version {user.version}")
                raise UserOptimisticLockError(CONCURRENT_MODIFICATION_MESSAGE)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Email {user.email} already belongs to another user: {type(e).__name__}")
            raise ResourceAlreadyExistsError(USER_ALREADY_EXISTS_MESSAGE) from e
        except (ResourceNotFoundError, UserOptimisticLockError):
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user.id}: {type(e).__name__}: {str(e)}")
            raise

        self.db.expire_all()
        updated = self.get(user.id)
        logger.debug(f"Updated user {user.id} to version {updated.version if updated else '?'}")
        return updated

    def delete(self, user_id: int) -> bool:
        """Delete a user by ID."""
        user_db = self._read(lambda: self.db.query(UserDB).filter(UserDB.id == user_id).first())
        if not user_db:
            return False

        try:
            self.db.delete(user_db)
            self.db.commit()
            logger.debug(f"Deleted user {user_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def query(
        self,
        predicate: Predicate,
        page_number: int,
        page_size: int,
        sort_field: str,
        sort_direction: SortDirection,
    ) -> Tuple[List[User], int]:
        """Run a filtered, sorted, paginated query.

        Rows are ordered by `sort_field` and then by ID ascending, so pages
        stay stable when the sort key has duplicates.

        Args:
            predicate: Filter to apply
            page_number: Zero-based page index
            page_size: Rows per page
            sort_field: Sortable attribute (API or column name)
            sort_direction: Ascending or descending

        Returns:
            Tuple of (users on the requested page, total matching rows)

        Raises:
            InvalidSortFieldError: If sort_field does not name a sortable attribute
            StorageUnavailableError: If the database cannot be reached
        """
        sort_column = self._sort_column(sort_field)
        order_by = [sort_column.desc() if sort_direction == SortDirection.DESC else sort_column.asc()]
        if sort_column is not UserDB.id:
            order_by.append(UserDB.id.asc())

        where = to_sqlalchemy(predicate, UserDB)

        def run():
            total = self.db.query(func.count(UserDB.id)).filter(where).scalar() or 0
            rows = (
                self.db.query(UserDB)
                .filter(where)
                .order_by(*order_by)
                .offset(page_number * page_size)
                .limit(page_size)
                .all()
            )
            return rows, int(total)

        rows, total = self._read(run)
        return [row.to_pydantic() for row in rows], total

    def find_all(
        self,
        page_number: int,
        page_size: int,
        sort_field: str,
        sort_direction: SortDirection,
    ) -> Tuple[List[User], int]:
        """Unfiltered page of users."""
        return self.query(Always(), page_number, page_size, sort_field, sort_direction)

    def _sort_column(self, sort_field: str):
        column_name = SORTABLE_FIELDS.get(sort_field or "")
        if column_name is None:
            raise InvalidSortFieldError(sort_field)
        if column_name == ID_FIELD:
            return UserDB.id
        return getattr(UserDB, column_name)

    def _read(self, operation):
        try:
            return operation()
        except OperationalError as e:
            self.db.rollback()
            logger.error(f"Database unavailable: {type(e).__name__}: {str(e)}")
            raise StorageUnavailableError("Database is temporarily unavailable") from e
