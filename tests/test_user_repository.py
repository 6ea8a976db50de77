"""Tests for UserRepository CRUD, optimistic locking and queries."""

import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from userservice.exceptions import (
    InvalidSortFieldError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    StorageUnavailableError,
    UserOptimisticLockError,
)
from userservice.models.filter_criteria import SortDirection
from userservice.models.user import User
from userservice.search.predicates import Or, SubstringMatch


class TestUserRepository:
    """Test UserRepository CRUD operations."""

    def test_create_user(self, user_repository, sample_user):
        """Test creating a user assigns id, timestamps and version 0."""
        created = user_repository.create(sample_user)

        assert created.id is not None
        assert created.email == sample_user.email
        assert created.created_on is not None
        assert created.updated_on is not None
        assert created.version == 0

    def test_create_duplicate_email(self, user_repository, sample_user):
        """Test the unique email constraint maps to ResourceAlreadyExistsError."""
        user_repository.create(sample_user)
        with pytest.raises(ResourceAlreadyExistsError):
            user_repository.create(sample_user)

    def test_get_user_by_id(self, user_repository, sample_user):
        """Test retrieving a user by ID."""
        created = user_repository.create(sample_user)
        retrieved = user_repository.get(created.id)

        assert retrieved is not None
        assert retrieved.id == created.id
        assert retrieved.last_name == sample_user.last_name

    def test_get_nonexistent_user(self, user_repository):
        """Test retrieving a nonexistent user returns None."""
        assert user_repository.get(999) is None

    def test_get_by_email_ignores_case(self, user_repository, sample_user):
        """Test email lookup is case-insensitive."""
        created = user_repository.create(sample_user)

        found = user_repository.get_by_email_ci("TEST.User@Example.COM")
        assert found is not None
        assert found.id == created.id
        assert user_repository.exists_by_email_ci("test.user@EXAMPLE.com") is True
        assert user_repository.exists_by_email_ci("other@example.com") is False

    def test_update_user_bumps_version(self, user_repository, sample_user):
        """Test update overwrites fields and increments the version."""
        created = user_repository.create(sample_user)

        updated = user_repository.update(created.model_copy(update={"first_name": "Renamed"}))

        assert updated.first_name == "Renamed"
        assert updated.version == created.version + 1
        assert updated.created_on == created.created_on

    def test_update_with_stale_version(self, user_repository, sample_user):
        """Test a stale version raises UserOptimisticLockError and leaves the row alone."""
        created = user_repository.create(sample_user)
        user_repository.update(created.model_copy(update={"first_name": "First"}))

        with pytest.raises(UserOptimisticLockError):
            user_repository.update(created.model_copy(update={"first_name": "Second"}))

        assert user_repository.get(created.id).first_name == "First"

    def test_update_nonexistent_user(self, user_repository, sample_user):
        """Test updating a missing user raises ResourceNotFoundError."""
        with pytest.raises(ResourceNotFoundError):
            user_repository.update(sample_user.model_copy(update={"id": 999}))

    def test_update_to_taken_email(self, user_repository, seeded_users):
        """Test updating to another user's email raises ResourceAlreadyExistsError."""
        alice, bob = seeded_users[0], seeded_users[1]

        with pytest.raises(ResourceAlreadyExistsError):
            user_repository.update(alice.model_copy(update={"email": bob.email}))

        assert user_repository.get(alice.id).email == alice.email

    def test_delete_user(self, user_repository, sample_user):
        """Test deleting a user."""
        created = user_repository.create(sample_user)

        assert user_repository.delete(created.id) is True
        assert user_repository.get(created.id) is None
        assert user_repository.delete(created.id) is False


class TestUserRepositoryQuery:
    """Test filtered, sorted and paginated queries."""

    def test_find_all(self, user_repository, seeded_users):
        """Test unfiltered listing returns every user with the total."""
        users, total = user_repository.find_all(0, 10, "id", SortDirection.ASC)

        assert total == 5
        assert [u.id for u in users] == [u.id for u in seeded_users]

    def test_query_with_predicate(self, user_repository, seeded_users):
        """Test a predicate is applied in SQL."""
        predicate = Or((SubstringMatch("last_name", "smith"),))
        users, total = user_repository.query(predicate, 0, 10, "id", SortDirection.ASC)

        assert total == 2
        assert [u.last_name for u in users] == ["Smith", "Smithers"]

    def test_query_id_substring(self, user_repository, seeded_users):
        """Test ID substring matching casts the id to text."""
        predicate = Or((SubstringMatch("id", "3", cast_to_text=True),))
        users, total = user_repository.query(predicate, 0, 10, "id", SortDirection.ASC)

        assert total == 1
        assert users[0].id == 3

    def test_query_escapes_underscore(self, user_repository, seeded_users):
        """Test an underscore in a value is matched literally."""
        users, total = user_repository.query(Or((SubstringMatch("first_name", "a_ice"),)), 0, 10, "id", SortDirection.ASC)
        assert total == 0

        users, total = user_repository.query(Or((SubstringMatch("last_name", "o_b"),)), 0, 10, "id", SortDirection.ASC)
        assert total == 1
        assert users[0].first_name == "Dave"

    def test_query_sort_descending(self, user_repository, seeded_users):
        """Test sorting by an API field name in descending order."""
        users, _ = user_repository.find_all(0, 10, "firstName", SortDirection.DESC)
        assert [u.first_name for u in users] == ["Erin", "Dave", "Carol", "Bob", "Alice"]

    def test_query_sort_ties_broken_by_id(self, user_repository, seeded_users):
        """Test rows with equal sort keys come back in ID order."""
        extra = user_repository.create(
            User(email="frank.smith@example.com", first_name="Frank", last_name="Smith", phone_number="+1-555-0106")
        )

        users, _ = user_repository.find_all(0, 10, "last_name", SortDirection.DESC)
        smiths = [u.id for u in users if u.last_name == "Smith"]
        assert smiths == [seeded_users[0].id, extra.id]

    def test_query_pagination(self, user_repository, seeded_users):
        """Test offset/limit paging keeps the full total."""
        users, total = user_repository.find_all(2, 2, "id", SortDirection.ASC)

        assert total == 5
        assert [u.id for u in users] == [seeded_users[4].id]

    def test_query_invalid_sort_field(self, user_repository, seeded_users):
        """Test an unknown sort field is rejected."""
        with pytest.raises(InvalidSortFieldError):
            user_repository.find_all(0, 10, "password", SortDirection.ASC)


def _unavailable(*args, **kwargs):
    raise OperationalError("SELECT users", {}, Exception("database is down"))


class TestUserRepositoryStorageUnavailable:
    """Test database connectivity failures."""

    def test_get_maps_operational_error(self, user_repository, db_session, monkeypatch):
        """Test a read failure raises StorageUnavailableError and rolls back."""
        rollback = MagicMock()
        monkeypatch.setattr(db_session, "query", _unavailable)
        monkeypatch.setattr(db_session, "rollback", rollback)

        with pytest.raises(StorageUnavailableError):
            user_repository.get(1)
        rollback.assert_called_once()

    def test_query_maps_operational_error(self, user_repository, db_session, monkeypatch):
        """Test a search failure raises StorageUnavailableError."""
        monkeypatch.setattr(db_session, "query", _unavailable)

        with pytest.raises(StorageUnavailableError):
            user_repository.find_all(0, 10, "id", SortDirection.ASC)

    def test_delete_maps_operational_error(self, user_repository, db_session, monkeypatch):
        """Test the delete lookup raises StorageUnavailableError."""
        monkeypatch.setattr(db_session, "query", _unavailable)

        with pytest.raises(StorageUnavailableError):
            user_repository.delete(1)
