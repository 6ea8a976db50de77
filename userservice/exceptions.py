"""Exception hierarchy for userservice.

Services and repositories raise these; the HTTP layer maps them to responses
(see userservice.api.errors).
"""


class UserServiceError(Exception):
    """Base class for all userservice errors."""


class InvalidRequestArgumentError(UserServiceError, ValueError):
    """A request argument is out of range or otherwise unusable."""


class InvalidSortFieldError(InvalidRequestArgumentError):
    """The requested sort field does not name a sortable user attribute."""

    def __init__(self, sort_field: str):
        super().__init__(f"Unknown sort field '{sort_field}'")
        self.sort_field = sort_field


class MalformedFilterValueError(InvalidRequestArgumentError):
    """A filter value cannot be used with the requested matching mode."""


class InvalidEmailError(InvalidRequestArgumentError):
    """Email address missing or not well-formed."""


class ResourceNotFoundError(UserServiceError):
    """Requested user does not exist."""


class ResourceAlreadyExistsError(UserServiceError):
    """A user with the same email already exists."""


class UserOptimisticLockError(UserServiceError):
    """The user was modified by someone else since it was read."""


class StorageUnavailableError(UserServiceError):
    """The relational store could not be reached."""


class EventPublishingError(UserServiceError):
    """A user event could not be handed to the message queue."""
