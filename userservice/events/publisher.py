"""Publishing of user events to the background queue.

Email changes are announced asynchronously: the event is enqueued on Redis
using RQ and handled by `userservice.events.jobs` in a worker process.
Without REDIS_URL the event is only logged.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional

from userservice.exceptions import EventPublishingError
from userservice.models.events import UserEmailUpdatedEvent

logger = logging.getLogger(__name__)

EMAIL_UPDATED_JOB = "userservice.events.jobs.handle_user_email_updated"
DEFAULT_QUEUE_NAME = "user-events"


class EventPublisher(ABC):
    """Abstract interface for user event publishers."""

    @abstractmethod
    def publish_email_updated(self, event: UserEmailUpdatedEvent) -> Optional[str]:
        """Hand the event off for asynchronous delivery.

        Returns:
            Queue job ID, if the backend assigns one

        Raises:
            EventPublishingError: If the event could not be enqueued
        """
        ...


class RQEventPublisher(EventPublisher):
    """Enqueue user events on Redis with RQ."""

    def __init__(
        self,
        redis_url: str,
        queue_name: str = DEFAULT_QUEUE_NAME,
        retry_max_attempts: int = 3,
        retry_intervals: Optional[List[int]] = None,
    ):
        from redis import Redis
        from rq import Queue, Retry

        self._redis = Redis.from_url(redis_url)
        self._queue = Queue(queue_name, connection=self._redis)
        self._retry = Retry(max=retry_max_attempts, interval=retry_intervals or [10, 30, 60])

    def publish_email_updated(self, event: UserEmailUpdatedEvent) -> Optional[str]:
        try:
            job = self._queue.enqueue(
                EMAIL_UPDATED_JOB,
                event.model_dump(mode="json", by_alias=True),
                retry=self._retry,
            )
        except Exception as e:
            logger.error(f"Failed to enqueue email update for user {event.user_id}: {type(e).__name__}: {str(e)}")
            raise EventPublishingError(f"Failed to publish email update for user {event.user_id}") from e
        logger.info(f"Enqueued email update for user {event.user_id} as job {job.id}")
        return job.id


class LoggingEventPublisher(EventPublisher):
    """Fallback publisher for local runs: logs the event and drops it."""

    def publish_email_updated(self, event: UserEmailUpdatedEvent) -> Optional[str]:
        logger.info(
            f"Email updated for user {event.user_id}: {event.old_email} -> {event.new_email} "
            "(no queue configured)"
        )
        return None


# Global publisher instance
_publisher: Optional[EventPublisher] = None


def get_event_publisher() -> EventPublisher:
    """Get or create the global publisher (also the FastAPI dependency)."""
    global _publisher
    if _publisher is None:
        redis_url = os.getenv("REDIS_URL", "").strip()
        if redis_url:
            queue_name = os.getenv("USER_EVENTS_QUEUE_NAME", DEFAULT_QUEUE_NAME)
            _publisher = RQEventPublisher(redis_url, queue_name=queue_name)
        else:
            _publisher = LoggingEventPublisher()
    return _publisher


def reset_event_publisher() -> None:
    """Reset the global publisher (for testing)."""
    global _publisher
    _publisher = None
