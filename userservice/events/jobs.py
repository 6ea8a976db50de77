"""Background job entry points for user events (run by the RQ worker)."""

import logging
from typing import Any, Dict

from pydantic import ValidationError
from rq import get_current_job

from userservice.models.events import UserEmailUpdatedEvent

logger = logging.getLogger(__name__)


def handle_user_email_updated(payload: Dict[str, Any]) -> Dict[str, Any]:
    """RQ job: consume a UserEmailUpdatedEvent payload.

    Invalid payloads are logged and rejected without retry; downstream
    consumers subscribe to the queue rather than to this service.
    """
    job = get_current_job()
    job_id = job.id if job else None

    try:
        event = UserEmailUpdatedEvent.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Rejected invalid email update payload (job {job_id}): {e.error_count()} errors")
        return {"status": "INVALID", "job_id": job_id}

    logger.info(
        f"Processed email update for user {event.user_id}: "
        f"{event.old_email} -> {event.new_email} at {event.updated_at.isoformat()} (job {job_id})"
    )
    return {"status": "PROCESSED", "job_id": job_id, "user_id": event.user_id}
