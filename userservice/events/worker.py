"""RQ worker entry point for user events.

Usage: python -m userservice.events.worker
"""

import logging
import os
import sys

from dotenv import load_dotenv
from redis import Redis
from rq import Worker

from userservice.events.publisher import DEFAULT_QUEUE_NAME

load_dotenv()


def main() -> int:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    redis_url = os.getenv("REDIS_URL", "")
    if not redis_url:
        raise SystemExit("REDIS_URL is required to run the worker")

    queue_name = os.getenv("USER_EVENTS_QUEUE_NAME", DEFAULT_QUEUE_NAME)
    redis_conn = Redis.from_url(redis_url)
    worker = Worker([queue_name], connection=redis_conn)
    worker.work(with_scheduler=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
