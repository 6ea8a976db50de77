"""FastAPI dependencies wiring repositories, cache and publisher into services."""

from fastapi import Depends
from sqlalchemy.orm import Session

from userservice.cache.user_cache import UserCache, get_user_cache
from userservice.database.database import get_db
from userservice.database.user_repository import UserRepository
from userservice.events.publisher import EventPublisher, get_event_publisher
from userservice.services.user_search_service import UserSearchService
from userservice.services.user_service import UserService


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_user_service(
    repository: UserRepository = Depends(get_user_repository),
    cache: UserCache = Depends(get_user_cache),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> UserService:
    return UserService(repository, cache, publisher)


def get_user_search_service(
    repository: UserRepository = Depends(get_user_repository),
) -> UserSearchService:
    return UserSearchService(repository)
