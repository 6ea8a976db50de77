"""FastAPI web application for userservice."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import Body, Depends, FastAPI, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware

from userservice.api.dependencies import get_user_search_service, get_user_service
from userservice.api.errors import register_exception_handlers
from userservice.api.schemas import HealthResponse, UserFilterRequest, UsersPage
from userservice.database.database import init_db
from userservice.exceptions import ResourceNotFoundError
from userservice.models.constants import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    USER_NOT_FOUND_MESSAGE,
)
from userservice.models.filter_criteria import Pagination
from userservice.models.mappers import to_criteria
from userservice.models.user import UserRecord, UserRequest
from userservice.services.user_search_service import UserSearchService
from userservice.services.user_service import UserService

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"
API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="userservice API",
    description="CRUD and filtered search over user records",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)


def _pagination(page_no: int, page_size: int, order_by: str, direction: Optional[str]) -> Pagination:
    return Pagination(page_number=page_no, page_size=page_size, sort_field=order_by, direction=direction)


@app.get("/health", response_model=HealthResponse)
def health():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=API_VERSION)


@app.get(f"{API_PREFIX}/users", response_model=UsersPage)
def get_users(
    page_no: int = Query(DEFAULT_PAGE_NUMBER, alias="pageNo"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    order_by: str = Query(DEFAULT_SORT_FIELD, alias="orderBy"),
    direction: Optional[str] = Query(DEFAULT_SORT_DIRECTION),
    service: UserService = Depends(get_user_service),
):
    """List users page by page."""
    logger.debug(
        f"Received request to get all users with pageNo {page_no}, pageSize {page_size}, "
        f"direction {direction} and orderBy {order_by}"
    )
    return service.get_all_users(_pagination(page_no, page_size, order_by, direction))


@app.post(f"{API_PREFIX}/users/search", response_model=UsersPage)
def search_users(
    filter_request: Optional[UserFilterRequest] = Body(None),
    page_no: int = Query(DEFAULT_PAGE_NUMBER, alias="pageNo"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    order_by: str = Query(DEFAULT_SORT_FIELD, alias="orderBy"),
    direction: Optional[str] = Query(DEFAULT_SORT_DIRECTION),
    service: UserSearchService = Depends(get_user_search_service),
):
    """Filter users by field lists and/or free text."""
    logger.debug(f"Received request to search users with filter {filter_request}")
    return service.search_users(to_criteria(filter_request), _pagination(page_no, page_size, order_by, direction))


@app.get(f"{API_PREFIX}/users/email/{{email}}", response_model=UserRecord)
def get_user_by_email(email: str, service: UserService = Depends(get_user_service)):
    """Get a user by email (case-insensitive)."""
    logger.debug(f"Received request to get user by email '{email}'")
    record = service.get_user_by_email(email)
    if record is None:
        raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)
    return record


@app.get(f"{API_PREFIX}/users/{{user_id}}", response_model=UserRecord)
def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Get a user by ID."""
    logger.debug(f"Received request to get user by id '{user_id}'")
    return service.get_user_by_id(user_id)


@app.post(f"{API_PREFIX}/users", response_model=UserRecord, status_code=status.HTTP_201_CREATED)
def create_user(request: UserRequest, service: UserService = Depends(get_user_service)):
    """Create a user."""
    logger.debug(f"Received request to create user '{request.email}'")
    return service.create_user(request)


@app.put(f"{API_PREFIX}/users/{{user_id}}", response_model=UserRecord)
def update_user(user_id: int, request: UserRequest, service: UserService = Depends(get_user_service)):
    """Overwrite a user's email, names and phone number."""
    logger.debug(f"Received request to update user with id '{user_id}'")
    return service.update_user(user_id, request)


@app.delete(f"{API_PREFIX}/users/{{user_id}}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Delete a user."""
    logger.debug(f"Received request to delete user with id '{user_id}'")
    service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
