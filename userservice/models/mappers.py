"""Conversions between request/response shapes and internal models."""

from userservice.models.filter_criteria import FilterCriteria
from userservice.models.user import User, UserRecord, UserRequest


def to_user_record(user: User) -> UserRecord:
    """Outward view of a persisted user."""
    return UserRecord(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone_number=user.phone_number,
        created_on=user.created_on,
        updated_on=user.updated_on,
    )


def to_new_user(request: UserRequest) -> User:
    """Unsaved user built from a create request."""
    return User(
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        phone_number=request.phone_number,
    )


def apply_user_request(user: User, request: UserRequest) -> User:
    """Copy of `user` with every editable field overwritten from `request`."""
    return user.model_copy(
        update={
            "email": request.email,
            "first_name": request.first_name,
            "last_name": request.last_name,
            "phone_number": request.phone_number,
        }
    )


def to_criteria(filter_request) -> FilterCriteria:
    """FilterCriteria from an API filter request (None means no filtering)."""
    if filter_request is None:
        return FilterCriteria()
    return FilterCriteria(
        user_ids=list(filter_request.user_ids) if filter_request.user_ids is not None else None,
        first_names=list(filter_request.first_names) if filter_request.first_names is not None else None,
        last_names=list(filter_request.last_names) if filter_request.last_names is not None else None,
        emails=list(filter_request.emails) if filter_request.emails is not None else None,
        phone_numbers=list(filter_request.phone_numbers) if filter_request.phone_numbers is not None else None,
        exact_user_ids_flag=bool(filter_request.exact_user_ids_flag),
        search_text=filter_request.search_text,
    )
