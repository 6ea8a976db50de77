"""Per-field filter predicate for user search.

Each populated list in FilterCriteria becomes an OR over its values; the
field predicates are AND-ed together. Fields with no values are skipped
entirely, so empty criteria match every user.
"""

from typing import List, Optional, Sequence

from userservice.exceptions import MalformedFilterValueError
from userservice.models.constants import (
    EMAIL_FIELD,
    FIRST_NAME_FIELD,
    ID_FIELD,
    LAST_NAME_FIELD,
    PHONE_NUMBER_FIELD,
)
from userservice.models.filter_criteria import FilterCriteria
from userservice.search.predicates import Always, And, Equals, Or, Predicate, SubstringMatch


def build_filter_predicate(criteria: Optional[FilterCriteria]) -> Predicate:
    """Translate filter criteria into a single predicate.

    Args:
        criteria: Filter criteria (None is treated as empty criteria)

    Returns:
        AND of the per-field predicates, or Always() when no field has values

    Raises:
        MalformedFilterValueError: If exact ID matching is requested with a
            value that is not an integer
    """
    if criteria is None:
        return Always()

    predicates: List[Predicate] = []

    if criteria.user_ids:
        if criteria.exact_user_ids_flag:
            predicates.append(_exact_user_ids_predicate(criteria.user_ids))
        else:
            predicates.append(_user_ids_predicate(criteria.user_ids))

    for values, field in (
        (criteria.first_names, FIRST_NAME_FIELD),
        (criteria.last_names, LAST_NAME_FIELD),
        (criteria.emails, EMAIL_FIELD),
        (criteria.phone_numbers, PHONE_NUMBER_FIELD),
    ):
        if values:
            predicates.append(Or(tuple(SubstringMatch(field, str(value)) for value in values)))

    if not predicates:
        return Always()
    return And(tuple(predicates))


def _exact_user_ids_predicate(user_ids: Sequence) -> Predicate:
    return Or(tuple(Equals(ID_FIELD, _as_user_id(user_id)) for user_id in user_ids))


def _user_ids_predicate(user_ids: Sequence) -> Predicate:
    # Numeric substring match: "12" matches 12, 120, 512
    return Or(tuple(SubstringMatch(ID_FIELD, str(user_id), cast_to_text=True) for user_id in user_ids))


def _as_user_id(value) -> int:
    if isinstance(value, bool):
        raise MalformedFilterValueError(f"User ID '{value}' is not an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise MalformedFilterValueError(f"User ID '{value}' is not an integer") from None
