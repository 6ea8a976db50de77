"""Free-text predicate: one search string matched across several user fields."""

from typing import Optional

from userservice.models.constants import SEARCH_TEXT_FIELDS
from userservice.models.filter_criteria import FilterCriteria
from userservice.search.predicates import Always, Or, Predicate, SubstringMatch


def build_search_text_predicate(criteria: Optional[FilterCriteria]) -> Predicate:
    """OR of substring matches of the trimmed search text over name, email and phone.

    Returns Always() when the search text is missing or blank.
    """
    if criteria is None or not criteria.has_search_text():
        return Always()

    search_text = criteria.search_text.strip()
    return Or(tuple(SubstringMatch(field, search_text) for field in SEARCH_TEXT_FIELDS))
