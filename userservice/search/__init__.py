"""Dynamic user search: predicate tree, builders and SQL translation."""

from userservice.search.predicates import (
    Always,
    And,
    Equals,
    Or,
    Predicate,
    SubstringMatch,
    escape_like,
    like_pattern,
)
from userservice.search.filter_predicate import build_filter_predicate
from userservice.search.search_text_predicate import build_search_text_predicate
from userservice.search.sql import to_sqlalchemy

__all__ = [
    "Always",
    "And",
    "Equals",
    "Or",
    "Predicate",
    "SubstringMatch",
    "escape_like",
    "like_pattern",
    "build_filter_predicate",
    "build_search_text_predicate",
    "to_sqlalchemy",
]
