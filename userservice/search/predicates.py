"""Composable boolean predicates over user records.

Predicates form a small tagged tree (Always, Equals, SubstringMatch, And, Or).
The tree is pure data: `userservice.search.sql` compiles it to a SQLAlchemy
WHERE clause, and `Predicate.matches()` evaluates it against in-memory records.

Substring matching follows SQL LIKE semantics with `\\` as the escape
character. User input is escaped before it is wrapped in `%...%`, so literal
`%`, `_` and quoting/comment sequences never change what a pattern matches.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple

LIKE_ESCAPE_CHAR = "\\"
LIKE_WILDCARD_ANY = "%"
LIKE_WILDCARD_ONE = "_"

# Escaped after the escape character and the wildcards, in this order.
RESERVED_SEQUENCES = ("'", '"', ";", "--", "/*", "*/", "[", "]", "^")


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters and reserved sequences in `value`.

    The escape character itself goes first so later escapes are not doubled.
    """
    if value is None:
        return ""
    escaped = value.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
    escaped = escaped.replace(LIKE_WILDCARD_ANY, LIKE_ESCAPE_CHAR + LIKE_WILDCARD_ANY)
    escaped = escaped.replace(LIKE_WILDCARD_ONE, LIKE_ESCAPE_CHAR + LIKE_WILDCARD_ONE)
    for sequence in RESERVED_SEQUENCES:
        escaped = escaped.replace(sequence, LIKE_ESCAPE_CHAR + sequence)
    return escaped


def like_pattern(value: str) -> str:
    """Build the case-insensitive "contains" pattern for `value`."""
    return f"{LIKE_WILDCARD_ANY}{escape_like((value or '').lower())}{LIKE_WILDCARD_ANY}"


def like_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a LIKE pattern (with `\\` escapes) into a compiled regex."""
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == LIKE_ESCAPE_CHAR and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == LIKE_WILDCARD_ANY:
            parts.append(".*")
        elif char == LIKE_WILDCARD_ONE:
            parts.append(".")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def _field_value(record: Any, field: str) -> Any:
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


class Predicate:
    """Base class for predicate nodes."""

    def matches(self, record: Any) -> bool:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    def and_(self, other: "Predicate") -> "Predicate":
        """Conjunction that drops `Always` operands."""
        if isinstance(other, Always):
            return self
        if isinstance(self, Always):
            return other
        return And((self, other))


@dataclass(frozen=True)
class Always(Predicate):
    """Universal predicate: matches every record."""

    def matches(self, record: Any) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"op": "always"}


@dataclass(frozen=True)
class Equals(Predicate):
    """`field == value`."""

    field: str
    value: Any

    def matches(self, record: Any) -> bool:
        return _field_value(record, self.field) == self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"op": "equals", "field": self.field, "value": self.value}


@dataclass(frozen=True)
class SubstringMatch(Predicate):
    """Case-insensitive "field contains value", with LIKE escaping.

    `cast_to_text` marks non-text columns (e.g. the numeric id) that must be
    converted to text before matching.
    """

    field: str
    value: str
    cast_to_text: bool = False

    @property
    def pattern(self) -> str:
        return like_pattern(self.value)

    def matches(self, record: Any) -> bool:
        field_value = _field_value(record, self.field)
        if field_value is None:
            return False
        return like_to_regex(self.pattern).fullmatch(str(field_value).lower()) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": "substring",
            "field": self.field,
            "value": self.value,
            "cast_to_text": self.cast_to_text,
        }


@dataclass(frozen=True)
class And(Predicate):
    """All operands hold. An empty conjunction is true."""

    operands: Tuple[Predicate, ...]

    def matches(self, record: Any) -> bool:
        return all(operand.matches(record) for operand in self.operands)

    def to_dict(self) -> Dict[str, Any]:
        return {"op": "and", "operands": [operand.to_dict() for operand in self.operands]}


@dataclass(frozen=True)
class Or(Predicate):
    """At least one operand holds. An empty disjunction is false."""

    operands: Tuple[Predicate, ...]

    def matches(self, record: Any) -> bool:
        return any(operand.matches(record) for operand in self.operands)

    def to_dict(self) -> Dict[str, Any]:
        return {"op": "or", "operands": [operand.to_dict() for operand in self.operands]}
