"""Compile predicate trees into SQLAlchemy WHERE clauses."""

from sqlalchemy import String, and_, cast, false, func, or_, true
from sqlalchemy.sql.elements import ColumnElement

from userservice.search.predicates import (
    LIKE_ESCAPE_CHAR,
    Always,
    And,
    Equals,
    Or,
    Predicate,
    SubstringMatch,
)


def to_sqlalchemy(predicate: Predicate, model) -> ColumnElement:
    """Translate `predicate` into a boolean clause over the columns of `model`.

    Args:
        predicate: Predicate tree to compile
        model: Declarative model class whose attributes are named after predicate fields

    Returns:
        SQLAlchemy boolean expression usable in `Query.filter()`
    """
    if isinstance(predicate, Always):
        return true()

    if isinstance(predicate, Equals):
        return _column(model, predicate.field) == predicate.value

    if isinstance(predicate, SubstringMatch):
        column = _column(model, predicate.field)
        if predicate.cast_to_text:
            column = cast(column, String)
        return func.lower(column).like(predicate.pattern, escape=LIKE_ESCAPE_CHAR)

    if isinstance(predicate, And):
        if not predicate.operands:
            return true()
        return and_(*[to_sqlalchemy(operand, model) for operand in predicate.operands])

    if isinstance(predicate, Or):
        if not predicate.operands:
            return false()
        return or_(*[to_sqlalchemy(operand, model) for operand in predicate.operands])

    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def _column(model, field: str):
    column = getattr(model, field, None)
    if column is None:
        raise ValueError(f"{model.__name__} has no attribute '{field}'")
    return column
