"""
Query matching: decide which documents of a collection satisfy a query.

A query is a dict whose keys are either field names or group operators:

  {"name": "foo"}                              literal equality
  {"age": {"$gte": 18, "$lt": 65}}             operator set (all must hold)
  {"$or": [{"name": "foo"}, {"age": 3}]}       group
  {"_id": "abc", "$not": {"done": true}}       groups and fields mixed (AND)

Queries are validated in full before any document is scanned. An invalid
query matches nothing; the reason is logged.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .document import (
    ID_FIELD,
    OPERATOR_PREFIX,
    DocMap,
    Document,
    Value,
    is_number,
    is_scalar,
    strict_equal,
    type_tag,
)
from .errors import QueryError

logger = logging.getLogger(__name__)

Query = dict[str, object]

TYPE_TAGS = frozenset({"number", "string", "boolean", "null", "array", "object"})


class QueryOperator(StrEnum):
    EXISTS = "$exists"
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    INCLUDES = "$includes"
    LIKE = "$like"
    TYPE = "$type"


class GroupOperator(StrEnum):
    AND = "$and"
    OR = "$or"
    NOT = "$not"


@dataclass(frozen=True, slots=True)
class OperatorVariant:
    """
    One field operator: what operand it accepts and how it tests a value.
    """

    operator: QueryOperator
    expected: str
    accepts: Callable[[object], bool]
    evaluate: Callable[[Value, object], bool]


# --- operand checks -------------------------------------------------------


def _is_exists_flag(operand: object) -> bool:
    if isinstance(operand, bool):
        return True
    return isinstance(operand, int) and operand in (0, 1)


def _is_orderable(operand: object) -> bool:
    return is_number(operand) or isinstance(operand, str)


def _is_scalar_list(operand: object) -> bool:
    return isinstance(operand, list) and all(is_scalar(item) for item in operand)


def _is_pattern(operand: object) -> bool:
    if not isinstance(operand, str):
        return False
    try:
        re.compile(operand)
    except re.error:
        return False
    return True


def _is_type_tag(operand: object) -> bool:
    return isinstance(operand, str) and operand in TYPE_TAGS


# --- evaluators -----------------------------------------------------------


def _same_order_kind(value: Value, operand: object) -> bool:
    return (is_number(value) and is_number(operand)) or (
        isinstance(value, str) and isinstance(operand, str)
    )


def _gt(value: Value, operand: object) -> bool:
    return _same_order_kind(value, operand) and value > operand


def _gte(value: Value, operand: object) -> bool:
    return _same_order_kind(value, operand) and value >= operand


def _lt(value: Value, operand: object) -> bool:
    return _same_order_kind(value, operand) and value < operand


def _lte(value: Value, operand: object) -> bool:
    return _same_order_kind(value, operand) and value <= operand


def _in(value: Value, operand: object) -> bool:
    return any(strict_equal(value, item) for item in operand)


def _includes(value: Value, operand: object) -> bool:
    if isinstance(value, str):
        return isinstance(operand, str) and operand in value
    if isinstance(value, list):
        return any(strict_equal(item, operand) for item in value)
    return False


def _like(value: Value, operand: object) -> bool:
    if not isinstance(value, str):
        return False
    return re.search(operand, value, re.IGNORECASE) is not None


VARIANTS: dict[QueryOperator, OperatorVariant] = {
    variant.operator: variant
    for variant in (
        OperatorVariant(
            QueryOperator.EXISTS,
            "true, false, 1 or 0",
            _is_exists_flag,
            # Only reached for present fields; absence is handled by the clause.
            lambda value, operand: bool(operand),
        ),
        OperatorVariant(QueryOperator.EQ, "a scalar", is_scalar, strict_equal),
        OperatorVariant(
            QueryOperator.NE,
            "a scalar",
            is_scalar,
            lambda value, operand: not strict_equal(value, operand),
        ),
        OperatorVariant(QueryOperator.GT, "a number or a string", _is_orderable, _gt),
        OperatorVariant(QueryOperator.GTE, "a number or a string", _is_orderable, _gte),
        OperatorVariant(QueryOperator.LT, "a number or a string", _is_orderable, _lt),
        OperatorVariant(QueryOperator.LTE, "a number or a string", _is_orderable, _lte),
        OperatorVariant(QueryOperator.IN, "a list of scalars", _is_scalar_list, _in),
        OperatorVariant(
            QueryOperator.NIN,
            "a list of scalars",
            _is_scalar_list,
            lambda value, operand: not _in(value, operand),
        ),
        OperatorVariant(QueryOperator.INCLUDES, "a scalar", is_scalar, _includes),
        OperatorVariant(QueryOperator.LIKE, "a regular expression string", _is_pattern, _like),
        OperatorVariant(
            QueryOperator.TYPE,
            "one of " + ", ".join(sorted(TYPE_TAGS)),
            _is_type_tag,
            lambda value, operand: type_tag(value) == operand,
        ),
    )
}


# --- validation -----------------------------------------------------------


def validate_query(query: object) -> Query:
    """
    Walk the whole query and raise QueryError on the first malformed part.
    """
    if not isinstance(query, dict):
        raise QueryError(f"the query is not a dict, got {type(query).__name__}")

    for key, cond in query.items():
        if not isinstance(key, str):
            raise QueryError(f"query keys must be strings, got {key!r}")

        if key in (GroupOperator.AND, GroupOperator.OR):
            if not isinstance(cond, list):
                raise QueryError(f"{key} operand is not a list, got {type(cond).__name__}")
            for sub in cond:
                validate_query(sub)
        elif key == GroupOperator.NOT:
            validate_query(cond)
        elif key.startswith(OPERATOR_PREFIX):
            raise QueryError(f"unknown query operator: {key}")
        elif isinstance(cond, dict):
            _validate_operator_set(key, cond)
        elif not is_scalar(cond):
            raise QueryError(
                f"field {key!r} must be compared to a scalar or an operator set"
            )

    return query


def _validate_operator_set(field: str, op_set: dict[str, object]) -> None:
    for op_key, operand in op_set.items():
        try:
            operator = QueryOperator(op_key)
        except ValueError:
            raise QueryError(f"unknown query operator for field {field!r}: {op_key!r}") from None

        variant = VARIANTS[operator]
        if not variant.accepts(operand):
            raise QueryError(
                f"{op_key} operand for field {field!r} must be {variant.expected}, got {operand!r}"
            )


# --- evaluation -----------------------------------------------------------


def _only_not_exists(op_set: dict[str, object]) -> bool:
    key = QueryOperator.EXISTS.value
    if len(op_set) != 1 or key not in op_set:
        return False
    return not op_set[key]


def _match_field(doc: Document, field: str, cond: object) -> bool:
    if field not in doc:
        return isinstance(cond, dict) and _only_not_exists(cond)

    value = doc[field]
    if not isinstance(cond, dict):
        return strict_equal(value, cond)

    return all(
        VARIANTS[QueryOperator(op_key)].evaluate(value, operand)
        for op_key, operand in cond.items()
    )


def evaluate(doc: Document, query: Query) -> bool:
    """
    Test an already validated query against one document.
    """
    for key, cond in query.items():
        if key == GroupOperator.AND:
            ok = all(evaluate(doc, sub) for sub in cond)
        elif key == GroupOperator.OR:
            ok = any(evaluate(doc, sub) for sub in cond)
        elif key == GroupOperator.NOT:
            ok = not evaluate(doc, cond)
        else:
            ok = _match_field(doc, key, cond)

        if not ok:
            return False

    return True


def _is_valid(query: object) -> bool:
    try:
        validate_query(query)
    except QueryError as exc:
        logger.warning("query rejected: %s", exc)
        return False
    return True


def _id_shortcut(query: Query) -> str | None:
    if len(query) == 1 and isinstance(query.get(ID_FIELD), str):
        return query[ID_FIELD]
    return None


def matches(doc: Document, query: object) -> bool:
    """
    Return True when ``doc`` satisfies ``query``; False for invalid queries.
    """
    return _is_valid(query) and evaluate(doc, query)


def select(docs: DocMap, query: object) -> list[str]:
    """
    Return the ids of all matching documents in collection order.
    """
    if not _is_valid(query):
        return []

    if not query:
        return list(docs)

    doc_id = _id_shortcut(query)
    if doc_id is not None:
        return [doc_id] if doc_id in docs else []

    return [key for key, doc in docs.items() if evaluate(doc, query)]


def select_one(docs: DocMap, query: object) -> str | None:
    """
    Return the id of the first matching document, or None.
    """
    if not _is_valid(query):
        return None

    doc_id = _id_shortcut(query)
    if doc_id is not None:
        return doc_id if doc_id in docs else None

    return next((key for key, doc in docs.items() if evaluate(doc, query)), None)
