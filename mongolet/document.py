"""
Document value model, validation and insertion.

A field value is one of:
  - a scalar: int, float, str, bool or None
  - a list of scalars
  - a flat dict whose values are scalars or lists of scalars
"""

from __future__ import annotations

import copy
import logging
import secrets

from .errors import DocumentValidationError

logger = logging.getLogger(__name__)

Scalar = str | int | float | bool | None
Value = Scalar | list[Scalar] | dict[str, object]
Document = dict[str, Value]
DocMap = dict[str, Document]

ID_FIELD = "_id"
OPERATOR_PREFIX = "$"
ID_LENGTH = 16
# token_urlsafe(12) yields exactly 16 characters (96 random bits).
_ID_BYTES = 12


def is_scalar(value: object) -> bool:
    return value is None or isinstance(value, (str, bool, int, float))


def is_number(value: object) -> bool:
    """True for int and float, False for bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_value(value: object, nested: bool = False) -> bool:
    """
    Check that ``value`` fits the value model.

    Dicts are allowed one level deep only: a dict nested inside another dict
    is rejected.
    """
    if is_scalar(value):
        return True
    if isinstance(value, list):
        return all(is_scalar(item) for item in value)
    if isinstance(value, dict) and not nested:
        return all(
            isinstance(key, str) and is_value(item, nested=True)
            for key, item in value.items()
        )
    return False


def type_tag(value: object) -> str:
    """Runtime type tag used by the ``$type`` query operator."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def strict_equal(a: object, b: object) -> bool:
    """
    Equality that never crosses type tags.

    ``1 == True`` and ``0 == False`` hold in Python but not here; ``1 == 1.0``
    still holds because both are numbers.
    """
    return type_tag(a) == type_tag(b) and a == b


def clone(value: Value) -> Value:
    return copy.deepcopy(value)


def is_field_name(name: object) -> bool:
    return isinstance(name, str) and bool(name) and not name.startswith(OPERATOR_PREFIX)


def validate_document(doc: object) -> Document:
    """
    Raise DocumentValidationError unless ``doc`` is a dict of legal fields.
    """
    if not isinstance(doc, dict):
        raise DocumentValidationError(
            f"document must be a dict, got {type(doc).__name__}"
        )

    for key, value in doc.items():
        if not isinstance(key, str):
            raise DocumentValidationError("document keys must be strings")
        if not is_field_name(key):
            raise DocumentValidationError(f"invalid field name: {key!r}")
        if key == ID_FIELD:
            continue
        if not is_value(value):
            raise DocumentValidationError(f"field {key!r} holds an unsupported value")

    return doc


def make_id(docs: DocMap) -> str:
    """
    Generate a random URL-safe id not yet used in ``docs``.
    """
    while True:
        doc_id = secrets.token_urlsafe(_ID_BYTES)
        if doc_id not in docs:
            return doc_id


def insert_document(docs: DocMap, doc: object) -> str | None:
    """
    Store a deep copy of ``doc`` in ``docs`` and return its id.

    A non-empty string ``_id`` is kept as is and must be unique; any other
    ``_id`` is replaced with a generated one. Returns None when the document
    is rejected.
    """
    try:
        validate_document(doc)
    except DocumentValidationError as exc:
        logger.warning("insert rejected: %s", exc)
        return None

    supplied = doc.get(ID_FIELD)
    if isinstance(supplied, str) and supplied:
        if supplied in docs:
            logger.warning("insert rejected: the _id is not unique: %r", supplied)
            return None
        docs[supplied] = clone(doc)
        return supplied

    doc_id = make_id(docs)
    stored = clone(doc)
    stored[ID_FIELD] = doc_id
    docs[doc_id] = stored
    return doc_id
