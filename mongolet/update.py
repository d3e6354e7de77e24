"""
Update operators applied to a single document in place.

Each operator takes a mapping of field -> operand. Failures are local to one
field: the field is left untouched, a warning is logged, and the remaining
fields and operators still run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from .document import (
    ID_FIELD,
    Document,
    clone,
    is_field_name,
    is_number,
    is_scalar,
    is_value,
)
from .errors import UpdateError

logger = logging.getLogger(__name__)

Update = dict[str, object]


class UpdateOperator(StrEnum):
    INC = "$inc"
    PUSH = "$push"
    RENAME = "$rename"
    SET = "$set"
    UNSET = "$unset"


def _check_target(operator: UpdateOperator, field: object) -> None:
    if field == ID_FIELD:
        raise UpdateError(f"cannot {operator} {ID_FIELD}")
    if not is_field_name(field):
        raise UpdateError(f"cannot {operator} invalid field name: {field!r}")


def _inc(doc: Document, field: str, delta: object) -> bool:
    _check_target(UpdateOperator.INC, field)
    if not is_number(delta):
        raise UpdateError(f"cannot $inc with a non-numeric delta: {delta!r}")

    if field not in doc:
        doc[field] = delta
        return True

    current = doc[field]
    if not is_number(current):
        raise UpdateError(f"cannot $inc field {field!r} of type {type(current).__name__}")
    doc[field] = current + delta
    return True


def _push(doc: Document, field: str, value: object) -> bool:
    _check_target(UpdateOperator.PUSH, field)
    if not is_scalar(value):
        raise UpdateError(f"cannot $push a non-scalar value to {field!r}")

    if field not in doc:
        doc[field] = [clone(value)]
        return True

    current = doc[field]
    if not isinstance(current, list):
        raise UpdateError(f"cannot $push to field {field!r} of type {type(current).__name__}")
    current.append(clone(value))
    return True


def _rename(doc: Document, field: str, new_name: object) -> bool:
    _check_target(UpdateOperator.RENAME, field)
    if not isinstance(new_name, str):
        raise UpdateError(f"cannot $rename to a non-string name: {new_name!r}")
    if new_name == ID_FIELD:
        raise UpdateError(f"cannot $rename to {ID_FIELD}")
    if not is_field_name(new_name):
        raise UpdateError(f"cannot $rename to an invalid name: {new_name!r}")
    if new_name in doc:
        raise UpdateError(f"cannot $rename to an existing name: {new_name!r}")
    if field not in doc:
        raise UpdateError(f"cannot $rename non-existing field: {field!r}")

    doc[new_name] = clone(doc[field])
    del doc[field]
    return True


def _set(doc: Document, field: str, value: object) -> bool:
    _check_target(UpdateOperator.SET, field)
    if not is_value(value):
        raise UpdateError(f"cannot $set field {field!r} to an unsupported value")

    doc[field] = clone(value)
    return True


def _unset(doc: Document, field: str, flag: object) -> bool:
    _check_target(UpdateOperator.UNSET, field)
    if flag and field in doc:
        del doc[field]
        return True
    return False


HANDLERS: dict[UpdateOperator, Callable[[Document, str, object], bool]] = {
    UpdateOperator.INC: _inc,
    UpdateOperator.PUSH: _push,
    UpdateOperator.RENAME: _rename,
    UpdateOperator.SET: _set,
    UpdateOperator.UNSET: _unset,
}


def apply_update(doc: Document, update: object) -> int:
    """
    Apply every operator in ``update`` to ``doc``.

    Returns 1 if any field changed and 0 otherwise. This is a flag, not a
    field counter: setting ten fields still returns 1.
    """
    if not isinstance(update, dict):
        logger.warning("update rejected: the update is not a dict, got %s", type(update).__name__)
        return 0

    if not update:
        logger.warning("update rejected: the update has no operators")
        return 0

    changed = False
    recognized = 0

    for op_key, operand in update.items():
        try:
            operator = UpdateOperator(op_key)
        except ValueError:
            logger.warning("unknown update operator skipped: %r", op_key)
            continue

        recognized += 1
        if not isinstance(operand, dict):
            logger.warning("%s operand is not a dict, got %s", operator, type(operand).__name__)
            continue

        handler = HANDLERS[operator]
        for field, arg in operand.items():
            try:
                if handler(doc, field, arg):
                    changed = True
            except UpdateError as exc:
                logger.warning("update skipped: %s", exc)

    if not recognized:
        logger.warning("update rejected: no recognized operators in %r", list(update))

    return 1 if changed else 0
