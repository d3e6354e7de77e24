"""
Projection: an inclusion or exclusion mask applied to a document copy.
"""

from __future__ import annotations

import logging

from .document import Document, clone
from .errors import ProjectionError

logger = logging.getLogger(__name__)

Projection = dict[str, int | bool]


def _validate_projection(projection: object) -> Projection:
    if not isinstance(projection, dict):
        raise ProjectionError(
            f"the projection is not a dict, got {type(projection).__name__}"
        )
    for key, flag in projection.items():
        if not isinstance(key, str):
            raise ProjectionError(f"projection keys must be strings, got {key!r}")
        if not isinstance(flag, (bool, int)) or flag not in (0, 1):
            raise ProjectionError(f"projection value for {key!r} must be 1 or 0, got {flag!r}")
    return projection


def project(doc: Document, projection: object) -> Document | None:
    """
    Return a deep copy of ``doc`` reduced by ``projection``, or None.

    ``{}`` keeps every field. All-truthy values keep only the named fields,
    in the order they are named. All-falsy values drop the named fields.
    ``_id`` has no special treatment: name it to include or exclude it.
    """
    try:
        _validate_projection(projection)
    except ProjectionError as exc:
        logger.warning("projection rejected: %s", exc)
        return None

    if not projection:
        return clone(doc)

    included = sum(1 for flag in projection.values() if flag)
    if included and included != len(projection):
        logger.warning("projection rejected: mixed projection values: %r", projection)
        return None

    if included:
        return {key: clone(doc[key]) for key in projection if key in doc}

    return {key: clone(value) for key, value in doc.items() if key not in projection}
