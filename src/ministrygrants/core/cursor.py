"""Opaque pagination cursors.

A cursor is the standard base64 encoding of ``"<namespace>:<id>"``. The
namespace keeps a cursor minted for one entity type from being replayed
against another listing. Cursors carry no ordering of their own; listings
that accept them always order by ascending id.
"""

import base64
import binascii
import re

from .exceptions import InvalidCursorError
from ..models.database import MAX_ENTITY_ID

MINISTRY_NAMESPACE = "ministry"

_ID_PATTERN = re.compile(r"[0-9]+")


def encode_cursor(entity_id: int, namespace: str = MINISTRY_NAMESPACE) -> str:
    """Encode an entity id as an opaque cursor."""
    if isinstance(entity_id, bool) or not isinstance(entity_id, int) or entity_id < 0:
        raise ValueError(f"Cursor ids must be non-negative integers, got {entity_id!r}")
    return base64.b64encode(f"{namespace}:{entity_id}".encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str, namespace: str = MINISTRY_NAMESPACE) -> int:
    """Decode a cursor produced by :func:`encode_cursor` for ``namespace``."""
    if not isinstance(cursor, str) or not cursor:
        raise InvalidCursorError(str(cursor), "cursor is empty")
    try:
        payload = base64.b64decode(cursor.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        raise InvalidCursorError(cursor, "not valid base64") from None

    prefix = f"{namespace}:"
    if not payload.startswith(prefix):
        raise InvalidCursorError(cursor, f"expected a {namespace} cursor")

    raw_id = payload[len(prefix):]
    if not _ID_PATTERN.fullmatch(raw_id):
        raise InvalidCursorError(cursor, "cursor does not contain an integer id")
    entity_id = int(raw_id)
    if entity_id > MAX_ENTITY_ID:
        raise InvalidCursorError(cursor, "cursor id is out of range")
    return entity_id
