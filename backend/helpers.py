# helpers.py
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

def _now() -> datetime:
    # Mongo keeps millisecond precision; truncate so stored == returned
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)

def _oid(value) -> Optional[ObjectId]:
    """Parse a path/identity value into an ObjectId, or None if it isn't one."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
