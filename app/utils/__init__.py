from datetime import datetime, timezone
from typing import Optional

# Keys this short would be shown whole by a prefix mask
_MIN_PREFIX_MASK_LENGTH = 5


def mask_credential(token: Optional[str]) -> Optional[str]:
    """Shorten a key for logs: ``abcd****``, or just ``****`` for very short keys."""
    if not token:
        return token
    if len(token) < _MIN_PREFIX_MASK_LENGTH:
        return "****"
    return f"{token[:4]}****"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
