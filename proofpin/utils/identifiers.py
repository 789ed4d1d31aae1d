"""Identifier format checks.

Primary keys are UUIDs; PostgreSQL rejects malformed UUID literals with a
DataError, so services check ids before they reach a query.
"""

import re

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_uuid(value: object) -> bool:
    return isinstance(value, str) and bool(_UUID_PATTERN.match(value))
