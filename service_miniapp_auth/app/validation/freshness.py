"""
auth_date checks.
"""

import re
from typing import Mapping, Optional

from .result import InitDataRejected, RejectionKind

AUTH_DATE_FIELD = "auth_date"
DEFAULT_MAX_AGE = 86400

_DIGITS = re.compile(r"[0-9]+")


def parse_auth_date(fields: Mapping[str, str]) -> int:
    """Unix seconds from ``auth_date``; base-10 ASCII digits only."""
    raw = fields.get(AUTH_DATE_FIELD)
    if raw is None or not _DIGITS.fullmatch(raw):
        raise InitDataRejected(
            RejectionKind.MALFORMED_TIMESTAMP,
            "auth_date is missing or is not a unix timestamp",
        )
    return int(raw)


def check_freshness(auth_date: int, now: int, max_age: int, max_future_skew: Optional[int] = None) -> None:
    """Reject payloads older than ``max_age`` seconds (the bound itself is accepted).

    Future-dated payloads pass unless ``max_future_skew`` is given.
    """
    if max_age < 0:
        raise ValueError("max_age must be non-negative")

    if now - auth_date > max_age:
        raise InitDataRejected(
            RejectionKind.PAYLOAD_EXPIRED,
            f"Init-data is too old (max age: {max_age} seconds)",
        )

    if max_future_skew is not None and auth_date - now > max_future_skew:
        raise InitDataRejected(
            RejectionKind.AUTH_DATE_IN_FUTURE,
            f"auth_date is more than {max_future_skew} seconds in the future",
        )
