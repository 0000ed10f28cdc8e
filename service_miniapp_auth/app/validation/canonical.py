"""
Data-check string construction.

https://core.telegram.org/bots/webapps#validating-data-received-via-the-mini-app
"""

from typing import Mapping

from .decoder import SIGNATURE_FIELD


def build_data_check_string(fields: Mapping[str, str]) -> str:
    """Render ``key=value`` lines sorted by key and joined with ``\\n``.

    Sorting is by code point, which matches UTF-8 byte order; locale
    collation would break signatures for non-ASCII keys.
    """
    lines = [
        f"{key}={value}"
        for key, value in sorted(fields.items(), key=lambda item: item[0])
        if key != SIGNATURE_FIELD
    ]
    return "\n".join(lines)
