"""
Init-data decoding: query string into fields, and the ``user`` JSON into a claim.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl

from pydantic import ValidationError

from .models import UserClaim
from .result import InitDataRejected, RejectionKind

SIGNATURE_FIELD = "hash"
USER_FIELD = "user"


@dataclass(frozen=True)
class DecodedInitData:
    """Fields of a payload with the signature split off."""

    fields: Dict[str, str]
    signature: str
    raw: str


def parse_pairs(init_data: str) -> List[Tuple[str, str]]:
    """Percent-decode ``init_data`` into ordered key/value pairs."""
    return parse_qsl(init_data, keep_blank_values=True, separator="&")


def collect_fields(pairs: List[Tuple[str, str]]) -> Dict[str, str]:
    """Build the field map; a repeated key rejects the whole payload.

    Telegram never signs a payload with repeated field names, so a repeat
    can only be an appended, unsigned value.
    """
    fields: Dict[str, str] = {}
    for key, value in pairs:
        if key in fields:
            raise InitDataRejected(
                RejectionKind.SIGNATURE_INVALID, "Invalid hash - init-data verification failed"
            )
        fields[key] = value
    return fields


def decode_init_data(init_data: str) -> DecodedInitData:
    """Split the raw payload into fields and the received signature.

    Raises ``InitDataRejected(MissingSignature)`` when there is no usable
    ``hash`` field.
    """
    fields = collect_fields(parse_pairs(init_data))
    signature: Optional[str] = fields.pop(SIGNATURE_FIELD, None)
    if not signature:
        raise InitDataRejected(RejectionKind.MISSING_SIGNATURE, "Hash is missing from init-data")

    return DecodedInitData(fields=fields, signature=signature, raw=init_data)


def decode_user(fields: Dict[str, str]) -> UserClaim:
    """Decode the ``user`` field into a :class:`UserClaim`."""
    user_json = fields.get(USER_FIELD)
    if not user_json:
        raise InitDataRejected(RejectionKind.MALFORMED_CLAIMS, "User data is missing from init-data")

    try:
        parsed = json.loads(user_json)
    except ValueError:
        raise InitDataRejected(RejectionKind.MALFORMED_CLAIMS, "Invalid user data format") from None

    if not isinstance(parsed, dict):
        raise InitDataRejected(RejectionKind.MALFORMED_CLAIMS, "User data must be a JSON object")

    try:
        return UserClaim.model_validate(parsed)
    except ValidationError as e:
        # Name the offending fields only; values may be attacker-controlled
        bad_fields = ", ".join(sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]}))
        raise InitDataRejected(
            RejectionKind.MALFORMED_CLAIMS,
            f"Invalid user data: {bad_fields or 'unexpected shape'}",
        ) from None
