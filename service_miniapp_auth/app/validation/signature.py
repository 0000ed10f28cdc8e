"""
HMAC-SHA256 signing and verification of init-data.
"""

import hashlib
import hmac
from typing import Mapping
from urllib.parse import urlencode

from .canonical import build_data_check_string
from .decoder import SIGNATURE_FIELD
from .result import InitDataRejected, RejectionKind

WEB_APP_KEY = b"WebAppData"


def derive_signing_key(bot_token: str) -> bytes:
    """Per-bot key: HMAC-SHA256 of the bot token keyed with ``WebAppData``."""
    return hmac.new(
        key=WEB_APP_KEY,
        msg=bot_token.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).digest()


def compute_signature(data_check_string: str, bot_token: str) -> str:
    """Hex digest the platform would put in the ``hash`` field."""
    return hmac.new(
        key=derive_signing_key(bot_token),
        msg=data_check_string.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()


def verify_signature(data_check_string: str, received: str, bot_token: str) -> None:
    """Raise ``InitDataRejected(SignatureInvalid)`` unless ``received`` matches.

    Every mismatch cause (wrong token, tampered field, bad canonicalization)
    produces the same rejection.
    """
    expected = compute_signature(data_check_string, bot_token)
    if not hmac.compare_digest(expected.encode("ascii"), received.encode("utf-8")):
        raise InitDataRejected(
            RejectionKind.SIGNATURE_INVALID,
            "Invalid hash - init-data verification failed",
        )


def sign_fields(fields: Mapping[str, str], bot_token: str) -> str:
    """Signature for a set of init-data fields."""
    return compute_signature(build_data_check_string(fields), bot_token)


def build_init_data(fields: Mapping[str, str], bot_token: str) -> str:
    """Encode ``fields`` as a signed init-data query string.

    Field order is preserved; ``hash`` goes last, like the platform sends it.
    """
    unsigned = {key: value for key, value in fields.items() if key != SIGNATURE_FIELD}
    pairs = list(unsigned.items())
    pairs.append((SIGNATURE_FIELD, sign_fields(unsigned, bot_token)))
    return urlencode(pairs)
