"""
Init-data validation package.

Verifies the launch payload a Telegram Mini App receives from the client
(``Telegram.WebApp.initData``):

- Decoding the query string and the nested ``user`` JSON claim.
- Rebuilding the data-check string and checking its HMAC-SHA256 signature.
- Enforcing the ``auth_date`` freshness bound.
- Assembling the verified claims.

Everything here is pure: no I/O, no shared state, safe to call from any
number of threads or tasks at once.
"""

from .models import UserClaim, VerifiedPayload
from .result import InitDataRejected, Rejected, RejectionKind, VerificationResult, Verified
from .signature import build_init_data, sign_fields
from .verifier import InitDataVerifier, verify_init_data

__all__ = [
    "InitDataRejected",
    "InitDataVerifier",
    "Rejected",
    "RejectionKind",
    "UserClaim",
    "VerificationResult",
    "Verified",
    "VerifiedPayload",
    "build_init_data",
    "sign_fields",
    "verify_init_data",
]
