"""
Assembly of the verified payload from checked fields.
"""

from .decoder import DecodedInitData, decode_user
from .models import VerifiedPayload
from .result import InitDataRejected, RejectionKind

QUERY_ID_FIELD = "query_id"


def assemble_payload(decoded: DecodedInitData, auth_date: int) -> VerifiedPayload:
    """Build the :class:`VerifiedPayload` once signature and freshness are checked."""
    query_id = decoded.fields.get(QUERY_ID_FIELD)
    if not query_id:
        raise InitDataRejected(RejectionKind.MISSING_QUERY_ID, "Query ID is missing from init-data")

    return VerifiedPayload(
        query_id=query_id,
        user=decode_user(decoded.fields),
        auth_date=auth_date,
        signature=decoded.signature,
        raw=decoded.raw,
    )
