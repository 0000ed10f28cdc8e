"""
Verification outcomes: the rejection taxonomy and the tagged result variants.
"""

from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from shared.errors import AuthenticationError

from .models import VerifiedPayload


class RejectionKind(str, Enum):
    """Why a launch payload was not accepted."""

    MISSING_SECRET = "MissingSecret"
    MISSING_PAYLOAD = "MissingPayload"
    MISSING_SIGNATURE = "MissingSignature"
    SIGNATURE_INVALID = "SignatureInvalid"
    MALFORMED_CLAIMS = "MalformedClaims"
    MISSING_QUERY_ID = "MissingQueryId"
    MALFORMED_TIMESTAMP = "MalformedTimestamp"
    PAYLOAD_EXPIRED = "PayloadExpired"
    AUTH_DATE_IN_FUTURE = "AuthDateInFuture"

    @property
    def code(self) -> str:
        """Machine-readable error code, e.g. ``SIGNATURE_INVALID``."""
        return self.name


class InitDataRejected(AuthenticationError):
    """Raised when a launch payload fails verification."""

    def __init__(self, kind: RejectionKind, message: str, item_index: Optional[int] = None):
        self.kind = kind
        self.item_index = item_index
        details: Dict[str, Any] = {"kind": kind.value}
        if item_index is not None:
            details["item_index"] = item_index
        super().__init__(message, details=details, code=kind.code)

    def at_index(self, item_index: int) -> "InitDataRejected":
        """Copy of this rejection tagged with a position in a batch."""
        return InitDataRejected(self.kind, self.message, item_index=item_index)


class Verified(BaseModel):
    """Successful verification."""

    model_config = ConfigDict(frozen=True)

    valid: Literal[True] = True
    payload: VerifiedPayload

    def unwrap(self) -> VerifiedPayload:
        return self.payload


class Rejected(BaseModel):
    """Failed verification with a stable kind and a human-readable message."""

    model_config = ConfigDict(frozen=True)

    valid: Literal[False] = False
    kind: RejectionKind
    message: str
    item_index: Optional[int] = None

    @property
    def code(self) -> str:
        return self.kind.code

    def unwrap(self) -> VerifiedPayload:
        """Raise the rejection as an exception."""
        raise self.to_exception()

    def to_exception(self) -> InitDataRejected:
        return InitDataRejected(self.kind, self.message, item_index=self.item_index)

    @classmethod
    def from_exception(cls, exc: InitDataRejected) -> "Rejected":
        return cls(kind=exc.kind, message=exc.message, item_index=exc.item_index)


VerificationResult = Union[Verified, Rejected]
