"""
Claim models carried by a verified launch payload.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, StrictStr


class UserClaim(BaseModel):
    """The ``user`` object of init-data.

    Only ``id`` and ``first_name`` are mandatory. Fields the platform adds
    later (``allows_write_to_pm``, ``photo_url``, ...) are kept as extras.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: StrictInt
    first_name: StrictStr
    last_name: Optional[StrictStr] = None
    username: Optional[StrictStr] = None
    language_code: Optional[StrictStr] = None
    is_premium: Optional[StrictBool] = None

    @property
    def full_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    def as_claims(self) -> Dict[str, Any]:
        """The claims exactly as the platform sent them."""
        return self.model_dump(exclude_unset=True)


class VerifiedPayload(BaseModel):
    """Init-data that passed every check. Built only by the verification pipeline."""

    model_config = ConfigDict(frozen=True)

    query_id: str
    user: UserClaim
    auth_date: int
    signature: str
    raw: str
