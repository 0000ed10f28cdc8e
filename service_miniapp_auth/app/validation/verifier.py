"""
Init-data verification pipeline.

decode -> canonicalize -> check signature -> check freshness -> assemble.
Each stage either hands its result to the next or raises
``InitDataRejected``; ``verify_init_data`` turns that into a ``Rejected``
value so callers branch on ``kind`` instead of catching exceptions.
"""

import re
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from shared.errors import ValidationError
from shared.logging import get_logger

from .canonical import build_data_check_string
from .claims import assemble_payload
from .decoder import decode_init_data
from .freshness import DEFAULT_MAX_AGE, check_freshness, parse_auth_date
from .models import VerifiedPayload
from .result import InitDataRejected, Rejected, RejectionKind, VerificationResult, Verified
from .signature import verify_signature

logger = get_logger("miniapp_auth.verifier")

BOT_TOKEN_PATTERN = re.compile(r"[0-9]+:[A-Za-z0-9_-]+")


def _check_inputs(init_data: Optional[str], bot_token: Optional[str], strict_secret: bool) -> None:
    if not bot_token:
        raise InitDataRejected(RejectionKind.MISSING_SECRET, "Bot token is required")
    if strict_secret and not BOT_TOKEN_PATTERN.fullmatch(bot_token):
        raise InitDataRejected(RejectionKind.MISSING_SECRET, "Bot token must look like '<bot id>:<token>'")
    if not init_data:
        raise InitDataRejected(RejectionKind.MISSING_PAYLOAD, "Init data is required")


def _run_pipeline(
    init_data: Optional[str],
    bot_token: Optional[str],
    max_age: int,
    now: int,
    max_future_skew: Optional[int],
    strict_secret: bool,
) -> VerifiedPayload:
    _check_inputs(init_data, bot_token, strict_secret)

    decoded = decode_init_data(init_data)
    data_check_string = build_data_check_string(decoded.fields)
    verify_signature(data_check_string, decoded.signature, bot_token)

    auth_date = parse_auth_date(decoded.fields)
    check_freshness(auth_date, now, max_age, max_future_skew)

    return assemble_payload(decoded, auth_date)


def verify_init_data(
    init_data: Optional[str],
    bot_token: Optional[str],
    max_age: int = DEFAULT_MAX_AGE,
    *,
    now: Optional[int] = None,
    max_future_skew: Optional[int] = None,
    strict_secret: bool = False,
) -> VerificationResult:
    """Verify a Telegram Mini App launch payload.

    Args:
        init_data: Raw ``Telegram.WebApp.initData`` query string.
        bot_token: Token of the bot the mini app belongs to.
        max_age: Oldest acceptable ``auth_date``, in seconds before ``now``.
        now: Current unix time; sampled once from the clock when omitted.
        max_future_skew: When set, reject ``auth_date`` more than this many
            seconds ahead of ``now``.
        strict_secret: Require the ``<bot id>:<token>`` shape for ``bot_token``.

    Returns:
        ``Verified`` carrying the payload, or ``Rejected`` with the reason.

    Raises:
        ValueError: if ``max_age`` is negative.
    """
    if max_age < 0:
        raise ValueError("max_age must be non-negative")
    if now is None:
        now = int(time.time())

    try:
        payload = _run_pipeline(init_data, bot_token, max_age, now, max_future_skew, strict_secret)
    except InitDataRejected as e:
        logger.warning("Init-data rejected", kind=e.kind.value, reason=e.message)
        return Rejected.from_exception(e)

    logger.info("Init-data verified", user_id=payload.user.id, auth_date=payload.auth_date)
    return Verified(payload=payload)


class InitDataVerifier:
    """Stateless verifier bound to one bot's settings.

    Adds the output shape used by the HTTP layer and per-item batch handling
    on top of :func:`verify_init_data`.
    """

    def __init__(
        self,
        bot_token: Optional[str],
        max_age: int = DEFAULT_MAX_AGE,
        include_raw_data: bool = False,
        include_hash: bool = False,
        max_future_skew: Optional[int] = None,
        strict_secret: bool = False,
    ):
        if max_age < 0:
            raise ValidationError("max_age must be non-negative", details={"max_age": max_age})
        self._bot_token = bot_token
        self.max_age = max_age
        self.include_raw_data = include_raw_data
        self.include_hash = include_hash
        self.max_future_skew = max_future_skew
        self.strict_secret = strict_secret

    def __repr__(self) -> str:
        return f"InitDataVerifier(max_age={self.max_age}, max_future_skew={self.max_future_skew})"

    def verify(self, init_data: Optional[str], max_age: Optional[int] = None,
               now: Optional[int] = None) -> VerificationResult:
        """Verify one payload with this verifier's settings."""
        return verify_init_data(
            init_data,
            self._bot_token,
            self.max_age if max_age is None else max_age,
            now=now,
            max_future_skew=self.max_future_skew,
            strict_secret=self.strict_secret,
        )

    def to_output(self, payload: VerifiedPayload, include_raw_data: Optional[bool] = None,
                  include_hash: Optional[bool] = None) -> Dict[str, Any]:
        """Shape a verified payload for downstream consumers."""
        if include_raw_data is None:
            include_raw_data = self.include_raw_data
        if include_hash is None:
            include_hash = self.include_hash

        output: Dict[str, Any] = {
            "verified": True,
            "query_id": payload.query_id,
            "user": payload.user.as_claims(),
            "auth_date": payload.auth_date,
        }
        if include_raw_data:
            output["raw_data"] = payload.raw
        if include_hash:
            output["hash"] = payload.signature

        output["user_id"] = payload.user.id
        output["user_name"] = payload.user.full_name
        output["is_authenticated"] = True
        return output

    @staticmethod
    def failure_output(rejected: Rejected) -> Dict[str, Any]:
        """Soft-failure record for a rejected payload."""
        output: Dict[str, Any] = {
            "verified": False,
            "error": rejected.message,
            "code": rejected.code,
            "is_authenticated": False,
        }
        if rejected.item_index is not None:
            output["item_index"] = rejected.item_index
        return output

    def verify_one(self, init_data: Optional[str], max_age: Optional[int] = None,
                   include_raw_data: Optional[bool] = None,
                   include_hash: Optional[bool] = None) -> Dict[str, Any]:
        """Verify and shape one payload; raises ``InitDataRejected`` on failure."""
        result = self.verify(init_data, max_age=max_age)
        return self.to_output(result.unwrap(), include_raw_data, include_hash)

    def verify_many(self, items: Iterable[Optional[str]], max_age: Optional[int] = None,
                    include_raw_data: Optional[bool] = None, include_hash: Optional[bool] = None,
                    continue_on_fail: bool = False,
                    on_outcome: Optional[Callable[[str], None]] = None) -> List[Dict[str, Any]]:
        """Verify each payload independently.

        With ``continue_on_fail`` every item yields an output record and
        failures are flagged ``verified: False``. Otherwise the first
        rejection is raised, tagged with its ``item_index``.

        ``on_outcome`` is called once per item checked, before any raise,
        with ``"verified"`` or the rejection code.
        """
        outputs: List[Dict[str, Any]] = []
        for index, init_data in enumerate(items):
            result = self.verify(init_data, max_age=max_age)
            if on_outcome is not None:
                on_outcome("verified" if result.valid else result.code)
            if isinstance(result, Verified):
                outputs.append(self.to_output(result.payload, include_raw_data, include_hash))
                continue

            rejected = result.model_copy(update={"item_index": index})
            if not continue_on_fail:
                raise rejected.to_exception()
            outputs.append(self.failure_output(rejected))

        return outputs
