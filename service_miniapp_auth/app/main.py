"""
Mini App Auth service: verifies Telegram Mini App init-data over HTTP.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.logging import set_user_context
from .validation import InitDataRejected, InitDataVerifier

SERVICE_NAME = "miniapp_auth"
SERVICE_PORT = 8010


class InitDataVerificationRequest(BaseModel):
    """Request model for verifying one payload."""
    init_data: Optional[str] = None
    max_age: Optional[int] = Field(default=None, ge=0)
    include_raw_data: Optional[bool] = None
    include_hash: Optional[bool] = None


class BatchVerificationRequest(BaseModel):
    """Request model for verifying a list of payloads."""
    items: List[str]
    max_age: Optional[int] = Field(default=None, ge=0)
    include_raw_data: Optional[bool] = None
    include_hash: Optional[bool] = None
    continue_on_fail: bool = False


class BatchVerificationResponse(BaseModel):
    """Response model for batch verification."""
    results: List[Dict[str, Any]]


class MiniAppAuthService(BaseService):
    """Init-data verification service."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config)
        self.verifier = InitDataVerifier(
            self.config.bot_token,
            max_age=self.config.max_age,
            include_raw_data=self.config.include_raw_data,
            include_hash=self.config.include_hash,
            max_future_skew=self.config.max_future_skew,
            strict_secret=self.config.strict_bot_token,
        )

        self._setup_auth_routes()

    def _record(self, outcome: str) -> None:
        self.metrics.record_verification(outcome)

    def _setup_auth_routes(self):
        """Set up verification routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Mini App Auth - Telegram init-data verification",
                "version": "1.0.0"
            }

        @self.app.post("/miniapp/verify")
        async def verify_init_data(request: InitDataVerificationRequest):
            """Verify one init-data string; rejections surface as 401 error envelopes."""
            with self.metrics.time_verification():
                try:
                    output = self.verifier.verify_one(
                        request.init_data,
                        max_age=request.max_age,
                        include_raw_data=request.include_raw_data,
                        include_hash=request.include_hash,
                    )
                except InitDataRejected as e:
                    self._record(e.code)
                    raise

            self._record("verified")
            set_user_context(str(output["user_id"]))
            self.logger.info("Init-data accepted", user_id=output["user_id"])
            return output

        @self.app.post("/miniapp/verify-batch", response_model=BatchVerificationResponse)
        async def verify_init_data_batch(request: BatchVerificationRequest):
            """Verify each item independently.

            With ``continue_on_fail`` failed items come back flagged
            ``verified: false``; otherwise the first failure is returned as
            a 401 carrying its ``item_index``.
            """
            with self.metrics.time_verification():
                results = self.verifier.verify_many(
                    request.items,
                    max_age=request.max_age,
                    include_raw_data=request.include_raw_data,
                    include_hash=request.include_hash,
                    continue_on_fail=request.continue_on_fail,
                    on_outcome=self._record,
                )

            self.logger.info(
                "Batch verified",
                total=len(results),
                failed=sum(1 for result in results if not result["verified"])
            )
            return BatchVerificationResponse(results=results)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Verification has no remote dependencies; report credential presence only."""
        return {"bot_token": "configured" if self.config.bot_token else "missing"}


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = MiniAppAuthService(config)
    return service.app


def get_service_config(**overrides) -> ServiceConfig:
    return get_config(SERVICE_NAME, SERVICE_PORT, **overrides)


if __name__ == "__main__":
    service = MiniAppAuthService()
    service.run()
