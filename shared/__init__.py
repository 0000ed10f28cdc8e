"""
Shared utilities for the Mini App Auth service.

This package aggregates common building blocks:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application base with health and metrics routes
- test_helpers: Factories for signed init-data used by tests

Only test_helpers imports from the service package.
"""
