"""
Mini App Auth service package.

This package exposes the FastAPI application that verifies launch payloads
handed to Telegram Mini Apps by the client:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.validation: The verification pipeline (decoding, data-check string,
  HMAC signature, freshness, claims assembly).

Design notes:
- Import must stay free of side effects; the pipeline performs no I/O at
  all and never contacts the Bot API.
- Use the shared/ utilities for logging, metrics, config and errors.
- The bot token is read from configuration and never logged or echoed.
"""
