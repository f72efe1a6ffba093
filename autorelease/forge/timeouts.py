from __future__ import annotations

# Single API round trip
HTTP_TIMEOUT_SECONDS = 60.0

# Idempotent GET retry policy; writes are never retried
READ_RETRY_ATTEMPTS = 3
READ_RETRY_DELAY_SECONDS = 1.0
