# Middleware package init
"""
Glyphbin Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: records method, path, status and duration with that ID
    3. GZip / CORS: FastAPI-provided response shaping

    Responses travel back through the same chain in reverse, which is how
    the X-Request-ID header and the duration end up on each response/log.
"""
