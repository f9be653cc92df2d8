# Middleware package init
"""
CatHealth Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID: correlation ID stored on request.state and echoed in the
      X-Request-ID response header
    - Logging:    one access log line per request with status and duration

Authentication is not middleware: protected routes declare the
get_current_user dependency, so public routes (/health, /api/files, login,
register) stay outside the gate without a path allowlist.
"""
