# Middleware package init
"""
PasteShare — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Submission Rate Limit] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation id for logs and error bodies, including 429s
    2. Rate limit: rejects excess paste submissions before any work
    3. Logging: one access line per request, tagged with the request ID
"""
