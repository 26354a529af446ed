"""
Menagerie Backend: Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry the correlation ID
    2. Logging measures the full handler duration and the final status code
"""
