# Middleware package init
"""
Evernote REST — Middleware Package
====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    1. Request ID: correlation ID, stored in a ContextVar for log lines and
       error bodies, echoed back in X-Request-ID
    2. Logging: method, path, status and duration of every request
"""
