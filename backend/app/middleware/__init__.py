# Middleware package init
"""
CrudCamp Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [CORS] → [Request ID] → [Logging] → [GZip] → [Rate Limit] → Route Handler

    1. CORS outermost: preflights are answered before anything else, and
       every response (429s included) carries the CORS headers
    2. Request ID: correlation id for logs, error bodies and the response header
    3. Logging: method, path, status, duration, request id
    4. Rate Limit: rejects with 429 before the route runs; the rejection is
       still logged and tagged with the request id

Authentication is NOT middleware here: it is the `get_current_user`
dependency (app/dependencies.py), applied per route, so public routes
(register, login, health, docs) need no allow-list.
"""
