# Routes package init
"""
CrudCamp Backend — API Routes Package
=======================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - tasks.py:   GET/POST /api/tasks, GET/PUT/PATCH/DELETE /api/tasks/{id}
    - health.py:  GET /health

Routes stay thin: pull data out of the request, call a service, shape the
response (status code, headers). Business rules live in app/services.
"""
