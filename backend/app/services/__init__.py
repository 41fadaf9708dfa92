# Services package init
"""
CrudCamp Backend — Services Layer
===================================

What:  Business rules between the routes (HTTP) and the database.
How:   Services take an AsyncSession plus validated DTOs, enforce ownership
       and uniqueness, and raise CrudCampError subclasses that the global
       handlers in main.py turn into HTTP responses.

Service Inventory:
    - AuthService: registration, credential checks, user lookup
      (plus module-level password hashing and JWT helpers)
    - TaskService: per-owner task CRUD, filtering, search, sort, pagination

Services never see Request objects, so they can be unit-tested with a
mocked session.
"""
