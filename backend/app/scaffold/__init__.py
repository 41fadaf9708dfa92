"""
CrudCamp — Project Scaffolder
===============================

What:  Generates the skeleton of a new FastAPI CRUD backend, the same shape
       as this repository: folders, config files, a pyproject.toml with the
       course's dependency stack, and an installed virtualenv.
Who:   Students, via the `crudcamp-scaffold` console script
       (or `python -m app.scaffold`).

Steps (in order, no rollback):
    1. Resolve options (flags, else interactive prompts, else defaults with --yes)
    2. Create folders
    3. Write config files (.env.example, .gitignore, main.py)
    4. Create / patch pyproject.toml
    5. Run package-manager commands, then `git init`

Any failure propagates: a failing command raises CalledProcessError and the
half-built directory is left in place for inspection.
"""

from app.scaffold.generator import ScaffoldError, ScaffoldOptions, scaffold

__all__ = ["ScaffoldError", "ScaffoldOptions", "scaffold"]
