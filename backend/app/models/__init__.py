"""ORM models. Importing this package registers every table on Base.metadata."""

from app.models.user import User
from app.models.task import Task

__all__ = ["User", "Task"]
