"""User Registry API.

A FastAPI service exposing CRUD endpoints for user records, backed by a
relational table through SQLModel.
"""

__version__ = "0.1.0"
