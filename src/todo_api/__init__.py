"""
Todo API package.

HTTP service exposing CRUD operations over todo items stored in a SQL
database. ``create_app`` builds the FastAPI application; ``server.main``
runs the whole process.
"""

from .main import create_app  # noqa: F401
