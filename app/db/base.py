"""
Declarative base - the parent class for every ORM model.

Importing this module also imports all models so that
Base.metadata knows every table (used by tests and migrations).
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base shared by all models."""
    pass


# Register all models on Base.metadata
from app.models import user, location, area, bin, ai_settings  # noqa: E402,F401
