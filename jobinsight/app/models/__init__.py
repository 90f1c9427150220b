"""
Database models package.

This package contains SQLAlchemy models and database schema definitions.
"""

from .base import Base
from .career_job import CareerJob

__all__ = ["Base", "CareerJob"]
