"""
SQLAlchemy declarative base for all table models.

Import Base from here when defining new models.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
