"""Declarative base for all TaxSaver ORM records."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
