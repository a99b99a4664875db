"""
Repository layer - Item request persistence.

``IItemRequestRepository`` is the store contract the services depend on;
``PostgresItemRequestRepository`` implements it with SQLAlchemy.
"""

from .postgres_repository import PostgresItemRequestRepository
from .request_repository import IItemRequestRepository

__all__ = ["IItemRequestRepository", "PostgresItemRequestRepository"]
