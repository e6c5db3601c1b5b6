"""
Storage Package.

The Record Store: key -> entity persistence for every entity
the indexer derives.

Modules:
- models/: SQLAlchemy ORM models
- repositories/: Data access layer
- sets: set semantics over JSON list columns
"""

from storage.models import Base

__all__ = ["Base"]
