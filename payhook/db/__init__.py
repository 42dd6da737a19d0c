"""Session store."""

from payhook.db.session import Base, Database

__all__ = [
    "Base",
    "Database",
]
