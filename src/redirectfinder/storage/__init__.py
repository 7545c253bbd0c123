"""SQLite persistence for probe statuses, reference codes and redirects."""

from redirectfinder.storage.database import Database

__all__ = ["Database"]
