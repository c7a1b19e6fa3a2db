# portal/db/__init__.py
# The portal keeps no database: its only store is the in-memory roster snapshot

from portal.db.directory import StudentDirectory

__all__ = ["StudentDirectory"]
