"""
Database module untuk PIN Gate API.
Berisi base model dan session management untuk audit trail.
"""

from app.db.base import Base
from app.db.session import (
    engine,
    SessionLocal,
    init_db,
    close_db
)

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "init_db",
    "close_db"
]
