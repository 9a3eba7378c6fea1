"""Database package exports."""

from cable_inventory.db.base import Base
from cable_inventory.db.session import get_db, get_engine, init_db

__all__ = ["Base", "get_db", "get_engine", "init_db"]
