"""Repository layer for database operations."""

from cable_inventory.repositories import (
    catalog_repo,
    datacenter_repo,
    import_record_repo,
    ledger_repo,
)

__all__ = [
    "catalog_repo",
    "datacenter_repo",
    "import_record_repo",
    "ledger_repo",
]
