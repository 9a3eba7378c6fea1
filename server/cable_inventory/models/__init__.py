"""Models package exports."""

from cable_inventory.models.datacenter import Datacenter
from cable_inventory.models.inventory import (
    CatalogEntry,
    ImportRecord,
    LedgerEntry,
)

__all__ = [
    "CatalogEntry",
    "Datacenter",
    "ImportRecord",
    "LedgerEntry",
]
