"""
Inventory read queries (current quantity resolution) and full erasure.

Current quantity is never stored; it is resolved from the ledger as the
quantity of the newest row (greatest ``import_timestamp``, then greatest
``id``) for an MSF. A datacenter filter of ``None`` considers every scope
and reports the single newest row (a snapshot, not a sum); any string,
including ``""``, restricts resolution to exactly that scope. An MSF with
no matching ledger rows reads as 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from cable_inventory.models.inventory import CatalogEntry, ImportRecord, LedgerEntry
from cable_inventory.repositories import catalog_repo, import_record_repo, ledger_repo

UNCATEGORIZED = "Uncategorized"


class ProductNotFoundError(Exception):
    """Raised when an MSF is not in the catalog."""
    pass


@dataclass
class CatalogItem:
    """A catalog entry together with its resolved current quantity."""
    entry: CatalogEntry
    quantity: int


@dataclass
class ProductDetail:
    entry: CatalogEntry
    history: list[LedgerEntry]


def resolve_current_quantity(
    db: Session,
    msf: str,
    datacenter: Optional[str] = None,
) -> int:
    """
    Current quantity of one MSF.

    Args:
        db: Database session
        msf: Part number
        datacenter: Scope filter; None for the newest row in any scope

    Returns:
        Quantity of the newest matching ledger row, or 0 if there is none
    """
    latest = ledger_repo.get_latest_entry(db, msf, datacenter)
    return latest.quantity if latest is not None else 0


def _catalog_with_quantity_stmt(datacenter: Optional[str]):
    quantity = func.coalesce(
        ledger_repo.latest_quantity_subquery(CatalogEntry.msf, datacenter), 0
    ).label("quantity")
    return select(CatalogEntry, quantity).order_by(
        CatalogEntry.category,
        CatalogEntry.cable_length_value,
        CatalogEntry.msf,
    )


def list_catalog_with_quantities(
    db: Session,
    datacenter: Optional[str] = None,
) -> list[CatalogItem]:
    """Every catalog entry with its current quantity, ordered by category then length."""
    rows = db.execute(_catalog_with_quantity_stmt(datacenter)).all()
    return [CatalogItem(entry=entry, quantity=quantity) for entry, quantity in rows]


def get_inventory_by_category(
    db: Session,
    datacenter: Optional[str] = None,
) -> dict[str, list[CatalogItem]]:
    """Current inventory grouped by category; entries without one go under Uncategorized."""
    grouped: dict[str, list[CatalogItem]] = {}
    for item in list_catalog_with_quantities(db, datacenter):
        grouped.setdefault(item.entry.category or UNCATEGORIZED, []).append(item)
    return grouped


def search_catalog(db: Session, query: str) -> list[CatalogItem]:
    """
    Case-insensitive substring search over MSF, item name and category.

    Quantities are resolved across all datacenter scopes.
    """
    query = (query or "").strip()
    if not query:
        return []
    pattern = f"%{query}%"
    stmt = _catalog_with_quantity_stmt(None).where(
        or_(
            CatalogEntry.msf.ilike(pattern),
            CatalogEntry.item_name.ilike(pattern),
            CatalogEntry.category.ilike(pattern),
        )
    )
    return [CatalogItem(entry=entry, quantity=quantity) for entry, quantity in db.execute(stmt).all()]


def get_product_detail(
    db: Session,
    msf: str,
    datacenter: Optional[str] = None,
) -> ProductDetail:
    """
    Catalog entry plus its ledger history, newest first.

    Raises:
        ProductNotFoundError: If the MSF is not in the catalog
    """
    entry = catalog_repo.get_entry(db, msf)
    if entry is None:
        raise ProductNotFoundError(f"Product with MSF '{msf}' not found")
    return ProductDetail(entry=entry, history=ledger_repo.get_history(db, msf, datacenter))


def get_ledger_history(
    db: Session,
    msf: str,
    datacenter: Optional[str] = None,
) -> list[LedgerEntry]:
    """
    Ledger rows for a catalogued MSF, newest first.

    Raises:
        ProductNotFoundError: If the MSF is not in the catalog
    """
    if catalog_repo.get_entry(db, msf) is None:
        raise ProductNotFoundError(f"Product with MSF '{msf}' not found")
    return ledger_repo.get_history(db, msf, datacenter)


def get_import_history(db: Session, limit: int = 50) -> list[ImportRecord]:
    """The most recent import audit records."""
    return import_record_repo.list_recent_imports(db, limit)


def erase_all_data(db: Session) -> dict[str, int]:
    """
    Delete the whole catalog, ledger and audit log in one transaction.

    Returns:
        Deletion counts keyed products_deleted, inventory_deleted, imports_deleted
    """
    try:
        counts = import_record_repo.delete_all_inventory_data(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return counts
