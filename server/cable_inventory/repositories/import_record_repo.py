"""Import audit log and full-erasure repository helpers."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from cable_inventory.models.inventory import CatalogEntry, ImportRecord, LedgerEntry


def create_import_record(
    db: Session,
    filename: str,
    datacenter: str,
    import_date: datetime,
    records_processed: int,
    new_products: int,
    updated_products: int,
) -> ImportRecord:
    """Append one audit record for a completed reconciliation pass."""
    record = ImportRecord(
        filename=filename,
        datacenter=datacenter,
        import_date=import_date,
        records_processed=records_processed,
        new_products=new_products,
        updated_products=updated_products,
    )
    db.add(record)
    db.flush()
    return record


def list_recent_imports(db: Session, limit: int = 50) -> list[ImportRecord]:
    """The most recent audit records, newest first."""
    stmt = (
        select(ImportRecord)
        .order_by(ImportRecord.import_date.desc(), ImportRecord.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt))


def delete_all_inventory_data(db: Session) -> dict[str, int]:
    """
    Erase the ledger, the audit log and the catalog.

    Ledger rows go first because they reference the catalog. Flushes but
    does not commit.
    """
    counts = {
        "products_deleted": db.scalar(select(func.count()).select_from(CatalogEntry)) or 0,
        "inventory_deleted": db.scalar(select(func.count()).select_from(LedgerEntry)) or 0,
        "imports_deleted": db.scalar(select(func.count()).select_from(ImportRecord)) or 0,
    }
    db.execute(delete(LedgerEntry))
    db.execute(delete(ImportRecord))
    db.execute(delete(CatalogEntry))
    db.flush()
    return counts
