"""
Inventory reconciliation: apply one datacenter's export to the catalog and ledger.

One import is one transaction with a fixed order of steps:

1. Reset: append a zero-quantity ledger row in the target datacenter for
   every catalog entry (the catalog is global). The ledger cannot delete,
   so an MSF missing from the new export must be recorded as an explicit
   zero, or its old quantity would stay current.
2. Apply: for each parsed record, in order, upsert the catalog entry
   (coalesce-on-write for derived attributes) and append a ledger row with
   the real quantity. The catalog write always precedes the ledger write
   for the same MSF. Duplicate MSFs are applied in turn, so the last
   occurrence wins.
3. Audit: append one ImportRecord with the pass counters.
4. Commit.

Any failure in steps 1-3 rolls the whole pass back and surfaces a single
ReconciliationFailedError carrying the underlying cause. Every row the
pass writes is scoped to the target datacenter string, including the
empty (unscoped) scope; no other scope is ever touched.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cable_inventory.config import Settings, get_settings
from cable_inventory.repositories import catalog_repo, import_record_repo, ledger_repo
from cable_inventory.services.inventory_csv_parser import (
    InventoryParseError,
    ParsedCable,
    parse_inventory_csv,
)

logger = logging.getLogger(__name__)

NO_VALID_RECORDS_MESSAGE = (
    "No valid records found in CSV. Make sure the file has MSF and Item Name columns."
)


# =============================================================================
# Custom Exceptions
# =============================================================================

class ReconciliationError(Exception):
    """Base exception for reconciliation operations."""
    pass


class EmptyBatchError(ReconciliationError):
    """Raised when a pass is requested with no records to apply."""
    pass


class ReconciliationFailedError(ReconciliationError):
    """Raised when the reconciliation transaction failed and was rolled back."""
    pass


# =============================================================================
# Result Data Classes
# =============================================================================

@dataclass
class ReconciliationResult:
    """Counters of a committed reconciliation pass."""
    records_processed: int
    new_products: int
    updated_products: int
    reset_count: int
    import_record_id: int


class ImportStatus(str, enum.Enum):
    """The bounded set of outcomes an import can have."""

    SUCCESS = "success"
    NO_VALID_RECORDS = "no_valid_records"
    UNREADABLE = "unreadable"
    FAILED = "failed"


@dataclass
class ImportOutcome:
    """What the caller of an import gets back. Never a partial success."""
    status: ImportStatus
    records_processed: int = 0
    new_products: int = 0
    updated_products: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ImportStatus.SUCCESS


# =============================================================================
# Reconciliation
# =============================================================================

def _catalog_fields(record: ParsedCable) -> dict[str, Any]:
    return {
        "item_name": record.item_name,
        "item_group": record.item_group,
        "category": record.category,
        "cable_type": record.cable_type,
        "cable_length": record.cable_length,
        "cable_length_value": record.cable_length_value,
        "cable_length_unit": record.cable_length_unit,
        "speed": record.speed,
        "connector_type": record.connector_type,
        "location": record.location,
        "datacenter": record.datacenter,
    }


def _serialize_datacenter_scope(db: Session, datacenter: str) -> None:
    """
    Block concurrent passes for the same datacenter until this one ends.

    SQLite connections already open every transaction with BEGIN IMMEDIATE
    (see db.session); PostgreSQL takes a transaction-scoped advisory lock.
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(select(func.pg_advisory_xact_lock(func.hashtext(datacenter))))


def reconcile_inventory(
    db: Session,
    records: Sequence[ParsedCable],
    source_file: str,
    datacenter: str = "",
    settings: Optional[Settings] = None,
) -> ReconciliationResult:
    """
    Reconcile one datacenter's parsed export into the catalog and ledger.

    Args:
        db: Database session; the pass commits or rolls back on it
        records: Parsed records in export order
        source_file: Provenance recorded on ledger and audit rows
        datacenter: Target datacenter scope ("" is the unscoped scope)
        settings: Application settings (defaults to get_settings())

    Returns:
        ReconciliationResult with the pass counters

    Raises:
        EmptyBatchError: If ``records`` is empty (nothing is written)
        ReconciliationFailedError: If any step failed; nothing is persisted
    """
    if not records:
        raise EmptyBatchError(NO_VALID_RECORDS_MESSAGE)

    settings = settings or get_settings()
    reset_source = f"{source_file}{settings.reset_source_suffix}"

    logger.info(
        "Starting inventory reconciliation",
        extra={"source_file": source_file, "datacenter": datacenter, "records": len(records)},
    )

    try:
        _serialize_datacenter_scope(db, datacenter)
        # Read under the lock so this pass stamps after every committed pass.
        clock = ledger_repo.LedgerClock(ledger_repo.latest_timestamp(db))

        reset_count = ledger_repo.append_zero_snapshots(
            db, catalog_repo.list_msfs(db), datacenter, reset_source, clock
        )
        logger.debug(
            "Reset catalog entries to zero",
            extra={"datacenter": datacenter, "reset_count": reset_count},
        )

        new_products = 0
        updated_products = 0
        for record in records:
            _, created = catalog_repo.upsert_entry(db, record.msf, _catalog_fields(record))
            if created:
                new_products += 1
            else:
                updated_products += 1

            ledger_repo.append_entry(
                db,
                msf=record.msf,
                quantity=record.quantity,
                datacenter=datacenter,
                source_file=source_file,
                import_timestamp=clock.now(),
            )

        audit = import_record_repo.create_import_record(
            db,
            filename=source_file,
            datacenter=datacenter,
            import_date=clock.now(),
            records_processed=len(records),
            new_products=new_products,
            updated_products=updated_products,
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(
            "Inventory reconciliation failed, rolled back",
            extra={"source_file": source_file, "datacenter": datacenter},
            exc_info=True,
        )
        raise ReconciliationFailedError(f"Inventory import failed: {e}") from e

    logger.info(
        "Inventory reconciliation complete",
        extra={
            "source_file": source_file,
            "datacenter": datacenter,
            "records_processed": len(records),
            "new_products": new_products,
            "updated_products": updated_products,
            "reset_count": reset_count,
        },
    )
    return ReconciliationResult(
        records_processed=len(records),
        new_products=new_products,
        updated_products=updated_products,
        reset_count=reset_count,
        import_record_id=audit.id,
    )


def import_inventory_file(
    db: Session,
    content: Union[bytes, str],
    filename: str,
    datacenter: str = "",
    settings: Optional[Settings] = None,
) -> ImportOutcome:
    """
    Parse an export and reconcile it, reporting one bounded outcome.

    An export with no usable rows is a soft failure and never opens a
    reconciliation transaction, so no reset is written for it.
    """
    datacenter = (datacenter or "").strip()

    try:
        records = parse_inventory_csv(content)
    except InventoryParseError as e:
        logger.warning("Unreadable inventory export", extra={"source_file": filename, "error": str(e)})
        return ImportOutcome(status=ImportStatus.UNREADABLE, error=str(e))

    if not records:
        logger.info("No valid records in inventory export", extra={"source_file": filename})
        return ImportOutcome(status=ImportStatus.NO_VALID_RECORDS, error=NO_VALID_RECORDS_MESSAGE)

    try:
        result = reconcile_inventory(db, records, filename, datacenter, settings)
    except ReconciliationFailedError as e:
        return ImportOutcome(status=ImportStatus.FAILED, error=str(e))

    return ImportOutcome(
        status=ImportStatus.SUCCESS,
        records_processed=result.records_processed,
        new_products=result.new_products,
        updated_products=result.updated_products,
    )
