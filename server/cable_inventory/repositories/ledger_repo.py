"""Inventory ledger repository: append-only quantity snapshots."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from cable_inventory.models.inventory import LedgerEntry

_TICK = timedelta(microseconds=1)


class LedgerClock:
    """
    Strictly increasing UTC timestamps for one reconciliation pass.

    Wall-clock time at microsecond resolution, bumped by one microsecond
    whenever it would not advance past the previous stamp. Seeding it with
    ``floor`` (the newest stamp already in the ledger) keeps a pass ordered
    after earlier passes even if the wall clock has stepped backwards.
    Naive floors are taken as UTC, which is how SQLite returns them.
    """

    def __init__(self, floor: Optional[datetime] = None) -> None:
        if floor is not None and floor.tzinfo is None:
            floor = floor.replace(tzinfo=timezone.utc)
        self._last: Optional[datetime] = floor

    def now(self) -> datetime:
        stamp = datetime.now(timezone.utc)
        if self._last is not None and stamp <= self._last:
            stamp = self._last + _TICK
        self._last = stamp
        return stamp


def latest_timestamp(db: Session) -> Optional[datetime]:
    """The newest import_timestamp in the ledger, or None when it is empty."""
    return db.scalar(select(func.max(LedgerEntry.import_timestamp)))


def append_entry(
    db: Session,
    msf: str,
    quantity: int,
    datacenter: str,
    source_file: str,
    import_timestamp: datetime,
) -> LedgerEntry:
    """Append one quantity snapshot. The MSF must already be in the catalog."""
    entry = LedgerEntry(
        msf=msf,
        quantity=quantity,
        datacenter=datacenter,
        source_file=source_file,
        import_timestamp=import_timestamp,
    )
    db.add(entry)
    db.flush()
    return entry


def append_zero_snapshots(
    db: Session,
    msfs: Iterable[str],
    datacenter: str,
    source_file: str,
    clock: LedgerClock,
) -> int:
    """
    Append a zero-quantity entry in ``datacenter`` for every given MSF.

    Returns:
        Number of entries written
    """
    rows = [
        {
            "msf": msf,
            "quantity": 0,
            "datacenter": datacenter,
            "source_file": source_file,
            "import_timestamp": clock.now(),
        }
        for msf in msfs
    ]
    if rows:
        db.execute(insert(LedgerEntry), rows)
    return len(rows)


def _scope_filter(stmt, msf, datacenter: Optional[str]):
    stmt = stmt.where(LedgerEntry.msf == msf)
    if datacenter is not None:
        stmt = stmt.where(LedgerEntry.datacenter == datacenter)
    return stmt


def latest_quantity_subquery(msf_column: ColumnElement, datacenter: Optional[str] = None):
    """
    Correlated scalar subquery: quantity of the newest ledger row for
    ``msf_column``, optionally restricted to one datacenter scope.

    ``None`` means every scope; ``""`` is the unscoped/legacy scope only.
    Yields NULL when no row exists.
    """
    stmt = _scope_filter(select(LedgerEntry.quantity), msf_column, datacenter)
    return (
        stmt.order_by(LedgerEntry.import_timestamp.desc(), LedgerEntry.id.desc())
        .limit(1)
        .scalar_subquery()
    )


def get_latest_entry(
    db: Session,
    msf: str,
    datacenter: Optional[str] = None,
) -> Optional[LedgerEntry]:
    """The newest ledger row for an MSF, optionally in one datacenter scope."""
    stmt = _scope_filter(select(LedgerEntry), msf, datacenter)
    stmt = stmt.order_by(LedgerEntry.import_timestamp.desc(), LedgerEntry.id.desc()).limit(1)
    return db.scalars(stmt).first()


def get_history(
    db: Session,
    msf: str,
    datacenter: Optional[str] = None,
) -> list[LedgerEntry]:
    """All ledger rows for an MSF, newest first."""
    stmt = _scope_filter(select(LedgerEntry), msf, datacenter)
    stmt = stmt.order_by(LedgerEntry.import_timestamp.desc(), LedgerEntry.id.desc())
    return list(db.scalars(stmt))
