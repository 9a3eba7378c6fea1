"""Catalog (products) repository for database operations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cable_inventory.models.inventory import CatalogEntry

# Overwritten wholesale on every sighting of an MSF.
OVERWRITE_FIELDS = ("item_name", "item_group", "location", "datacenter")

# Kept unless the incoming value is present (non-null, non-empty).
COALESCE_FIELDS = (
    "category",
    "cable_type",
    "cable_length",
    "cable_length_value",
    "cable_length_unit",
    "speed",
    "connector_type",
)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def coalesce(new: Any, old: Any) -> Any:
    """Return ``new`` if it is present, else ``old``."""
    return new if _is_present(new) else old


def merge_catalog_fields(
    existing: Optional[Mapping[str, Any]],
    incoming: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Merge an incoming sighting into the stored catalog values.

    Identity and last-seen fields take the incoming value as-is (a blank
    location overwrites a known one). Derived attributes follow
    coalesce-on-write: once known, they never go back to unknown.

    Args:
        existing: Stored field values, or None for a first sighting
        incoming: Field values from the current import

    Returns:
        The field values to store
    """
    existing = existing or {}
    merged: dict[str, Any] = {}
    for field in OVERWRITE_FIELDS:
        merged[field] = incoming.get(field)
    for field in COALESCE_FIELDS:
        merged[field] = coalesce(incoming.get(field), existing.get(field))
    return merged


def catalog_fields(entry: CatalogEntry) -> dict[str, Any]:
    """Current mergeable field values of a stored entry."""
    return {field: getattr(entry, field) for field in OVERWRITE_FIELDS + COALESCE_FIELDS}


def get_entry(db: Session, msf: str) -> Optional[CatalogEntry]:
    """Get a catalog entry by MSF."""
    return db.get(CatalogEntry, msf)


def list_msfs(db: Session) -> list[str]:
    """All MSFs in the catalog, in key order."""
    stmt = select(CatalogEntry.msf).order_by(CatalogEntry.msf)
    return list(db.scalars(stmt))


def upsert_entry(
    db: Session,
    msf: str,
    fields: Mapping[str, Any],
) -> tuple[CatalogEntry, bool]:
    """
    Insert or update the catalog entry for ``msf``.

    Returns:
        Tuple of (entry, created)
    """
    entry = get_entry(db, msf)
    created = entry is None
    merged = merge_catalog_fields(None if created else catalog_fields(entry), fields)

    if created:
        entry = CatalogEntry(msf=msf, **merged)
        db.add(entry)
    else:
        for field, value in merged.items():
            setattr(entry, field, value)
        entry.updated_at = datetime.now(timezone.utc)

    db.flush()
    return entry, created
