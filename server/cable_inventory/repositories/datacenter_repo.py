"""Datacenter registry repository for database operations."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cable_inventory.models.datacenter import Datacenter


def get_all_datacenters(db: Session) -> list[Datacenter]:
    """Get all registered datacenters ordered by name."""
    stmt = select(Datacenter).order_by(Datacenter.name)
    return list(db.execute(stmt).scalars().all())


def get_datacenter_by_id(db: Session, datacenter_id: str) -> Optional[Datacenter]:
    """Get a datacenter by its scope id."""
    return db.get(Datacenter, datacenter_id)


def create_datacenter(db: Session, datacenter_id: str, name: str) -> Datacenter:
    """Register a new datacenter."""
    datacenter = Datacenter(id=datacenter_id, name=name)
    db.add(datacenter)
    db.commit()
    db.refresh(datacenter)
    return datacenter


def rename_datacenter(db: Session, datacenter: Datacenter, name: str) -> Datacenter:
    """Change a datacenter's display name."""
    datacenter.name = name
    db.commit()
    db.refresh(datacenter)
    return datacenter


def delete_datacenter(db: Session, datacenter: Datacenter) -> None:
    """Remove a datacenter from the registry. Ledger rows are kept."""
    db.delete(datacenter)
    db.commit()
