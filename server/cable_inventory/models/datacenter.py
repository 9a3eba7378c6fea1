"""Datacenter registry model."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cable_inventory.db.base import Base
from cable_inventory.db.mixins import TimestampMixin


class Datacenter(Base, TimestampMixin):
    """
    A named site that inventory exports can be imported into.

    The ``id`` is the scope string written on ledger rows. The registry is
    informational: ledger rows may carry scopes that were never registered,
    and removing a registry entry leaves its ledger history in place.
    """

    __tablename__ = "datacenters"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Datacenter(id='{self.id}', name='{self.name}')>"
