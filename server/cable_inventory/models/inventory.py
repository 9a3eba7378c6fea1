"""Catalog, inventory ledger and import audit models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from cable_inventory.db.base import Base
from cable_inventory.db.mixins import TimestampMixin
from cable_inventory.services.cable_attributes import CableAttributes, describe_cable


class CatalogEntry(Base, TimestampMixin):
    """
    One row per MSF part number: what the part is.

    Derived cable attributes only ever strengthen across imports (an unknown
    value never replaces a known one). ``item_name``, ``location`` and
    ``datacenter`` always reflect the most recent import that saw the MSF.
    """

    __tablename__ = "products"

    msf: Mapped[str] = mapped_column(String(100), primary_key=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    item_group: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Derived from the item description by the attribute extractor
    cable_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    cable_length: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True,
        comment="Display form of the length, e.g. 2FT or 2.5M"
    )
    cable_length_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    cable_length_unit: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    speed: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    connector_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Last seen, overwritten on every import
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    datacenter: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("ix_products_item_group", "item_group"),
        Index("ix_products_category", "category"),
        Index("ix_products_cable_type", "cable_type"),
    )

    @property
    def short_description(self) -> str:
        """Compact label built from the stored attributes, e.g. ``7M - 400G - AOC``."""
        return describe_cable(
            self.item_name,
            CableAttributes(
                length_value=self.cable_length_value,
                length_unit=self.cable_length_unit,
                speed=self.speed,
                cable_type=self.cable_type,
                connector_type=self.connector_type,
            ),
        )

    def __repr__(self) -> str:
        return f"<CatalogEntry(msf='{self.msf}', category='{self.category}')>"


class LedgerEntry(Base):
    """
    Append-only quantity snapshot for one MSF in one datacenter scope.

    Rows are never updated. The current quantity of an (msf, datacenter)
    pair is the row with the greatest ``import_timestamp``, ties broken by
    the greater ``id``.
    """

    __tablename__ = "inventory_ledger"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    msf: Mapped[str] = mapped_column(
        ForeignKey("products.msf"), nullable=False
    )
    # Empty string is the unscoped/legacy scope, distinct from any named datacenter
    datacenter: Mapped[str] = mapped_column(
        String(100), nullable=False, default="", server_default=""
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    import_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    source_file: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index(
            "ix_inventory_ledger_msf_datacenter_ts",
            "msf", "datacenter", "import_timestamp", "id",
        ),
        Index("ix_inventory_ledger_datacenter", "datacenter"),
        CheckConstraint("quantity >= 0", name="ck_inventory_ledger_quantity_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry(id={self.id}, msf='{self.msf}', "
            f"datacenter='{self.datacenter}', quantity={self.quantity})>"
        )


class ImportRecord(Base):
    """Audit trail of completed reconciliation passes. Reporting only."""

    __tablename__ = "import_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    datacenter: Mapped[str] = mapped_column(
        String(100), nullable=False, default="", server_default=""
    )
    import_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    records_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    new_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_import_history_import_date", "import_date"),
    )
