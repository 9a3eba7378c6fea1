"""
Pydantic schemas for the Cable Inventory API.

These schemas define the request/response models for imports, catalog
queries, ledger history and the datacenter registry.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Import Schemas
# =============================================================================

class ImportResultResponse(BaseModel):
    """Outcome of one inventory import (camelCase on the wire)."""

    success: bool
    records_processed: Optional[int] = None
    new_products: Optional[int] = None
    updated_products: Optional[int] = None
    error: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportRecordRead(BaseModel):
    """Response schema for an import audit record."""

    id: int
    filename: str
    datacenter: str
    import_date: datetime
    records_processed: int
    new_products: int
    updated_products: int

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Catalog / Ledger Schemas
# =============================================================================

class CatalogEntryRead(BaseModel):
    """Response schema for a catalog entry."""

    msf: str
    item_name: str
    item_group: Optional[str] = None
    category: Optional[str] = None
    cable_type: Optional[str] = None
    cable_length: Optional[str] = None
    cable_length_value: Optional[float] = None
    cable_length_unit: Optional[str] = None
    speed: Optional[str] = None
    connector_type: Optional[str] = None
    location: Optional[str] = None
    datacenter: Optional[str] = None
    short_description: Optional[str] = Field(None, description="Compact label, e.g. 7M - 400G - AOC")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CatalogEntryWithQuantity(CatalogEntryRead):
    """Catalog entry with its resolved current quantity."""

    quantity: int = 0


class LedgerEntryRead(BaseModel):
    """Response schema for one inventory ledger row."""

    id: int
    msf: str
    datacenter: str
    quantity: int
    import_timestamp: datetime
    source_file: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductDetailResponse(BaseModel):
    """Catalog entry with its ledger history (newest first)."""

    product: CatalogEntryRead
    history: list[LedgerEntryRead]


class CurrentQuantityResponse(BaseModel):
    """Resolved current quantity for one MSF."""

    msf: str
    datacenter: Optional[str] = Field(None, description="Scope filter used; null means all scopes")
    quantity: int


class EraseResponse(BaseModel):
    """Counts of rows removed by a full erasure."""

    success: bool = True
    products_deleted: int
    inventory_deleted: int
    imports_deleted: int


# =============================================================================
# Datacenter Schemas
# =============================================================================

class DatacenterCreate(BaseModel):
    """Request schema for registering a datacenter."""

    id: str = Field(..., min_length=1, max_length=100, description="Scope id written on ledger rows")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")

    model_config = ConfigDict(str_strip_whitespace=True)


class DatacenterUpdate(BaseModel):
    """Request schema for renaming a datacenter."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")

    model_config = ConfigDict(str_strip_whitespace=True)


class DatacenterRead(BaseModel):
    """Response schema for a datacenter."""

    id: str
    name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
