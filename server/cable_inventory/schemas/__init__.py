"""Pydantic schemas for the Cable Inventory API."""

from cable_inventory.schemas.inventory import (
    CatalogEntryRead,
    CatalogEntryWithQuantity,
    CurrentQuantityResponse,
    DatacenterCreate,
    DatacenterRead,
    DatacenterUpdate,
    EraseResponse,
    ImportRecordRead,
    ImportResultResponse,
    LedgerEntryRead,
    ProductDetailResponse,
)

__all__ = [
    # Import schemas
    "ImportRecordRead",
    "ImportResultResponse",
    # Catalog / ledger schemas
    "CatalogEntryRead",
    "CatalogEntryWithQuantity",
    "CurrentQuantityResponse",
    "EraseResponse",
    "LedgerEntryRead",
    "ProductDetailResponse",
    # Datacenter schemas
    "DatacenterCreate",
    "DatacenterRead",
    "DatacenterUpdate",
]
