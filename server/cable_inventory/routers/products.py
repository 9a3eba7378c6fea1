"""
Product Catalog Router.

Read-only endpoints over the catalog with quantities resolved from the
inventory ledger. A ``datacenter`` query parameter restricts resolution to
that scope; omitting it resolves across all scopes, while an empty value
(``?datacenter=``) selects the unscoped scope.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from cable_inventory.db.session import get_db
from cable_inventory.schemas.inventory import (
    CatalogEntryRead,
    CatalogEntryWithQuantity,
    CurrentQuantityResponse,
    LedgerEntryRead,
    ProductDetailResponse,
)
from cable_inventory.services.inventory_service import (
    CatalogItem,
    ProductNotFoundError,
    get_ledger_history,
    get_product_detail,
    list_catalog_with_quantities,
    resolve_current_quantity,
    search_catalog,
)

router = APIRouter()


def to_quantity_read(item: CatalogItem) -> CatalogEntryWithQuantity:
    """Serialize a catalog entry together with its resolved quantity."""
    entry = CatalogEntryRead.model_validate(item.entry)
    return CatalogEntryWithQuantity(**entry.model_dump(), quantity=item.quantity)


@router.get(
    "",
    response_model=list[CatalogEntryWithQuantity],
    status_code=status.HTTP_200_OK,
    summary="List catalog with current quantities",
)
async def list_products(
    datacenter: Optional[str] = Query(None, description="Datacenter scope filter"),
    db: Session = Depends(get_db),
):
    """List every catalog entry with its current quantity."""
    return [to_quantity_read(item) for item in list_catalog_with_quantities(db, datacenter)]


@router.get(
    "/search",
    response_model=list[CatalogEntryWithQuantity],
    status_code=status.HTTP_200_OK,
    summary="Search the catalog",
    description="Case-insensitive substring match over MSF, item name and category.",
)
async def search_products(
    q: str = Query("", description="Search text"),
    db: Session = Depends(get_db),
):
    """Search products."""
    return [to_quantity_read(item) for item in search_catalog(db, q)]


@router.get(
    "/{msf}",
    response_model=ProductDetailResponse,
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "MSF not in catalog"}},
    summary="Get product with ledger history",
)
async def get_product(
    msf: str,
    datacenter: Optional[str] = Query(None, description="Datacenter scope filter for the history"),
    db: Session = Depends(get_db),
):
    """Get a catalog entry and its ledger history."""
    try:
        detail = get_product_detail(db, msf, datacenter)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ProductDetailResponse(
        product=CatalogEntryRead.model_validate(detail.entry),
        history=[LedgerEntryRead.model_validate(row) for row in detail.history],
    )


@router.get(
    "/{msf}/history",
    response_model=list[LedgerEntryRead],
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "MSF not in catalog"}},
    summary="Get ledger history",
)
async def get_product_history(
    msf: str,
    datacenter: Optional[str] = Query(None, description="Datacenter scope filter"),
    db: Session = Depends(get_db),
):
    """Ledger rows for an MSF, newest first."""
    try:
        rows = get_ledger_history(db, msf, datacenter)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return [LedgerEntryRead.model_validate(row) for row in rows]


@router.get(
    "/{msf}/quantity",
    response_model=CurrentQuantityResponse,
    status_code=status.HTTP_200_OK,
    summary="Resolve current quantity",
    description="Quantity of the newest ledger row for the MSF; 0 when there is none.",
)
async def get_current_quantity(
    msf: str,
    datacenter: Optional[str] = Query(None, description="Datacenter scope filter"),
    db: Session = Depends(get_db),
):
    """Resolve an MSF's current quantity."""
    return CurrentQuantityResponse(
        msf=msf,
        datacenter=datacenter,
        quantity=resolve_current_quantity(db, msf, datacenter),
    )
