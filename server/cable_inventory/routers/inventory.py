"""Inventory Router: current inventory grouped by category."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cable_inventory.db.session import get_db
from cable_inventory.routers.products import to_quantity_read
from cable_inventory.schemas.inventory import CatalogEntryWithQuantity
from cable_inventory.services.inventory_service import get_inventory_by_category

router = APIRouter()


@router.get(
    "",
    response_model=dict[str, list[CatalogEntryWithQuantity]],
    status_code=status.HTTP_200_OK,
    summary="Get inventory grouped by category",
)
async def inventory_by_category(
    datacenter: Optional[str] = Query(None, description="Datacenter scope filter"),
    db: Session = Depends(get_db),
):
    """Get current inventory grouped by category."""
    grouped = get_inventory_by_category(db, datacenter)
    return {
        category: [to_quantity_read(item) for item in items]
        for category, items in grouped.items()
    }
