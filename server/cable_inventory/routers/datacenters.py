"""
Datacenter Registry Router.

Named datacenters that imports can target. Removing a datacenter from the
registry does not touch its inventory ledger history.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from cable_inventory.db.session import get_db
from cable_inventory.repositories.datacenter_repo import (
    create_datacenter,
    delete_datacenter,
    get_all_datacenters,
    get_datacenter_by_id,
    rename_datacenter,
)
from cable_inventory.schemas.inventory import DatacenterCreate, DatacenterRead, DatacenterUpdate

router = APIRouter()


@router.get(
    "",
    response_model=list[DatacenterRead],
    status_code=status.HTTP_200_OK,
    summary="List datacenters",
)
async def list_datacenters(db: Session = Depends(get_db)):
    """List all registered datacenters."""
    return get_all_datacenters(db)


@router.post(
    "",
    response_model=DatacenterRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Datacenter id already registered"}},
    summary="Register a datacenter",
)
async def add_datacenter(payload: DatacenterCreate, db: Session = Depends(get_db)):
    """Register a datacenter."""
    if get_datacenter_by_id(db, payload.id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Datacenter '{payload.id}' already exists",
        )
    return create_datacenter(db, payload.id, payload.name)


@router.put(
    "/{datacenter_id}",
    response_model=DatacenterRead,
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "Datacenter not found"}},
    summary="Rename a datacenter",
)
async def update_datacenter(
    datacenter_id: str,
    payload: DatacenterUpdate,
    db: Session = Depends(get_db),
):
    """Rename a datacenter."""
    datacenter = get_datacenter_by_id(db, datacenter_id)
    if datacenter is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Datacenter '{datacenter_id}' not found",
        )
    return rename_datacenter(db, datacenter, payload.name)


@router.delete(
    "/{datacenter_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Datacenter not found"}},
    summary="Remove a datacenter from the registry",
)
async def remove_datacenter(datacenter_id: str, db: Session = Depends(get_db)):
    """Remove a datacenter; its ledger history is kept."""
    datacenter = get_datacenter_by_id(db, datacenter_id)
    if datacenter is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Datacenter '{datacenter_id}' not found",
        )
    delete_datacenter(db, datacenter)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
