"""
Inventory Import Router.

Provides REST API endpoints for:
- Uploading a datacenter's inventory export (CSV) for reconciliation
- Viewing the import audit log
"""

from pathlib import PurePath
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from cable_inventory.config import Settings, get_settings
from cable_inventory.db.session import get_db
from cable_inventory.schemas.inventory import ImportRecordRead, ImportResultResponse
from cable_inventory.services.inventory_service import get_import_history
from cable_inventory.services.reconciliation_service import (
    ImportOutcome,
    ImportStatus,
    import_inventory_file,
)

router = APIRouter()

_OUTCOME_STATUS_CODES = {
    ImportStatus.SUCCESS: status.HTTP_200_OK,
    ImportStatus.NO_VALID_RECORDS: status.HTTP_200_OK,
    ImportStatus.UNREADABLE: status.HTTP_400_BAD_REQUEST,
    ImportStatus.FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _to_response(outcome: ImportOutcome) -> ImportResultResponse:
    if outcome.success:
        return ImportResultResponse(
            success=True,
            records_processed=outcome.records_processed,
            new_products=outcome.new_products,
            updated_products=outcome.updated_products,
        )
    return ImportResultResponse(success=False, error=outcome.error)


@router.post(
    "",
    response_model=ImportResultResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"description": "Import applied, or soft failure when the file has no valid records"},
        400: {"description": "File rejected (type, size or unreadable content)"},
        500: {"description": "Reconciliation failed and was rolled back"},
    },
    summary="Import a datacenter inventory export",
    description="""
    Upload a CSV inventory export for one datacenter.

    The whole import is one transaction: every catalog entry is first reset
    to zero in the target datacenter, then the export's quantities are
    applied. Either everything is persisted or nothing is.
    """,
)
async def import_inventory(
    file: UploadFile = File(..., description="Inventory export (CSV)"),
    datacenter: str = Form("", description="Target datacenter scope; empty for unscoped"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Import one inventory export."""
    filename = file.filename or "upload.csv"
    extension = PurePath(filename).suffix.lower()
    if extension not in settings.allowed_extensions_list:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{extension or filename}'. Only CSV files are allowed",
        )

    content = await file.read()
    if len(content) > settings.import_max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File exceeds the {settings.import_max_upload_bytes} byte upload limit",
        )

    outcome = import_inventory_file(db, content, filename, datacenter, settings)
    response = _to_response(outcome)

    status_code = _OUTCOME_STATUS_CODES[outcome.status]
    if status_code != status.HTTP_200_OK:
        return JSONResponse(
            status_code=status_code,
            content=response.model_dump(by_alias=True, exclude_none=True),
        )
    return response


@router.get(
    "/history",
    response_model=list[ImportRecordRead],
    status_code=status.HTTP_200_OK,
    summary="Get import audit log",
    description="Most recent completed imports, newest first.",
)
async def import_history(
    limit: Optional[int] = Query(None, ge=1, le=500, description="Maximum results"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Get the most recent import records."""
    return get_import_history(db, limit or settings.import_history_limit)
