import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import traceback

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from cable_inventory.config import get_settings
from cable_inventory.db.session import get_db, init_db
from cable_inventory.logging_config import setup_logging, get_logger
from cable_inventory.routers import datacenters, imports, inventory, products
from cable_inventory.schemas.inventory import EraseResponse
from cable_inventory.services.inventory_service import erase_all_data

# Load settings
settings = get_settings()

# Configure logging
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        }
    )
    if settings.auto_create_tables:
        init_db()
    yield
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(imports.router, prefix="/api/imports", tags=["imports"])
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["inventory"])
app.include_router(datacenters.router, prefix="/api/datacenters", tags=["datacenters"])


# Global exception handler to ensure JSON responses for all errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON error response."""
    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc(),
        }
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "type": type(exc).__name__,
        }
    )


@app.delete("/api/data", response_model=EraseResponse, tags=["admin"])
async def delete_all_data(db: Session = Depends(get_db)):
    """Erase the catalog, the inventory ledger and the import audit log."""
    counts = erase_all_data(db)
    logger.warning("Deleted all inventory data", extra=counts)
    return EraseResponse(**counts)


@app.get("/health")
async def health():
    """
    Health check endpoint for container orchestration and load balancers.
    Returns 200 OK with basic application info and DB status.
    """
    from cable_inventory.db.session import check_db_connection

    db_ok, _ = check_db_connection()

    return {
        "status": "ok" if db_ok else "degraded",
        "db": "ok" if db_ok else "error",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
