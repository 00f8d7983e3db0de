"""
NaijaTax Compliance - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import close_db, init_db
from app.routers import auth, compliance, entities, expenses, invoices, payroll, tax, vat, wht
from app.utils.error_handling import setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    # Create tables outside production; production schemas are managed externally
    if not settings.is_production:
        await init_db()
        logger.info("Database tables initialized")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Nigerian tax and payroll compliance: PAYE, VAT, WHT, CIT and ITF under the 2026 tax reform",
    version="0.1.0",
    docs_url="/api/docs" if not settings.is_production else None,
    redoc_url="/api/redoc" if not settings.is_production else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Consistent {"detail": {...}} error bodies
setup_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
    }


@app.get("/api/v1")
async def api_root():
    """API root with the available route groups."""
    return {
        "name": settings.app_name,
        "version": settings.api_version,
        "endpoints": {
            "auth": "/api/v1/auth",
            "entities": "/api/v1/entities",
            "invoices": "/api/v1/invoices",
            "expenses": "/api/v1/expenses",
            "payroll": "/api/v1/payroll",
            "vat": "/api/v1/vat",
            "wht": "/api/v1/wht",
            "tax": "/api/v1/tax",
            "compliance": "/api/v1/compliance",
        },
    }


# ===========================================
# API ROUTERS
# ===========================================

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(entities.router, prefix="/api/v1/entities", tags=["Companies & Businesses"])
app.include_router(invoices.router, prefix="/api/v1/invoices", tags=["Invoices"])
app.include_router(expenses.router, prefix="/api/v1/expenses", tags=["Expenses"])
app.include_router(payroll.router, prefix="/api/v1/payroll", tags=["Payroll"])
app.include_router(vat.router, prefix="/api/v1/vat", tags=["VAT"])
app.include_router(wht.router, prefix="/api/v1/wht", tags=["WHT"])
app.include_router(tax.router, prefix="/api/v1/tax", tags=["Tax Calculators"])
app.include_router(compliance.router, prefix="/api/v1/compliance", tags=["Compliance"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
