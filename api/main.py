"""FastAPI application for the Taxxy backend."""

import logging
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import classification, corrections, learning, tax_profile, transactions
from taxxy import __version__
from taxxy.config import get_config
from taxxy.exceptions import InvalidTransactionError, TaxxyError, TransactionNotFoundError

config = get_config()

# Configure logging
logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Taxxy API",
    description="Business/personal transaction classification that learns from user corrections",
    version=__version__,
)

# CORS origins can be set via CORS_ORIGINS env var as comma-separated list
cors_origins: List[str] = [origin.strip() for origin in config.cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],  # Default to * for development
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-User-Id"],
)


# Exception handlers
@app.exception_handler(TransactionNotFoundError)
async def transaction_not_found_handler(request: Request, exc: TransactionNotFoundError):
    """Handle transaction not found errors."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc), "error_type": "TransactionNotFoundError"},
    )


@app.exception_handler(InvalidTransactionError)
async def invalid_transaction_handler(request: Request, exc: InvalidTransactionError):
    """Handle invalid transaction input."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error_type": "InvalidTransactionError"},
    )


@app.exception_handler(TaxxyError)
async def taxxy_error_handler(request: Request, exc: TaxxyError):
    """Handle remaining domain errors."""
    logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    # pydantic puts the raising exception object in "ctx"
    errors = []
    for error in exc.errors():
        errors.append({
            key: str(value) if isinstance(value, Exception) else value
            for key, value in error.items()
            if key != "ctx"
        })

    logger.warning(f"Validation error: {errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors, "error_type": "ValidationError"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc) or "Internal server error", "error_type": type(exc).__name__},
    )


# Include routers
app.include_router(classification.router)
app.include_router(corrections.router)
app.include_router(learning.router)
app.include_router(transactions.router)
app.include_router(tax_profile.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Taxxy API",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
