"""Transactions API router."""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_user, get_transaction_service
from api.models.requests import (
    CreateTransactionRequest,
    ImportTransactionsRequest,
    UpdateClassificationRequest,
)
from api.models.responses import (
    CorrectionResponse,
    ImportSummaryResponse,
    TransactionResponse,
    TransactionsResponse,
    UpdateClassificationResponse,
)
from taxxy.database.db_manager import transaction_to_dict
from taxxy.services.transaction_service import TransactionService

router = APIRouter(prefix="/api/v1", tags=["transactions"])


@router.get("/transactions", response_model=TransactionsResponse)
def get_transactions(
    owner: str = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
):
    """List the caller's transactions, newest first."""
    rows = [transaction_to_dict(r) for r in service.list_transactions(owner)]
    return TransactionsResponse(rows=rows, total=len(rows))


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(
    request: CreateTransactionRequest,
    owner: str = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Create a transaction and classify it.

    Args:
        request: Description, amount, date and optional category
        owner: Caller identity
        service: Transaction service dependency

    Returns:
        Stored transaction with its classification

    Raises:
        InvalidTransactionError: If required fields are missing or malformed (400)
    """
    record = service.create_transaction(
        owner,
        request.description,
        request.amount,
        request.date,
        request.category,
    )
    return transaction_to_dict(record)


@router.post("/transactions/import", response_model=ImportSummaryResponse)
def import_transactions(
    request: ImportTransactionsRequest,
    owner: str = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
):
    """Bulk import parsed CSV rows, skipping duplicates."""
    rows = [row.model_dump() for row in request.transactions]
    return service.import_transactions(owner, rows).to_dict()


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    owner: str = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Get a single transaction.

    Raises:
        TransactionNotFoundError: If the caller has no such transaction (404)
    """
    return transaction_to_dict(service.get_transaction(owner, transaction_id))


@router.put(
    "/transactions/{transaction_id}/classification",
    response_model=UpdateClassificationResponse,
)
def update_classification(
    transaction_id: int,
    request: UpdateClassificationRequest,
    owner: str = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Apply a human edit to a transaction's classification.

    A change of purpose or write-off reason is recorded as a correction so
    later classifications learn from it.
    """
    record, correction = service.update_classification(
        owner,
        transaction_id,
        purpose=request.purpose,
        is_write_off=request.is_write_off,
        reason=request.reason,
        category=request.category,
        tag=request.tag,
    )
    return UpdateClassificationResponse(
        transaction=transaction_to_dict(record),
        correction=CorrectionResponse.from_correction(correction) if correction else None,
    )
