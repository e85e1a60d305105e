"""FastAPI dependencies for database and services."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from taxxy.agents.classification.agent import TransactionClassifier
from taxxy.agents.classification.write_off import WriteOffAdvisor
from taxxy.config import get_config
from taxxy.database.correction_store import CorrectionStore, SQLCorrectionStore
from taxxy.database.db_manager import TaxxyDBManager
from taxxy.llms.completion import CompletionClient
from taxxy.services.transaction_service import TransactionService


@lru_cache()
def get_db_manager() -> TaxxyDBManager:
    """Get cached database manager."""
    config = get_config()
    return TaxxyDBManager(config.database_path)


@lru_cache()
def get_correction_store() -> CorrectionStore:
    """Get cached SQL-backed correction log."""
    return SQLCorrectionStore(get_db_manager().Session)


@lru_cache()
def get_completion_client() -> CompletionClient:
    """
    Get configured completion client.

    Returns:
        CompletionClient for the classification agent
    """
    return CompletionClient(agent_name="classification")


@lru_cache()
def get_classifier() -> TransactionClassifier:
    """Get cached transaction classifier over the correction log."""
    return TransactionClassifier(get_correction_store(), client=get_completion_client())


@lru_cache()
def get_write_off_advisor() -> WriteOffAdvisor:
    """Get cached write-off advisor over the correction log."""
    return WriteOffAdvisor(get_correction_store(), client=CompletionClient(agent_name="write_off"))


def get_transaction_service(
    db: TaxxyDBManager = Depends(get_db_manager),
    classifier: TransactionClassifier = Depends(get_classifier),
    store: CorrectionStore = Depends(get_correction_store),
) -> TransactionService:
    """
    Get transaction service instance.

    Returns:
        TransactionService instance
    """
    return TransactionService(db, classifier, store)


def get_current_user(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Caller identity from the X-User-Id header.

    Authentication happens upstream; this only requires the header.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return x_user_id.strip()
