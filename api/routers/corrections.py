"""Corrections API router."""

import logging

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_correction_store, get_current_user
from api.models.requests import CreateCorrectionRequest
from api.models.responses import (
    CorrectionResponse,
    RelevantCorrectionsResponse,
    ScoredCorrectionResponse,
)
from taxxy.agents.classification.model import Correction
from taxxy.agents.classification.retriever import CorrectionRetriever
from taxxy.database.correction_store import CorrectionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["corrections"])


@router.get("/corrections/relevant", response_model=RelevantCorrectionsResponse)
def get_relevant_corrections(
    description: str = Query(..., description="Transaction description to match against"),
    owner: str = Depends(get_current_user),
    store: CorrectionStore = Depends(get_correction_store),
):
    """
    Show which past corrections would inform classifying this description.

    Args:
        description: Transaction description
        owner: Caller identity
        store: Correction log dependency

    Returns:
        Scored matches and the confidence boost they justify
    """
    retrieval = CorrectionRetriever(store).retrieve(description, owner)
    return RelevantCorrectionsResponse(
        matches=[ScoredCorrectionResponse.from_match(m) for m in retrieval.matches],
        confidence_adjustment=retrieval.confidence_adjustment,
    )


@router.post(
    "/corrections",
    response_model=CorrectionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_correction(
    request: CreateCorrectionRequest,
    owner: str = Depends(get_current_user),
    store: CorrectionStore = Depends(get_correction_store),
):
    """Append a correction to the caller's log."""
    correction = store.add(
        Correction(
            owner=owner,
            transaction_id=request.transaction_id,
            transaction_description=request.transaction_description,
            original_purpose=request.original_purpose,
            corrected_purpose=request.corrected_purpose,
            original_reason=request.original_reason,
            corrected_reason=request.corrected_reason,
        )
    )
    logger.info(f"Recorded correction {correction.id} for user {owner}")
    return CorrectionResponse.from_correction(correction)
