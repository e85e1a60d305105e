"""Classification API router."""

from fastapi import APIRouter, Depends

from api.dependencies import (
    get_classifier,
    get_current_user,
    get_db_manager,
    get_write_off_advisor,
)
from api.models.requests import ClassifyRequest, WriteOffRequest
from api.models.responses import (
    ClassificationResponse,
    ClassifyResponse,
    ScoredCorrectionResponse,
    WriteOffResponse,
)
from taxxy.agents.classification.agent import TransactionClassifier
from taxxy.agents.classification.model import ClassificationRequest
from taxxy.agents.classification.write_off import WriteOffAdvisor
from taxxy.config import get_config
from taxxy.database.db_manager import TaxxyDBManager

router = APIRouter(prefix="/api/v1", tags=["classification"])


@router.post("/classify", response_model=ClassifyResponse)
def classify_transaction(
    request: ClassifyRequest,
    owner: str = Depends(get_current_user),
    classifier: TransactionClassifier = Depends(get_classifier),
    db: TaxxyDBManager = Depends(get_db_manager),
):
    """
    Classify a transaction description for the caller.

    The caller's stored tax profile is used as context. Classification
    failures come back as a low-confidence result, never as an error.

    Args:
        request: Description and optional amount
        owner: Caller identity
        classifier: Transaction classifier dependency
        db: Database manager dependency

    Returns:
        Classification result and the corrections that informed it
    """
    classification_request = ClassificationRequest(
        description=request.description,
        amount=request.amount,
        tax_profile=db.tax_profile_context(owner),
    )
    result, retrieval = classifier.classify_with_matches(classification_request, owner)

    return ClassifyResponse(
        result=ClassificationResponse.from_result(result, get_config().classification.review_threshold),
        matches=[ScoredCorrectionResponse.from_match(m) for m in retrieval.matches],
    )


@router.post("/write-off", response_model=WriteOffResponse)
def suggest_write_off(
    request: WriteOffRequest,
    owner: str = Depends(get_current_user),
    advisor: WriteOffAdvisor = Depends(get_write_off_advisor),
):
    """
    Suggest whether a transaction is a deductible write-off.

    Args:
        request: Description and optional current purpose
        owner: Caller identity
        advisor: Write-off advisor dependency

    Returns:
        Write-off suggestion
    """
    suggestion = advisor.suggest(request.description, request.purpose, owner)
    return WriteOffResponse(**suggestion.to_dict())
