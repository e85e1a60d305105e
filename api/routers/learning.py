"""Learning statistics API router."""

from fastapi import APIRouter, Depends

from api.dependencies import get_correction_store, get_current_user
from api.models.responses import LearningStatsResponse
from taxxy.database.correction_store import CorrectionStore
from taxxy.services.learning_stats import get_learning_stats

router = APIRouter(prefix="/api/v1", tags=["learning"])


@router.get("/learning-stats", response_model=LearningStatsResponse)
def learning_stats(
    owner: str = Depends(get_current_user),
    store: CorrectionStore = Depends(get_correction_store),
):
    """How much the classifier has learned from the caller's corrections."""
    return get_learning_stats(store, owner).to_dict()
