"""Tax profile API router."""

from fastapi import APIRouter, Depends

from api.dependencies import get_current_user, get_db_manager
from api.models.requests import TaxProfileRequest
from api.models.responses import TaxProfileResponse
from taxxy.database.db_manager import TaxxyDBManager

router = APIRouter(prefix="/api/v1", tags=["tax-profile"])


@router.get("/tax-profile", response_model=TaxProfileResponse)
def get_tax_profile(
    owner: str = Depends(get_current_user),
    db: TaxxyDBManager = Depends(get_db_manager),
):
    """Get the caller's tax profile (null when not set)."""
    return TaxProfileResponse(profile=db.get_tax_profile(owner))


@router.put("/tax-profile", response_model=TaxProfileResponse)
def put_tax_profile(
    request: TaxProfileRequest,
    owner: str = Depends(get_current_user),
    db: TaxxyDBManager = Depends(get_db_manager),
):
    """Create or replace the caller's tax profile."""
    return TaxProfileResponse(profile=db.upsert_tax_profile(owner, request.profile))
