"""Pydantic request models for the Taxxy API."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from taxxy.agents.classification.model import CORRECTION_PURPOSES, PURPOSES


def _validate_purpose(value: Optional[str], allowed) -> Optional[str]:
    if value is None:
        return value
    normalized = value.strip().lower()
    if normalized not in allowed:
        raise ValueError(f"purpose must be one of: {', '.join(allowed)}")
    return normalized


class ClassifyRequest(BaseModel):
    """Request model for classifying a transaction description."""

    description: str = Field(..., max_length=1000, description="Bank transaction description")
    amount: Optional[float] = Field(None, description="Transaction amount (optional)")


class CreateCorrectionRequest(BaseModel):
    """Request model for recording a user correction."""

    transaction_description: str = Field(..., min_length=1, max_length=1000)
    original_purpose: str = Field("unknown", description="Purpose before the correction")
    corrected_purpose: str = Field("unknown", description="Purpose chosen by the user")
    original_reason: str = Field("", max_length=2000)
    corrected_reason: str = Field("", max_length=2000)
    transaction_id: Optional[int] = Field(None, description="Corrected transaction (traceability only)")

    @field_validator("original_purpose", "corrected_purpose")
    @classmethod
    def validate_purpose(cls, v: str) -> str:
        return _validate_purpose(v, CORRECTION_PURPOSES)


class WriteOffRequest(BaseModel):
    """Request model for a write-off suggestion."""

    description: str = Field(..., min_length=1, max_length=1000)
    purpose: Optional[str] = Field(None, description="Current purpose (business/personal), if known")


class CreateTransactionRequest(BaseModel):
    """Request model for creating a transaction."""

    description: str = Field(..., min_length=1, max_length=1000)
    amount: Union[float, str] = Field(..., description="Non-zero amount")
    date: str = Field(..., description="Transaction date (ISO, MM/DD/YYYY or MM-DD-YYYY)")
    category: Optional[str] = Field(None, max_length=100)


class UpdateClassificationRequest(BaseModel):
    """Request model for a human edit of a transaction's classification."""

    purpose: Optional[str] = None
    is_write_off: Optional[bool] = None
    reason: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=100)
    tag: Optional[str] = Field(None, max_length=100)

    @field_validator("purpose")
    @classmethod
    def validate_purpose(cls, v: Optional[str]) -> Optional[str]:
        return _validate_purpose(v, PURPOSES)


class ImportRow(BaseModel):
    """One already-parsed CSV row."""

    date: Any = None
    description: Optional[str] = None
    amount: Any = None
    category: Optional[str] = None


class ImportTransactionsRequest(BaseModel):
    """Request model for bulk transaction import."""

    transactions: List[ImportRow] = Field(..., description="Parsed rows to import")


class TaxProfileRequest(BaseModel):
    """Request model for creating or replacing the tax profile."""

    profile: Dict[str, Any] = Field(
        ...,
        description=(
            "Free-form profile, e.g. business_type, has_home_office, home_office_square_feet, "
            "total_home_square_feet, uses_vehicle_for_business, business_miles_percentage, state"
        ),
    )
