"""Pydantic response models for the Taxxy API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from taxxy.agents.classification.model import ClassificationResult, Correction, ScoredCorrection


class WriteOffResponse(BaseModel):
    """Write-off eligibility."""

    is_write_off: bool
    reason: str


class ClassificationResponse(BaseModel):
    """Normalized classification result."""

    tag: str
    category: str
    confidence: float
    purpose: str
    write_off: WriteOffResponse
    learned_from: int
    correction_influence: float
    needs_review: bool
    learning_note: Optional[str] = None

    @classmethod
    def from_result(cls, result: ClassificationResult, review_threshold: float) -> "ClassificationResponse":
        return cls(
            **result.to_dict(),
            needs_review=result.needs_review(review_threshold),
            learning_note=result.learning_note,
        )


class CorrectionResponse(BaseModel):
    """A stored correction."""

    id: Optional[int]
    transaction_id: Optional[int]
    transaction_description: str
    original_purpose: str
    corrected_purpose: str
    original_reason: str
    corrected_reason: str
    timestamp: str

    @classmethod
    def from_correction(cls, correction: Correction) -> "CorrectionResponse":
        data = correction.to_dict()
        data.pop("owner")
        return cls(**data)


class ScoredCorrectionResponse(BaseModel):
    """A past correction with its relevance score."""

    correction: CorrectionResponse
    score: float

    @classmethod
    def from_match(cls, match: ScoredCorrection) -> "ScoredCorrectionResponse":
        return cls(
            correction=CorrectionResponse.from_correction(match.correction),
            score=round(match.score, 4),
        )


class ClassifyResponse(BaseModel):
    """Classification plus the corrections that informed it."""

    result: ClassificationResponse
    matches: List[ScoredCorrectionResponse]


class RelevantCorrectionsResponse(BaseModel):
    """Corrections relevant to a description and the boost they justify."""

    matches: List[ScoredCorrectionResponse]
    confidence_adjustment: float


class TransactionResponse(BaseModel):
    """A stored transaction with its classification."""

    id: int
    description: str
    amount: float
    date: Optional[str]
    tag: Optional[str]
    category: Optional[str]
    confidence: Optional[float]
    purpose: Optional[str]
    write_off: WriteOffResponse
    learned_from: int
    correction_influence: float
    reviewed: bool
    classified_at: Optional[str]


class TransactionsResponse(BaseModel):
    """Response model for listing transactions."""

    rows: List[TransactionResponse]
    total: int


class UpdateClassificationResponse(BaseModel):
    """Updated transaction and the correction recorded for it, if any."""

    transaction: TransactionResponse
    correction: Optional[CorrectionResponse] = None


class ImportSummaryResponse(BaseModel):
    """Outcome of a bulk import."""

    imported: int
    skipped: int
    ai_classified: int
    needs_review: int
    errors: List[str]


class LearningTrendsResponse(BaseModel):
    weekly_corrections: List[int]


class LearningStatsResponse(BaseModel):
    """How much the classifier has learned from the user."""

    total_corrections: int
    recent_corrections: int
    avg_confidence_improvement: float
    top_categories: List[Dict[str, Any]]
    learning_trends: LearningTrendsResponse


class TaxProfileResponse(BaseModel):
    """The user's tax profile, or null when none is stored."""

    profile: Optional[Dict[str, Any]] = None
