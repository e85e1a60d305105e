"""Data models for transaction classification."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

PURPOSES = ("business", "personal")
CORRECTION_PURPOSES = ("business", "personal", "unknown")


@dataclass(frozen=True)
class Correction:
    """A user's override of an earlier classification. Immutable once stored."""

    owner: str
    transaction_description: str
    original_purpose: str = "unknown"
    corrected_purpose: str = "unknown"
    original_reason: str = ""
    corrected_reason: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)
    transaction_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def purpose_changed(self) -> bool:
        return self.original_purpose != self.corrected_purpose

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "owner": self.owner,
            "transaction_id": self.transaction_id,
            "transaction_description": self.transaction_description,
            "original_purpose": self.original_purpose,
            "corrected_purpose": self.corrected_purpose,
            "original_reason": self.original_reason,
            "corrected_reason": self.corrected_reason,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ScoredCorrection:
    """A past correction together with its relevance to a new description."""

    correction: Correction
    score: float


@dataclass
class RetrievalResult:
    """Relevant corrections and the confidence boost they justify."""

    matches: List[ScoredCorrection] = field(default_factory=list)
    confidence_adjustment: float = 0.0


@dataclass
class ClassificationRequest:
    """Input for a single classification."""

    description: str
    amount: Optional[float] = None
    tax_profile: Optional[Dict[str, Any]] = None


@dataclass
class WriteOff:
    """Write-off eligibility and its explanation."""

    is_write_off: bool = False
    reason: str = ""

    def to_dict(self) -> dict:
        return {"is_write_off": self.is_write_off, "reason": self.reason}


@dataclass
class ClassificationResult:
    """Normalized classification. Every field is always populated."""

    tag: str
    category: str = "unassigned"
    confidence: float = 0.05
    purpose: str = "personal"
    write_off: WriteOff = field(default_factory=WriteOff)
    learned_from: int = 0
    correction_influence: float = 0.0

    def needs_review(self, threshold: float = 0.7) -> bool:
        """Low-confidence results should be checked by a human."""
        return self.confidence < threshold

    @property
    def learning_note(self) -> Optional[str]:
        if self.learned_from <= 0:
            return None
        noun = "correction" if self.learned_from == 1 else "corrections"
        return f"AI used {self.learned_from} of your past {noun}"

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "tag": self.tag,
            "category": self.category,
            "confidence": self.confidence,
            "purpose": self.purpose,
            "write_off": self.write_off.to_dict(),
            "learned_from": self.learned_from,
            "correction_influence": self.correction_influence,
        }


@dataclass
class ParsedOk:
    """Model output that contained a JSON object."""

    data: Dict[str, Any]


@dataclass
class ParseFailed:
    """Model output with no usable JSON object."""

    raw_text: str


ParseOutcome = Union[ParsedOk, ParseFailed]
