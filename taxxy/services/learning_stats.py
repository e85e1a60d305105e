"""Learning progress statistics over a user's corrections."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from taxxy.agents.classification.model import Correction
from taxxy.agents.classification.tables import STATS_CATEGORIES
from taxxy.database.correction_store import CorrectionStore

RECENT_WINDOW_DAYS = 30
TREND_WEEKS = 8
TOP_CATEGORY_COUNT = 5


@dataclass
class LearningStats:
    """How much the classifier has learned from a user."""

    total_corrections: int = 0
    recent_corrections: int = 0
    avg_confidence_improvement: float = 0.0
    top_categories: List[Dict[str, int]] = field(default_factory=list)
    weekly_corrections: List[int] = field(default_factory=lambda: [0] * TREND_WEEKS)

    def to_dict(self) -> dict:
        return {
            "total_corrections": self.total_corrections,
            "recent_corrections": self.recent_corrections,
            "avg_confidence_improvement": self.avg_confidence_improvement,
            "top_categories": self.top_categories,
            "learning_trends": {"weekly_corrections": self.weekly_corrections},
        }


def infer_stats_category(description: str) -> str:
    desc = (description or "").lower()
    for label, keywords in STATS_CATEGORIES:
        if any(keyword in desc for keyword in keywords):
            return label
    return "Other"


def weekly_trend(corrections: List[Correction], now: datetime) -> List[int]:
    """Corrections per week for the last 8 weeks, most recent week last."""
    weeks = [0] * TREND_WEEKS
    for correction in corrections:
        weeks_ago = int((now - correction.timestamp).total_seconds() // (7 * 24 * 3600))
        if 0 <= weeks_ago < TREND_WEEKS:
            weeks[TREND_WEEKS - 1 - weeks_ago] += 1
    return weeks


def estimate_confidence_improvement(total: int) -> float:
    # Rough heuristic: improvement grows with corrections, up to 15 points at 20 corrections
    if total == 0:
        return 0.0
    return round(min(total / 20, 1.0) * 15, 2)


def compute_learning_stats(corrections: List[Correction], now: Optional[datetime] = None) -> LearningStats:
    """
    Summarize a user's corrections.

    Args:
        corrections: All corrections of one user
        now: Reference time (defaults to now)

    Returns:
        LearningStats
    """
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=RECENT_WINDOW_DAYS)

    counts = Counter(infer_stats_category(c.transaction_description) for c in corrections)
    # Counter.most_common keeps first-seen order on ties
    top = [
        {"category": category, "corrections": count}
        for category, count in counts.most_common(TOP_CATEGORY_COUNT)
    ]

    return LearningStats(
        total_corrections=len(corrections),
        recent_corrections=sum(1 for c in corrections if c.timestamp >= cutoff),
        avg_confidence_improvement=estimate_confidence_improvement(len(corrections)),
        top_categories=top,
        weekly_corrections=weekly_trend(corrections, now),
    )


def get_learning_stats(store: CorrectionStore, owner: str, now: Optional[datetime] = None) -> LearningStats:
    """Learning stats for one user read from the correction log."""
    return compute_learning_stats(store.list_for_owner(owner), now)
