"""Relevance retrieval over a user's past corrections.

Scores each recent correction against a new transaction description with a
bag-of-words heuristic and returns the best few as few-shot examples for the
classification prompt, plus a confidence boost justified by them.

Score signals (summed, total capped at 2.0):
    substring containment     1.0
    word overlap              0.8 x share of query tokens found
    topic group in common     0.6
    same merchant             0.5 (0.4 via capitalized-token fallback)
    recency                   up to 0.2, gone after 30 days
    purpose flipped           0.3
"""

import logging
import re
from datetime import datetime
from typing import List, Optional, Set

from taxxy.agents.classification.model import Correction, RetrievalResult, ScoredCorrection
from taxxy.agents.classification.tables import CATEGORY_GROUPS, MERCHANT_PATTERNS, STOP_WORDS
from taxxy.database.correction_store import CorrectionStore
from taxxy.utils.sanitize import sanitize_description

logger = logging.getLogger(__name__)

SUBSTRING_WEIGHT = 1.0
WORD_OVERLAP_WEIGHT = 0.8
CATEGORY_WEIGHT = 0.6
MERCHANT_WEIGHT = 0.5
MERCHANT_FALLBACK_FACTOR = 0.8
RECENCY_WEIGHT = 0.2
RECENCY_WINDOW_DAYS = 30
PURPOSE_CHANGE_BONUS = 0.3
MAX_SCORE = 2.0

CANDIDATE_LIMIT = 50
MIN_SCORE = 0.1
TOP_K = 5

ADJUSTMENT_PER_WORD = 0.05
ADJUSTMENT_PER_MATCH_CAP = 0.15
ADJUSTMENT_CAP = 0.3

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
_CAPITALIZED = re.compile(r"\b[A-Z][A-Za-z0-9&']*")


def _raw_tokens(text: str) -> List[str]:
    return [t for t in _TOKEN_SPLIT.split((text or "").lower()) if t]


def meaningful_tokens(text: str) -> Set[str]:
    """Lowercase tokens minus stop-words and tokens of 2 characters or less."""
    return {t for t in _raw_tokens(text) if len(t) > 2 and t not in STOP_WORDS}


def _long_tokens(text: str) -> Set[str]:
    return {t for t in _raw_tokens(text) if len(t) > 3}


def _topic_groups(text: str) -> Set[str]:
    tokens = set(_raw_tokens(text))
    return {name for name, keywords in CATEGORY_GROUPS if tokens.intersection(keywords)}


def _merchants(text: str) -> Set[str]:
    return {name for name, pattern in MERCHANT_PATTERNS if pattern.search(text or "")}


def _substring_score(query: str, candidate: str) -> float:
    q = query.strip().lower()
    c = candidate.strip().lower()
    if q and c and (q in c or c in q):
        return SUBSTRING_WEIGHT
    return 0.0


def _word_overlap_score(query: str, candidate: str) -> float:
    query_tokens = meaningful_tokens(query)
    if not query_tokens:
        return 0.0
    shared = query_tokens & meaningful_tokens(candidate)
    return WORD_OVERLAP_WEIGHT * (len(shared) / len(query_tokens))


def _category_score(query: str, candidate: str) -> float:
    if _topic_groups(query) & _topic_groups(candidate):
        return CATEGORY_WEIGHT
    return 0.0


def _merchant_score(query: str, candidate: str) -> float:
    query_merchants = _merchants(query)
    candidate_merchants = _merchants(candidate)
    if query_merchants and candidate_merchants:
        return MERCHANT_WEIGHT if query_merchants & candidate_merchants else 0.0

    # No fixed pattern on one side; compare capitalized names instead
    query_names = {m.lower() for m in _CAPITALIZED.findall(query or "")}
    candidate_names = {m.lower() for m in _CAPITALIZED.findall(candidate or "")}
    for a in query_names:
        for b in candidate_names:
            shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
            if len(shorter) > 3 and shorter in longer:
                return MERCHANT_WEIGHT * MERCHANT_FALLBACK_FACTOR
    return 0.0


def _recency_score(timestamp: datetime, now: datetime) -> float:
    days = max(0.0, (now - timestamp).total_seconds() / 86400)
    return max(0.0, (RECENCY_WINDOW_DAYS - days) / RECENCY_WINDOW_DAYS) * RECENCY_WEIGHT


def score_correction(description: str, correction: Correction, now: Optional[datetime] = None) -> float:
    """
    Relevance of one correction to a new description.

    Pure function of its inputs; `now` defaults to the current UTC time.

    Args:
        description: New transaction description
        correction: Past correction
        now: Reference time for the recency signal

    Returns:
        Score in [0, 2.0]
    """
    now = now or datetime.utcnow()
    candidate = correction.transaction_description or ""

    score = (
        _substring_score(description, candidate)
        + _word_overlap_score(description, candidate)
        + _category_score(description, candidate)
        + _merchant_score(description, candidate)
        + _recency_score(correction.timestamp, now)
    )
    if correction.purpose_changed:
        score += PURPOSE_CHANGE_BONUS

    return min(score, MAX_SCORE)


def rank_corrections(
    description: str,
    corrections: List[Correction],
    owner: str,
    now: Optional[datetime] = None,
) -> List[ScoredCorrection]:
    """
    Score, filter and order candidate corrections.

    Candidates must already be newest first; the stable sort then breaks
    score ties in favour of the newer correction.
    """
    now = now or datetime.utcnow()
    scored = []
    for correction in corrections:
        # Never let another user's correction through, whatever the store returned
        if not correction.owner or correction.owner != owner:
            continue
        score = score_correction(description, correction, now)
        if score > MIN_SCORE:
            scored.append(ScoredCorrection(correction=correction, score=score))

    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:TOP_K]


def compute_confidence_adjustment(matches: List[ScoredCorrection], description: str) -> float:
    """
    Confidence boost from matched corrections.

    Each match contributes 0.05 per shared word longer than 3 characters,
    at most 0.15; the total is capped at 0.3.
    """
    query_words = _long_tokens(description)
    if not query_words:
        return 0.0

    total = 0.0
    for match in matches:
        overlap = len(query_words & _long_tokens(match.correction.transaction_description))
        total += min(ADJUSTMENT_PER_MATCH_CAP, overlap * ADJUSTMENT_PER_WORD)

    return round(min(total, ADJUSTMENT_CAP), 4)


class CorrectionRetriever:
    """Finds a user's past corrections relevant to a new description."""

    def __init__(self, store: CorrectionStore, candidate_limit: int = CANDIDATE_LIMIT):
        """
        Initialize retriever

        Args:
            store: Correction log to read from
            candidate_limit: How many recent corrections to consider
        """
        self.store = store
        self.candidate_limit = candidate_limit

    def find_relevant_corrections(
        self,
        description: str,
        owner: Optional[str],
        now: Optional[datetime] = None,
    ) -> List[ScoredCorrection]:
        """
        Top matching corrections for a description.

        Never raises: an anonymous owner, an empty description or a storage
        failure all yield an empty list.

        Args:
            description: New transaction description
            owner: Authenticated user id (None or "" when unresolved)
            now: Reference time for recency (defaults to now)

        Returns:
            Up to 5 ScoredCorrection, best first
        """
        if not owner:
            logger.warning("No owner resolved for correction lookup; skipping retrieval")
            return []

        if not description or not description.strip():
            return []

        try:
            candidates = self.store.list_recent(owner, limit=self.candidate_limit)
        except Exception as e:
            logger.error(f"Failed to fetch corrections for user {owner}: {e}", exc_info=True)
            return []

        matches = rank_corrections(description, candidates, owner, now)
        logger.debug(
            f"Found {len(matches)} relevant corrections for '{sanitize_description(description)}' "
            f"(out of {len(candidates)} candidates)"
        )
        return matches

    def compute_confidence_adjustment(self, matches: List[ScoredCorrection], description: str) -> float:
        return compute_confidence_adjustment(matches, description)

    def retrieve(
        self,
        description: str,
        owner: Optional[str],
        now: Optional[datetime] = None,
    ) -> RetrievalResult:
        """Matches and confidence adjustment in one call."""
        matches = self.find_relevant_corrections(description, owner, now)
        return RetrievalResult(
            matches=matches,
            confidence_adjustment=compute_confidence_adjustment(matches, description),
        )
