"""Keyword heuristics used when the model output is unusable."""

import re
from typing import List

from taxxy.agents.classification.tables import (
    BUSINESS_INDICATORS,
    BUSINESS_TAG_KEYWORDS,
    CATEGORY_KEYWORDS,
)

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def _tokens(description: str) -> List[str]:
    return [t for t in _TOKEN_SPLIT.split((description or "").lower()) if t]


def extract_tag(description: str) -> str:
    """
    Derive a short tag from the description.

    Returns "business-<token>" for the first token containing a business
    keyword, else the first token longer than 3 characters, else "transaction".
    """
    tokens = _tokens(description)

    for token in tokens:
        if any(keyword in token for keyword in BUSINESS_TAG_KEYWORDS):
            return f"business-{token}"

    for token in tokens:
        if len(token) > 3:
            return token

    return "transaction"


def guess_category(description: str) -> str:
    """Ordered substring lookup; descriptions can match several categories."""
    desc = (description or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in desc for keyword in keywords):
            return category
    return "unassigned"


def infer_purpose(description: str) -> str:
    """Business only on a clear indicator; personal otherwise (lower audit risk)."""
    desc = (description or "").lower()
    if any(indicator in desc for indicator in BUSINESS_INDICATORS):
        return "business"
    return "personal"
