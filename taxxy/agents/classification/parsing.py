"""Parsing and validation of untrusted model output."""

import json
import logging
import math
from typing import Any, Dict, Optional

from taxxy.agents.classification.heuristics import extract_tag, guess_category, infer_purpose
from taxxy.agents.classification.model import (
    PURPOSES,
    ClassificationResult,
    ParsedOk,
    ParseFailed,
    ParseOutcome,
    WriteOff,
)
from taxxy.utils.sanitize import sanitize_for_logging

logger = logging.getLogger(__name__)

UNCERTAIN_REASON = "Classification uncertain - manual review needed"
FALLBACK_CONFIDENCE = 0.15
DEFAULT_CONFIDENCE = 0.2
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95
FAILURE_CONFIDENCE = 0.05


def extract_json_object(text: str) -> ParseOutcome:
    """
    Slice from the first '{' to the last '}' and parse it.

    The model is not trusted to return only JSON, so surrounding prose is
    ignored. Anything but a JSON object is a parse failure.
    """
    if not text:
        return ParseFailed(raw_text=text or "")

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return ParseFailed(raw_text=text)

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse JSON from model output: {e}")
        return ParseFailed(raw_text=text)

    if not isinstance(parsed, dict):
        return ParseFailed(raw_text=text)
    return ParsedOk(data=parsed)


def keyword_fallback(description: str) -> Dict[str, Any]:
    """Conservative classification built from keywords alone."""
    return {
        "tag": extract_tag(description),
        "category": guess_category(description),
        "confidence": FALLBACK_CONFIDENCE,
        "purpose": infer_purpose(description),
        "writeOff": {"isWriteOff": False, "reason": UNCERTAIN_REASON},
    }


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def coerce_write_off(raw: Any) -> WriteOff:
    """Accepts the camelCase shape the prompt asks for, or snake_case."""
    if not isinstance(raw, dict):
        return WriteOff(is_write_off=False, reason="")
    flag = raw.get("isWriteOff", raw.get("is_write_off", False))
    return WriteOff(is_write_off=_as_bool(flag), reason=_as_text(raw.get("reason")))


def reported_confidence(data: Dict[str, Any]) -> Optional[float]:
    """The model's confidence if it is a finite number, else None."""
    value = data.get("confidence")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def blend_confidence(base: Optional[float], adjustment: float) -> float:
    """Base (or 0.2) plus the correction boost, clamped to [0.1, 0.95]."""
    start = DEFAULT_CONFIDENCE if base is None else base
    return round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, start + adjustment)), 4)


def validate_classification(
    data: Dict[str, Any],
    description: str,
    confidence_adjustment: float = 0.0,
) -> ClassificationResult:
    """
    Coerce a parsed object into a ClassificationResult.

    Applied to model output and to the keyword fallback alike, so every
    missing or wrongly-typed field ends up with the same default.
    """
    tag = _as_text(data.get("tag")) or extract_tag(description)
    category = _as_text(data.get("category")) or "unassigned"

    purpose = _as_text(data.get("purpose")).lower()
    if purpose not in PURPOSES:
        purpose = infer_purpose(description)

    write_off = coerce_write_off(data.get("writeOff", data.get("write_off")))

    return ClassificationResult(
        tag=tag,
        category=category,
        confidence=blend_confidence(reported_confidence(data), confidence_adjustment),
        purpose=purpose,
        write_off=write_off,
    )


def parse_classification_response(
    text: str,
    description: str,
    confidence_adjustment: float = 0.0,
) -> ClassificationResult:
    """Model text to a validated result, via the keyword fallback when unparsable."""
    outcome = extract_json_object(text)
    if isinstance(outcome, ParseFailed):
        logger.warning(
            f"Could not parse classification response, using keyword fallback: "
            f"{sanitize_for_logging(outcome.raw_text)}"
        )
        data = keyword_fallback(description)
    else:
        data = outcome.data
    return validate_classification(data, description, confidence_adjustment)


def failure_result(description: str, reason: str) -> ClassificationResult:
    """Fixed result for when the classification call itself failed."""
    return ClassificationResult(
        tag=extract_tag(description),
        category="unassigned",
        confidence=FAILURE_CONFIDENCE,
        purpose="personal",
        write_off=WriteOff(is_write_off=False, reason=reason),
    )
