"""Prompt templates for classification and write-off suggestions."""

import json
import math
from typing import Any, Dict, List, Optional

from taxxy.agents.classification.model import ScoredCorrection

MAX_PROMPT_EXAMPLES = 3

CLASSIFICATION_SCHEMA = {
    "tag": "short label, e.g. 'software-subscription'",
    "category": "expense category, e.g. 'software', 'travel', 'meals'",
    "confidence": "number between 0 and 1",
    "purpose": "'business' or 'personal'",
    "writeOff": {"isWriteOff": "true or false", "reason": "brief explanation"},
}

# Profile keys rendered by _format_tax_profile with their own wording
_PROFILE_KEYS_HANDLED = {
    "business_type", "business_name", "has_employees", "has_home_office",
    "home_office_square_feet", "total_home_square_feet",
    "uses_vehicle_for_business", "business_miles_percentage",
    "filing_status", "state", "user_id", "id",
}


def _format_amount(amount: Optional[float]) -> Optional[str]:
    if amount is None:
        return None
    return f"${abs(amount):,.2f} ({'income' if amount > 0 else 'expense'})"


def _office_share(office_sqft: Any, home_sqft: Any) -> Optional[int]:
    """Percent of the home used as office, or None when the values are not numbers."""
    try:
        share = float(office_sqft) / float(home_sqft) * 100
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    if not math.isfinite(share):
        return None
    return round(share)


def _format_tax_profile(profile: Dict[str, Any]) -> List[str]:
    lines = []

    business_type = profile.get("business_type")
    if business_type:
        name = profile.get("business_name")
        named = f' called "{name}"' if name else ""
        staffing = "with employees" if profile.get("has_employees") else "as a sole proprietor"
        lines.append(f"The user operates a {business_type}{named} {staffing}.")
    elif "business_type" in profile:
        lines.append("The user does not have a business.")

    office_sqft = profile.get("home_office_square_feet")
    home_sqft = profile.get("total_home_square_feet")
    if profile.get("has_home_office"):
        if office_sqft and home_sqft:
            share = _office_share(office_sqft, home_sqft)
            if share is None:
                lines.append(f"They have a home office of {office_sqft} sq ft (home: {home_sqft} sq ft).")
            else:
                lines.append(f"They have a home office of {office_sqft} sq ft ({share}% of their home).")
        else:
            lines.append("They have a home office but square footage details are not specified.")
    elif "has_home_office" in profile:
        lines.append("They do not have a home office.")

    if profile.get("uses_vehicle_for_business"):
        miles = profile.get("business_miles_percentage")
        if miles:
            lines.append(f"They use {miles}% of their vehicle for business purposes.")
        else:
            lines.append("They use their vehicle for business but the percentage is not specified.")
    elif "uses_vehicle_for_business" in profile:
        lines.append("They do not use a vehicle for business.")

    if profile.get("filing_status"):
        lines.append(f"Filing status: {profile['filing_status']}.")
    if profile.get("state"):
        lines.append(f"Filing state: {profile['state']}.")

    for key in sorted(profile):
        value = profile[key]
        if key in _PROFILE_KEYS_HANDLED or value in (None, "", [], {}):
            continue
        lines.append(f"{key.replace('_', ' ').capitalize()}: {value}.")

    return lines


def _format_pattern(index: int, match: ScoredCorrection) -> str:
    c = match.correction
    lines = [
        f'Pattern {index}: "{c.transaction_description}"',
        f"  AI said: {c.original_purpose} -> user corrected to: {c.corrected_purpose}",
    ]
    if c.corrected_reason:
        lines.append(f"  User's reason: {c.corrected_reason}")
    elif c.original_reason:
        lines.append(f"  Original reason: {c.original_reason}")
    lines.append(f"  Relevance: {match.score:.2f}")
    return "\n".join(lines)


def build_classification_prompt(
    description: str,
    matches: List[ScoredCorrection],
    confidence_adjustment: float = 0.0,
    amount: Optional[float] = None,
    tax_profile: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Build the classification prompt.

    Sections for past corrections and the tax profile are left out entirely
    when there is nothing to show.
    """
    sections = [
        "You are Taxxy, an assistant that classifies financial transactions for "
        "personal and small-business taxes. Decide whether the transaction is a "
        "business or personal expense, give it a short tag and an expense "
        "category, and decide whether it is a deductible business write-off.",
        "Respond ONLY with a JSON object in exactly this shape:\n"
        + json.dumps(CLASSIFICATION_SCHEMA, indent=2),
    ]

    examples = matches[:MAX_PROMPT_EXAMPLES]
    if examples:
        patterns = "\n\n".join(
            _format_pattern(i, m) for i, m in enumerate(examples, start=1)
        )
        sections.append(
            "LEARNED FROM THIS USER'S PAST CORRECTIONS:\n"
            f"{patterns}\n\n"
            "Lesson: when the transaction resembles these patterns, follow the user's "
            "corrected classification. These matches add "
            f"{confidence_adjustment:.2f} to your confidence, so report your own "
            "confidence before that boost."
        )

    if tax_profile:
        profile_lines = _format_tax_profile(tax_profile)
        if profile_lines:
            sections.append(
                "USER TAX PROFILE:\n" + "\n".join(f"- {line}" for line in profile_lines)
            )

    transaction_lines = [f'- Description: "{description}"']
    formatted_amount = _format_amount(amount)
    if formatted_amount:
        transaction_lines.append(f"- Amount: {formatted_amount}")
    sections.append("TRANSACTION TO CLASSIFY:\n" + "\n".join(transaction_lines))

    sections.append(
        "If you are unsure whether it is a business expense, choose 'personal' "
        "and lower your confidence."
    )
    return "\n\n".join(sections)


def build_write_off_prompt(
    description: str,
    purpose: Optional[str],
    matches: List[ScoredCorrection],
) -> str:
    """Prompt asking only for write-off eligibility, with past corrections as guidance."""
    safe_purpose = purpose or "unknown"

    examples = []
    for i, match in enumerate(matches, start=1):
        c = match.correction
        examples.append(
            f"Example {i}:\n"
            f'Original: "{c.original_reason}" ({c.original_purpose})\n'
            f'Corrected: "{c.corrected_reason}" ({c.corrected_purpose})'
        )
    correction_examples = "\n\n".join(examples) or "(no prior examples)"

    return f"""You are a financial assistant. Determine whether the following transaction is a business write-off.

Respond ONLY with a JSON object like this:
{{
  "writeOff": {{
    "isWriteOff": true,
    "reason": "Brief explanation here"
  }}
}}

Transaction:
Description: "{description}"
Purpose: "{safe_purpose}"

Use these previous user corrections as guidance:
{correction_examples}
"""
