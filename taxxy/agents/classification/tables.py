"""Static keyword tables used by retrieval scoring and the keyword fallbacks.

Each table is plain data so new groups or merchants can be added without
touching control flow. Keywords are lowercase.
"""

import re
from typing import List, Pattern, Tuple

# Words ignored by word-overlap scoring (tokens of 2 chars or less are dropped separately)
STOP_WORDS = frozenset({
    "the", "and", "for", "with", "from", "this", "that", "these", "those",
    "are", "was", "were", "been", "has", "have", "had", "not", "but", "all",
    "any", "can", "will", "into", "out", "per", "via", "our", "your", "you",
    "its", "his", "her", "their", "they", "them", "who", "what", "when",
    "where", "which", "how", "also", "just", "than", "then", "too", "very",
    "inc", "llc", "ltd", "corp", "com", "www", "pos", "debit", "credit",
    "card", "purchase", "payment", "transaction", "ref",
})

# Topic groups for category co-membership
CATEGORY_GROUPS: List[Tuple[str, List[str]]] = [
    ("software", [
        "software", "subscription", "saas", "license", "licence", "cloud",
        "app", "apps", "adobe", "photoshop", "illustrator", "microsoft",
        "github", "slack", "zoom", "dropbox", "notion", "figma", "canva",
        "aws", "hosting", "domain", "godaddy", "squarespace",
    ]),
    ("office_supplies", [
        "office", "supplies", "supply", "staples", "paper", "printer", "ink",
        "toner", "stationery", "desk", "chair", "pens", "notebook", "depot",
    ]),
    ("travel", [
        "travel", "flight", "flights", "airline", "airlines", "airfare",
        "hotel", "hotels", "airbnb", "lodging", "motel", "expedia",
        "booking", "rental", "delta", "southwest", "marriott", "hilton",
    ]),
    ("meals", [
        "meal", "meals", "food", "restaurant", "lunch", "dinner",
        "breakfast", "coffee", "cafe", "starbucks", "doordash", "grubhub",
        "ubereats", "catering", "bistro", "pizza",
    ]),
    ("marketing", [
        "marketing", "ads", "advertising", "advert", "promotion", "campaign",
        "seo", "mailchimp", "flyers", "branding", "sponsored",
    ]),
    ("professional_services", [
        "consulting", "consultant", "legal", "lawyer", "attorney",
        "accounting", "accountant", "bookkeeping", "cpa", "freelance",
        "contractor", "upwork", "fiverr", "notary",
    ]),
    ("communications", [
        "phone", "internet", "wireless", "mobile", "verizon", "comcast",
        "xfinity", "tmobile", "telephone", "broadband", "cellular", "fiber",
    ]),
    ("fuel_transport", [
        "gas", "fuel", "gasoline", "shell", "chevron", "exxon", "parking",
        "toll", "tolls", "uber", "lyft", "taxi", "mileage", "transit",
    ]),
]


def _merchant(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


# Known merchant name patterns for merchant co-membership
MERCHANT_PATTERNS: List[Tuple[str, Pattern]] = [
    ("amazon", _merchant(r"\bamazon\b|\bamzn\b")),
    ("google", _merchant(r"\bgoogle\b|\bgsuite\b")),
    ("uber", _merchant(r"\buber\b(?!\s*eats)")),
    ("uber_eats", _merchant(r"\buber\s*eats\b|\bubereats\b")),
    ("lyft", _merchant(r"\blyft\b")),
    ("starbucks", _merchant(r"\bstarbucks\b|\bsbux\b")),
    ("apple", _merchant(r"\bapple\b|\bitunes\b")),
    ("microsoft", _merchant(r"\bmicrosoft\b|\bmsft\b")),
    ("walmart", _merchant(r"\bwal-?mart\b")),
    ("target", _merchant(r"\btarget\b")),
    ("costco", _merchant(r"\bcostco\b")),
    ("home_depot", _merchant(r"\bhome\s*depot\b")),
    ("office_depot", _merchant(r"\boffice\s*depot\b|\bofficemax\b")),
    ("staples", _merchant(r"\bstaples\b")),
    ("netflix", _merchant(r"\bnetflix\b")),
    ("spotify", _merchant(r"\bspotify\b")),
    ("paypal", _merchant(r"\bpaypal\b")),
    ("doordash", _merchant(r"\bdoordash\b")),
    ("zoom", _merchant(r"\bzoom\b")),
    ("github", _merchant(r"\bgithub\b")),
    ("verizon", _merchant(r"\bverizon\b")),
    ("comcast", _merchant(r"\bcomcast\b|\bxfinity\b")),
    ("fedex", _merchant(r"\bfedex\b")),
    ("usps", _merchant(r"\busps\b")),
    ("shell", _merchant(r"\bshell\s+(oil|gas|station)\b")),
]

# Substrings that make a tag "business-<token>"
BUSINESS_TAG_KEYWORDS = ("software", "office", "meeting", "client", "business", "professional")

# Ordered substring checks; first match wins
CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("software", ("software", "subscription")),
    ("office-supplies", ("office", "supplies")),
    ("travel", ("travel", "flight")),
    ("meals", ("food", "restaurant", "meal")),
    ("transportation", ("gas", "fuel")),
]

# Any of these in a description infers a business purpose
BUSINESS_INDICATORS = (
    "software", "subscription", "office", "client", "meeting",
    "professional", "business", "work", "conference", "training",
)

# Display categories for learning statistics; first match wins
STATS_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Software", ("software", "subscription")),
    ("Office Supplies", ("office", "supplies")),
    ("Travel", ("travel", "flight")),
    ("Meals", ("food", "restaurant")),
    ("Transportation", ("gas", "fuel")),
    ("Marketing", ("marketing", "ads")),
]
