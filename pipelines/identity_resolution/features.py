"""
Feature Extraction for Identity Resolution.

Responsibilities:
- Compare individual name tokens (exact, containment, edit distance).

Non-Responsibilities:
- No weighting logic.
- No threshold logic.
- No persistence.

Invariant:
Every comparison is total: empty tokens never raise.
"""

from rapidfuzz.distance import Levenshtein

FULL = "full"
PARTIAL = "partial"

EDIT_SIMILARITY_MIN = 0.8
EDIT_MIN_LEN = 2


def compare_tokens(schedule_token: str, registry_token: str):
    """Return FULL, PARTIAL or None for a single token pair."""
    if schedule_token == registry_token:
        return FULL
    if schedule_token in registry_token or registry_token in schedule_token:
        return PARTIAL
    if len(schedule_token) > EDIT_MIN_LEN and len(registry_token) > EDIT_MIN_LEN:
        # 1 - distance / longer length
        if Levenshtein.normalized_similarity(schedule_token, registry_token) > EDIT_SIMILARITY_MIN:
            return PARTIAL
    return None


def credit_token(schedule_token: str, registry_tokens):
    """An identical token anywhere wins over an earlier partial one."""
    if schedule_token in registry_tokens:
        return FULL
    for registry_token in registry_tokens:
        if compare_tokens(schedule_token, registry_token) is not None:
            return PARTIAL
    return None
