"""
Scoring Logic for Identity Resolution (v1).

Responsibilities:
- Compute a deterministic 0-100 score between a schedule name and a registry name.

Non-Responsibilities:
- No database access.
- No candidate ranking.
- No threshold decisions.

Invariant:
Given identical inputs, this module must always return the same score.
The score is directional: the first-token bonus favours surname-first
schedule names, so score(a, b) need not equal score(b, a).
"""

from refpay.normalize import normalize_name

from .features import FULL, PARTIAL, credit_token

EXACT_SCORE = 100
CONTAINS_SCORE = 90
FULL_WEIGHT = 80
PARTIAL_WEIGHT = 50
FIRST_TOKEN_BONUS = 20
SURNAME_BONUS = 15
SURNAME_MIN_LEN = 3


def _clamp(score: float) -> int:
    score = max(0.0, min(100.0, score))
    return int(score + 0.5)


def token_score(schedule_parts, registry_parts) -> float:
    """Weighted share of schedule tokens that fully or partially match."""
    total = max(len(schedule_parts), len(registry_parts))
    if total == 0:
        return 0.0

    full = partial = 0
    for token in schedule_parts:
        outcome = credit_token(token, registry_parts)
        if outcome == FULL:
            full += 1
        elif outcome == PARTIAL:
            partial += 1

    return (full / total) * FULL_WEIGHT + (partial / total) * PARTIAL_WEIGHT


def first_token_bonus(schedule_parts, registry_parts) -> int:
    if not schedule_parts or not registry_parts:
        return 0
    first = schedule_parts[0]
    if first == registry_parts[0]:
        return FIRST_TOKEN_BONUS
    # Schedules usually lead with the surname
    if len(first) > SURNAME_MIN_LEN and first in registry_parts:
        return SURNAME_BONUS
    return 0


def calculate_similarity(schedule_name: str, registry_name: str) -> int:
    sched_norm = normalize_name(schedule_name)
    ref_norm = normalize_name(registry_name)

    if sched_norm == ref_norm:
        return EXACT_SCORE
    # An empty normalized name is contained in any other
    if sched_norm in ref_norm or ref_norm in sched_norm:
        return CONTAINS_SCORE

    schedule_parts = sched_norm.split(" ")
    registry_parts = ref_norm.split(" ")
    base = token_score(schedule_parts, registry_parts)
    return _clamp(base + first_token_bonus(schedule_parts, registry_parts))
