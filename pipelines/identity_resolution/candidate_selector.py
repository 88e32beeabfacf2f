"""
Candidate Selection Logic.

Responsibilities:
- Score every registry entry against a schedule name and rank them.
- Pick the alternatives shown next to the chosen match.

Non-Responsibilities:
- No normalization or token comparison.
- No cache lookups.
- No persistence.

Invariant:
Ranking never drops a registry entry; ties keep registry order.
"""

from typing import List, Sequence

from refpay.models import (
    CONFIDENCE_THRESHOLD,
    CONFIDENT_SUGGESTIONS,
    REVIEW_SUGGESTIONS,
    SUGGESTION_FLOOR,
    MatchSuggestion,
    RefereeRecord,
)

from .scoring import calculate_similarity


def rank_candidates(schedule_name: str, registry: Sequence[RefereeRecord]) -> List[MatchSuggestion]:
    scored = [
        MatchSuggestion(referee=referee, confidence=calculate_similarity(schedule_name, referee.full_name))
        for referee in registry
    ]
    # sorted() is stable, so equal scores stay in registry order
    return sorted(scored, key=lambda s: s.confidence, reverse=True)


def is_confident(confidence: int) -> bool:
    return confidence >= CONFIDENCE_THRESHOLD


def select_suggestions(ranked: List[MatchSuggestion]) -> List[MatchSuggestion]:
    """
    Confident matches get a short, filtered list of alternatives.
    Uncertain ones get a longer unfiltered list for manual review.
    """
    if not ranked:
        return []
    if is_confident(ranked[0].confidence):
        return [s for s in ranked[:CONFIDENT_SUGGESTIONS] if s.confidence >= SUGGESTION_FLOOR]
    return ranked[:REVIEW_SUGGESTIONS]
