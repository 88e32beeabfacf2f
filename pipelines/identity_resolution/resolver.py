"""
Identity Resolution Orchestrator.

Responsibilities:
- Consult the mapping cache before scoring.
- Coordinate candidate ranking.
- Always return a best match and flag uncertainty through confidence.

Non-Responsibilities:
- No database access.
- No token comparison.
- No persistence of confirmations (returned to the caller instead).

Invariant:
For a non-empty registry every result carries a matched referee.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from refpay.logger import get_logger
from refpay.models import MatchMapping, MatchResult, RefereeRecord
from refpay.registry import get_referee

from .cache import MappingCache
from .candidate_selector import rank_candidates, select_suggestions

logger = get_logger()


def find_match(
    schedule_name: str,
    registry: Sequence[RefereeRecord],
    cache: Optional[MappingCache] = None,
) -> MatchResult:
    if not registry:
        return MatchResult(schedule_name=schedule_name, matched_referee=None, confidence=0)

    if cache is not None:
        stored = cache.lookup(schedule_name)
        if stored is not None:
            referee = get_referee(registry, stored.employee_number)
            if referee is not None:
                return MatchResult(
                    schedule_name=schedule_name,
                    matched_referee=referee,
                    confidence=100,
                    is_from_storage=True,
                )

    ranked = rank_candidates(schedule_name, registry)
    best = ranked[0]
    return MatchResult(
        schedule_name=schedule_name,
        matched_referee=best.referee,
        confidence=best.confidence,
        suggestions=select_suggestions(ranked),
    )


def match_all(
    schedule_names: Iterable[str],
    registry: Sequence[RefereeRecord],
    cache: Optional[MappingCache] = None,
) -> Tuple[List[MatchResult], List[MatchResult]]:
    """
    Resolve every schedule name.

    Returns:
        Tuple of (matched, unmatched). Unmatched is only non-empty when the
        registry itself is empty.
    """
    results = [find_match(name, registry, cache) for name in schedule_names]
    matched = [r for r in results if r.matched_referee is not None]
    unmatched = [r for r in results if r.matched_referee is None]

    for result in results:
        logger.record_match(result.is_from_storage, result.needs_review)

    if not registry and results:
        logger.warning("Referee registry is empty; every name needs manual selection", names=len(results))
    review = sum(1 for r in matched if r.needs_review)
    logger.info(
        "Resolved schedule names",
        total=len(results),
        from_storage=sum(1 for r in matched if r.is_from_storage),
        needs_review=review,
        unmatched=len(unmatched),
    )
    return matched, unmatched


def confirm_match(
    result: MatchResult,
    cache: MappingCache,
    referee: Optional[RefereeRecord] = None,
    date_processed: str = "",
) -> Optional[MatchMapping]:
    """
    Accept a result, optionally overriding the referee.

    Picking someone other than the automatic match is recorded as a manual
    confirmation. Returns the mapping to persist, or None when there is
    nothing new to store (no referee, or an unchanged cache hit).
    """
    chosen = referee or result.matched_referee
    if chosen is None:
        return None
    is_manual = result.matched_referee is None or chosen.employee_number != result.matched_referee.employee_number
    if not is_manual and result.is_from_storage:
        return None
    mapping = cache.confirm(result.schedule_name, chosen, date_processed=date_processed, is_manual=is_manual)
    logger.record_confirmation(is_manual)
    logger.debug(
        "Confirmed mapping",
        schedule_name=result.schedule_name,
        employee_number=chosen.employee_number,
        manual=is_manual,
    )
    return mapping


def confirm_results(
    results: Iterable[MatchResult],
    cache: MappingCache,
    date_processed: str = "",
) -> List[MatchMapping]:
    """Accept every resolved result as-is. Cache hits are already stored."""
    mappings = []
    for result in results:
        if result.matched_referee is None or result.is_from_storage:
            continue
        mappings.append(confirm_match(result, cache, date_processed=date_processed))
    return mappings
