"""
Mapping Cache.

Responsibilities:
- Hold confirmed schedule name -> employee number links, keyed by normalized name.
- Record new confirmations (last write wins).

Non-Responsibilities:
- No scoring.
- No persistence: confirm() returns the mapping for the caller to store.

Invariant:
At most one mapping exists per normalized schedule name.
"""

import time
from typing import Callable, Dict, Iterable, Optional

from refpay.models import MatchMapping, RefereeRecord
from refpay.normalize import normalize_name


class MappingCache:
    """In-memory snapshot of the confirmed mappings."""

    def __init__(self, mappings: Iterable[MatchMapping] = (), clock: Callable[[], float] = time.time):
        self._clock = clock
        self._by_key: Dict[str, MatchMapping] = {}
        for mapping in mappings:
            self._by_key[normalize_name(mapping.schedule_name)] = mapping

    def lookup(self, schedule_name: str) -> Optional[MatchMapping]:
        return self._by_key.get(normalize_name(schedule_name))

    def confirm(
        self,
        schedule_name: str,
        referee: RefereeRecord,
        date_processed: str = "",
        is_manual: bool = False,
    ) -> MatchMapping:
        mapping = MatchMapping(
            schedule_name=schedule_name,
            employee_number=referee.employee_number,
            confirmed_at=self._clock(),
            date_processed=date_processed,
            is_manual=is_manual,
        )
        self._by_key[normalize_name(schedule_name)] = mapping
        return mapping
