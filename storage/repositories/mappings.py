"""
Match Mappings Repository.

Responsibilities:
- Load the mapping cache snapshot.
- Upsert confirmed mappings keyed by normalized schedule name.

Non-Responsibilities:
- No scoring or confirmation decisions.

Invariant:
One row per normalized schedule name; the latest write wins.
"""

from typing import Iterable, List

from refpay.database import MatchMappingRow
from refpay.models import MatchMapping
from refpay.normalize import normalize_name


def _to_mapping(row: MatchMappingRow) -> MatchMapping:
    return MatchMapping(
        schedule_name=row.schedule_name,
        employee_number=row.employee_number,
        confirmed_at=row.confirmed_at,
        date_processed=row.date_processed,
        is_manual=row.is_manual,
    )


class MappingRepository:
    def __init__(self, session):
        self.session = session

    def all(self) -> List[MatchMapping]:
        rows = self.session.query(MatchMappingRow).order_by(MatchMappingRow.confirmed_at).all()
        return [_to_mapping(r) for r in rows]

    def save(self, mappings: Iterable[MatchMapping]) -> int:
        saved = 0
        for mapping in mappings:
            if mapping is None:
                continue
            key = normalize_name(mapping.schedule_name)
            row = self.session.get(MatchMappingRow, key)
            if row is None:
                row = MatchMappingRow(normalized_name=key)
                self.session.add(row)
            row.schedule_name = mapping.schedule_name
            row.employee_number = mapping.employee_number
            row.confirmed_at = mapping.confirmed_at
            row.date_processed = mapping.date_processed
            row.is_manual = mapping.is_manual
            saved += 1
        self.session.commit()
        return saved

    def delete(self, schedule_name: str) -> bool:
        row = self.session.get(MatchMappingRow, normalize_name(schedule_name))
        if row is None:
            return False
        self.session.delete(row)
        self.session.commit()
        return True
