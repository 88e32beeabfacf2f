"""
Referee registry mutations on an in-memory snapshot.

Every operation returns a new list sorted by full name and leaves the input
untouched, so a failed mutation never produces a partial write.
"""

from typing import List, Optional, Sequence

from .errors import DuplicateKeyError, NotFoundError
from .models import RefereeRecord


def _sorted(referees) -> List[RefereeRecord]:
    return sorted(referees, key=lambda r: r.full_name)


def get_referee(registry: Sequence[RefereeRecord], employee_number: str) -> Optional[RefereeRecord]:
    for referee in registry:
        if referee.employee_number == employee_number:
            return referee
    return None


def add_referee(registry: Sequence[RefereeRecord], referee: RefereeRecord) -> List[RefereeRecord]:
    if get_referee(registry, referee.employee_number) is not None:
        raise DuplicateKeyError(referee.employee_number)
    return _sorted([*registry, referee])


def update_referee(
    registry: Sequence[RefereeRecord],
    old_employee_number: str,
    referee: RefereeRecord,
) -> List[RefereeRecord]:
    if get_referee(registry, old_employee_number) is None:
        raise NotFoundError(old_employee_number)
    if referee.employee_number != old_employee_number and get_referee(registry, referee.employee_number) is not None:
        raise DuplicateKeyError(referee.employee_number)
    return _sorted(referee if r.employee_number == old_employee_number else r for r in registry)


def delete_referee(registry: Sequence[RefereeRecord], employee_number: str) -> List[RefereeRecord]:
    if get_referee(registry, employee_number) is None:
        raise NotFoundError(employee_number)
    return _sorted(r for r in registry if r.employee_number != employee_number)
