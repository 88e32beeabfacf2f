"""
Referees Repository.

Responsibilities:
- CRUD operations for the referees table.
- Transaction-safe writes: a failed mutation is rolled back whole.

Non-Responsibilities:
- No matching.
- No payroll logic.

Invariant:
Employee numbers are unique; a duplicate never reaches the table.
"""

from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from refpay.database import Referee
from refpay.errors import DuplicateKeyError, NotFoundError
from refpay.logger import get_logger
from refpay.models import RefereeRecord
from refpay.registry import add_referee, delete_referee, update_referee

logger = get_logger()


def _to_record(row: Referee) -> RefereeRecord:
    return RefereeRecord(employee_number=row.employee_number, full_name=row.full_name)


class RefereeRepository:
    def __init__(self, session):
        self.session = session

    def snapshot(self) -> List[RefereeRecord]:
        """Registry ordered by full name, the order ties are broken in."""
        rows = self.session.query(Referee).order_by(Referee.full_name, Referee.employee_number).all()
        return [_to_record(r) for r in rows]

    def get(self, employee_number: str) -> Optional[RefereeRecord]:
        row = self.session.get(Referee, employee_number)
        return _to_record(row) if row is not None else None

    def count(self) -> int:
        return self.session.query(Referee).count()

    def add(self, referee: RefereeRecord) -> RefereeRecord:
        self._check(add_referee, referee)
        self.session.add(Referee(employee_number=referee.employee_number, full_name=referee.full_name))
        self._commit(referee.employee_number)
        logger.info("Added referee", employee_number=referee.employee_number)
        return referee

    def add_many(self, referees: Iterable[RefereeRecord]) -> int:
        """Insert every referee not already present; returns how many were added."""
        added = 0
        seen = set()
        for referee in referees:
            if referee.employee_number in seen or self.session.get(Referee, referee.employee_number) is not None:
                continue
            seen.add(referee.employee_number)
            self.session.add(Referee(employee_number=referee.employee_number, full_name=referee.full_name))
            added += 1
        self._commit("bulk")
        return added

    def update(self, old_employee_number: str, referee: RefereeRecord) -> RefereeRecord:
        self._check(update_referee, old_employee_number, referee)
        row = self.session.get(Referee, old_employee_number)
        if referee.employee_number == old_employee_number:
            row.full_name = referee.full_name
        else:
            # Primary key change: swap rows inside one transaction
            self.session.delete(row)
            self.session.flush()
            self.session.add(Referee(employee_number=referee.employee_number, full_name=referee.full_name))
        self._commit(referee.employee_number)
        logger.info("Updated referee", old_employee_number=old_employee_number, employee_number=referee.employee_number)
        return referee

    def delete(self, employee_number: str) -> RefereeRecord:
        self._check(delete_referee, employee_number)
        row = self.session.get(Referee, employee_number)
        record = _to_record(row)
        self.session.delete(row)
        self.session.commit()
        logger.info("Deleted referee", employee_number=employee_number)
        return record

    def _check(self, mutation, *args) -> None:
        """Apply a registry mutation to the current snapshot; raises before any write."""
        try:
            mutation(self.snapshot(), *args)
        except DuplicateKeyError:
            logger.record_error("DuplicateKey")
            raise
        except NotFoundError:
            logger.record_error("NotFound")
            raise

    def _commit(self, employee_number: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.record_error("DuplicateKey")
            raise DuplicateKeyError(employee_number) from e
