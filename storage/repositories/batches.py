"""
Payroll Batches Repository.

Responsibilities:
- Save, load, rename and delete payroll batches with their referee lines.
- Aggregate prior lifetime earnings per referee for the tax exemption.

Non-Responsibilities:
- No payroll computation.

Invariant:
A batch is written or removed together with all of its lines.
Only the name of a saved batch can change.
"""

from dataclasses import asdict
from typing import Dict, List, Optional

from pipelines.payroll.ledger import lifetime_earnings_before
from refpay.database import PayrollBatch, PayrollLine
from refpay.errors import NotFoundError
from refpay.logger import get_logger
from refpay.models import BatchTotals, PayrollBatchRecord, PayrollRefereeRecord

logger = get_logger()

LINE_FIELDS = [
    "employee_number",
    "referee_name",
    "schedule_name",
    "games",
    "gross_pay",
    "extra_pay",
    "admin_fee",
    "fines",
    "taxable_income",
    "hacienda_tax",
    "deposit_fee",
    "net_pay",
    "used_fixed_rate",
    "fixed_rate",
    "categories",
    "category_rates",
]


def _to_line(row: PayrollLine) -> PayrollRefereeRecord:
    return PayrollRefereeRecord(**{f: getattr(row, f) for f in LINE_FIELDS})


def _to_batch(row: PayrollBatch) -> PayrollBatchRecord:
    return PayrollBatchRecord(
        id=row.id,
        timestamp=row.timestamp,
        date_range=(row.date_start, row.date_end),
        referees=[_to_line(line) for line in row.lines],
        totals=BatchTotals(**(row.totals or {})),
        files=list(row.files or []),
        name=row.name,
    )


class BatchRepository:
    def __init__(self, session):
        self.session = session

    def save(self, batch: PayrollBatchRecord) -> PayrollBatchRecord:
        """Insert a batch, replacing any saved batch with the same id."""
        existing = self.session.get(PayrollBatch, batch.id)
        if existing is not None:
            self.session.delete(existing)
            self.session.flush()

        row = PayrollBatch(
            id=batch.id,
            timestamp=batch.timestamp,
            name=batch.name,
            date_start=batch.date_range[0],
            date_end=batch.date_range[1],
            files=list(batch.files),
            totals=asdict(batch.totals),
        )
        for position, line in enumerate(batch.referees):
            values = {f: getattr(line, f) for f in LINE_FIELDS}
            row.lines.append(PayrollLine(position=position, **values))
        self.session.add(row)
        self.session.commit()

        logger.record_batch_saved()
        logger.info(
            "Saved payroll batch",
            batch_id=batch.id,
            referees=len(batch.referees),
            replaced=existing is not None,
            net_pay=round(batch.totals.net_pay, 2),
        )
        return batch

    def get(self, batch_id: str) -> Optional[PayrollBatchRecord]:
        row = self.session.get(PayrollBatch, batch_id)
        return _to_batch(row) if row is not None else None

    def history(self) -> List[PayrollBatchRecord]:
        """Saved batches, newest first."""
        rows = self.session.query(PayrollBatch).order_by(PayrollBatch.timestamp.desc()).all()
        return [_to_batch(r) for r in rows]

    def rename(self, batch_id: str, name: str) -> PayrollBatchRecord:
        row = self.session.get(PayrollBatch, batch_id)
        if row is None:
            raise NotFoundError(batch_id, kind="Batch")
        row.name = name
        self.session.commit()
        return _to_batch(row)

    def delete(self, batch_id: str) -> None:
        row = self.session.get(PayrollBatch, batch_id)
        if row is None:
            raise NotFoundError(batch_id, kind="Batch")
        self.session.delete(row)
        self.session.commit()
        logger.info("Deleted payroll batch", batch_id=batch_id)

    def delete_many(self, batch_ids: List[str]) -> int:
        deleted = 0
        for batch_id in batch_ids:
            row = self.session.get(PayrollBatch, batch_id)
            if row is not None:
                self.session.delete(row)
                deleted += 1
        self.session.commit()
        return deleted

    def lifetime_earnings(self, exclude_batch_id: Optional[str] = None) -> Dict[str, float]:
        """Gross + extra pay per referee across saved batches."""
        return lifetime_earnings_before(self.history(), exclude_batch_id=exclude_batch_id)
