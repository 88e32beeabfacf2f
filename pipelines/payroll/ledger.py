"""
Cumulative Earnings Ledger.

Responsibilities:
- Sum gross + extra pay per referee across saved batches.

Non-Responsibilities:
- No persistence: history is a snapshot passed in by the caller.
- No tax math.

Invariant:
The batch being (re)computed never counts towards its own exemption.
"""

from typing import Dict, Iterable, Optional

from refpay.models import PayrollBatchRecord


def lifetime_earnings_before(
    history: Iterable[PayrollBatchRecord],
    exclude_batch_id: Optional[str] = None,
) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for batch in history:
        if exclude_batch_id is not None and batch.id == exclude_batch_id:
            continue
        for line in batch.referees:
            totals[line.employee_number] = totals.get(line.employee_number, 0.0) + line.total_earnings
    return totals
