"""
Cleanup module for clearing a month of saved payroll batches.

Removing batches also removes their earnings from the lifetime ledger, so
later recomputations see more of the tax exemption available again.
"""

from pathlib import Path
from typing import Tuple

from storage.repositories.batches import BatchRepository

from .database import get_session, init_database
from .logger import get_logger
from .reports import batches_in_month

logger = get_logger()


def clear_month(db_path: Path, month: str) -> Tuple[int, int]:
    """
    Remove every payroll batch whose date range starts in the given month.

    Args:
        db_path: Path to the SQLite database
        month: Month key, e.g. "2024-01"

    Returns:
        Tuple of (total_batches_before, total_batches_after)
        Difference = batches_removed
    """
    if not db_path.exists():
        logger.warning("Database not found, nothing to clear", db_path=str(db_path))
        return (0, 0)

    init_database(db_path)
    session = get_session(db_path)
    try:
        repo = BatchRepository(session)
        history = repo.history()
        doomed = [b.id for b in batches_in_month(history, month)]
        removed = repo.delete_many(doomed)
        before, after = len(history), len(history) - removed

        logger.info(
            f"Cleared {month}: {removed} removed, {after} remaining",
            batches_before=before,
            batches_removed=removed,
            batches_after=after,
            month=month,
        )
        return (before, after)
    finally:
        session.close()
