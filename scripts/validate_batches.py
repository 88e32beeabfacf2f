#!/usr/bin/env python3
"""
Validate that every saved batch's totals match the sum of its referee lines.

Usage:
    python scripts/validate_batches.py --db data/refpay.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pipelines.payroll import verify_totals
from refpay.database import get_session
from storage.repositories import BatchRepository


def validate(db_path: Path, tolerance: float) -> bool:
    """
    Check stored totals against recomputed ones.

    Returns True if every batch matches, False otherwise.
    """
    print(f"Querying database at {db_path}...")
    session = get_session(db_path)
    try:
        history = BatchRepository(session).history()
    finally:
        session.close()
    print(f"  {len(history)} batches")

    mismatches = []
    for batch in history:
        for field in verify_totals(batch, tolerance=tolerance):
            mismatches.append({
                "batch_id": batch.id,
                "field": field,
                "stored": getattr(batch.totals, field),
            })

    if mismatches:
        print(f"\n❌ TOTALS MISMATCHES: {len(mismatches)} field differences")
        for mismatch in mismatches[:5]:
            print(f"   - {mismatch['batch_id']}: {mismatch['field']} stored={mismatch['stored']}")
        if len(mismatches) > 5:
            print(f"   ... and {len(mismatches) - 5} more")
        return False

    print("✅ All batches validated successfully!")
    print("   - Totals equal the sum of referee lines")
    return True


def main():
    parser = argparse.ArgumentParser(description="Validate saved payroll batch totals")
    parser.add_argument("--db", type=Path, default=Path("data/refpay.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--tolerance", type=float, default=0.01,
                        help="Allowed rounding difference per total")

    args = parser.parse_args()

    if not args.db.exists():
        print(f"❌ Database file not found: {args.db}")
        sys.exit(1)

    success = validate(args.db, args.tolerance)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
