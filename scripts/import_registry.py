#!/usr/bin/env python3
"""
Import referees into the registry from a JSON file or the built-in seed list.

Usage:
    python scripts/import_registry.py --json data/referees.json --db data/refpay.db
    python scripts/import_registry.py --seed-defaults --db data/refpay.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from refpay.database import init_database, get_session
from refpay.errors import InvalidDocumentError
from refpay.models import DEFAULT_REFEREE_REGISTRY
from refpay.settings import initialize_default_settings
from refpay.storage import load_registry
from storage.repositories import RefereeRepository, SettingsRepository


def import_registry(referees, db_path: Path, dry_run: bool = False) -> bool:
    """
    Insert referees that are not already registered.

    Args:
        referees: RefereeRecord list to import
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
    """
    print(f"Found {len(referees)} referees to import")

    if dry_run:
        print("\n[DRY RUN] Would import the following referees:")
        for i, referee in enumerate(referees[:5], 1):
            print(f"  {i}. {referee.display_name}")
        if len(referees) > 5:
            print(f"  ... and {len(referees) - 5} more")
        return True

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)
    session = get_session(db_path)

    try:
        referee_repo = RefereeRepository(session)
        before = referee_repo.count()
        added = referee_repo.add_many(referees)

        # Admin-fee defaults for every newly registered referee
        settings_repo = SettingsRepository(session)
        _, created = initialize_default_settings(referee_repo.snapshot(), settings_repo.referee_settings())
        settings_repo.save_referees(created)

        print("\n✅ Import complete!")
        print(f"   Added:    {added}")
        print(f"   Skipped:  {len(referees) - added}")
        print(f"   Registry: {before} -> {referee_repo.count()}")
        print(f"   Settings created: {len(created)}")
    finally:
        session.close()

    return True


def main():
    parser = argparse.ArgumentParser(description="Import referees into the registry")
    parser.add_argument("--json", type=Path,
                        help="Path to registry JSON (list of {employee_number, full_name})")
    parser.add_argument("--seed-defaults", action="store_true",
                        help="Import the built-in default registry")
    parser.add_argument("--db", type=Path, default=Path("data/refpay.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be imported without writing")

    args = parser.parse_args()

    if args.seed_defaults:
        referees = list(DEFAULT_REFEREE_REGISTRY)
    elif args.json:
        try:
            referees = load_registry(args.json)
        except InvalidDocumentError as e:
            print(f"❌ {e}")
            sys.exit(1)
    else:
        parser.error("Pass --json or --seed-defaults")

    import_registry(referees, args.db, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
