#!/usr/bin/env python3
"""Migration script to convert free-text payment terms into net days.

Older databases stored client payment terms as text ("Net 30 days"). This
migration adds the structured column to the clients table:
- payment_terms_days (INTEGER, nullable)

and fills it from the legacy ``payment_terms`` column:
- "Net 30", "net 14 days", "30 days", "30" -> 30, 14, 30, 30
- Empty or unreadable text -> NULL (invoices are then due on issue)

The legacy column is left in place and is no longer read.

Usage:
    python migrations/migrate_payment_terms_to_net_days.py [--db-path PATH] [--dry-run]
"""

import sys
from pathlib import Path

# Add src to path so we can import billable modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from billable.database.factories import create_sqlite_database
from billable.utils.payment_terms import parse_payment_terms

LEGACY_COLUMN = "payment_terms"
NEW_COLUMN = "payment_terms_days"


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the table
        column_name: Name of the column

    Returns:
        True if column exists, False otherwise
    """
    inspector = inspect(engine)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def convert_terms(rows) -> tuple[dict[int, int], list[tuple[int, str]]]:
    """Split legacy rows into converted days and unreadable texts.

    Args:
        rows: Iterable of (client_id, payment_terms) tuples

    Returns:
        Tuple of ({client_id: days}, [(client_id, text), ...] that could not be read)
    """
    converted = {}
    unreadable = []
    for client_id, terms in rows:
        days = parse_payment_terms(terms)
        if days is not None:
            converted[client_id] = days
        elif terms is not None and terms.strip():
            unreadable.append((client_id, terms))
    return converted, unreadable


def migrate_database(database_path: str | None = None, dry_run: bool = False) -> None:
    """Migrate database to structured payment terms.

    Args:
        database_path: Path to database file. If None, uses default location.
        dry_run: Report what would change without writing

    Raises:
        Exception: If migration fails
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
        finally:
            session.close()

        inspector = inspect(engine)
        if "clients" not in inspector.get_table_names():
            raise Exception("Table 'clients' does not exist. Please initialize the database schema first.")

        has_new = column_exists(engine, "clients", NEW_COLUMN)
        has_legacy = column_exists(engine, "clients", LEGACY_COLUMN)
        if not has_legacy:
            print(f"Nothing to migrate: clients table has no {LEGACY_COLUMN} column")
            return

        print("Starting migration: converting payment terms to net days...")

        with engine.begin() as conn:
            if not has_new:
                if dry_run:
                    print(f"  Would add column: {NEW_COLUMN}")
                else:
                    conn.execute(text(f"ALTER TABLE clients ADD COLUMN {NEW_COLUMN} INTEGER"))
                    print(f"  Added column: {NEW_COLUMN}")

            rows = conn.execute(text(f"SELECT id, {LEGACY_COLUMN} FROM clients")).fetchall()
            converted, unreadable = convert_terms(rows)

            if not dry_run:
                for client_id, days in converted.items():
                    conn.execute(
                        text(f"UPDATE clients SET {NEW_COLUMN} = :days WHERE id = :id"),
                        {"days": days, "id": client_id},
                    )

        print(f"  Converted payment terms of {len(converted)} client(s)")
        for client_id, terms in unreadable:
            print(f"  Client {client_id}: could not read '{terms}', left without payment terms")

        if dry_run:
            print("Dry run: no changes written")
        else:
            print("Migration completed successfully!")

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Migrate free-text client payment terms to structured net days"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides BILLABLE_DB_PATH environment variable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would change without writing",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path, dry_run=args.dry_run)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
