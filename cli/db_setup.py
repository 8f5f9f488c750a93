"""
Database setup commands for the PostgreSQL backend.

Usage:
    uv run db-init          # First-time setup (add --demo for demo rows)
    uv run db-seed-demo     # Seed with demo data
    uv run db-verify        # Verify setup

Environment Variables:
- DATABASE_URL_ADMIN: Admin connection with DDL permissions (primary)
- DATABASE_URL_APP: Fallback when no admin URL is configured
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass

import psycopg
from psycopg.rows import dict_row

from app.core.config import get_settings
from app.persistence.schema import DEMO_CARDS, DEMO_SEED_STATEMENT, SCHEMA_STATEMENTS


@dataclass
class SetupResult:
    """Result of a setup step."""

    success: bool
    message: str
    details: str | None = None


class DatabaseSetup:
    """Handles database setup for the cash card store."""

    def __init__(self, admin_url: str):
        self.admin_url = admin_url

    def _apply_schema(self, conn: psycopg.Connection) -> SetupResult:
        try:
            for stmt in SCHEMA_STATEMENTS:
                conn.execute(stmt)
            conn.commit()
            return SetupResult(
                success=True,
                message="Schema applied",
                details=f"Executed {len(SCHEMA_STATEMENTS)} statements",
            )
        except psycopg.Error as e:
            conn.rollback()
            return SetupResult(
                success=False,
                message="Schema creation failed",
                details=f"{type(e).__name__}: {e}",
            )

    def _apply_demo(self, conn: psycopg.Connection) -> SetupResult:
        try:
            with conn.cursor() as cur:
                cur.executemany(DEMO_SEED_STATEMENT, DEMO_CARDS)
            conn.commit()
            return SetupResult(
                success=True,
                message="Demo data applied",
                details=f"Inserted {len(DEMO_CARDS)} cards",
            )
        except psycopg.Error as e:
            conn.rollback()
            return SetupResult(
                success=False,
                message="Demo data insertion failed",
                details=f"{type(e).__name__}: {e}",
            )

    def init(self, demo: bool = False) -> int:
        """Initialize database schema."""
        print("Initializing database schema...")

        try:
            with psycopg.connect(self.admin_url, autocommit=False) as conn:
                print("  Applying schema...")
                result = self._apply_schema(conn)
                if not result.success:
                    print(f"ERROR: {result.details}")
                    return 1
                print(f"  Schema applied: {result.details}")

                if demo:
                    print("  Applying demo data...")
                    result = self._apply_demo(conn)
                    if not result.success:
                        print(f"ERROR: {result.details}")
                        return 1
                    print(f"  Demo data applied: {result.details}")

        except psycopg.Error as e:
            print(f"ERROR: Database connection failed: {e}")
            return 1

        print("Database initialization complete.")
        return 0

    def seed(self) -> int:
        """Apply demo seed data."""
        print("Seeding database...")

        try:
            with psycopg.connect(self.admin_url, autocommit=False) as conn:
                result = self._apply_demo(conn)
                if not result.success:
                    print(f"ERROR: {result.details}")
                    return 1
                print(f"  Demo data applied: {result.details}")

        except psycopg.Error as e:
            print(f"ERROR: Database seed failed: {e}")
            return 1

        print("Demo data seeded.")
        return 0

    def verify(self) -> int:
        """Verify database setup."""
        print("Verifying database setup...")

        errors: list[str] = []

        try:
            with psycopg.connect(self.admin_url, autocommit=True, row_factory=dict_row) as conn:
                print("  [OK] Database connection")

                columns = conn.execute("""
                    SELECT column_name FROM information_schema.columns
                    WHERE table_name = 'cash_cards'
                    ORDER BY ordinal_position
                """).fetchall()
                found = [row["column_name"] for row in columns]
                missing = [c for c in ("id", "amount", "owner") if c not in found]
                if not found:
                    errors.append("Missing table: cash_cards")
                elif missing:
                    errors.append(f"Missing columns on cash_cards: {missing}")
                else:
                    print(f"  [OK] cash_cards columns: {', '.join(found)}")

                indexes = conn.execute("""
                    SELECT indexname FROM pg_indexes
                    WHERE tablename = 'cash_cards'
                """).fetchall()
                if indexes:
                    print(f"  [OK] Indexes on cash_cards: {len(indexes)}")
        except psycopg.Error as e:
            errors.append(f"Schema check failed: {e}")

        if errors:
            print("\nVerification FAILED:")
            for err in errors:
                print(f"  - {err}")
            return 1

        print("\nVerification PASSED.")
        return 0


def _setup(admin_url: str | None = None) -> DatabaseSetup:
    return DatabaseSetup(admin_url=admin_url or get_settings().database.libpq_url)


def db_init() -> None:
    """First-time database setup."""
    parser = argparse.ArgumentParser(prog="db-init")
    parser.add_argument("--demo", action="store_true", help="Include demo data")
    parser.add_argument("--admin-url", help="Admin database URL (overrides env var)")
    args = parser.parse_args(sys.argv[1:])
    sys.exit(_setup(args.admin_url).init(demo=args.demo))


def db_seed_demo() -> None:
    """Apply demo seed data."""
    sys.exit(_setup().seed())


def db_verify() -> None:
    """Verify database setup."""
    sys.exit(_setup().verify())
