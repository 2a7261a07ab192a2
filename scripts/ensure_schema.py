"""
Bring the database schema up to date without touching existing data.

Creates tables declared in the models that are missing from the database.

Run:
  python scripts/ensure_schema.py
"""

from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import inspect

# project root on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

print("[ensure] loading app...")
from stylematrix import create_app  # type: ignore
from stylematrix.extensions import db  # type: ignore

EXPECTED = ("users", "employees", "services", "transactions", "transaction_items")


def _tables() -> set[str]:
    return set(inspect(db.engine).get_table_names())


def main() -> int:
    app = create_app()
    with app.app_context():
        print(f"[ensure] SQLALCHEMY_DATABASE_URI = {app.config.get('SQLALCHEMY_DATABASE_URI', '')}")

        before = _tables()
        print(f"[ensure] tables before: {len(before)}")

        from stylematrix import models  # noqa: F401

        print("[ensure] creating missing tables (if any)...")
        db.create_all()

        after = _tables()
        created = sorted(after - before)
        if created:
            print(f"[ensure] created tables: {', '.join(created)}")
        else:
            print("[ensure] no new tables needed.")

        missing = [t for t in EXPECTED if t not in after]
        if missing:
            print(f"[ensure] still missing: {', '.join(missing)}")
            return 1
        print("[ensure] done.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
