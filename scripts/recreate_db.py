# -*- coding: utf-8 -*-
"""
Drop the SQLite database and seed it with demo users, employees and a catalog.

Run from the project root:
  python scripts/recreate_db.py
"""

from __future__ import annotations
import sys, traceback
from pathlib import Path
from typing import Optional
from sqlalchemy import text

# --- project path ---
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

print(f"[recreate] ROOT={ROOT}")
if not (ROOT / "stylematrix" / "__init__.py").exists():
    raise SystemExit("[recreate] error: stylematrix/__init__.py not found next to scripts/")

print("[recreate] importing app…")
from stylematrix import create_app  # type: ignore
from stylematrix.extensions import db  # type: ignore
from stylematrix import store  # type: ignore

SERVICES = [
    ("Haircut", "50.00", "service"),
    ("Beard Trim", "30.00", "service"),
    ("Hair Coloring", "150.00", "service"),
    ("Facial", "120.00", "service"),
    ("Shampoo", "45.00", "product"),
    ("Hair Wax", "35.00", "product"),
]


def _db_path_from_uri(uri: str) -> Optional[Path]:
    if uri.startswith("sqlite:///"):
        return Path(uri.replace("sqlite:///", "")).resolve()
    return None


def _cnt(table: str) -> int:
    return int(db.session.execute(text(f'SELECT COUNT(*) FROM "{table}"')).scalar() or 0)


def main() -> int:
    print("[recreate] create_app()…")
    app = create_app()
    with app.app_context():
        uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
        print(f"[recreate] SQLALCHEMY_DATABASE_URI = {uri}")

        db_path = _db_path_from_uri(uri)
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            if db_path.exists():
                print(f"[recreate] removing database file: {db_path}")
                db_path.unlink()
            else:
                print(f"[recreate] database file does not exist yet: {db_path}")
        else:
            print("[recreate] not sqlite, dropping tables instead")
            db.drop_all()

        print("[recreate] creating tables from models…")
        db.create_all()

        print("[recreate] adding employees…")
        sara = store.create_employee("Sara", "+971 50 123 4567")
        omar = store.create_employee("Omar", "+971 55 765 4321")
        print(f"[recreate] employees rows={_cnt('employees')}  -> Sara id={sara.id}, Omar id={omar.id}")

        print("[recreate] adding services and products…")
        for name, price, category in SERVICES:
            store.create_service(name, price, category)
        print(f"[recreate] services rows={_cnt('services')}")

        print("[recreate] creating users…")
        store.create_user("admin@stylematrix.ae", "admin", role="admin")
        store.create_user("sara@stylematrix.ae", "sara", role="employee", employee_id=sara.id)
        print(f"[recreate] users rows={_cnt('users')}")

        print("\n[recreate] Done.")
        print("Logins:")
        print("  admin@stylematrix.ae / admin")
        print("  sara@stylematrix.ae  / sara")
        if db_path:
            print(f"\nDatabase file: {db_path}")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception:
        print("\n[recreate] ERROR:")
        traceback.print_exc()
        sys.exit(1)
