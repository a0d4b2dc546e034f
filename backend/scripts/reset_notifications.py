#!/usr/bin/env python3
"""Clear all notification data (admin broadcasts, read receipts, user notifications).
Run from backend: python scripts/reset_notifications.py
Running pollers keep their processed-id memory until the next prune; restart them for a clean slate.
"""
import sys
from pathlib import Path

# Ensure backend is on path when run as script
backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from portal.db.session import SessionLocal
from portal.services.admin_service import clear_notifications


def main():
    db = SessionLocal()
    try:
        deleted = clear_notifications(db)
        print("Notifications cleared. Rows deleted:")
        for table, count in deleted.items():
            print(f"  {table}: {count}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
