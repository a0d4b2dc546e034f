#!/usr/bin/env python3
"""
Console notification watcher: polls the admin feed like the dashboard bell and prints toasts.
  python scripts/watch_notifications.py --session <auth_session cookie> [--base-url http://127.0.0.1:8000]
Ctrl+C to stop.
"""
import argparse
import logging
import sys
import time
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from portal.client.api_client import DEFAULT_BASE_URL, NotificationsApiClient
from portal.client.poller import NotificationPoller
from portal.core.constants import POLL_INTERVAL_SECONDS

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("watch_notifications")


def _print_toast(item, toast):
    line = f"[{toast.kind}] {toast.title}: {toast.details}"
    if toast.action_path:
        line += f"  ({toast.action_text}: {toast.action_path})"
    print(line, flush=True)


def _bell():
    print("\a", end="", flush=True)


def main() -> int:
    parser = argparse.ArgumentParser(description="Watch admin notifications")
    parser.add_argument("--session", required=True, help="auth_session cookie value of an admin")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--interval", type=int, default=POLL_INTERVAL_SECONDS)
    args = parser.parse_args()

    client = NotificationsApiClient(args.base_url, args.session)
    poller = NotificationPoller(client, on_alert=_print_toast, on_sound=_bell, poll_interval_seconds=args.interval)
    poller.start()
    print(f"Watching {args.base_url}: {poller.feed.unread_count} unread. Ctrl+C to stop.", flush=True)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
