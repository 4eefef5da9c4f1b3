"""Switch free mode on or off from the command line.

Usage:
  python scripts/set_free_mode.py --on --admin-id 42
  python scripts/set_free_mode.py --toggle
  python scripts/set_free_mode.py --status

Running API instances pick the change up on their next refresh.
"""

from __future__ import annotations

import argparse

from playerzero.config import Settings
from playerzero.db import SessionLocal, init_db
from playerzero.services.feature_flags import (
    FREE_MODE_KEY,
    get_all_flags,
    set_flag,
    toggle_free_mode,
)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser()
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--on", action="store_true")
    group.add_argument("--off", action="store_true")
    group.add_argument("--toggle", action="store_true")
    group.add_argument("--status", action="store_true")
    parser.add_argument("--admin-id", type=int, default=None)
    args = parser.parse_args(argv)

    init_db(Settings())

    with SessionLocal() as session:
        if args.status:
            value = get_all_flags(session)[FREE_MODE_KEY]
        elif args.toggle:
            value = toggle_free_mode(session, updated_by=args.admin_id)
        else:
            value = set_flag(session, FREE_MODE_KEY, args.on, updated_by=args.admin_id).value
    print("on" if value else "off")


if __name__ == "__main__":
    main()
