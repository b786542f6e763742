# app/seed/show_current_week.py
import argparse

from dateutil import parser as dtparser

from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.db.session import session_scope
from app.services.season_resolver import get_current_season_info, store_resolved_week


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--now", help="pretend it is this instant (ISO 8601), e.g. 2025-10-01T12:00Z")
    ap.add_argument("--fallback-week", type=int, help="override the stored current week fallback")
    ap.add_argument("--store", action="store_true", help="persist the result in season_state")
    args = ap.parse_args()

    setup_logging()
    init_db()

    now = dtparser.isoparse(args.now) if args.now else None

    with session_scope() as db:
        if args.store:
            info = store_resolved_week(db, now=now)
        else:
            info = get_current_season_info(db, now=now, fallback_week=args.fallback_week)
        print(info.as_dict())


if __name__ == "__main__":
    main()
