# app/seed/sync_matchups.py
# Usage:
#   python -m app.seed.sync_matchups --current
#   python -m app.seed.sync_matchups --season-year 2025 --phase REG --start-week 1 --weeks 18
import argparse

from app.core.errors import FeedError
from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.db.session import session_scope
from app.scrapers.espn_scoreboard import fetch_week
from app.scrapers.http import make_client
from app.services.matchup_reconciler import reconcile_matchups
from app.services.season_resolver import get_current_season_info, season_info_for_label, store_resolved_week
from app.services.week_mapping import season_label, normalize_phase


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--current", action="store_true", help="sync the week the resolver says is current")
    ap.add_argument("--season-year", type=int, help="e.g. 2025 for the 2025-26 season")
    ap.add_argument("--phase", default="REG", help="PRE, REG or POST")
    ap.add_argument("--start-week", type=int, default=1, help="feed week number (POST restarts at 1)")
    ap.add_argument("--weeks", type=int, default=1)
    ap.add_argument("--store-week", action="store_true", help="persist the resolved week afterwards")
    args = ap.parse_args()

    setup_logging()
    init_db()

    totals = {"created": 0, "updated": 0, "unchanged": 0, "warnings": 0}

    with session_scope() as db, make_client() as client:
        if args.current:
            info = get_current_season_info(db)
            targets = [(info.season_year, info.phase, info.week, info)]
        else:
            if args.season_year is None:
                raise SystemExit("--season-year is required unless --current is given")
            phase = normalize_phase(args.phase)
            targets = []
            for i in range(args.weeks):
                week = args.start_week + i
                label = season_label(phase, week)
                targets.append((args.season_year, phase, week, season_info_for_label(label, args.season_year)))

        for year, phase, week, info in targets:
            try:
                games = fetch_week(year, phase, week, client=client)
            except FeedError as exc:
                print(f"WARNING: {exc}")
                continue

            if not games:
                print(f"WARNING: no games in feed for {phase}{week} {year}")
                continue

            res = reconcile_matchups(db, games, info)
            for k in ("created", "updated", "unchanged"):
                totals[k] += getattr(res, k)
            totals["warnings"] += len(res.warnings)

            print(f"{info.label} {year}: {res.as_dict()}")

        if args.store_week:
            info = store_resolved_week(db)
            print({"stored": info.label, "reason": info.reason})

    print(totals)


if __name__ == "__main__":
    main()
