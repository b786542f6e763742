# app/seed/settle_picks.py
# Usage:
#   python -m app.seed.settle_picks
#   python -m app.seed.settle_picks --matchup-id 42 --winner away
import argparse

from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.db.session import session_scope
from app.services.owner_summary import summarize_owners
from app.services.pick_lifecycle import settle_all_finalized, settle_matchup


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--matchup-id", type=int, help="settle a single matchup instead of sweeping")
    ap.add_argument("--winner", choices=["away", "home", "tie"], help="required with --matchup-id")
    args = ap.parse_args()

    setup_logging()
    init_db()

    with session_scope() as db:
        if args.matchup_id is not None:
            if args.winner is None:
                raise SystemExit("--winner is required with --matchup-id")
            res = settle_matchup(db, args.matchup_id, args.winner)
            owner_ids = res.owner_ids
            print({"matchup_id": res.matchup_id, "picks_updated": res.picks_updated, "warnings": res.warnings})
        else:
            sweep = settle_all_finalized(db)
            owner_ids = sweep.owner_ids
            print(sweep.as_dict())

        for s in summarize_owners(db, owner_ids):
            print(s.as_dict())


if __name__ == "__main__":
    main()
