# scripts/list_matchups_by_kickoff.py
# Usage:
#   python scripts/list_matchups_by_kickoff.py loser_pool.sqlite 2025
#   python scripts/list_matchups_by_kickoff.py loser_pool.sqlite 2025 --label REG4
#   python scripts/list_matchups_by_kickoff.py loser_pool.sqlite 2025 --tsv --limit 50

import argparse
import sqlite3
from pathlib import Path

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("db_path", help="Path to sqlite DB, e.g. loser_pool.sqlite")
    ap.add_argument("season_year", type=int, help="Season year, e.g. 2025")
    ap.add_argument("--label", help='Only one week, e.g. "REG4" or "POST1"')
    ap.add_argument("--limit", type=int, default=0, help="Limit rows printed (0 = all)")
    ap.add_argument("--tsv", action="store_true", help="Print as TSV (tab-separated)")
    args = ap.parse_args()

    db_path = Path(args.db_path)
    if not db_path.exists():
        raise SystemExit(f"DB not found: {db_path}")

    sep = "\t" if args.tsv else " | "

    where_extra = " AND season_label = ?" if args.label else ""
    params = [args.season_year] + ([args.label.upper()] if args.label else [])

    sql = f"""
    SELECT
        id,
        season_label,
        week,
        kickoff_at,
        away_team,
        home_team,
        status,
        away_score,
        home_score,
        winner,
        external_id
    FROM matchups
    WHERE season_year = ?{where_extra}
    ORDER BY
        CASE WHEN kickoff_at IS NULL THEN 1 ELSE 0 END,
        kickoff_at ASC,
        week ASC,
        id ASC;
    """

    with sqlite3.connect(str(db_path)) as con:
        con.row_factory = sqlite3.Row
        rows = con.execute(sql, params).fetchall()

    if args.limit and args.limit > 0:
        rows = rows[: args.limit]

    print(
        sep.join([
            "idx", "id", "label", "wk", "kickoff_at",
            "away", "home",
            "status", "score", "winner",
            "external_id",
        ])
    )

    for idx, r in enumerate(rows, start=1):
        a_s = r["away_score"]
        hs = r["home_score"]
        score = f"{a_s}-{hs}" if (a_s is not None and hs is not None) else ""

        print(
            sep.join([
                str(idx),
                str(r["id"]),
                r["season_label"],
                str(r["week"]),
                str(r["kickoff_at"] or ""),
                r["away_team"],
                r["home_team"],
                r["status"],
                score,
                r["winner"] or "",
                str(r["external_id"] or ""),
            ])
        )

    print(f"\nTOTAL: {len(rows)} row(s) printed for season {args.season_year}")

if __name__ == "__main__":
    main()
