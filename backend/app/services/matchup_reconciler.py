# app/services/matchup_reconciler.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple, Union

from sqlalchemy.orm import Session

from app.core.game_config import KICKOFF_TOLERANCE_SECONDS
from app.core.timeutils import as_utc, utcnow
from app.crud.crud_matchup import MatchupKey, get_matchup_by_key, insert_matchup_if_absent
from app.models.matchups import Matchup, winner_from_scores
from app.schemas.matchups import ExternalGame
from app.services.season_resolver import SeasonInfo
from app.services.week_mapping import season_year_for, translate_feed_week

logger = logging.getLogger("loserpool.reconcile")


# ============================
# Matching rules
# ============================
# Two teams can meet more than once in a season (division rematch, playoffs),
# so the team pair alone never identifies a fixture. The durable key is
# (away_team, home_team, season_label).
#
# Kickoff updates go through two checks against the stored row found by team
# pair in the week being reconciled:
#   1. week must match  -> otherwise warn and leave that row's kickoff alone
#   2. date should match -> otherwise warn but update (feed owns the schedule)
# Status and scores are live state and are always taken from the feed.


@dataclass
class ReconcileResult:
    season_label: str
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    warnings: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "season_label": self.season_label,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "warnings": list(self.warnings),
        }


def _game_name(game: ExternalGame, label: str) -> str:
    return f"{game.away_team} @ {game.home_team} ({label})"


def _apply_kickoff(row: Matchup, game: ExternalGame, name: str) -> bool:
    if game.kickoff_at is None:
        return False

    new = as_utc(game.kickoff_at)
    old = as_utc(row.kickoff_at)
    if old is None:
        row.kickoff_at = new
        return True

    if old.date() != new.date():
        # reschedules (flex, weather) are expected: advisory only
        logger.warning(
            "Date mismatch for %s: stored %s, feed %s - updating anyway",
            name, old.date().isoformat(), new.date().isoformat(),
        )

    if abs((new - old).total_seconds()) > KICKOFF_TOLERANCE_SECONDS:
        logger.info("Kickoff for %s: %s -> %s", name, old.isoformat(), new.isoformat())
        row.kickoff_at = new
        return True
    return False


def _apply_live_state(row: Matchup, game: ExternalGame) -> bool:
    changed = False

    if row.status != game.status:
        row.status = game.status
        changed = True

    # a missing score in the feed never erases a reported one
    for attr in ("away_score", "home_score"):
        value = getattr(game, attr)
        if value is not None and getattr(row, attr) != value:
            setattr(row, attr, value)
            changed = True

    winner = winner_from_scores(row.away_score, row.home_score) if row.status == "final" else None
    if row.winner != winner:
        row.winner = winner
        changed = True

    return changed


def _new_matchup(game: ExternalGame, phase: str, local_week: int, label: str, season: SeasonInfo) -> Matchup:
    kickoff = as_utc(game.kickoff_at)
    row = Matchup(
        season_year=season_year_for(kickoff) if kickoff is not None else season.season_year,
        phase=phase,
        week=local_week,
        season_label=label,
        away_team=game.away_team,
        home_team=game.home_team,
        kickoff_at=kickoff,
        status="scheduled",
        external_id=game.external_id,
    )
    _apply_live_state(row, game)
    return row


def reconcile_matchups(
    db: Session,
    games: Iterable[Union[ExternalGame, dict]],
    season: SeasonInfo,
    now: Optional[datetime] = None,
) -> ReconcileResult:
    """
    Merge a feed snapshot into the matchups table.

    `season` is the week being reconciled (normally the resolver's current
    week); it scopes the team-pair lookup used by the week check.
    """
    now = now or utcnow()
    result = ReconcileResult(season_label=season.label)

    scope_rows = db.query(Matchup).filter(Matchup.season_label == season.label).all()
    by_pair = {(m.away_team, m.home_team): m for m in scope_rows}

    seen: Set[MatchupKey] = set()

    for raw in games:
        game = raw if isinstance(raw, ExternalGame) else ExternalGame.model_validate(raw)
        phase, local_week, label = translate_feed_week(game.season_type, game.week)
        key: MatchupKey = (game.away_team, game.home_team, label)
        name = _game_name(game, label)

        if key in seen:
            msg = f"Duplicate game in feed for {name}; ignored"
            logger.warning(msg)
            result.warnings.append(msg)
            continue
        seen.add(key)

        target = by_pair.get((game.away_team, game.home_team))
        if target is not None and (target.phase, target.week) != (phase, local_week):
            msg = (
                f"Week mismatch for {game.away_team} @ {game.home_team}: "
                f"stored {target.season_label} (week {target.week}) vs feed {label} (week {local_week}); "
                f"kickoff not updated"
            )
            logger.warning(msg)
            result.warnings.append(msg)
            target = None

        if target is None:
            target = get_matchup_by_key(db, *key)

        if target is None:
            row, created = insert_matchup_if_absent(db, _new_matchup(game, phase, local_week, label, season))
            if created:
                row.updated_at = now
                row.last_feed_update = now
                result.created += 1
                logger.info("Added matchup %s", name)
                continue
            # somebody else inserted it first: treat as an update
            target = row

        changed = _apply_kickoff(target, game, name)
        changed = _apply_live_state(target, game) or changed

        if changed:
            target.updated_at = now
            target.last_feed_update = now
            result.updated += 1
            logger.info(
                "Updated matchup %s status=%s score=%s-%s winner=%s",
                name, target.status, target.away_score, target.home_score, target.winner,
            )
        else:
            result.unchanged += 1

    db.commit()

    logger.info(
        "Reconcile %s done: created=%d updated=%d unchanged=%d warnings=%d",
        season.label, result.created, result.updated, result.unchanged, len(result.warnings),
    )
    return result


def split_by_label(games: Iterable[ExternalGame]) -> List[Tuple[str, List[ExternalGame]]]:
    """Group feed games per season label, in feed order of first appearance."""
    groups: dict = {}
    for g in games:
        _, _, label = translate_feed_week(g.season_type, g.week)
        groups.setdefault(label, []).append(g)
    return list(groups.items())
