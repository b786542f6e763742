"""
backend/tests/test_week_mapping.py

Purpose:
    Feed week -> local week -> season label translation, and season year
    inference from kickoffs.
"""

from __future__ import annotations

import pytest

from app.services.week_mapping import (
    normalize_phase,
    parse_season_label,
    season_label,
    season_sort_key,
    season_year_for,
    to_local_week,
    translate_feed_week,
)
from tests.helpers import utc


@pytest.mark.parametrize(
    "season_type,feed_week,expected",
    [
        ("PRE", 2, ("PRE", 2, "PRE2")),
        ("REG", 4, ("REG", 4, "REG4")),
        ("REG", 18, ("REG", 18, "REG18")),
        ("POST", 1, ("POST", 19, "POST1")),
        ("POST", 4, ("POST", 22, "POST4")),
        (3, 2, ("POST", 20, "POST2")),
        ("2", 7, ("REG", 7, "REG7")),
    ],
)
def test_translate_feed_week(season_type, feed_week, expected):
    assert translate_feed_week(season_type, feed_week) == expected


def test_translate_feed_week_rejects_week_zero():
    with pytest.raises(ValueError):
        translate_feed_week("REG", 0)


def test_normalize_phase_accepts_names_and_espn_types():
    assert normalize_phase("reg") == "REG"
    assert normalize_phase(1) == "PRE"
    assert normalize_phase(" post ") == "POST"


@pytest.mark.parametrize("bad", ["", None, "PLAYOFF", 4, True])
def test_normalize_phase_rejects_unknown(bad):
    with pytest.raises(ValueError):
        normalize_phase(bad)


def test_local_week_offsets_postseason_only():
    for w in range(1, 5):
        assert to_local_week("PRE", w) == w
        assert to_local_week("POST", w) == 18 + w
    assert to_local_week("REG", 18) == 18


def test_label_parsing():
    assert parse_season_label("POST1") == ("POST", 1)
    assert parse_season_label("reg12") == ("REG", 12)
    assert season_label("REG", 3) == "REG3"

    for bad in ("", "WEEK3", "REG", "POST123"):
        with pytest.raises(ValueError):
            parse_season_label(bad)


def test_season_sort_key_is_natural_season_order():
    labels = ["POST1", "REG10", "PRE3", "REG9", "REG1"]
    assert sorted(labels, key=season_sort_key) == ["PRE3", "REG1", "REG9", "REG10", "POST1"]


def test_season_year_for_kickoff():
    assert season_year_for(utc(2025, 9, 7, 17)) == 2025
    assert season_year_for(utc(2025, 8, 1)) == 2025
    # January playoffs belong to the season that started the previous year
    assert season_year_for(utc(2026, 1, 11, 18)) == 2025
    assert season_year_for(utc(2026, 7, 31)) == 2025
