"""
backend/tests/test_allocation_codec.py

Purpose:
    Legacy "<matchupId>_<team>" allocation tokens.
"""

from __future__ import annotations

import pytest

from app.services.allocation_codec import encode_allocation, parse_allocation_token


def test_encode_allocation():
    assert encode_allocation(42, "KC") == "42_KC"


def test_team_with_underscores_round_trips():
    token = encode_allocation(7, "NY_JETS_B")
    assert token == "7_NY_JETS_B"
    assert parse_allocation_token(token) == (7, "NY_JETS_B")


@pytest.mark.parametrize("bad", ["", "42", "42_", "_KC", "abc_KC", None])
def test_parse_rejects_malformed_tokens(bad):
    with pytest.raises(ValueError):
        parse_allocation_token(bad)


def test_encode_requires_team():
    with pytest.raises(ValueError):
        encode_allocation(1, "")
