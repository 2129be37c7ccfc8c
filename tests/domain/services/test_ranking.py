"""Tests for leaderboard ranking."""

from datetime import timedelta

import pytest

from perimeter.domain.models.analytics import ForecasterSummary
from perimeter.domain.models.forecaster import Forecaster
from perimeter.domain.services.ranking import (
    RankingPolicy,
    period_to_days,
    window_start,
)


@pytest.fixture
def forecasters():
    """Provide forecaster records by id."""
    return {
        fid: Forecaster(id=fid, name=name, handle=name.lower())
        for fid, name in (("a", "Ann"), ("b", "Bob"), ("c", "Cid"), ("d", "Dee"))
    }


def test_orders_by_weighted_then_average(forecasters):
    """Test the primary and secondary sort keys."""
    summaries = [
        ForecasterSummary("a", 3, 3, average_perimeter=70.0, weighted_perimeter=80.0),
        ForecasterSummary("b", 3, 3, average_perimeter=90.0, weighted_perimeter=80.0),
        ForecasterSummary("c", 3, 3, average_perimeter=99.0, weighted_perimeter=60.0),
    ]

    entries = RankingPolicy().rank(summaries, forecasters)

    assert [e.forecaster_id for e in entries] == ["b", "a", "c"]
    assert [e.rank for e in entries] == [1, 2, 3]
    assert entries[0].forecaster_name == "Bob"
    assert entries[0].forecaster_handle == "bob"


def test_missing_scores_rank_last(forecasters):
    """Test forecasters without scores sort after scored ones."""
    summaries = [
        ForecasterSummary("a", 1, 1, None, None),
        ForecasterSummary("b", 1, 1, 10.0, 10.0),
    ]

    entries = RankingPolicy().rank(summaries, forecasters)

    assert [e.forecaster_id for e in entries] == ["b", "a"]
    assert entries[1].weighted_perimeter == 0.0


def test_min_claims_excludes_forecasters(forecasters):
    """Test a forecaster with one resolved claim is dropped at min_claims=2."""
    summaries = [
        ForecasterSummary("a", 5, 1, 99.0, 99.0),
        ForecasterSummary("b", 5, 2, 50.0, 50.0),
    ]

    assert [e.forecaster_id for e in RankingPolicy().rank(summaries, forecasters, min_claims=2)] == ["b"]
    assert [e.forecaster_id for e in RankingPolicy(min_claims=2).rank(summaries, forecasters)] == ["b"]
    assert len(RankingPolicy().rank(summaries, forecasters)) == 2


def test_ties_are_deterministic(forecasters):
    """Test equal scores order by id across input permutations."""
    summaries = [ForecasterSummary(fid, 2, 2, 75.0, 75.0) for fid in ("d", "b", "c", "a")]
    policy = RankingPolicy()

    first = [e.forecaster_id for e in policy.rank(summaries, forecasters)]
    second = [e.forecaster_id for e in policy.rank(list(reversed(summaries)), forecasters)]

    assert first == second == ["a", "b", "c", "d"]


def test_limit_and_unknown_forecaster():
    """Test truncation and the placeholder name for unknown ids."""
    summaries = [ForecasterSummary(fid, 1, 1, 50.0, score) for fid, score in (("x", 10.0), ("y", 20.0))]

    entries = RankingPolicy().rank(summaries, {}, limit=1)

    assert len(entries) == 1
    assert entries[0].forecaster_id == "y"
    assert entries[0].forecaster_name == "Unknown"


@pytest.mark.parametrize(
    "period,days",
    [("1y", 365), ("6m", 180), ("3m", 90), ("1m", 30), ("7d", 7), ("2w", 365), (None, None), ("", None)],
)
def test_period_to_days(period, days):
    """Test period tokens, the unknown-token default and all time."""
    assert period_to_days(period) == days


def test_window_start(now):
    """Test windows start the given number of days before now."""
    assert window_start("1m", now) == now - timedelta(days=30)
    assert window_start(None, now) is None
