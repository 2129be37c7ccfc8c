"""Tests for the aggregation engine."""

from datetime import timedelta

import pytest

from perimeter.domain.models.claim import ClaimType
from perimeter.domain.services.aggregation import (
    AggregationEngine,
    bucket_for,
    filter_records,
)


@pytest.fixture
def engine() -> AggregationEngine:
    """Provide an aggregation engine."""
    return AggregationEngine()


def test_summarize_forecasters(engine, make_record):
    """Test totals, resolved counts and both averages per forecaster."""
    records = [
        make_record(90.0, "f1"),
        make_record(70.0, "f1"),
        make_record(None, "f1"),
        make_record(40.0, "f2"),
        make_record(100.0, None),
    ]

    summaries = engine.summarize_forecasters(records)

    assert set(summaries) == {"f1", "f2"}
    f1 = summaries["f1"]
    assert (f1.total_claims, f1.resolved_claims) == (3, 2)
    assert f1.average_perimeter == pytest.approx(80.0)
    assert f1.weighted_perimeter == pytest.approx(80.0)
    assert summaries["f2"].average_perimeter == pytest.approx(40.0)


def test_summary_without_scores(engine, make_record):
    """Test a forecaster with only pending claims has no averages."""
    summary = engine.summarize_forecasters([make_record(None, "f1")])["f1"]
    assert summary.resolved_claims == 0
    assert summary.average_perimeter is None
    assert summary.weighted_perimeter is None


@pytest.mark.parametrize(
    "score,bucket",
    [(100.0, "excellent"), (80.0, "excellent"), (79.99, "good"), (60.0, "good"),
     (59.99, "fair"), (40.0, "fair"), (39.99, "poor"), (0.0, "poor")],
)
def test_bucket_boundaries(score, bucket):
    """Test histogram bucket edges."""
    assert bucket_for(score) == bucket


def test_score_distribution_ignores_pending(engine, make_record):
    """Test only scored claims enter the histogram."""
    records = [make_record(s) for s in (95.0, 80.0, 65.0, 45.0, 10.0)] + [make_record(None)]

    distribution = engine.score_distribution(records)

    assert (distribution.excellent, distribution.good, distribution.fair, distribution.poor) == (2, 1, 1, 1)


def test_domain_breakdown_lists_known_domains(engine, make_record):
    """Test known domains appear with zero counts and new domains are added."""
    records = [make_record(80.0, domain="economy"), make_record(None, domain="economy"), make_record(50.0, domain="sports")]

    breakdown = engine.domain_breakdown(records)

    assert breakdown["economy"].total == 2
    assert breakdown["economy"].resolved == 1
    assert breakdown["economy"].average_perimeter == pytest.approx(80.0)
    assert breakdown["politics"].total == 0
    assert breakdown["politics"].average_perimeter == 0.0
    assert breakdown["sports"].average_perimeter == pytest.approx(50.0)


def test_type_and_status_breakdowns(engine, make_record):
    """Test counts per claim type and status."""
    records = [
        make_record(80.0, claim_type=ClaimType.NUMERIC),
        make_record(None, claim_type=ClaimType.PROBABILISTIC),
        make_record(None, claim_type=ClaimType.PROBABILISTIC),
    ]

    assert engine.type_breakdown(records) == {"numeric": 1, "probabilistic": 2}
    assert engine.status_breakdown(records) == {"resolved": 1, "pending": 2}


def test_recent_activity(engine, make_record, now):
    """Test claims count by creation time and resolutions by verification time."""
    old = now - timedelta(days=30)
    records = [
        make_record(None, created_at=now - timedelta(days=1)),
        make_record(90.0, created_at=old, verified_at=now - timedelta(days=2)),
        make_record(90.0, created_at=old, verified_at=old),
    ]

    activity = engine.recent_activity(records, now)

    assert activity.claims == 1
    assert activity.resolutions == 1


def test_trend_series(engine, make_record, now):
    """Test one point per day, oldest first, with empty days filled."""
    today = now.date()
    records = [
        make_record(90.0, created_at=now - timedelta(days=2), verified_at=now),
        make_record(70.0, created_at=now - timedelta(days=2), verified_at=now),
        make_record(None, created_at=now),
        make_record(50.0, created_at=now - timedelta(days=10)),
    ]

    points = engine.trend_series(records, days=3, today=today)

    assert [p.date for p in points] == [today - timedelta(days=2), today - timedelta(days=1), today]
    assert (points[0].claims, points[0].resolved, points[0].resolutions) == (2, 2, 0)
    assert points[0].average_perimeter == pytest.approx(80.0)
    assert points[1].claims == 0
    assert points[1].average_perimeter == 0.0
    assert (points[2].claims, points[2].resolved, points[2].resolutions) == (1, 0, 2)


def test_trend_series_empty_window(engine, make_record, now):
    """Test a non-positive day count gives no points."""
    assert engine.trend_series([make_record(50.0)], days=0, today=now.date()) == []


def test_filter_records(make_record, now):
    """Test domain and creation-time filters."""
    records = [
        make_record(None, domain="economy", created_at=now),
        make_record(None, domain="politics", created_at=now),
        make_record(None, domain="economy", created_at=now - timedelta(days=40)),
    ]

    assert len(filter_records(records, domain="ECONOMY")) == 2
    assert len(filter_records(records, since=now - timedelta(days=30))) == 2
    assert len(filter_records(records, domain="economy", since=now - timedelta(days=30))) == 1


def test_snapshot(engine, make_record, now):
    """Test the combined analytics record."""
    records = [make_record(90.0, "f1"), make_record(30.0, "f2"), make_record(None, "f1")]

    snapshot = engine.snapshot(records, now)

    assert snapshot.total_claims == 3
    assert snapshot.resolved_claims == 2
    assert snapshot.pending_claims == 1
    assert snapshot.expired_claims == 0
    assert snapshot.average_perimeter == pytest.approx(60.0)
    assert snapshot.score_distribution.excellent == 1
    assert snapshot.score_distribution.poor == 1
    assert snapshot.recent_activity.claims == 3
    assert snapshot.top_forecasters == []
