"""
Tests for post-allocation invariant verification.
"""

from datetime import date, datetime

from fixture_engine.models.entrant import Entrant
from fixture_engine.models.fixture import Fixture
from fixture_engine.services.fixture_invariants import verify_fixtures

A, B, C, D = (Entrant(id=x, name=f"Team {x}") for x in "ABCD")


def _fixture(code, home, away, kickoff, venue="North Park"):
    return Fixture(
        fixture_code=code,
        phase="League",
        round_number=1,
        round_label="Matchday 1",
        sequence_in_round=1,
        home=home,
        away=away,
        kickoff=kickoff,
        venue=venue,
    )


def test_clean_schedule_passes(make_config):
    fixtures = [
        _fixture("LG_MD01_01", A, B, datetime(2026, 3, 1, 15)),
        _fixture("LG_MD01_02", C, D, datetime(2026, 3, 1, 18)),
    ]
    report = verify_fixtures(fixtures, make_config())

    assert report.ok
    assert report.violations == []
    assert report.to_dict()["stats"]["slot_collisions"] == 0


def test_self_pairing(make_config):
    report = verify_fixtures([_fixture("X1", A, A, datetime(2026, 3, 1, 15))], make_config())
    assert not report.ok
    assert report.stats.self_pairings == 1


def test_slot_reused(make_config):
    fixtures = [
        _fixture("X1", A, B, datetime(2026, 3, 1, 15)),
        _fixture("X2", C, D, datetime(2026, 3, 1, 15)),
    ]
    report = verify_fixtures(fixtures, make_config())

    assert report.stats.slot_collisions == 1
    assert report.violations[0].context["fixture_codes"] == ["X1", "X2"]


def test_day_over_cap(make_config):
    fixtures = [
        _fixture("X1", A, B, datetime(2026, 3, 1, 15)),
        _fixture("X2", C, D, datetime(2026, 3, 1, 18)),
    ]
    report = verify_fixtures(fixtures, make_config(matches_per_day=1))
    assert report.stats.days_over_cap == 1
    assert report.messages("DAY_OVER_CAP") == ["2 fixtures on 2026-03-01 (cap=1)"]


def test_outside_window(make_config):
    fixture = _fixture("X1", A, B, datetime(2026, 7, 4, 15))

    report = verify_fixtures([fixture], make_config(end_date=date(2026, 6, 30)))
    assert report.stats.outside_window == 1

    relaxed = verify_fixtures([fixture], make_config(end_date=date(2026, 6, 30), respect_tournament_period=False))
    assert relaxed.ok


def test_entrant_double_booked(make_config):
    fixtures = [
        _fixture("X1", A, B, datetime(2026, 3, 1, 15), venue="North Park"),
        _fixture("X2", A, C, datetime(2026, 3, 1, 15), venue="Riverside"),
    ]
    report = verify_fixtures(fixtures, make_config())

    assert report.stats.double_bookings == 1
    assert report.violations[0].entrant_id == "A"
