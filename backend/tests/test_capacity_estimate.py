"""
Tests for the feasibility preview.
"""

from datetime import date

import pytest

from fixture_engine.services.capacity_estimate import estimate_generation
from fixture_engine.services.fixture_orchestrator import generate
from fixture_engine.services.generation_errors import ConfigurationError


class TestLeagueEstimate:
    def test_single_leg(self, make_config):
        estimate = estimate_generation(6, make_config(matches_per_day=3))

        assert estimate.estimated_fixtures == 15
        assert estimate.matchdays == 5
        assert estimate.daily_capacity == 3
        assert estimate.required_days == 5
        assert estimate.feasible
        assert estimate.knockout_fixtures == 0

    def test_two_legs_with_rest(self, make_config):
        estimate = estimate_generation(6, make_config(matches_per_day=3, league_legs=2, rest_days_between_rounds=1))

        assert estimate.estimated_fixtures == 30
        assert estimate.matchdays == 10
        # Five matchdays, double rest, five more: days 0-4 and 6-10
        assert estimate.required_days == 11

    def test_daily_capacity_limited_by_slots(self, make_config):
        estimate = estimate_generation(6, make_config(matches_per_day=10, venues=("Only Ground",)))
        assert estimate.daily_capacity == 2

    def test_narrow_window_infeasible(self, make_config):
        estimate = estimate_generation(
            4,
            make_config(
                min_entrants=4, matches_per_day=1, start_date=date(2026, 3, 1), end_date=date(2026, 3, 2)
            ),
        )
        assert estimate.required_days == 6
        assert estimate.available_days == 2
        assert not estimate.feasible


class TestGroupEstimate:
    def test_group_knockout(self, make_config):
        estimate = estimate_generation(8, make_config(format="group_knockout"))

        assert estimate.groups_count == 2
        assert estimate.group_sizes == [4, 4]
        assert estimate.estimated_fixtures == 12
        assert estimate.matchdays == 3
        assert estimate.knockout_fixtures == 3

    def test_two_legged(self, make_config):
        estimate = estimate_generation(16, make_config(format="champions_league"))

        assert estimate.groups_count == 4
        assert estimate.estimated_fixtures == 48
        assert estimate.matchdays == 6
        assert estimate.knockout_fixtures == 14

    def test_two_legged_single_leg_final(self, make_config):
        estimate = estimate_generation(16, make_config(format="champions_league", single_leg_final=True))
        assert estimate.knockout_fixtures == 13

    def test_non_power_of_two_bracket_has_no_knockout_estimate(self, make_config):
        estimate = estimate_generation(12, make_config(format="group_knockout"))
        assert estimate.groups_count == 3
        assert estimate.knockout_fixtures == 0


def test_invalid_config_reports_errors(make_config):
    estimate = estimate_generation(8, make_config(venues=()))

    assert not estimate.feasible
    assert estimate.errors == ["At least one venue is required"]
    assert estimate.to_dict()["estimated_fixtures"] == 0


class TestRosterChecks:
    def test_below_format_minimum(self, make_config):
        estimate = estimate_generation(4, make_config())

        assert not estimate.feasible
        assert estimate.errors == ["Format 'league' needs at least 6 entrants, got 4"]

    def test_minimum_override(self, make_config):
        estimate = estimate_generation(4, make_config(min_entrants=4))
        assert estimate.feasible
        assert estimate.errors == []

    def test_groups_too_small(self, make_config):
        estimate = estimate_generation(8, make_config(format="group_knockout", groups_count=5))

        assert not estimate.feasible
        assert estimate.errors == ["5 groups for 8 entrants leaves a group with fewer than 2 entrants"]

    def test_more_groups_than_entrants(self, make_config):
        estimate = estimate_generation(8, make_config(format="group_knockout", groups_count=9))
        assert estimate.errors == ["Cannot split 8 entrants into 9 groups"]

    def test_rejected_rosters_match_generate(self, make_entrants, make_config):
        for count, config in [
            (4, make_config()),
            (8, make_config(format="group_knockout", groups_count=5)),
            (6, make_config(format="group_knockout")),
        ]:
            assert not estimate_generation(count, config).feasible
            with pytest.raises(ConfigurationError):
                generate(make_entrants(count), config)


class TestRequiredDaysMatchGenerate:
    @staticmethod
    def _span(fixtures):
        days = [f.day for f in fixtures]
        return (max(days) - min(days)).days + 1

    def test_two_legged_league_with_rest(self, make_entrants, make_config):
        config = make_config(matches_per_day=3, league_legs=2, rest_days_between_rounds=1)
        estimate = estimate_generation(6, config)
        assert estimate.required_days == self._span(generate(make_entrants(6), config)) == 11

    def test_two_legged_groups_with_rest(self, make_entrants, make_config):
        config = make_config(format="champions_league", matches_per_day=4, rest_days_between_rounds=1)
        estimate = estimate_generation(8, config)
        assert estimate.required_days == self._span(generate(make_entrants(8), config)) == 7
