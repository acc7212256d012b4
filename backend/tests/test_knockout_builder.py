"""
Tests for the Knockout Bracket Builder and group-standings seeding.
"""

import pytest

from fixture_engine.models.entrant import Entrant
from fixture_engine.services.generation_errors import ConfigurationError
from fixture_engine.services.knockout_builder import advancing_from_groups, build_knockout_round


def _ids(entrants):
    return [e.id for e in entrants]


class TestBuildKnockoutRound:
    def test_semifinal_pairs_consecutive_entrants(self, make_entrants):
        knockout = build_knockout_round(make_entrants(4))

        assert knockout.name == "Semifinal"
        assert knockout.code == "SF"
        assert not knockout.two_legged
        assert [(p.home.id, p.away.id) for p in knockout.pairings] == [("T1", "T2"), ("T3", "T4")]
        assert all(p.leg is None for p in knockout.pairings)

    @pytest.mark.parametrize(
        "size,name,code",
        [(2, "Final", "F"), (8, "Quarterfinal", "QF"), (16, "Round of 16", "R16"), (32, "Round of 32", "R32")],
    )
    def test_round_names(self, make_entrants, size, name, code):
        knockout = build_knockout_round(make_entrants(size))
        assert (knockout.name, knockout.code) == (name, code)
        assert len(knockout.pairings) == size // 2

    def test_two_legged_reverses_home_and_away(self, make_entrants):
        knockout = build_knockout_round(make_entrants(8), two_legged=True)

        assert knockout.two_legged
        first, second = knockout.legs
        assert len(first) == len(second) == 4
        assert {p.leg for p in first} == {1}
        assert {p.leg for p in second} == {2}
        assert [(p.away.id, p.home.id) for p in first] == [(p.home.id, p.away.id) for p in second]

    def test_single_leg_final(self, make_entrants):
        knockout = build_knockout_round(make_entrants(2), two_legged=True, single_leg_final=True)
        assert not knockout.two_legged
        assert len(knockout.pairings) == 1
        assert knockout.pairings[0].leg is None

    def test_single_leg_final_only_affects_final(self, make_entrants):
        knockout = build_knockout_round(make_entrants(4), two_legged=True, single_leg_final=True)
        assert knockout.two_legged

    @pytest.mark.parametrize("size", [0, 1, 3, 6, 12])
    def test_non_power_of_two_rejected(self, make_entrants, size):
        with pytest.raises(ConfigurationError):
            build_knockout_round(make_entrants(size))

    def test_duplicate_entrants_rejected(self, make_entrants):
        entrants = make_entrants(4)
        entrants[3] = entrants[0]
        with pytest.raises(ConfigurationError):
            build_knockout_round(entrants)


class TestAdvancingFromGroups:
    @staticmethod
    def _standings(labels, per_group):
        return {
            label: [Entrant(id=f"{label}{rank}", name=f"{label}{rank}") for rank in range(1, per_group + 1)]
            for label in labels
        }

    def test_two_groups_cross_seeded(self):
        ordered = advancing_from_groups(self._standings("AB", 4), 2)
        assert _ids(ordered) == ["A1", "B2", "B1", "A2"]

    def test_four_groups_paired_by_label(self):
        ordered = advancing_from_groups(self._standings("DCBA", 4), 2)
        assert _ids(ordered) == ["A1", "B2", "B1", "A2", "C1", "D2", "D1", "C2"]

    def test_one_advancing_per_group(self):
        ordered = advancing_from_groups(self._standings("ABCD", 3), 1)
        assert _ids(ordered) == ["A1", "B1", "C1", "D1"]

    def test_odd_group_count_rank_major(self):
        ordered = advancing_from_groups(self._standings("ABC", 3), 2)
        assert _ids(ordered) == ["A1", "B1", "C1", "A2", "B2", "C2"]

    def test_group_winners_never_meet_in_first_round(self):
        ordered = advancing_from_groups(self._standings("ABCD", 4), 2)
        knockout = build_knockout_round(ordered)
        for p in knockout.pairings:
            assert not (p.home.id.endswith("1") and p.away.id.endswith("1"))

    def test_short_table_rejected(self):
        standings = self._standings("AB", 2)
        standings["B"] = standings["B"][:1]
        with pytest.raises(ConfigurationError):
            advancing_from_groups(standings, 2)

    def test_zero_advancing_rejected(self):
        with pytest.raises(ConfigurationError):
            advancing_from_groups(self._standings("AB", 2), 0)
