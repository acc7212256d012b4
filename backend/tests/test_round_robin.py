"""
Tests for the circle-method round robin: completeness, byes, legs, home/away balance.
"""

from collections import Counter
from itertools import combinations

import pytest

from fixture_engine.models.entrant import Entrant
from fixture_engine.services.generation_errors import ConfigurationError, DuplicatePairingInvariantViolation
from fixture_engine.services.round_robin import Pairing, round_robin_rounds, rr_pairings_by_round, verify_round_robin


def _pair_counts(rounds):
    return Counter(frozenset((p.home.id, p.away.id)) for rnd in rounds for p in rnd)


# -----------------------------------------------------------------------------
# rr_pairings_by_round
# -----------------------------------------------------------------------------


class TestPairingsByRound:
    def test_four_entrants_first_round(self):
        pairings = rr_pairings_by_round(4)
        assert pairings[:2] == [(1, 1, 0, 3), (1, 2, 2, 1)]

    def test_fixed_entrant_alternates_home_and_away(self):
        fixed = [(r, h, a) for r, _, h, a in rr_pairings_by_round(6) if 0 in (h, a)]
        homes = [h == 0 for _, h, _ in fixed]
        assert homes == [True, False, True, False, True]

    def test_fewer_than_two_entrants_yields_nothing(self):
        assert rr_pairings_by_round(0) == []
        assert rr_pairings_by_round(1) == []

    def test_odd_roster_drops_bye(self):
        pairings = rr_pairings_by_round(5)
        assert all(5 not in (h, a) for _, _, h, a in pairings)
        assert len(pairings) == 10


# -----------------------------------------------------------------------------
# round_robin_rounds
# -----------------------------------------------------------------------------


class TestRoundRobinRounds:
    @pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8, 10, 12])
    def test_every_pair_meets_exactly_once(self, make_entrants, n):
        entrants = make_entrants(n)
        rounds = round_robin_rounds(entrants)

        counts = _pair_counts(rounds)
        assert sum(counts.values()) == n * (n - 1) // 2
        for a, b in combinations([e.id for e in entrants], 2):
            assert counts[frozenset((a, b))] == 1

    def test_four_entrants_three_rounds_of_two(self, make_entrants):
        rounds = round_robin_rounds(make_entrants(4))
        assert [len(r) for r in rounds] == [2, 2, 2]
        assert [p.round_number for r in rounds for p in r] == [1, 1, 2, 2, 3, 3]

    def test_five_entrants_each_rests_once(self, make_entrants):
        entrants = make_entrants(5)
        rounds = round_robin_rounds(entrants)

        assert len(rounds) == 5
        assert all(len(r) == 2 for r in rounds)

        rests = Counter()
        for rnd in rounds:
            playing = {e for p in rnd for e in (p.home.id, p.away.id)}
            rests.update(e.id for e in entrants if e.id not in playing)
        assert rests == Counter({e.id: 1 for e in entrants})

    @pytest.mark.parametrize("n", [4, 5, 6, 7, 8])
    def test_no_entrant_twice_in_a_round(self, make_entrants, n):
        for rnd in round_robin_rounds(make_entrants(n)):
            ids = [e for p in rnd for e in (p.home.id, p.away.id)]
            assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("n", [4, 6, 8, 10])
    def test_home_games_balanced_for_even_rosters(self, make_entrants, n):
        rounds = round_robin_rounds(make_entrants(n))
        homes = Counter(p.home.id for rnd in rounds for p in rnd)
        for entrant in make_entrants(n):
            assert homes[entrant.id] in (n // 2 - 1, n // 2)

    def test_single_leg_has_no_leg_label(self, make_entrants):
        rounds = round_robin_rounds(make_entrants(4))
        assert all(p.leg is None for rnd in rounds for p in rnd)

    def test_pairing_order_is_stable(self, make_entrants):
        entrants = make_entrants(6)
        first = [(p.home.id, p.away.id) for rnd in round_robin_rounds(entrants) for p in rnd]
        second = [(p.home.id, p.away.id) for rnd in round_robin_rounds(entrants) for p in rnd]
        assert first == second


class TestTwoLegs:
    def test_second_leg_mirrors_first(self, make_entrants):
        rounds = round_robin_rounds(make_entrants(4), legs=2)

        assert len(rounds) == 6
        first_leg, second_leg = rounds[:3], rounds[3:]
        for r1, r2 in zip(first_leg, second_leg):
            assert [(p.away.id, p.home.id) for p in r1] == [(p.home.id, p.away.id) for p in r2]

    def test_leg_labels_and_continued_numbering(self, make_entrants):
        rounds = round_robin_rounds(make_entrants(4), legs=2)
        assert {p.leg for p in rounds[0]} == {1}
        assert {p.leg for p in rounds[-1]} == {2}
        assert [rnd[0].round_number for rnd in rounds] == [1, 2, 3, 4, 5, 6]

    @pytest.mark.parametrize("n", [3, 4, 5, 6])
    def test_each_orientation_once(self, make_entrants, n):
        rounds = round_robin_rounds(make_entrants(n), legs=2)
        oriented = Counter((p.home.id, p.away.id) for rnd in rounds for p in rnd)
        assert len(oriented) == n * (n - 1)
        assert set(oriented.values()) == {1}

    def test_invalid_leg_count(self, make_entrants):
        with pytest.raises(ConfigurationError):
            round_robin_rounds(make_entrants(4), legs=3)


# -----------------------------------------------------------------------------
# verify_round_robin
# -----------------------------------------------------------------------------


class TestVerifyRoundRobin:
    def test_repeated_pairing_is_rejected(self):
        a, b, c = (Entrant(id=x, name=x) for x in "ABC")
        rounds = [
            [Pairing(round_number=1, sequence_in_round=1, home=a, away=b)],
            [Pairing(round_number=2, sequence_in_round=1, home=b, away=a)],
            [Pairing(round_number=3, sequence_in_round=1, home=b, away=c)],
        ]
        with pytest.raises(DuplicatePairingInvariantViolation) as exc:
            verify_round_robin([a, b, c], rounds)

        assert exc.value.code == "DUPLICATE_PAIRING"
        assert any("A and C meet 0 times" in d for d in exc.value.details)

    def test_self_pairing_is_rejected(self):
        a, b = Entrant(id="A", name="A"), Entrant(id="B", name="B")
        rounds = [[Pairing(round_number=1, sequence_in_round=1, home=a, away=a)]]
        with pytest.raises(DuplicatePairingInvariantViolation):
            verify_round_robin([a, b], rounds)
