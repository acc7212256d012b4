"""
Round-Robin Scheduler - circle method pairings for one entrant pool

Produces the ordered rounds of a single or double round robin. Rounds come out
in increasing order; inside a round, pairings keep the position order of the
rotation. That order is what the slot allocator consumes.
"""

from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from fixture_engine.models.entrant import Entrant
from fixture_engine.services.format_rules import rr_fixture_count, rr_round_count
from fixture_engine.services.generation_errors import ConfigurationError, DuplicatePairingInvariantViolation


@dataclass
class Pairing:
    round_number: int  # 1-based; a second leg continues the numbering
    sequence_in_round: int
    home: Entrant
    away: Entrant
    leg: Optional[int] = None  # None for single round robin, else 1 | 2


def rr_pairings_by_round(entrant_count: int) -> List[Tuple[int, int, int, int]]:
    """
    Circle-method pairings. Returns list of (round_number, sequence_in_round, home_idx, away_idx).
    Indices are 0-based roster positions.

    Position 0 is fixed; the others rotate one step per round (last moves to
    second). Round r pairs position i with position n-1-i. Odd rosters get a
    BYE at index n; pairings against it are dropped.

    Home/away:
    - the fixed entrant is home on odd-numbered rounds, away on even ones
    - every other pairing gives home to whoever sits on an even position,
      so an entrant flips home/away as it moves one position per round
    """
    n = entrant_count
    if n < 2:
        return []

    n2 = n + 1 if n % 2 == 1 else n
    half = n2 // 2
    bye_idx = n if n % 2 == 1 else -1

    result: List[Tuple[int, int, int, int]] = []
    positions = list(range(n2))

    for round_index in range(rr_round_count(n)):
        seq = 0
        for i in range(half):
            j = n2 - 1 - i
            a, b = positions[i], positions[j]
            if a == bye_idx or b == bye_idx:
                continue
            if i == 0:
                home, away = (a, b) if round_index % 2 == 0 else (b, a)
            elif i % 2 == 1:
                home, away = b, a
            else:
                home, away = a, b
            seq += 1
            result.append((round_index + 1, seq, home, away))
        # Rotate: keep 0, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return result


def round_robin_rounds(entrants: Sequence[Entrant], legs: int = 1) -> List[List[Pairing]]:
    """
    Build the rounds of a round robin over `entrants`.

    Args:
        entrants: Pool in seeding order (position 0 is the fixed entrant)
        legs: 1 for single round robin, 2 for home-and-away

    Returns:
        List of rounds, each a list of Pairing. With legs=2 the mirrored second
        leg follows the first, home/away reversed, numbering continued.
    """
    if legs not in (1, 2):
        raise ConfigurationError(f"legs must be 1 or 2, got {legs}")

    index_pairings = rr_pairings_by_round(len(entrants))
    round_count = rr_round_count(len(entrants))

    rounds: List[List[Pairing]] = [[] for _ in range(round_count)]
    for round_number, seq, home_idx, away_idx in index_pairings:
        rounds[round_number - 1].append(
            Pairing(
                round_number=round_number,
                sequence_in_round=seq,
                home=entrants[home_idx],
                away=entrants[away_idx],
                leg=1 if legs == 2 else None,
            )
        )

    if legs == 2:
        second_leg = [
            [
                Pairing(
                    round_number=p.round_number + round_count,
                    sequence_in_round=p.sequence_in_round,
                    home=p.away,
                    away=p.home,
                    leg=2,
                )
                for p in round_pairings
            ]
            for round_pairings in rounds
        ]
        rounds.extend(second_leg)

    verify_round_robin(entrants, rounds, legs)
    return rounds


def verify_round_robin(entrants: Sequence[Entrant], rounds: List[List[Pairing]], legs: int = 1) -> None:
    """
    Check that a round robin is complete and repeat-free.

    - no self pairing, no entrant twice in one round
    - every unordered pair meets exactly `legs` times
    - with two legs, each orientation (home/away) occurs once

    Raises:
        DuplicatePairingInvariantViolation: on the first broken rule
    """
    ids = [e.id for e in entrants]
    problems: List[str] = []

    pair_counts: Counter = Counter()
    oriented_counts: Counter = Counter()
    for round_pairings in rounds:
        seen_in_round = set()
        for p in round_pairings:
            if p.home.id == p.away.id:
                problems.append(f"{p.home.id} paired with itself in round {p.round_number}")
            for entrant_id in (p.home.id, p.away.id):
                if entrant_id in seen_in_round:
                    problems.append(f"{entrant_id} plays twice in round {p.round_number}")
                seen_in_round.add(entrant_id)
            pair_counts[frozenset((p.home.id, p.away.id))] += 1
            oriented_counts[(p.home.id, p.away.id)] += 1

    expected_total = rr_fixture_count(len(ids), legs)
    actual_total = sum(pair_counts.values())
    if actual_total != expected_total:
        problems.append(f"expected {expected_total} pairings, found {actual_total}")

    for i, a in enumerate(ids):
        for b in ids[i + 1 :]:
            count = pair_counts.get(frozenset((a, b)), 0)
            if count != legs:
                problems.append(f"{a} and {b} meet {count} times (expected {legs})")
            elif legs == 2 and (oriented_counts[(a, b)], oriented_counts[(b, a)]) != (1, 1):
                problems.append(f"{a} and {b} do not swap home and away between legs")

    if problems:
        raise DuplicatePairingInvariantViolation(
            f"Round robin over {len(ids)} entrants is inconsistent", details=problems
        )
