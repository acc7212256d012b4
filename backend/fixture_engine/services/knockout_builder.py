"""
Knockout Bracket Builder - one elimination round from a known list of advancing entrants

The builder never recurses: later rounds depend on played results, so the
caller asks for each round once its advancing entrants are known.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

from fixture_engine.models.entrant import Entrant
from fixture_engine.services.format_rules import is_power_of_two, knockout_round_code, knockout_round_name
from fixture_engine.services.generation_errors import ConfigurationError
from fixture_engine.services.round_robin import Pairing


@dataclass
class KnockoutRound:
    name: str  # "Quarterfinal"
    code: str  # "QF"
    bracket_size: int
    legs: List[List[Pairing]] = field(default_factory=list)  # One list per leg, leg 1 first

    @property
    def two_legged(self) -> bool:
        return len(self.legs) == 2

    @property
    def pairings(self) -> List[Pairing]:
        return [p for leg in self.legs for p in leg]


def build_knockout_round(
    advancing: Sequence[Entrant],
    two_legged: bool = False,
    single_leg_final: bool = False,
) -> KnockoutRound:
    """
    Pair consecutive entrants (0 v 1, 2 v 3, ...) into one elimination round.

    Args:
        advancing: Entrants in bracket order; size must be a power of two >= 2
        two_legged: Emit a second leg with home/away reversed
        single_leg_final: Play a two-legged bracket's Final as one match

    Raises:
        ConfigurationError: size not a power of two, fewer than 2 entrants, or duplicate ids
    """
    size = len(advancing)
    if size < 2 or not is_power_of_two(size):
        raise ConfigurationError(f"Knockout rounds need a power-of-two number of entrants (>= 2), got {size}")

    ids = [e.id for e in advancing]
    if len(set(ids)) != size:
        raise ConfigurationError("Knockout entrants must be distinct")

    with_second_leg = two_legged and not (single_leg_final and size == 2)

    first_leg = [
        Pairing(
            round_number=1,
            sequence_in_round=i // 2 + 1,
            home=advancing[i],
            away=advancing[i + 1],
            leg=1 if with_second_leg else None,
        )
        for i in range(0, size, 2)
    ]
    legs = [first_leg]

    if with_second_leg:
        legs.append(
            [
                Pairing(round_number=2, sequence_in_round=p.sequence_in_round, home=p.away, away=p.home, leg=2)
                for p in first_leg
            ]
        )

    return KnockoutRound(
        name=knockout_round_name(size),
        code=knockout_round_code(size),
        bracket_size=size,
        legs=legs,
    )


def advancing_from_groups(standings: Mapping[str, Sequence[Entrant]], advancing_per_group: int) -> List[Entrant]:
    """
    Turn caller-ranked group tables into knockout bracket order.

    The caller decides the ranking (played results live outside the engine);
    this only takes the top `advancing_per_group` of each table.

    Even group count: groups are paired in label order (A/B, C/D, ...) and
    crossed so high ranks meet low ranks of the sister group:
        A1 v B2, B1 v A2  (2 advancing)
    Odd group count: rank-major order (A1, B1, C1, A2, B2, C2, ...).

    Raises:
        ConfigurationError: a table holds fewer entrants than advance
    """
    if advancing_per_group < 1:
        raise ConfigurationError(f"advancing_per_group must be at least 1, got {advancing_per_group}")

    labels = sorted(standings)
    short = [label for label in labels if len(standings[label]) < advancing_per_group]
    if short:
        raise ConfigurationError(
            f"Groups {', '.join(short)} have fewer than {advancing_per_group} ranked entrants"
        )

    tops = {label: list(standings[label])[:advancing_per_group] for label in labels}
    a = advancing_per_group
    ordered: List[Entrant] = []

    if len(labels) % 2 == 0:
        for first, second in zip(labels[0::2], labels[1::2]):
            g1, g2 = tops[first], tops[second]
            for k in range(a // 2):
                ordered.extend([g1[k], g2[a - 1 - k], g2[k], g1[a - 1 - k]])
            if a % 2 == 1:
                middle = a // 2
                ordered.extend([g1[middle], g2[middle]])
    else:
        for rank in range(a):
            ordered.extend(tops[label][rank] for label in labels)

    return ordered
