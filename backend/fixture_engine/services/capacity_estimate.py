"""
Feasibility preview for a generation run (no fixtures are produced).

One estimate path per format family:
- LEAGUE: C(n, 2) fixtures per leg over the whole roster.
- GROUPS: C(size, 2) fixtures per leg per group, plus the knockout tree the
  advancing entrants would play.

Roster problems generate() would reject (entrant floor, group count) come back
in `errors` with feasible=False.

The day count is a lower bound from the per-day capacity, fixture gaps and rest
days; generate() stays the authority on whether a schedule fits.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from fixture_engine.services.format_rules import (
    FORMATS,
    GROUP_KNOCKOUT_TWO_LEGGED,
    LEAGUE,
    entrant_count_errors,
    is_power_of_two,
    rr_fixture_count,
    rr_round_count,
    validate_config,
)
from fixture_engine.services.generation_config import GenerationConfig
from fixture_engine.utils.group_partition import compute_group_capacities, group_count_errors, resolve_groups_count


@dataclass
class GenerationEstimate:
    estimated_fixtures: int
    knockout_fixtures: int
    matchdays: int
    daily_capacity: int
    required_days: int
    available_days: int
    feasible: bool
    groups_count: Optional[int] = None
    group_sizes: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "estimated_fixtures": self.estimated_fixtures,
            "knockout_fixtures": self.knockout_fixtures,
            "matchdays": self.matchdays,
            "daily_capacity": self.daily_capacity,
            "required_days": self.required_days,
            "available_days": self.available_days,
            "feasible": self.feasible,
            "groups_count": self.groups_count,
            "group_sizes": self.group_sizes,
            "errors": self.errors,
        }


def _knockout_fixture_count(bracket_size: int, two_legged: bool, single_leg_final: bool) -> int:
    """Fixtures in a full elimination tree entered by `bracket_size` entrants."""
    if bracket_size < 2 or not is_power_of_two(bracket_size):
        return 0
    ties = bracket_size - 1
    if not two_legged:
        return ties
    return ties * 2 - (1 if single_leg_final else 0)


def _matchday_sizes(pool_sizes: List[int], legs: int) -> List[int]:
    """Fixtures per matchday when round r of every pool shares matchday r."""
    rounds = max((rr_round_count(size) for size in pool_sizes), default=0)
    per_leg = [
        sum(size // 2 for size in pool_sizes if r < rr_round_count(size))
        for r in range(rounds)
    ]
    return per_leg * legs


def _required_days(matchday_sizes: List[int], legs: int, daily_capacity: int, config: GenerationConfig) -> int:
    """
    Walk the allocator's date cursor without entrant clashes.

    A full day advances 1 + interval_days; each matchday boundary advances
    rest_days_between_rounds (doubled before return legs). Clashes can only
    push fixtures later, so this is a lower bound.
    """
    if not matchday_sizes or daily_capacity < 1:
        return 0

    return_leg_start = len(matchday_sizes) // 2 if legs == 2 else None
    cursor = 0
    used = 0
    last_day = 0
    for index, size in enumerate(matchday_sizes):
        if index and config.rest_days_between_rounds:
            factor = 2 if index == return_leg_start else 1
            cursor += config.rest_days_between_rounds * factor
            used = 0
        for _ in range(size):
            if used >= daily_capacity:
                cursor += 1 + config.interval_days
                used = 0
            used += 1
            last_day = cursor
    return last_day + 1


def estimate_generation(entrant_count: int, config: GenerationConfig) -> GenerationEstimate:
    """
    Estimate fixture volume and the days needed to play it.

    Config problems are reported in `errors` (feasible=False) rather than raised,
    so a form can show them next to the numbers.
    """
    errors = validate_config(config)
    available_days = max(0, config.window_days)

    if not errors and config.format in FORMATS:
        # Same roster rules generate() enforces before partitioning
        errors.extend(entrant_count_errors(config.format, entrant_count, config.min_entrants))
        if config.format != LEAGUE:
            requested_groups = resolve_groups_count(
                config.format, entrant_count, config.groups_count, config.teams_per_group
            )
            errors.extend(group_count_errors(entrant_count, requested_groups))

    if errors or config.format not in FORMATS:
        return GenerationEstimate(
            estimated_fixtures=0,
            knockout_fixtures=0,
            matchdays=0,
            daily_capacity=0,
            required_days=0,
            available_days=available_days,
            feasible=False,
            errors=errors,
        )

    groups_count: Optional[int] = None
    group_sizes: List[int] = []
    knockout_fixtures = 0

    if config.format == LEAGUE:
        legs = config.league_legs
        pool_sizes = [entrant_count]
        fixtures = rr_fixture_count(entrant_count, legs)
        matchdays = rr_round_count(entrant_count) * legs
    else:
        legs = 2 if config.format == GROUP_KNOCKOUT_TWO_LEGGED else 1
        groups_count = resolve_groups_count(
            config.format, entrant_count, config.groups_count, config.teams_per_group
        )
        group_sizes = compute_group_capacities(entrant_count, groups_count)
        pool_sizes = group_sizes
        fixtures = sum(rr_fixture_count(size, legs) for size in group_sizes)
        matchdays = max((rr_round_count(size) for size in group_sizes), default=0) * legs
        knockout_fixtures = _knockout_fixture_count(
            groups_count * config.advancing_per_group,
            two_legged=config.format == GROUP_KNOCKOUT_TWO_LEGGED,
            single_leg_final=config.single_leg_final,
        )

    daily_capacity = min(config.matches_per_day, len(config.kickoff_times) * len(config.venues))
    required_days = _required_days(_matchday_sizes(pool_sizes, legs), legs, daily_capacity, config)

    feasible = required_days <= available_days or not config.respect_tournament_period

    return GenerationEstimate(
        estimated_fixtures=fixtures,
        knockout_fixtures=knockout_fixtures,
        matchdays=matchdays,
        daily_capacity=daily_capacity,
        required_days=required_days,
        available_days=available_days,
        feasible=feasible,
        groups_count=groups_count,
        group_sizes=group_sizes,
        errors=[],
    )
