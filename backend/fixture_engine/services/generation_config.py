"""
GenerationConfig - immutable per-run input of the fixture engine.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Tuple

from fixture_engine.config import DEFAULT_ADVANCING_PER_GROUP
from fixture_engine.services.format_rules import normalize_format


@dataclass(frozen=True)
class GenerationConfig:
    """Canonical input for one generation run."""

    format: str
    start_date: date
    end_date: date  # Inclusive
    matches_per_day: int
    kickoff_times: Tuple[time, ...]
    venues: Tuple[str, ...]
    league_legs: int = 1
    rest_days_between_rounds: int = 0
    interval_days: int = 0  # Extra days skipped whenever a day is full
    respect_tournament_period: bool = True
    groups_count: Optional[int] = None
    teams_per_group: Optional[int] = None
    advancing_per_group: int = DEFAULT_ADVANCING_PER_GROUP
    seed: Optional[int] = None
    venue_selection: str = "random"  # "random" | "round_robin"
    min_entrants: Optional[int] = None  # Overrides the catalogue floor
    single_leg_final: bool = False

    def __post_init__(self):
        # Frozen: normalise through object.__setattr__
        object.__setattr__(self, "format", normalize_format(self.format))
        object.__setattr__(self, "kickoff_times", tuple(self.kickoff_times))
        object.__setattr__(self, "venues", tuple(self.venues))

    @property
    def window_days(self) -> int:
        """Number of calendar days in the window, both ends included."""
        return (self.end_date - self.start_date).days + 1
