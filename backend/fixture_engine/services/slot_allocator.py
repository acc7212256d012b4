"""
Time-Slot Allocator - date, kickoff time and venue for each pairing

A SlotAllocator lives for exactly one generation run. It walks a date cursor
forward from the window start and hands out slots in the order pairings are
offered; nothing is shared between runs.

Per day:
- at most matches_per_day fixtures
- slot k of the day kicks off at kickoff_times[k % len(kickoff_times)], so
  concurrent kickoffs only happen once every declared time is in use
- a (date, time, venue) triple is used once
- an entrant plays at most once per (date, time)
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence, Set, Tuple

from fixture_engine.config import ALLOCATOR_ATTEMPTS_PER_ENTRANT, MIN_ALLOCATOR_ATTEMPTS
from fixture_engine.services.generation_config import GenerationConfig
from fixture_engine.services.generation_errors import CapacityError

logger = logging.getLogger(__name__)


@dataclass
class SlotAssignment:
    day: date
    kickoff_time: time
    venue: str

    @property
    def kickoff(self) -> datetime:
        return datetime.combine(self.day, self.kickoff_time)


# ============================================================================
# Day State Tracking
# ============================================================================


@dataclass
class DayState:
    """Tracks the slots handed out on one calendar day"""

    used_slot_indexes: Set[int] = field(default_factory=set)
    venues_by_time: Dict[time, Set[str]] = field(default_factory=dict)
    entrants_by_time: Dict[time, Set[str]] = field(default_factory=dict)

    @property
    def fixture_count(self) -> int:
        return len(self.used_slot_indexes)

    def record(self, slot_index: int, kickoff_time: time, venue: str, entrant_ids: Sequence[str]):
        self.used_slot_indexes.add(slot_index)
        self.venues_by_time.setdefault(kickoff_time, set()).add(venue)
        self.entrants_by_time.setdefault(kickoff_time, set()).update(entrant_ids)


def max_attempts_for(entrant_count: int) -> int:
    """Day advances a single pairing may trigger before the run is declared infeasible."""
    return max(MIN_ALLOCATOR_ATTEMPTS, ALLOCATOR_ATTEMPTS_PER_ENTRANT * entrant_count)


# ============================================================================
# Allocator
# ============================================================================


class SlotAllocator:
    """Sequential slot allocator scoped to one generation run"""

    def __init__(
        self,
        config: GenerationConfig,
        entrant_count: int,
        rng: random.Random,
        start_date: Optional[date] = None,
    ):
        self.config = config
        self.rng = rng
        self.cursor: date = start_date or config.start_date
        self.max_attempts = max_attempts_for(entrant_count)
        self.days: Dict[date, DayState] = {}
        self.allocated_count = 0
        self._allocated_since_boundary = 0
        self._venue_index = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def allocate(self, home_id: str, away_id: str) -> SlotAssignment:
        """
        Assign the next free slot to a pairing.

        Raises:
            CapacityError: the cursor left the date window (when the window is
                respected) or no slot was found within max_attempts day advances
        """
        attempts = 0
        while True:
            self._check_window()

            found = self._find_slot(self.cursor, home_id, away_id)
            if found is not None:
                slot_index, kickoff_time, venue = found
                self.days.setdefault(self.cursor, DayState()).record(
                    slot_index, kickoff_time, venue, (home_id, away_id)
                )
                self.allocated_count += 1
                self._allocated_since_boundary += 1
                return SlotAssignment(day=self.cursor, kickoff_time=kickoff_time, venue=venue)

            attempts += 1
            if attempts > self.max_attempts:
                raise CapacityError(
                    f"No free slot for {home_id} v {away_id} after {self.max_attempts} day advances "
                    f"(matches_per_day={self.config.matches_per_day}, "
                    f"{len(self.config.kickoff_times)} kickoff times, {len(self.config.venues)} venues)"
                )
            self._advance_day()

    def end_round(self, before_return_leg: bool = False) -> None:
        """
        Signal a round boundary: the next round starts rest_days_between_rounds later.

        The boundary between the last first-leg round and the first return-leg
        round gets double rest. A boundary with nothing allocated since the
        previous one is ignored so empty rounds never add rest.
        """
        if self._allocated_since_boundary == 0:
            return
        self._allocated_since_boundary = 0
        rest = self.config.rest_days_between_rounds * (2 if before_return_leg else 1)
        if rest:
            self.cursor += timedelta(days=rest)
            logger.debug("Round boundary: cursor moved to %s", self.cursor)

    @property
    def days_used(self) -> List[date]:
        return sorted(day for day, state in self.days.items() if state.fixture_count)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_window(self) -> None:
        if not self.config.respect_tournament_period:
            return
        if self.cursor > self.config.end_date:
            raise CapacityError(
                f"Date window {self.config.start_date} to {self.config.end_date} is too narrow: "
                f"{self.allocated_count} fixtures fitted before {self.cursor}. Widen the window, "
                f"raise matches_per_day, add kickoff times or venues, or reduce rest days"
            )

    def _advance_day(self) -> None:
        self.cursor += timedelta(days=1 + self.config.interval_days)

    def _find_slot(self, day: date, home_id: str, away_id: str) -> Optional[Tuple[int, time, str]]:
        state = self.days.get(day) or DayState()
        if state.fixture_count >= self.config.matches_per_day:
            return None

        kickoff_times = self.config.kickoff_times
        for slot_index in range(self.config.matches_per_day):
            if slot_index in state.used_slot_indexes:
                continue
            kickoff_time = kickoff_times[slot_index % len(kickoff_times)]

            busy = state.entrants_by_time.get(kickoff_time, set())
            if home_id in busy or away_id in busy:
                continue

            taken = state.venues_by_time.get(kickoff_time, set())
            free_venues = [v for v in self.config.venues if v not in taken]
            if not free_venues:
                continue

            return slot_index, kickoff_time, self._pick_venue(free_venues)
        return None

    def _pick_venue(self, free_venues: List[str]) -> str:
        if self.config.venue_selection == "round_robin":
            venues = self.config.venues
            for offset in range(len(venues)):
                candidate = venues[(self._venue_index + offset) % len(venues)]
                if candidate in free_venues:
                    self._venue_index = (venues.index(candidate) + 1) % len(venues)
                    return candidate
        return self.rng.choice(free_venues)
