"""
Fixture Invariant Verifier
==========================
Hard-stop safety envelope around a generation run.

Every invariant is checked after allocation. If any violation is found the
run fails and no fixture is returned.

Invariants:
  A) No fixture pairs an entrant with itself
  B) No two fixtures share a (date, time, venue) slot
  C) No day holds more than matches_per_day fixtures
  D) Every kickoff lies inside the date window (when the window is respected)
  E) No entrant plays twice at the same date and time
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fixture_engine.models.fixture import Fixture
from fixture_engine.services.generation_config import GenerationConfig

OUTSIDE_WINDOW = "OUTSIDE_WINDOW"


# ─── Data structures ─────────────────────────────────────────────────────

@dataclass
class Violation:
    code: str
    message: str
    fixture_code: Optional[str] = None
    entrant_id: Optional[str] = None
    context: Optional[Dict[str, Any]] = None


@dataclass
class InvariantStats:
    self_pairings: int = 0
    slot_collisions: int = 0
    days_over_cap: int = 0
    outside_window: int = 0
    double_bookings: int = 0


@dataclass
class InvariantReport:
    ok: bool
    violations: List[Violation] = field(default_factory=list)
    stats: InvariantStats = field(default_factory=InvariantStats)

    def messages(self, code: Optional[str] = None) -> List[str]:
        return [v.message for v in self.violations if code is None or v.code == code]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "violations": [
                {
                    "code": v.code,
                    "message": v.message,
                    "fixture_code": v.fixture_code,
                    "entrant_id": v.entrant_id,
                    "context": v.context,
                }
                for v in self.violations
            ],
            "stats": {
                "self_pairings": self.stats.self_pairings,
                "slot_collisions": self.stats.slot_collisions,
                "days_over_cap": self.stats.days_over_cap,
                "outside_window": self.stats.outside_window,
                "double_bookings": self.stats.double_bookings,
            },
        }


# ─── Invariant A: No self pairing ────────────────────────────────────────

def _check_self_pairing(fixtures: Sequence[Fixture]) -> List[Violation]:
    return [
        Violation(
            code="SELF_PAIRING",
            message=f"Fixture {f.fixture_code} pairs {f.home.id} with itself",
            fixture_code=f.fixture_code,
            entrant_id=f.home.id,
        )
        for f in fixtures
        if f.home.id == f.away.id
    ]


# ─── Invariant B: Slot exclusivity ───────────────────────────────────────

def _check_slot_exclusivity(fixtures: Sequence[Fixture]) -> List[Violation]:
    by_slot: Dict[Tuple[datetime, str], List[str]] = defaultdict(list)
    for f in fixtures:
        by_slot[(f.kickoff, f.venue)].append(f.fixture_code)

    violations = []
    for (kickoff, venue), codes in by_slot.items():
        if len(codes) > 1:
            violations.append(Violation(
                code="SLOT_REUSED",
                message=f"{len(codes)} fixtures share {venue} at {kickoff.isoformat()}",
                context={"kickoff": kickoff.isoformat(), "venue": venue, "fixture_codes": codes},
            ))
    return violations


# ─── Invariant C: Day capacity ───────────────────────────────────────────

def _check_day_capacity(fixtures: Sequence[Fixture], cap: int) -> List[Violation]:
    per_day: Dict[date, int] = defaultdict(int)
    for f in fixtures:
        per_day[f.day] += 1

    return [
        Violation(
            code="DAY_OVER_CAP",
            message=f"{count} fixtures on {day} (cap={cap})",
            context={"day": str(day), "count": count},
        )
        for day, count in sorted(per_day.items())
        if count > cap
    ]


# ─── Invariant D: Window containment ─────────────────────────────────────

def _check_window(fixtures: Sequence[Fixture], start: date, end: date) -> List[Violation]:
    return [
        Violation(
            code=OUTSIDE_WINDOW,
            message=f"Fixture {f.fixture_code} on {f.day} is outside {start} to {end}",
            fixture_code=f.fixture_code,
            context={"day": str(f.day)},
        )
        for f in fixtures
        if not (start <= f.day <= end)
    ]


# ─── Invariant E: Entrant double booking ─────────────────────────────────

def _check_double_booking(fixtures: Sequence[Fixture]) -> List[Violation]:
    booked: Dict[Tuple[date, time, str], List[str]] = defaultdict(list)
    for f in fixtures:
        for entrant_id in (f.home.id, f.away.id):
            booked[(f.day, f.kickoff_time, entrant_id)].append(f.fixture_code)

    violations = []
    for (day, kickoff_time, entrant_id), codes in booked.items():
        # A self pairing books the same entrant twice in one fixture; reported by A
        if len(set(codes)) > 1:
            violations.append(Violation(
                code="ENTRANT_DOUBLE_BOOKED",
                message=f"{entrant_id} plays {len(set(codes))} fixtures at {day} {kickoff_time}",
                entrant_id=entrant_id,
                context={"day": str(day), "time": str(kickoff_time), "fixture_codes": sorted(set(codes))},
            ))
    return violations


# ─── Entry point ─────────────────────────────────────────────────────────

def verify_fixtures(fixtures: Sequence[Fixture], config: GenerationConfig) -> InvariantReport:
    """Run every invariant over a generated fixture list."""
    stats = InvariantStats()
    violations: List[Violation] = []

    self_pairings = _check_self_pairing(fixtures)
    stats.self_pairings = len(self_pairings)
    violations.extend(self_pairings)

    collisions = _check_slot_exclusivity(fixtures)
    stats.slot_collisions = len(collisions)
    violations.extend(collisions)

    over_cap = _check_day_capacity(fixtures, config.matches_per_day)
    stats.days_over_cap = len(over_cap)
    violations.extend(over_cap)

    if config.respect_tournament_period:
        outside = _check_window(fixtures, config.start_date, config.end_date)
        stats.outside_window = len(outside)
        violations.extend(outside)

    double_booked = _check_double_booking(fixtures)
    stats.double_bookings = len(double_booked)
    violations.extend(double_booked)

    return InvariantReport(ok=not violations, violations=violations, stats=stats)
