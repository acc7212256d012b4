"""
Format Rules - Tournament format catalogue (Single Source of Truth)

This module defines every per-format constant: entrant floors and ceilings,
recommended group layouts, knockout round names and the config validation
matrix. All other modules must import from here. Do NOT duplicate these rules
elsewhere.
"""

from dataclasses import dataclass, field
from datetime import time
from typing import Dict, List, Literal, Optional, Tuple

# =============================================================================
# Format keys
# =============================================================================

TournamentFormat = Literal["league", "group_knockout", "group_knockout_two_legged"]

LEAGUE = "league"
GROUP_KNOCKOUT = "group_knockout"
GROUP_KNOCKOUT_TWO_LEGGED = "group_knockout_two_legged"

GROUP_FORMATS = frozenset({GROUP_KNOCKOUT, GROUP_KNOCKOUT_TWO_LEGGED})

# Legacy names used by the tournament UI
FORMAT_ALIASES: Dict[str, str] = {
    "world_cup": GROUP_KNOCKOUT,
    "champions_league": GROUP_KNOCKOUT_TWO_LEGGED,
    "liga": LEAGUE,
}

VENUE_SELECTION_MODES = frozenset({"random", "round_robin"})

# Smallest rosters the algorithms can handle at all (league: one pairing, groups: two groups of two)
ALGORITHMIC_FLOOR: Dict[str, int] = {
    LEAGUE: 2,
    GROUP_KNOCKOUT: 4,
    GROUP_KNOCKOUT_TWO_LEGGED: 4,
}


def normalize_format(value: Optional[str]) -> str:
    """Lowercase, strip, spaces/dashes to underscores, resolve legacy aliases."""
    if value is None:
        return ""
    key = value.strip().lower().replace(" ", "_").replace("-", "_")
    return FORMAT_ALIASES.get(key, key)


# =============================================================================
# Catalogue
# =============================================================================


@dataclass
class PhaseDefinition:
    key: str
    name: str
    kind: str  # "league" | "group_stage" | "knockout"
    legs: int = 1


@dataclass
class FormatDefinition:
    key: str
    name: str
    description: str
    min_entrants: int
    max_entrants: int
    recommended_entrant_counts: List[int] = field(default_factory=list)
    phases: List[PhaseDefinition] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "min_entrants": self.min_entrants,
            "max_entrants": self.max_entrants,
            "recommended_entrant_counts": list(self.recommended_entrant_counts),
            "phases": [
                {"key": p.key, "name": p.name, "kind": p.kind, "legs": p.legs} for p in self.phases
            ],
        }


FORMATS: Dict[str, FormatDefinition] = {
    LEAGUE: FormatDefinition(
        key=LEAGUE,
        name="League",
        description="Every entrant meets every other entrant once, or home and away with two legs; the table decides the title.",
        min_entrants=6,
        max_entrants=20,
        recommended_entrant_counts=[8, 10, 12, 16, 20],
        phases=[PhaseDefinition(key="league_phase", name="League", kind="league")],
    ),
    GROUP_KNOCKOUT: FormatDefinition(
        key=GROUP_KNOCKOUT,
        name="Group stage + knockout",
        description="Round-robin groups, then single-elimination rounds for the top entrants of each group.",
        min_entrants=8,
        max_entrants=32,
        recommended_entrant_counts=[8, 16, 24, 32],
        phases=[
            PhaseDefinition(key="group_stage", name="Group Stage", kind="group_stage"),
            PhaseDefinition(key="round_of_16", name="Round of 16", kind="knockout"),
            PhaseDefinition(key="quarter_finals", name="Quarterfinal", kind="knockout"),
            PhaseDefinition(key="semi_finals", name="Semifinal", kind="knockout"),
            PhaseDefinition(key="final", name="Final", kind="knockout"),
        ],
    ),
    GROUP_KNOCKOUT_TWO_LEGGED: FormatDefinition(
        key=GROUP_KNOCKOUT_TWO_LEGGED,
        name="Group stage + two-legged knockout",
        description="Home-and-away groups, then home-and-away elimination ties.",
        min_entrants=8,
        max_entrants=32,
        recommended_entrant_counts=[16, 24, 32],
        phases=[
            PhaseDefinition(key="group_stage", name="Group Stage", kind="group_stage", legs=2),
            PhaseDefinition(key="round_of_16", name="Round of 16", kind="knockout", legs=2),
            PhaseDefinition(key="quarter_finals", name="Quarterfinal", kind="knockout", legs=2),
            PhaseDefinition(key="semi_finals", name="Semifinal", kind="knockout", legs=2),
            PhaseDefinition(key="final", name="Final", kind="knockout", legs=2),
        ],
    ),
}


# =============================================================================
# Group Sizing Rules
# =============================================================================

RECOMMENDED_GROUP_SIZE = 4

# (max entrant count, groups) - first row whose bound covers the roster wins
GROUPS_BY_ENTRANT_COUNT: List[Tuple[int, int]] = [(8, 2), (12, 3), (16, 4), (24, 6)]
GROUPS_FALLBACK = 8


def recommended_groups(format_key: str, entrant_count: int) -> Tuple[int, int]:
    """
    Return (groups_count, teams_per_group) for a format and roster size.

    Rules:
    - league: 1 group holding everybody
    - group formats: <=8 -> 2, <=12 -> 3, <=16 -> 4, <=24 -> 6, else 8 groups of 4
    """
    if normalize_format(format_key) == LEAGUE:
        return (1, entrant_count)

    for bound, groups in GROUPS_BY_ENTRANT_COUNT:
        if entrant_count <= bound:
            return (groups, RECOMMENDED_GROUP_SIZE)
    return (GROUPS_FALLBACK, RECOMMENDED_GROUP_SIZE)


# =============================================================================
# Round Robin Counting
# =============================================================================


def rr_round_count(entrant_count: int) -> int:
    """
    Return number of RR rounds for n entrants.
    Even n: n-1 rounds. Odd n: n rounds (with BYE).
    """
    if entrant_count < 2:
        return 0
    if entrant_count % 2 == 0:
        return entrant_count - 1
    return entrant_count


def rr_fixture_count(entrant_count: int, legs: int = 1) -> int:
    """Return number of RR fixtures: C(n, 2) per leg."""
    return (entrant_count * (entrant_count - 1)) // 2 * legs


# =============================================================================
# Knockout Rules
# =============================================================================

KNOCKOUT_ROUND_NAMES: Dict[int, Tuple[str, str]] = {
    2: ("Final", "F"),
    4: ("Semifinal", "SF"),
    8: ("Quarterfinal", "QF"),
    16: ("Round of 16", "R16"),
}


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def knockout_round_name(bracket_size: int) -> str:
    """Display name for a round entered by `bracket_size` entrants."""
    if bracket_size in KNOCKOUT_ROUND_NAMES:
        return KNOCKOUT_ROUND_NAMES[bracket_size][0]
    return f"Round of {bracket_size}"


def knockout_round_code(bracket_size: int) -> str:
    if bracket_size in KNOCKOUT_ROUND_NAMES:
        return KNOCKOUT_ROUND_NAMES[bracket_size][1]
    return f"R{bracket_size}"


# =============================================================================
# Validation Helpers
# =============================================================================


def entrant_floor(format_key: str, override: Optional[int] = None) -> int:
    """
    Minimum roster size for a format.

    The catalogue minimum applies unless the caller overrides it; an override
    can never go below what the algorithms need to produce any fixture.
    """
    key = normalize_format(format_key)
    floor = ALGORITHMIC_FLOOR.get(key, 2)
    if override is not None:
        return max(floor, override)
    definition = FORMATS.get(key)
    return definition.min_entrants if definition else floor


def entrant_count_errors(format_key: str, entrant_count: int, override: Optional[int] = None) -> List[str]:
    """Return a message when the roster is smaller than the format allows."""
    floor = entrant_floor(format_key, override)
    if entrant_count < floor:
        return [f"Format '{normalize_format(format_key)}' needs at least {floor} entrants, got {entrant_count}"]
    return []


def validate_config(config) -> List[str]:
    """
    Validate a GenerationConfig.

    Returns an empty list if valid, otherwise one message per problem.
    """
    errors: List[str] = []

    if config.format not in FORMATS:
        allowed = ", ".join(sorted(FORMATS))
        errors.append(f"Unknown format '{config.format}' (expected one of: {allowed})")

    if config.end_date < config.start_date:
        errors.append(f"Date window ends ({config.end_date}) before it starts ({config.start_date})")

    if config.matches_per_day < 1:
        errors.append(f"matches_per_day must be at least 1, got {config.matches_per_day}")

    if not config.kickoff_times:
        errors.append("At least one kickoff time is required")
    elif len(set(config.kickoff_times)) != len(config.kickoff_times):
        errors.append("Kickoff times must be distinct")
    elif not all(isinstance(t, time) for t in config.kickoff_times):
        errors.append("Kickoff times must be time-of-day values")

    if not config.venues:
        errors.append("At least one venue is required")
    elif any(not v for v in config.venues):
        errors.append("Venue names must not be empty")
    elif len(set(config.venues)) != len(config.venues):
        errors.append("Venue names must be distinct")

    if config.league_legs not in (1, 2):
        errors.append(f"league_legs must be 1 or 2, got {config.league_legs}")

    if config.rest_days_between_rounds < 0:
        errors.append(f"rest_days_between_rounds must not be negative, got {config.rest_days_between_rounds}")

    if config.interval_days < 0:
        errors.append(f"interval_days must not be negative, got {config.interval_days}")

    if config.groups_count is not None and config.groups_count <= 0:
        errors.append(f"groups_count must be positive, got {config.groups_count}")

    if config.teams_per_group is not None and config.teams_per_group < 2:
        errors.append(f"teams_per_group must be at least 2, got {config.teams_per_group}")

    if config.advancing_per_group < 1:
        errors.append(f"advancing_per_group must be at least 1, got {config.advancing_per_group}")

    if config.venue_selection not in VENUE_SELECTION_MODES:
        errors.append(f"venue_selection must be 'random' or 'round_robin', got '{config.venue_selection}'")

    return errors
