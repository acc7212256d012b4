"""
Fixture Orchestrator Service - Format-driven fixture generation

Composes the engine for one format per run:
1. Validate roster and config
2. Partition into groups (group formats only)
3. Round-robin rounds per pool, merged into matchdays
4. Allocate slots matchday by matchday (rest days at each boundary)
5. Verify invariants

Knockout rounds are not produced by generate(): their entrants depend on
played results, so the caller asks for each round via generate_knockout_round().

Every run owns its RNG and slot allocator; nothing survives the call.
"""

import logging
import random
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple

from fixture_engine.models.entrant import Entrant
from fixture_engine.models.fixture import Fixture
from fixture_engine.services.fixture_invariants import OUTSIDE_WINDOW, verify_fixtures
from fixture_engine.services.format_rules import (
    FORMATS,
    GROUP_KNOCKOUT_TWO_LEGGED,
    LEAGUE,
    entrant_count_errors,
    is_power_of_two,
    validate_config,
)
from fixture_engine.services.generation_config import GenerationConfig
from fixture_engine.services.generation_errors import (
    CapacityError,
    ConfigurationError,
    GenerationError,
    SlotConflictInvariantViolation,
)
from fixture_engine.services.knockout_builder import build_knockout_round
from fixture_engine.services.round_robin import Pairing, round_robin_rounds
from fixture_engine.services.slot_allocator import SlotAllocator
from fixture_engine.utils.group_partition import partition_entrants, resolve_groups_count

logger = logging.getLogger(__name__)

PHASE_LEAGUE = "League"
PHASE_GROUP_STAGE = "Group Stage"
PHASE_KNOCKOUT = "Knockout"

# A matchday is a list of (pairing, group label) in allocation order
Matchday = List[Tuple[Pairing, Optional[str]]]

# ============================================================================
# Response Models
# ============================================================================


class GenerationWarning:
    """Non-fatal remark about a generation run"""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message

    def to_dict(self):
        return {"code": self.code, "message": self.message}


class GenerationSummary:
    """Summary of a generation run"""

    def __init__(self):
        self.fixtures_generated = 0
        self.matchdays = 0
        self.groups: Dict[str, List[str]] = {}  # label -> entrant ids
        self.first_kickoff: Optional[datetime] = None
        self.last_kickoff: Optional[datetime] = None
        self.days_used = 0
        self.matches_per_day = 0
        self.expected_knockout_size: Optional[int] = None

    def to_dict(self):
        return {
            "fixtures_generated": self.fixtures_generated,
            "matchdays": self.matchdays,
            "groups": self.groups,
            "first_kickoff": self.first_kickoff.isoformat() if self.first_kickoff else None,
            "last_kickoff": self.last_kickoff.isoformat() if self.last_kickoff else None,
            "days_used": self.days_used,
            "matches_per_day": self.matches_per_day,
            "expected_knockout_size": self.expected_knockout_size,
        }


class GenerationResult:
    """Complete, structured result of a generation run"""

    def __init__(self):
        self.status = "success"
        self.format: Optional[str] = None
        self.fixtures: List[Fixture] = []
        self.summary = GenerationSummary()
        self.warnings: List[GenerationWarning] = []
        self.failed_step: Optional[str] = None
        self.error_code: Optional[str] = None
        self.error_message: Optional[str] = None
        self.error_details: List[str] = []

    def to_dict(self):
        result = {
            "status": self.status,
            "format": self.format,
            "fixtures": [f.model_dump(mode="json") for f in self.fixtures],
            "summary": self.summary.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
        }

        if self.failed_step:
            result["failed_step"] = self.failed_step
            result["error_code"] = self.error_code
            result["error_message"] = self.error_message
            result["error_details"] = self.error_details

        return result


# ============================================================================
# Validation
# ============================================================================


def validate_entrants(entrants: Sequence[Entrant]) -> List[str]:
    """Return one message per roster problem (empty ids, duplicate ids)."""
    errors: List[str] = []
    seen = set()
    duplicates = set()
    for entrant in entrants:
        if not entrant.id:
            errors.append(f"Entrant '{entrant.name}' has an empty id")
            continue
        if entrant.id in seen:
            duplicates.add(entrant.id)
        seen.add(entrant.id)
    if duplicates:
        errors.append(f"Duplicate entrant ids: {', '.join(sorted(duplicates))}")
    return errors


def _validate_run(entrants: Sequence[Entrant], config: GenerationConfig) -> None:
    errors = validate_config(config) + validate_entrants(entrants)
    if not errors and config.format in FORMATS:
        errors.extend(entrant_count_errors(config.format, len(entrants), config.min_entrants))
    if errors:
        raise ConfigurationError("; ".join(errors), details=errors)


# ============================================================================
# Fixture construction
# ============================================================================


def _matchday_label(matchday: int, leg: Optional[int]) -> str:
    label = f"Matchday {matchday}"
    return f"{label} (Leg {leg})" if leg else label


def _fixture_code(phase: str, matchday: int, pairing: Pairing, group: Optional[str]) -> str:
    if phase == PHASE_LEAGUE:
        return f"LG_MD{matchday:02d}_{pairing.sequence_in_round:02d}"
    return f"G{group}_MD{matchday:02d}_{pairing.sequence_in_round:02d}"


def _matchday_leg(matchday: Matchday) -> Optional[int]:
    return matchday[0][0].leg if matchday else None


def _allocate_matchdays(
    matchdays: List[Matchday],
    phase: str,
    allocator: SlotAllocator,
) -> List[Fixture]:
    """Allocate matchdays in order, signalling a round boundary after each (double rest before return legs)."""
    fixtures: List[Fixture] = []
    for matchday_number, matchday in enumerate(matchdays, start=1):
        for seq, (pairing, group) in enumerate(matchday, start=1):
            slot = allocator.allocate(pairing.home.id, pairing.away.id)
            fixtures.append(
                Fixture(
                    fixture_code=_fixture_code(phase, matchday_number, pairing, group),
                    phase=phase,
                    round_number=matchday_number,
                    round_label=_matchday_label(matchday_number, pairing.leg),
                    sequence_in_round=seq,
                    group=group,
                    leg=pairing.leg,
                    home=pairing.home,
                    away=pairing.away,
                    kickoff=slot.kickoff,
                    venue=slot.venue,
                )
            )
        logger.debug("%s matchday %d: %d fixtures", phase, matchday_number, len(matchday))
        next_leg = _matchday_leg(matchdays[matchday_number]) if matchday_number < len(matchdays) else None
        allocator.end_round(before_return_leg=_matchday_leg(matchday) == 1 and next_leg == 2)
    return fixtures


def _merge_group_rounds(group_rounds: Dict[str, List[List[Pairing]]], legs: int) -> List[Matchday]:
    """
    Interleave per-group rounds into matchdays.

    Matchday k holds round k of every group (groups in label order). Legs are
    merged separately so no matchday mixes first and second legs.
    """
    matchdays: List[Matchday] = []
    for leg_index in range(legs):
        per_group_leg: Dict[str, List[List[Pairing]]] = {}
        for label, rounds in group_rounds.items():
            per_leg = len(rounds) // legs
            per_group_leg[label] = rounds[leg_index * per_leg : (leg_index + 1) * per_leg]

        leg_length = max((len(r) for r in per_group_leg.values()), default=0)
        for round_index in range(leg_length):
            matchday: Matchday = []
            for label, rounds in per_group_leg.items():
                if round_index < len(rounds):
                    matchday.extend((pairing, label) for pairing in rounds[round_index])
            matchdays.append(matchday)
    return matchdays


def _raise_on_invariant_failure(fixtures: Sequence[Fixture], config: GenerationConfig) -> None:
    report = verify_fixtures(fixtures, config)
    if report.ok:
        return
    outside = report.messages(OUTSIDE_WINDOW)
    if outside:
        raise CapacityError("Fixtures fall outside the date window", details=outside)
    raise SlotConflictInvariantViolation("Generated schedule breaks slot invariants", details=report.messages())


def _summarise(result: GenerationResult, allocator: SlotAllocator, matchdays: int, config: GenerationConfig):
    summary = result.summary
    summary.fixtures_generated = len(result.fixtures)
    summary.matchdays = matchdays
    summary.days_used = len(allocator.days_used)
    summary.matches_per_day = config.matches_per_day
    if result.fixtures:
        kickoffs = [f.kickoff for f in result.fixtures]
        summary.first_kickoff = min(kickoffs)
        summary.last_kickoff = max(kickoffs)


# ============================================================================
# Main Orchestrator
# ============================================================================


def _run(entrants: Sequence[Entrant], config: GenerationConfig, result: GenerationResult) -> GenerationResult:
    """
    Execute every step, keeping result.failed_step on the step in progress.

    Raises:
        GenerationError: any configuration, capacity or invariant failure
    """
    result.format = config.format

    # ====================================================================
    # Step 1: Validate
    # ====================================================================
    result.failed_step = "VALIDATE"
    _validate_run(entrants, config)

    definition = FORMATS[config.format]
    if len(entrants) > definition.max_entrants:
        message = f"{len(entrants)} entrants exceeds the {definition.name} maximum of {definition.max_entrants}"
        logger.warning(message)
        result.warnings.append(GenerationWarning(code="ABOVE_MAX_ENTRANTS", message=message))

    rng = random.Random(config.seed)
    logger.info("Generating %s fixtures for %d entrants", config.format, len(entrants))

    # ====================================================================
    # Step 2: Partition (group formats)
    # ====================================================================
    result.failed_step = "PARTITION"
    if config.format == LEAGUE:
        pools: Dict[str, List[Entrant]] = {"": list(entrants)}
        legs = config.league_legs
        phase = PHASE_LEAGUE
    else:
        groups_count = resolve_groups_count(
            config.format, len(entrants), config.groups_count, config.teams_per_group
        )
        pools = partition_entrants(entrants, groups_count, rng)
        legs = 2 if config.format == GROUP_KNOCKOUT_TWO_LEGGED else 1
        phase = PHASE_GROUP_STAGE
        result.summary.groups = {label: [e.id for e in members] for label, members in pools.items()}

        knockout_size = len(pools) * config.advancing_per_group
        result.summary.expected_knockout_size = knockout_size
        if not is_power_of_two(knockout_size):
            message = (
                f"{len(pools)} groups x {config.advancing_per_group} advancing = {knockout_size} entrants; "
                "the knockout phase needs a power of two"
            )
            logger.warning(message)
            result.warnings.append(GenerationWarning(code="KNOCKOUT_SIZE_NOT_POWER_OF_TWO", message=message))

    # ====================================================================
    # Step 3: Round robin per pool
    # ====================================================================
    result.failed_step = "SCHEDULE"
    pool_rounds = {label: round_robin_rounds(members, legs=legs) for label, members in pools.items()}
    if config.format == LEAGUE:
        matchdays: List[Matchday] = [[(p, None) for p in rnd] for rnd in pool_rounds[""]]
    else:
        matchdays = _merge_group_rounds(pool_rounds, legs)

    # ====================================================================
    # Step 4: Allocate slots
    # ====================================================================
    result.failed_step = "ALLOCATE"
    allocator = SlotAllocator(config, len(entrants), rng)
    fixtures = _allocate_matchdays(matchdays, phase, allocator)

    # ====================================================================
    # Step 5: Verify
    # ====================================================================
    result.failed_step = "VERIFY"
    _raise_on_invariant_failure(fixtures, config)

    result.fixtures = fixtures
    _summarise(result, allocator, len(matchdays), config)
    result.status = "success"
    result.failed_step = None
    logger.info(
        "Generated %d %s fixtures over %d days", len(fixtures), config.format, result.summary.days_used
    )
    return result


def generate(entrants: Sequence[Entrant], config: GenerationConfig) -> List[Fixture]:
    """
    Generate the complete fixture list for one tournament.

    Args:
        entrants: Roster (ids unique); pre-set group labels are honoured by group formats
        config: Format, date window and slot catalogue

    Returns:
        Fixtures ordered by matchday, then allocation order

    Raises:
        ConfigurationError: invalid roster/config, nothing produced
        CapacityError: the window cannot hold every fixture
        InvariantViolation: internal consistency failure
    """
    return _run(entrants, config, GenerationResult()).fixtures


def run_generation(entrants: Sequence[Entrant], config: GenerationConfig) -> GenerationResult:
    """
    generate() as a structured result: failures come back with status="error",
    the failing step and the error code instead of an exception.
    """
    result = GenerationResult()
    try:
        return _run(entrants, config, result)
    except GenerationError as e:
        logger.info("Fixture generation failed at step %s: %s", result.failed_step, e.message)
        result.status = "error"
        result.fixtures = []
        result.error_code = e.code
        result.error_message = e.message
        result.error_details = list(e.details)
        return result


def generate_knockout_round(
    advancing: Sequence[Entrant],
    config: GenerationConfig,
    start_date: Optional[date] = None,
    two_legged: Optional[bool] = None,
) -> List[Fixture]:
    """
    Schedule one elimination round for entrants the caller has already qualified.

    Args:
        advancing: Entrants in bracket order (0 v 1, 2 v 3, ...); power-of-two size
        config: Slot catalogue and window; format decides the default leg mode
        start_date: First day to use (e.g. the day after the group stage); defaults to the window start
        two_legged: Override the leg mode implied by config.format

    Raises:
        ConfigurationError: bad config, bad bracket size, start outside the window
        CapacityError: the window cannot hold the round
    """
    errors = validate_config(config) + validate_entrants(advancing)
    first_day = start_date or config.start_date
    if config.respect_tournament_period and not (config.start_date <= first_day <= config.end_date):
        errors.append(f"Knockout start {first_day} is outside {config.start_date} to {config.end_date}")
    if errors:
        raise ConfigurationError("; ".join(errors), details=errors)

    if two_legged is None:
        two_legged = config.format == GROUP_KNOCKOUT_TWO_LEGGED

    knockout = build_knockout_round(advancing, two_legged=two_legged, single_leg_final=config.single_leg_final)
    allocator = SlotAllocator(config, len(advancing), random.Random(config.seed), start_date=first_day)

    fixtures: List[Fixture] = []
    for leg_pairings in knockout.legs:
        for pairing in leg_pairings:
            slot = allocator.allocate(pairing.home.id, pairing.away.id)
            code = f"KO_{knockout.code}_{pairing.sequence_in_round:02d}"
            label = knockout.name
            if pairing.leg:
                code = f"{code}_L{pairing.leg}"
                label = f"{label} (Leg {pairing.leg})"
            fixtures.append(
                Fixture(
                    fixture_code=code,
                    phase=PHASE_KNOCKOUT,
                    round_number=pairing.round_number,
                    round_label=label,
                    sequence_in_round=pairing.sequence_in_round,
                    leg=pairing.leg,
                    home=pairing.home,
                    away=pairing.away,
                    kickoff=slot.kickoff,
                    venue=slot.venue,
                )
            )
        allocator.end_round()

    _raise_on_invariant_failure(fixtures, config)
    logger.info("Scheduled %s: %d fixtures", knockout.name, len(fixtures))
    return fixtures
