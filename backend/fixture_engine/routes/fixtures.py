"""
API Routes for fixture generation - stateless adapter over the engine
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from fixture_engine.config import DEFAULT_ADVANCING_PER_GROUP
from fixture_engine.models.entrant import Entrant
from fixture_engine.models.fixture import Fixture
from fixture_engine.services.capacity_estimate import estimate_generation
from fixture_engine.services.fixture_orchestrator import generate_knockout_round, run_generation
from fixture_engine.services.format_rules import knockout_round_name
from fixture_engine.services.generation_config import GenerationConfig
from fixture_engine.services.generation_errors import CapacityError, ConfigurationError, GenerationError
from fixture_engine.services.knockout_builder import advancing_from_groups
from fixture_engine.utils.schedule_inputs import parse_kickoff_times, parse_venues

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BY_ERROR_CODE = {
    ConfigurationError.code: 422,
    CapacityError.code: 409,
}


# ============================================================================
# Request Models
# ============================================================================


class GenerationConfigRequest(BaseModel):
    """Config as edited in the scheduler form; times and venues may be comma-separated strings"""

    format: str
    start_date: date
    end_date: date
    matches_per_day: int
    kickoff_times: Union[str, List[str]]
    venues: Union[str, List[str]]
    league_legs: int = 1
    rest_days_between_rounds: int = 0
    interval_days: int = 0
    respect_tournament_period: bool = True
    groups_count: Optional[int] = None
    teams_per_group: Optional[int] = None
    advancing_per_group: int = DEFAULT_ADVANCING_PER_GROUP
    seed: Optional[int] = None
    venue_selection: str = "random"
    min_entrants: Optional[int] = None
    single_leg_final: bool = False

    def to_config(self) -> GenerationConfig:
        """
        Raises:
            ConfigurationError: a kickoff time is not a valid time of day
        """
        try:
            kickoff_times = parse_kickoff_times(self.kickoff_times)
        except ValueError as e:
            raise ConfigurationError(f"Invalid kickoff time: {e}")

        return GenerationConfig(
            format=self.format,
            start_date=self.start_date,
            end_date=self.end_date,
            matches_per_day=self.matches_per_day,
            kickoff_times=kickoff_times,
            venues=parse_venues(self.venues),
            league_legs=self.league_legs,
            rest_days_between_rounds=self.rest_days_between_rounds,
            interval_days=self.interval_days,
            respect_tournament_period=self.respect_tournament_period,
            groups_count=self.groups_count,
            teams_per_group=self.teams_per_group,
            advancing_per_group=self.advancing_per_group,
            seed=self.seed,
            venue_selection=self.venue_selection,
            min_entrants=self.min_entrants,
            single_leg_final=self.single_leg_final,
        )


class GenerateRequest(BaseModel):
    entrants: List[Entrant]
    config: GenerationConfigRequest


class KnockoutRoundRequest(BaseModel):
    """Either `advancing` in bracket order, or ranked `standings` per group label"""

    config: GenerationConfigRequest
    advancing: Optional[List[Entrant]] = None
    standings: Optional[Dict[str, List[Entrant]]] = None
    start_date: Optional[date] = None
    two_legged: Optional[bool] = None


class EstimateRequest(BaseModel):
    entrant_count: int = Field(ge=0)
    config: GenerationConfigRequest


# ============================================================================
# Response Models
# ============================================================================


class KnockoutRoundResponse(BaseModel):
    round_label: str
    fixtures: List[Fixture]


# ============================================================================
# Helpers
# ============================================================================


def _raise_http(error: GenerationError):
    status_code = STATUS_BY_ERROR_CODE.get(error.code, 500)
    raise HTTPException(status_code=status_code, detail=error.to_dict())


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/fixtures/generate")
def generate_fixtures(request: GenerateRequest):
    """
    Generate the fixture list for a roster.

    Returns:
        GenerationResult as a dict: fixtures, summary, warnings.

    Errors:
        422 configuration error, 409 capacity error, 500 invariant violation;
        the body carries the run's failed_step and error_code.
    """
    try:
        config = request.config.to_config()
    except GenerationError as e:
        _raise_http(e)

    try:
        result = run_generation(request.entrants, config)
    except Exception:
        logger.exception("Unexpected failure generating %s fixtures", request.config.format)
        raise HTTPException(status_code=500, detail="Fixture generation failed unexpectedly")

    body = result.to_dict()
    if result.status != "success":
        raise HTTPException(status_code=STATUS_BY_ERROR_CODE.get(result.error_code, 500), detail=body)
    return body


@router.post("/fixtures/knockout-round", response_model=KnockoutRoundResponse)
def schedule_knockout_round(request: KnockoutRoundRequest):
    """
    Schedule one elimination round once the caller knows who advanced.

    `standings` (ranked tables keyed by group label) is turned into bracket order
    with cross-seeding; `advancing` is used as given.
    """
    try:
        config = request.config.to_config()
        if request.advancing is not None:
            advancing = request.advancing
        elif request.standings is not None:
            advancing = advancing_from_groups(request.standings, config.advancing_per_group)
        else:
            raise ConfigurationError("Provide either advancing entrants or group standings")

        fixtures = generate_knockout_round(
            advancing, config, start_date=request.start_date, two_legged=request.two_legged
        )
    except GenerationError as e:
        _raise_http(e)

    return KnockoutRoundResponse(round_label=knockout_round_name(len(advancing)), fixtures=fixtures)


@router.post("/fixtures/estimate")
def estimate_fixtures(request: EstimateRequest):
    """Feasibility preview; config problems come back in `errors`, never as an HTTP error."""
    try:
        config = request.config.to_config()
    except GenerationError as e:
        _raise_http(e)
    return estimate_generation(request.entrant_count, config).to_dict()
