from datetime import date, time

import pytest
from fastapi.testclient import TestClient

from fixture_engine.main import app
from fixture_engine.models.entrant import Entrant
from fixture_engine.services.generation_config import GenerationConfig

START = date(2026, 3, 1)
END = date(2026, 6, 30)

# ============================================================================
# Factories
# ============================================================================
# Defaults give plenty of room: 4 fixtures/day, 2 kickoff times, 3 venues,
# a four-month window and a fixed seed. Tests override only what they probe.


def build_entrants(count: int, prefix: str = "T") -> list:
    return [Entrant(id=f"{prefix}{i + 1}", name=f"Team {i + 1}") for i in range(count)]


def build_config(**overrides) -> GenerationConfig:
    values = dict(
        format="league",
        start_date=START,
        end_date=END,
        matches_per_day=4,
        kickoff_times=(time(15, 0), time(18, 0)),
        venues=("North Park", "Riverside", "Harbour Field"),
        seed=7,
    )
    values.update(overrides)
    return GenerationConfig(**values)


@pytest.fixture(name="make_entrants")
def make_entrants_fixture():
    """Factory: make_entrants(6) -> [T1 .. T6]"""
    return build_entrants


@pytest.fixture(name="make_config")
def make_config_fixture():
    """Factory: make_config(format="group_knockout", matches_per_day=2)"""
    return build_config


@pytest.fixture(name="client")
def client_fixture():
    """Stateless app: no dependency overrides needed"""
    with TestClient(app) as client:
        yield client
