from fixture_engine.models.entrant import Entrant
from fixture_engine.models.fixture import Fixture

__all__ = [
    "Entrant",
    "Fixture",
]
