from datetime import date, datetime, time
from typing import Optional

from sqlmodel import Field, SQLModel

from fixture_engine.models.entrant import Entrant


class Fixture(SQLModel):
    fixture_code: str  # e.g. "LG_MD03_02", "GA_MD02_01", "KO_SF_01_L1"
    phase: str  # "League" | "Group Stage" | "Knockout"
    round_number: int
    round_label: str  # "Matchday 3", "Matchday 5 (Leg 2)", "Quarterfinal (Leg 1)"
    sequence_in_round: int
    group: Optional[str] = Field(default=None)
    leg: Optional[int] = Field(default=None)  # 1 | 2 for two-legged pairings

    home: Entrant
    away: Entrant

    kickoff: datetime
    venue: str

    # Scores and events belong to match tracking, not generation
    status: str = Field(default="scheduled")

    @property
    def day(self) -> date:
        return self.kickoff.date()

    @property
    def kickoff_time(self) -> time:
        return self.kickoff.time()
