from typing import Optional

from sqlmodel import Field, SQLModel


class Entrant(SQLModel):
    id: str
    name: str
    group: Optional[str] = Field(default=None)  # Pre-seeded group label; None = partitioner decides
