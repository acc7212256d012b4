"""
API Routes for the format catalogue
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from fixture_engine.services.format_rules import FORMATS, normalize_format, recommended_groups


router = APIRouter()


class RecommendedGroupsResponse(BaseModel):
    format: str
    entrant_count: int
    groups_count: int
    teams_per_group: int


@router.get("/formats")
def list_formats() -> List[dict]:
    """Every supported format with its entrant limits and phase list"""
    return [definition.to_dict() for definition in FORMATS.values()]


@router.get("/formats/{format_key}/recommended-groups", response_model=RecommendedGroupsResponse)
def get_recommended_groups(
    format_key: str,
    entrant_count: int = Query(..., ge=2, description="Roster size"),
):
    key = normalize_format(format_key)
    if key not in FORMATS:
        raise HTTPException(status_code=404, detail=f"Unknown format '{format_key}'")

    groups_count, teams_per_group = recommended_groups(key, entrant_count)
    return RecommendedGroupsResponse(
        format=key,
        entrant_count=entrant_count,
        groups_count=groups_count,
        teams_per_group=teams_per_group,
    )
