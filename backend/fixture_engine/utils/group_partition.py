"""
Group Partitioner - balanced split of a roster into round-robin groups

Entrants are shuffled with the run's RNG and cut into contiguous blocks whose
sizes differ by at most one. A roster where every entrant already carries a
group label is grouped by that label instead.
"""

import logging
import random
from math import ceil, floor
from typing import Dict, List, Optional, Sequence

from fixture_engine.models.entrant import Entrant
from fixture_engine.services.format_rules import LEAGUE, normalize_format, recommended_groups
from fixture_engine.services.generation_errors import ConfigurationError

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 2

# ============================================================================
# Groups Count Computation
# ============================================================================


def resolve_groups_count(
    format_key: str,
    entrant_count: int,
    groups_count: Optional[int] = None,
    teams_per_group: Optional[int] = None,
) -> int:
    """
    Decide how many groups a roster is split into.

    Priority:
    1. Explicit groups_count
    2. ceil(entrant_count / teams_per_group) when only the group size is given
    3. The catalogue recommendation for the format
    """
    if groups_count is not None:
        return groups_count
    if teams_per_group:
        return max(1, ceil(entrant_count / teams_per_group))
    if normalize_format(format_key) == LEAGUE:
        return 1
    return recommended_groups(format_key, entrant_count)[0]


def compute_group_capacities(entrant_count: int, groups_count: int) -> List[int]:
    """
    Compute capacity (size) for each group.

    Algorithm:
    - base_size = floor(entrant_count / groups_count)
    - remainder = entrant_count % groups_count
    - First `remainder` groups have size (base_size + 1)
    - Remaining groups have size base_size

    Examples:
    - 8 entrants, 2 groups  → [4, 4]
    - 10 entrants, 3 groups → [4, 3, 3]
    """
    if groups_count <= 0:
        return []

    base_size = floor(entrant_count / groups_count)
    remainder = entrant_count % groups_count

    return [base_size + 1 if i < remainder else base_size for i in range(groups_count)]


def group_count_errors(entrant_count: int, groups_count: int) -> List[str]:
    """
    Check that `groups_count` groups can be cut from `entrant_count` entrants.

    Returns an empty list if valid, otherwise the first problem found.
    """
    if groups_count <= 0:
        return [f"groups_count must be positive, got {groups_count}"]
    if groups_count > entrant_count:
        return [f"Cannot split {entrant_count} entrants into {groups_count} groups"]
    if entrant_count // groups_count < MIN_GROUP_SIZE:
        return [
            f"{groups_count} groups for {entrant_count} entrants leaves a group with fewer than "
            f"{MIN_GROUP_SIZE} entrants"
        ]
    return []


def group_label(index: int) -> str:
    """0 -> "A", 1 -> "B", ...; past "Z" falls back to G27, G28..."""
    if index < 26:
        return chr(ord("A") + index)
    return f"G{index + 1}"


# ============================================================================
# Partitioning
# ============================================================================


def _group_by_existing_labels(entrants: Sequence[Entrant]) -> Dict[str, List[Entrant]]:
    grouped: Dict[str, List[Entrant]] = {}
    for entrant in entrants:
        grouped.setdefault(entrant.group, []).append(entrant)

    undersized = sorted(label for label, members in grouped.items() if len(members) < MIN_GROUP_SIZE)
    if undersized:
        raise ConfigurationError(
            f"Pre-seeded groups need at least {MIN_GROUP_SIZE} entrants: {', '.join(undersized)}"
        )
    return {label: grouped[label] for label in sorted(grouped)}


def partition_entrants(
    entrants: Sequence[Entrant],
    groups_count: int,
    rng: random.Random,
    shuffle: bool = True,
) -> Dict[str, List[Entrant]]:
    """
    Split entrants into labelled groups.

    Args:
        entrants: Roster in caller order
        groups_count: Number of groups (ignored when every entrant is pre-labelled)
        rng: Run-scoped random source used for the shuffle
        shuffle: If False, slices the roster in caller order

    Returns:
        Ordered mapping group label → entrants

    Raises:
        ConfigurationError: groups_count <= 0 or larger than the roster allows,
            or only part of the roster carries group labels
    """
    labelled = [e for e in entrants if e.group]
    if labelled and len(labelled) == len(entrants):
        logger.debug("Using %d pre-seeded group labels", len({e.group for e in labelled}))
        return _group_by_existing_labels(entrants)
    if labelled:
        raise ConfigurationError(
            f"{len(labelled)} of {len(entrants)} entrants carry a group label; label all of them or none"
        )

    errors = group_count_errors(len(entrants), groups_count)
    if errors:
        raise ConfigurationError(errors[0], details=errors)

    pool = list(entrants)
    if shuffle:
        rng.shuffle(pool)

    groups: Dict[str, List[Entrant]] = {}
    start = 0
    for index, capacity in enumerate(compute_group_capacities(len(entrants), groups_count)):
        groups[group_label(index)] = pool[start : start + capacity]
        start += capacity

    return groups
