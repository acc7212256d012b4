"""
Canonical parsers for user-edited scheduling inputs.

Kickoff times and venue names arrive either as comma-separated strings
("15:00,18:00") or as lists; both normalise to ordered tuples with empties
dropped, so a list never gets split character by character.
"""
from datetime import time
from typing import List, Optional, Sequence, Tuple, Union


def _split(raw: Optional[Union[str, Sequence]]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        s = raw.strip()
        if not s:
            return []
        return [x.strip() for x in s.split(",") if x.strip()]
    return [str(x).strip() for x in raw if str(x).strip()]


def parse_venues(venues: Optional[Union[str, Sequence[str]]]) -> Tuple[str, ...]:
    """
    Normalize venues to a tuple of non-empty names, declared order kept.

    - None or "" -> ()
    - "North Park, Riverside" -> ("North Park", "Riverside")
    - ["North Park", " Riverside "] -> ("North Park", "Riverside")
    """
    return tuple(_split(venues))


def parse_kickoff_time(value: Union[str, time]) -> time:
    """
    Parse "HH:MM" (or "HH:MM:SS") into a time.

    Raises:
        ValueError: if the value is not a valid time of day
    """
    if isinstance(value, time):
        return value
    return time.fromisoformat(value.strip())


def parse_kickoff_times(kickoff_times: Optional[Union[str, Sequence[Union[str, time]]]]) -> Tuple[time, ...]:
    """
    Normalize kickoff times to a tuple of time values, declared order kept.

    - "15:00,18:00" -> (time(15, 0), time(18, 0))
    - [time(15, 0), "20:30"] -> (time(15, 0), time(20, 30))
    """
    if kickoff_times is None:
        return ()
    if isinstance(kickoff_times, str):
        return tuple(parse_kickoff_time(x) for x in _split(kickoff_times))
    return tuple(
        parse_kickoff_time(x) for x in kickoff_times if isinstance(x, time) or str(x).strip()
    )
