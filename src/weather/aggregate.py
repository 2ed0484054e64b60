"""
Daily aggregation of the OpenWeather 5-day / 3-hour forecast feed.

Samples are bucketed by their local calendar date (UTC timestamp shifted by
the feed's UTC offset), summarised per day, and the partial local "today" is
dropped. Pure functions over data that has already been fetched.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

SECONDS_PER_DAY = 86400
EPOCH_DATE = date(1970, 1, 1)


@dataclass(frozen=True)
class ForecastSample:
    timestamp_utc: Optional[int]
    temperature: Optional[float] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    precipitation_probability: Optional[float] = None

    @classmethod
    def from_slot(cls, slot: Dict[str, Any]) -> "ForecastSample":
        """Build a sample from one entry of the feed's `list` array."""
        if not isinstance(slot, dict):
            raise ValueError(f"Forecast slot is not an object: {slot!r}")
        main = slot.get("main") or {}
        weather = slot.get("weather") or []
        if not isinstance(weather, list):
            raise ValueError(f"Forecast slot weather is not a list: {weather!r}")
        condition = weather[0] if weather and isinstance(weather[0], dict) else {}
        dt = slot.get("dt")
        temp = main.get("temp")
        pop = slot.get("pop")
        return cls(
            timestamp_utc=int(dt) if dt is not None else None,
            temperature=float(temp) if temp is not None else None,
            description=condition.get("description"),
            icon=condition.get("icon"),
            precipitation_probability=float(pop) if pop is not None else None,
        )


@dataclass(frozen=True)
class DailySummary:
    local_date: str
    temperature_min: Optional[float]
    temperature_max: Optional[float]
    description: Optional[str]
    icon: Optional[str]
    max_precipitation_probability: Optional[float]
    utc_offset_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.local_date,
            "temp": {"min": self.temperature_min, "max": self.temperature_max},
            "weather": [{"description": self.description, "icon": self.icon}],
            "pop_max": self.max_precipitation_probability,
            "utc_offset_seconds": self.utc_offset_seconds,
        }


def local_date(timestamp_utc: int, utc_offset_seconds: int = 0) -> str:
    """Calendar date (YYYY-MM-DD) of a UTC timestamp shifted by a fixed offset."""
    days = (int(timestamp_utc) + int(utc_offset_seconds)) // SECONDS_PER_DAY
    return (EPOCH_DATE + timedelta(days=days)).isoformat()


def representative_value(values: Iterable[Optional[str]]) -> Optional[str]:
    """Most frequent non-empty value; ties go to the value seen first."""
    counts: Dict[str, int] = {}
    for value in values:
        if value:
            counts[value] = counts.get(value, 0) + 1

    best = None
    for value, count in counts.items():
        if best is None or count > counts[best]:
            best = value
    return best


def _summarize(day: str, samples: List[ForecastSample], utc_offset_seconds: int) -> DailySummary:
    temps = [s.temperature for s in samples if s.temperature is not None]
    pops = [s.precipitation_probability for s in samples if s.precipitation_probability is not None]
    return DailySummary(
        local_date=day,
        temperature_min=min(temps) if temps else None,
        temperature_max=max(temps) if temps else None,
        description=representative_value(s.description for s in samples),
        icon=representative_value(s.icon for s in samples),
        max_precipitation_probability=max(pops) if pops else None,
        utc_offset_seconds=utc_offset_seconds,
    )


def aggregate_daily(
    samples: Iterable[ForecastSample],
    utc_offset_seconds: int = 0,
    days: int = 5,
    now_utc: Optional[datetime] = None,
) -> List[DailySummary]:
    """
    Turn 3-hourly forecast samples into daily summaries.

    Args:
        samples: Forecast samples in feed order
        utc_offset_seconds: Offset of the forecast location, constant for the series
        days: Maximum number of summaries to return
        now_utc: Reference time used to find local today (defaults to now)

    Returns:
        Summaries sorted by local date, local today excluded, at most `days` long.

    Raises:
        ValueError: If a sample has no timestamp
    """
    if days <= 0:
        return []

    buckets: Dict[str, List[ForecastSample]] = {}
    for sample in samples:
        if sample.timestamp_utc is None:
            raise ValueError(f"Forecast sample has no timestamp: {sample!r}")
        day = local_date(sample.timestamp_utc, utc_offset_seconds)
        buckets.setdefault(day, []).append(sample)

    if now_utc is None:
        now_utc = datetime.now(timezone.utc)
    today = local_date(int(now_utc.timestamp()), utc_offset_seconds)

    upcoming = [
        _summarize(day, buckets[day], utc_offset_seconds)
        for day in sorted(buckets)
        if day != today
    ]
    return upcoming[:days]
