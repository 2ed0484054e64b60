"""
OpenWeather client for the landing page.

Fetches the free 5-day / 3-hour forecast for a destination city and reduces
it to daily summaries (see weather.aggregate). One HTTP call per method
invocation: no caching and no retry, so a failure surfaces immediately as
UpstreamError and the caller renders without weather.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests

from src.common.config import WeatherSettings
from src.common.errors import ConfigurationError, UpstreamError
from src.weather.aggregate import DailySummary, ForecastSample, aggregate_daily

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org"
FORECAST_PATH = "/data/2.5/forecast"
CURRENT_WEATHER_PATH = "/data/2.5/weather"
SUPPORTED_UNITS = ("metric", "imperial")

HTTP_ERROR_MAP = {
    400: "Bad request - check city or parameters",
    401: "Invalid or missing API key",
    404: "City not found",
    429: "Rate limit exceeded",
    500: "OpenWeather internal error",
    502: "Bad gateway at OpenWeather",
    503: "Service unavailable (maintenance)",
    504: "Gateway timeout",
}


class WeatherClient:
    """OpenWeather 2.5 API client.

    The API key is checked once, when the client is built. Requests never
    include the key in raised error messages.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if api_key is None or not api_key.strip():
            raise ConfigurationError("OPENWEATHER_API_KEY is not set")
        self._api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: WeatherSettings, session: Optional[requests.Session] = None) -> "WeatherClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            session=session,
        )

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = dict(params, appid=self._api_key)
        try:
            resp = self._session.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            # str(exc) can contain the full URL, credential included
            raise UpstreamError(f"OpenWeather request failed: {type(exc).__name__}") from exc

        if resp.status_code != 200:
            try:
                message = resp.json().get("message") or HTTP_ERROR_MAP.get(resp.status_code, "")
            except (ValueError, AttributeError):
                message = HTTP_ERROR_MAP.get(resp.status_code, "")
            raise UpstreamError(f"OpenWeather error: {resp.status_code} - {message}", resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("OpenWeather returned a non-JSON body", resp.status_code) from exc
        if not isinstance(data, dict):
            raise UpstreamError("OpenWeather returned an unexpected payload", resp.status_code)
        return data

    def _forecast_slots(self, city: str, units: str) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        if units not in SUPPORTED_UNITS:
            raise ValueError(f"Unsupported units: {units!r}")
        data = self._get(FORECAST_PATH, {"q": city, "units": units})
        slots = data.get("list")
        if not isinstance(slots, list):
            raise UpstreamError("OpenWeather forecast payload has no 'list'")
        return slots, data

    def fetch_daily_forecast(
        self,
        city: str,
        units: str = "metric",
        days: int = 5,
        now_utc: Optional[datetime] = None,
    ) -> List[DailySummary]:
        """
        Fetch daily summaries for the days after local today.

        Args:
            city: City name as understood by OpenWeather (e.g. "London")
            units: "metric" or "imperial"
            days: Maximum number of days to return
            now_utc: Reference time for local today (defaults to now)

        Raises:
            UpstreamError: Non-200 status, network failure or malformed payload
        """
        slots, data = self._forecast_slots(city, units)
        city_info = data.get("city") or {}
        try:
            utc_offset = int(city_info.get("timezone") or 0)
            samples = [ForecastSample.from_slot(slot) for slot in slots]
            daily = aggregate_daily(samples, utc_offset_seconds=utc_offset, days=days, now_utc=now_utc)
        except (TypeError, ValueError, AttributeError, KeyError, IndexError) as exc:
            raise UpstreamError(f"Malformed OpenWeather forecast: {exc}") from exc

        logger.info(f"Aggregated {len(slots)} forecast slots for {city} into {len(daily)} days")
        return daily

    def fetch_current_weather(self, city: str, units: str = "metric") -> Dict[str, Any]:
        """Current conditions for a city, as returned by the API."""
        if units not in SUPPORTED_UNITS:
            raise ValueError(f"Unsupported units: {units!r}")
        return self._get(CURRENT_WEATHER_PATH, {"q": city, "units": units})

    def fetch_forecast_slots(self, city: str, units: str = "metric", limit: int = 5) -> List[Dict[str, Any]]:
        """The first `limit` raw 3-hour forecast slots."""
        slots, _ = self._forecast_slots(city, units)
        return slots[: max(limit, 0)]
