from datetime import datetime, timezone
from typing import Any, Dict

import pytest

from helpers import slot, ts
from src.common.config import AppConfig


@pytest.fixture
def now_utc() -> datetime:
    return datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


@pytest.fixture
def forecast_payload() -> Dict[str, Any]:
    """Trimmed OpenWeather /data/2.5/forecast response around 2024-05-01."""
    return {
        "cod": "200",
        "cnt": 6,
        "list": [
            slot(ts(2024, 5, 1, 15), 14.0, "light rain", "10d", 0.4),
            slot(ts(2024, 5, 1, 18), 12.5, "light rain", "10n", 0.6),
            slot(ts(2024, 5, 2, 0), 9.0, "clear sky", "01n", 0.0),
            slot(ts(2024, 5, 2, 12), 17.5, "clear sky", "01d", 0.1),
            slot(ts(2024, 5, 2, 18), 15.0, "few clouds", "02d", 0.2),
            slot(ts(2024, 5, 3, 9), 13.0, "overcast clouds", "04d", 0.3),
        ],
        "city": {"name": "London", "country": "GB", "timezone": 0},
    }


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        default_destination="London",
        weather={"api_key": "test-key12345", "forecast_days": 5},
        registrations={"table_name": "registrations-test", "list_limit": 10, "max_scan_pages": 5},
        identity={"cookie_name": "email", "secret": "test-secret", "max_age_seconds": 3600},
    )
