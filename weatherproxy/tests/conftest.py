"""Shared test fixtures."""

import json
import logging
from pathlib import Path

import pytest
import respx

from weatherproxy.config.schema import ProxyConfig, UpstreamConfig

TEST_BASE_URL = "https://test-cwa.example.com/api"

ELEMENT_VALUES = {
    "Wx": "多雲",
    "PoP": "20",
    "MinT": "18",
    "MaxT": "24",
    "CI": "舒適",
}


def make_payload(
    city: str,
    periods: int = 3,
    elements: dict[str, str] | None = None,
    data_time: str | None = "2026-10-18T11:00:00+08:00",
) -> dict:
    """Build a CWA F-C0032-001 style payload with identical values per period."""
    elements = ELEMENT_VALUES if elements is None else elements
    windows = [
        (f"2026-10-{18 + i // 2} {'06' if i % 2 == 0 else '18'}:00:00",
         f"2026-10-{18 + (i + 1) // 2} {'18' if i % 2 == 0 else '06'}:00:00")
        for i in range(periods)
    ]
    weather_elements = [
        {
            "elementName": name,
            "time": [
                {"startTime": start, "endTime": end, "parameter": {"parameterName": value}}
                for start, end in windows
            ],
        }
        for name, value in elements.items()
    ]
    records: dict = {
        "location": [{"locationName": city, "weatherElement": weather_elements}]
    }
    if data_time is not None:
        records["resource"] = {"dataTime": data_time}
    return {"success": "true", "records": records}


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def taipei_forecast(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "cwa_forecast_taipei.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def proxy_config() -> ProxyConfig:
    """Config pointed at the mocked CWA host, with retries disabled."""
    return ProxyConfig(
        upstream=UpstreamConfig(
            base_url=TEST_BASE_URL,
            api_key="test-key-123",
            max_retries=0,
            retry_base_delay=0.0,
        )
    )


@pytest.fixture
def payload_factory():
    """Expose make_payload to tests as a fixture."""
    return make_payload


@pytest.fixture
def cwa_mock():
    """respx router for the CWA host; tests add routes per case."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture(autouse=True)
def _restore_httpx_log_level():
    """cli.main() lowers the global httpx logger level; undo it between tests."""
    httpx_logger = logging.getLogger("httpx")
    level = httpx_logger.level
    yield
    httpx_logger.setLevel(level)
