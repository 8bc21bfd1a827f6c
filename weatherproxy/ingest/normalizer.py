"""Pivot CWA per-element time series into per-period forecast records."""

from datetime import datetime

from weatherproxy.errors import MalformedUpstreamDataError
from weatherproxy.ingest.cwa_client import find_location
from weatherproxy.models.common import utc_now
from weatherproxy.models.forecast import ForecastPeriod, WeatherResult

REFERENCE_ELEMENT = "Wx"

# CWA element name -> ForecastPeriod field
ELEMENT_FIELDS: dict[str, str] = {
    "Wx": "weather",
    "PoP": "rain",
    "MinT": "min_temp",
    "MaxT": "max_temp",
    "CI": "comfort",
}


def normalize(
    raw: dict, city: str, now: datetime | None = None
) -> WeatherResult:
    """Build a WeatherResult for ``city`` from a raw F-C0032-001 payload.

    The period count is the length of the ``Wx`` series (or of the longest
    known series when ``Wx`` is absent). Every element is indexed
    independently, so a series shorter than the reference yields empty
    strings for the missing periods instead of failing.
    """
    location = find_location(raw, city)
    if location is None:
        raise MalformedUpstreamDataError(f"Upstream payload has no record for {city}")

    series = _element_series(location)
    reference = _reference_series(series)

    periods: list[ForecastPeriod] = []
    for i in range(len(reference)):
        start_time, end_time = _window_at(i, reference, series)
        values = {
            field: _parameter_name(series.get(element), i)
            for element, field in ELEMENT_FIELDS.items()
        }
        if values["rain"]:
            values["rain"] += "%"
        periods.append(
            ForecastPeriod(start_time=start_time, end_time=end_time, **values)
        )

    return WeatherResult(
        city=location.get("locationName", city),
        update_time=_update_time(raw, periods, now),
        forecasts=tuple(periods),
    )


def _element_series(location: dict) -> dict[str, list[dict]]:
    """Map known element names to their time arrays; unknown names are ignored."""
    elements = location.get("weatherElement")
    if not isinstance(elements, list):
        raise MalformedUpstreamDataError("Location record has no weatherElement list")

    series: dict[str, list[dict]] = {}
    for element in elements:
        if not isinstance(element, dict):
            raise MalformedUpstreamDataError("weatherElement entry is not an object")
        name = element.get("elementName")
        if not isinstance(name, str):
            raise MalformedUpstreamDataError("weatherElement entry has no elementName")
        if name not in ELEMENT_FIELDS:
            continue
        times = element.get("time")
        if not isinstance(times, list) or not all(isinstance(t, dict) for t in times):
            raise MalformedUpstreamDataError(f"Element {name} has no valid time list")
        series[name] = times
    return series


def _reference_series(series: dict[str, list[dict]]) -> list[dict]:
    if REFERENCE_ELEMENT in series:
        return series[REFERENCE_ELEMENT]
    if not series:
        return []
    return max(series.values(), key=len)


def _window_at(
    i: int, reference: list[dict], series: dict[str, list[dict]]
) -> tuple[str, str]:
    """Time window for period ``i``, preferring the reference element."""
    candidates = [reference] + [series[name] for name in ELEMENT_FIELDS if name in series]
    for times in candidates:
        if i < len(times) and times[i].get("startTime"):
            entry = times[i]
            return str(entry.get("startTime", "")), str(entry.get("endTime") or "")
    return "", ""


def _parameter_name(times: list[dict] | None, i: int) -> str:
    if times is None or i >= len(times):
        return ""
    parameter = times[i].get("parameter")
    if not isinstance(parameter, dict):
        return ""
    value = parameter.get("parameterName")
    return "" if value is None else str(value)


def _update_time(
    raw: dict, periods: list[ForecastPeriod], now: datetime | None
) -> str:
    resource = raw["records"].get("resource")
    if isinstance(resource, dict) and resource.get("dataTime"):
        return str(resource["dataTime"])
    if periods and periods[0].start_time:
        return periods[0].start_time
    return (now or utc_now()).isoformat()
