"""CWA open-data forecast API client with bounded retry on transient failures."""

import logging
import time

import httpx

from weatherproxy.config.schema import CWA_API_BASE_URL, CWA_FORECAST_DATASET, ProxyConfig
from weatherproxy.errors import (
    ConfigurationError,
    MalformedUpstreamDataError,
    NotFoundError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 502, 503, 504})
DEFAULT_USER_AGENT = "weatherproxy/0.1.0"


class CwaClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = CWA_API_BASE_URL,
        dataset_id: str = CWA_FORECAST_DATASET,
        timeout: float = 12.0,
        max_retries: int = 0,
        retry_base_delay: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.dataset_id = dataset_id
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.user_agent = user_agent

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "CwaClient":
        upstream = config.upstream
        return cls(
            api_key=config.api_key,
            base_url=upstream.base_url,
            dataset_id=upstream.dataset_id,
            timeout=upstream.timeout_seconds,
            max_retries=upstream.max_retries,
            retry_base_delay=upstream.retry_base_delay,
        )

    @property
    def forecast_url(self) -> str:
        return f"{self.base_url}/v1/rest/datastore/{self.dataset_id}"

    def get_forecast(self, city: str) -> dict:
        """Fetch the 36-hour forecast payload for one region.

        Raises ConfigurationError before any network I/O when no API key is
        configured, UpstreamError on error statuses or transport failures,
        and NotFoundError when the payload has no record for ``city``.
        """
        if not self.api_key:
            raise ConfigurationError(
                "CWA_API_KEY is not configured on the server", 500
            )

        resp = self._request(city)
        if resp.status_code >= 400:
            message = _upstream_message(resp)
            logger.error(
                "CWA API %d for %s: %s", resp.status_code, city, message
            )
            raise UpstreamError(message, resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("CWA API returned non-JSON body for %s", city)
            raise UpstreamError("Upstream returned a non-JSON response") from e

        if find_location(payload, city) is None:
            logger.warning("CWA payload has no record for %s", city)
            raise NotFoundError(city)
        return payload

    def _request(self, city: str) -> httpx.Response:
        # Key goes in a header so it never appears in logged request URLs.
        params = {"locationName": city}
        headers = {
            "Authorization": self.api_key,
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

        for attempt in range(self.max_retries + 1):
            try:
                resp = httpx.get(
                    self.forecast_url,
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "CWA request error for %s, retrying in %.1fs (attempt %d/%d): %s",
                        city, delay, attempt + 1, self.max_retries, type(e).__name__,
                    )
                    time.sleep(delay)
                    continue
                logger.error("CWA request failed for %s: %s", city, type(e).__name__)
                raise UpstreamError(
                    f"Could not reach the CWA API: {type(e).__name__}"
                ) from e

            if resp.status_code in RETRYABLE_STATUS and attempt < self.max_retries:
                delay = self.retry_base_delay * (2**attempt)
                logger.warning(
                    "CWA returned %d for %s, retrying in %.1fs (attempt %d/%d)",
                    resp.status_code, city, delay, attempt + 1, self.max_retries,
                )
                time.sleep(delay)
                continue
            return resp

        raise AssertionError("unreachable")


def find_location(payload: dict, city: str) -> dict | None:
    """Return the ``records.location`` entry named ``city``, if any."""
    if not isinstance(payload, dict):
        raise MalformedUpstreamDataError("Upstream payload is not a JSON object")
    records = payload.get("records")
    if not isinstance(records, dict):
        raise MalformedUpstreamDataError("Upstream payload has no records")
    locations = records.get("location")
    if not isinstance(locations, list):
        raise MalformedUpstreamDataError("Upstream payload has no location list")
    for loc in locations:
        if isinstance(loc, dict) and loc.get("locationName") == city:
            return loc
    return None


def _upstream_message(resp: httpx.Response) -> str:
    """Best-effort error message from an upstream error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    text = resp.text.strip()
    return text or f"Upstream responded with HTTP {resp.status_code}"
