"""Health checker: API key presence and CWA API reachability."""

import httpx

from weatherproxy.config.schema import ProxyConfig
from weatherproxy.models.common import utc_now_iso
from weatherproxy.models.reporting import HealthStatus


class HealthChecker:
    def __init__(self, config: ProxyConfig, timeout: float = 10.0):
        self.config = config
        self.timeout = timeout

    def check(self) -> HealthStatus:
        reachable, status = self._check_upstream()
        return HealthStatus(
            api_key_configured=bool(self.config.api_key),
            upstream_reachable=reachable,
            upstream_status=status,
            city_count=len(self.config.cities),
            checked_at=utc_now_iso(),
        )

    def _check_upstream(self) -> tuple[bool, int | None]:
        """Any HTTP answer from the API host counts as reachable."""
        try:
            resp = httpx.get(
                self.config.upstream.base_url,
                headers={"User-Agent": "weatherproxy-health/0.1.0"},
                timeout=self.timeout,
            )
            return True, resp.status_code
        except httpx.RequestError:
            return False, None
