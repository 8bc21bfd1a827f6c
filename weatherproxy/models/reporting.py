"""Operational health models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    api_key_configured: bool
    upstream_reachable: bool
    upstream_status: int | None
    city_count: int
    checked_at: str
