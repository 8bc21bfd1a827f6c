"""Forecast fetcher: validate a city, fetch its CWA payload, normalize it."""

import logging

from weatherproxy.config.schema import ProxyConfig
from weatherproxy.ingest.cwa_client import CwaClient
from weatherproxy.ingest.normalizer import normalize
from weatherproxy.models.forecast import WeatherResult
from weatherproxy.validation.city_validator import CityValidator

logger = logging.getLogger(__name__)


class ForecastFetcher:
    def __init__(self, cwa_client: CwaClient, validator: CityValidator):
        self.cwa = cwa_client
        self.validator = validator

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "ForecastFetcher":
        return cls(CwaClient.from_config(config), CityValidator.from_config(config))

    def fetch(self, raw_city: str | None) -> WeatherResult:
        """Return the normalized forecast for a caller-supplied city.

        Errors from validation, the upstream call and normalization
        propagate unchanged; nothing is cached between calls.
        """
        city = self.validator.validate(raw_city)
        raw = self.cwa.get_forecast(city)
        result = normalize(raw, city)
        logger.info(
            "Fetched %d forecast periods for %s (updated %s)",
            len(result.forecasts), city, result.update_time,
        )
        return result
