"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field, SecretStr, model_validator

from weatherproxy.config.defaults import DEFAULT_CITY, TAIWAN_CITIES

CWA_API_BASE_URL = "https://opendata.cwa.gov.tw/api"
CWA_FORECAST_DATASET = "F-C0032-001"


class InvalidCityPolicy(StrEnum):
    REJECT = "reject"
    SUBSTITUTE = "substitute"


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = CWA_API_BASE_URL
    dataset_id: str = CWA_FORECAST_DATASET
    api_key: SecretStr | None = None
    timeout_seconds: float = Field(default=12.0, ge=1.0, le=60.0)
    max_retries: int = Field(default=0, ge=0, le=5)
    retry_base_delay: float = Field(default=0.5, ge=0.0)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)


class ValidationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    invalid_city_policy: InvalidCityPolicy = InvalidCityPolicy.REJECT
    default_city: str = DEFAULT_CITY


class ProxyConfig(BaseModel):
    model_config = {"extra": "forbid"}

    upstream: UpstreamConfig = UpstreamConfig()
    server: ServerConfig = ServerConfig()
    validation: ValidationConfig = ValidationConfig()
    cities: tuple[str, ...] = TAIWAN_CITIES

    @model_validator(mode="after")
    def _default_city_supported(self) -> "ProxyConfig":
        if not self.cities:
            raise ValueError("cities must not be empty")
        if self.validation.default_city not in self.cities:
            raise ValueError(
                f"validation.default_city {self.validation.default_city!r} "
                "is not one of the configured cities"
            )
        return self

    @property
    def api_key(self) -> str:
        """Plain API key, or empty string when unset."""
        if self.upstream.api_key is None:
            return ""
        return self.upstream.api_key.get_secret_value()
