"""City validation against the fixed set of supported CWA regions."""

import logging

from weatherproxy.config.defaults import CITY_CHAR_ALIASES, DEFAULT_CITY, TAIWAN_CITIES
from weatherproxy.config.schema import InvalidCityPolicy, ProxyConfig
from weatherproxy.errors import ValidationError

logger = logging.getLogger(__name__)

UNDEFINED_PLACEHOLDER = "undefined"


class CityValidator:
    """Checks caller-supplied city names and applies one invalid-city policy.

    With ``InvalidCityPolicy.REJECT`` an unknown city raises ValidationError;
    with ``InvalidCityPolicy.SUBSTITUTE`` the default city is returned.
    """

    def __init__(
        self,
        cities: tuple[str, ...] = TAIWAN_CITIES,
        policy: InvalidCityPolicy = InvalidCityPolicy.REJECT,
        default_city: str = DEFAULT_CITY,
    ):
        if default_city not in cities:
            raise ValueError(f"default city {default_city!r} is not supported")
        self.cities = tuple(cities)
        self.policy = InvalidCityPolicy(policy)
        self.default_city = default_city
        self._known = frozenset(self.cities)

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "CityValidator":
        return cls(
            cities=config.cities,
            policy=config.validation.invalid_city_policy,
            default_city=config.validation.default_city,
        )

    def validate(self, raw: str | None) -> str:
        """Return the canonical region name for ``raw`` or apply the policy."""
        city = canonical_city_name(raw or "")
        if city and city != UNDEFINED_PLACEHOLDER and city in self._known:
            return city

        if self.policy == InvalidCityPolicy.SUBSTITUTE:
            logger.warning(
                "Invalid city %r, substituting %s", raw, self.default_city
            )
            return self.default_city

        logger.info("Rejecting invalid city %r", raw)
        raise ValidationError(raw or "", self.cities)

    def is_valid(self, raw: str | None) -> bool:
        city = canonical_city_name(raw or "")
        return city in self._known


def canonical_city_name(value: str) -> str:
    """Strip whitespace and replace simplified characters with official ones."""
    city = value.strip()
    for alias, official in CITY_CHAR_ALIASES.items():
        city = city.replace(alias, official)
    return city
