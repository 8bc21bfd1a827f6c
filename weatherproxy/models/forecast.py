"""Normalized CWA forecast models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ForecastPeriod:
    start_time: str = ""
    end_time: str = ""
    weather: str = ""
    rain: str = ""  # precipitation probability, e.g. "20%"
    min_temp: str = ""
    max_temp: str = ""
    comfort: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "weather": self.weather,
            "rain": self.rain,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "comfort": self.comfort,
        }


@dataclass(frozen=True)
class WeatherResult:
    city: str
    update_time: str
    forecasts: tuple[ForecastPeriod, ...]

    def to_dict(self) -> dict:
        return {
            "city": self.city,
            "updateTime": self.update_time,
            "forecasts": [p.to_dict() for p in self.forecasts],
        }
