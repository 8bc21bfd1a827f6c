"""Tests for pivoting CWA element series into forecast periods."""

import copy
from datetime import UTC, datetime

import pytest

from weatherproxy.errors import MalformedUpstreamDataError
from weatherproxy.ingest.normalizer import normalize
from weatherproxy.models.forecast import ForecastPeriod

FIELDS = ("startTime", "endTime", "weather", "rain", "minTemp", "maxTemp", "comfort")


class TestNormalize:
    def test_fixture_payload(self, taipei_forecast: dict):
        result = normalize(taipei_forecast, "臺北市")
        assert result.city == "臺北市"
        assert result.update_time == "2026-10-18T11:00:00+08:00"
        assert len(result.forecasts) == 3

        first = result.forecasts[0]
        assert first == ForecastPeriod(
            start_time="2026-10-18 12:00:00",
            end_time="2026-10-18 18:00:00",
            weather="多雲時晴",
            rain="10%",
            min_temp="25",
            max_temp="30",
            comfort="舒適至悶熱",
        )
        assert result.forecasts[2].weather == "陰短暫雨"
        assert result.forecasts[2].rain == "60%"

    def test_element_order_does_not_matter(self, taipei_forecast: dict):
        # MaxT comes after CI in the fixture
        result = normalize(taipei_forecast, "臺北市")
        assert [p.max_temp for p in result.forecasts] == ["30", "26", "28"]

    @pytest.mark.parametrize("periods", [1, 3, 7])
    def test_period_count_follows_series_length(self, payload_factory, periods: int):
        raw = payload_factory("宜蘭縣", periods=periods)
        result = normalize(raw, "宜蘭縣")
        assert len(result.forecasts) == periods
        for period in result.forecasts:
            assert period.rain.endswith("%")
            assert period.rain == "20%"
            assert period.weather == "多雲"
            assert period.min_temp == "18"
            assert period.max_temp == "24"
            assert period.comfort == "舒適"

    def test_stable_shape(self, payload_factory):
        raw = payload_factory("基隆市", elements={"Wx": "晴"})
        result = normalize(raw, "基隆市")
        for period in result.to_dict()["forecasts"]:
            assert tuple(period) == FIELDS
            assert period["weather"] == "晴"
            assert period["rain"] == ""
            assert period["minTemp"] == ""
            assert period["maxTemp"] == ""
            assert period["comfort"] == ""

    def test_unknown_elements_ignored(self, payload_factory):
        raw = payload_factory("南投縣", elements={"Wx": "晴", "UVI": "7"})
        result = normalize(raw, "南投縣")
        assert result.forecasts[0].weather == "晴"

    def test_shorter_series_yields_empty_values(self, payload_factory):
        raw = payload_factory("嘉義縣", periods=3)
        elements = raw["records"]["location"][0]["weatherElement"]
        pop = next(e for e in elements if e["elementName"] == "PoP")
        pop["time"] = pop["time"][:1]

        result = normalize(raw, "嘉義縣")
        assert len(result.forecasts) == 3
        assert result.forecasts[0].rain == "20%"
        assert result.forecasts[1].rain == ""
        assert result.forecasts[2].rain == ""
        assert result.forecasts[2].weather == "多雲"

    def test_missing_reference_uses_longest_series(self, payload_factory):
        raw = payload_factory("彰化縣", periods=2, elements={"MinT": "15", "MaxT": "21"})
        elements = raw["records"]["location"][0]["weatherElement"]
        elements[0]["time"] = elements[0]["time"][:1]

        result = normalize(raw, "彰化縣")
        assert len(result.forecasts) == 2
        assert result.forecasts[1].min_temp == ""
        assert result.forecasts[1].max_temp == "21"
        assert result.forecasts[1].start_time != ""

    def test_window_falls_back_to_other_elements(self, payload_factory):
        raw = payload_factory("苗栗縣", periods=1)
        wx = raw["records"]["location"][0]["weatherElement"][0]
        del wx["time"][0]["startTime"]
        del wx["time"][0]["endTime"]

        result = normalize(raw, "苗栗縣")
        assert result.forecasts[0].start_time == "2026-10-18 06:00:00"
        assert result.forecasts[0].end_time == "2026-10-18 18:00:00"

    def test_missing_parameter_name(self, payload_factory):
        raw = payload_factory("雲林縣", periods=1)
        wx = raw["records"]["location"][0]["weatherElement"][0]
        wx["time"][0]["parameter"] = {}
        assert normalize(raw, "雲林縣").forecasts[0].weather == ""

    def test_no_elements_no_periods(self, payload_factory):
        raw = payload_factory("連江縣", elements={})
        result = normalize(raw, "連江縣")
        assert result.forecasts == ()


class TestUpdateTime:
    def test_falls_back_to_first_start_time(self, payload_factory):
        raw = payload_factory("屏東縣", data_time=None)
        result = normalize(raw, "屏東縣")
        assert result.update_time == "2026-10-18 06:00:00"

    def test_falls_back_to_now(self, payload_factory):
        raw = payload_factory("屏東縣", elements={}, data_time=None)
        now = datetime(2026, 10, 18, 3, 0, tzinfo=UTC)
        result = normalize(raw, "屏東縣", now=now)
        assert result.update_time == "2026-10-18T03:00:00+00:00"


class TestMalformed:
    def test_region_missing(self, taipei_forecast: dict):
        with pytest.raises(MalformedUpstreamDataError):
            normalize(taipei_forecast, "新北市")

    def test_not_a_mapping(self):
        with pytest.raises(MalformedUpstreamDataError):
            normalize(["not", "a", "dict"], "臺北市")

    def test_weather_element_missing(self):
        raw = {"records": {"location": [{"locationName": "臺北市"}]}}
        with pytest.raises(MalformedUpstreamDataError, match="weatherElement"):
            normalize(raw, "臺北市")

    @pytest.mark.parametrize("name", [["Wx"], {"name": "Wx"}, None, 7])
    def test_element_name_not_a_string(self, name):
        raw = {
            "records": {
                "location": [
                    {
                        "locationName": "臺北市",
                        "weatherElement": [{"elementName": name, "time": []}],
                    }
                ]
            }
        }
        with pytest.raises(MalformedUpstreamDataError, match="elementName"):
            normalize(raw, "臺北市")

    def test_time_not_a_list(self):
        raw = {
            "records": {
                "location": [
                    {
                        "locationName": "臺北市",
                        "weatherElement": [{"elementName": "Wx", "time": "soon"}],
                    }
                ]
            }
        }
        with pytest.raises(MalformedUpstreamDataError, match="Wx"):
            normalize(raw, "臺北市")

    def test_time_entries_not_objects(self):
        raw = {
            "records": {
                "location": [
                    {
                        "locationName": "臺北市",
                        "weatherElement": [{"elementName": "PoP", "time": [1, 2]}],
                    }
                ]
            }
        }
        with pytest.raises(MalformedUpstreamDataError):
            normalize(raw, "臺北市")


class TestPurity:
    def test_same_input_same_output(self, taipei_forecast: dict):
        assert normalize(taipei_forecast, "臺北市") == normalize(taipei_forecast, "臺北市")

    def test_input_not_mutated(self, taipei_forecast: dict):
        before = copy.deepcopy(taipei_forecast)
        normalize(taipei_forecast, "臺北市")
        assert taipei_forecast == before
