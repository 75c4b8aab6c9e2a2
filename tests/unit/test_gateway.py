"""
Unit tests for the weather gateway and resort directory.

The gateway never lets a provider failure reach the user unless
synthetic fallback is disabled, and never passes a gap or a NaN on to
the classifier.
"""

import asyncio
import math
import random

import pytest

from skipro.core.weather.gateway import (
    NUMERIC_DEFAULTS,
    TEXT_DEFAULTS,
    WeatherGateway,
    WeatherPayloadError,
    WeatherUnavailableError,
    normalize_observation,
    synthetic_observation,
)
from skipro.core.weather.resorts import DEFAULT_SKI_RESORTS
from tests.fakes import FakeWeatherProvider, make_resort


class HangingProvider:
    async def fetch_weather(self, location):
        await asyncio.sleep(5)
        return {}

    async def search_resorts(self, city, keywords):
        await asyncio.sleep(5)
        return []


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestNormalizeObservation:

    def test_empty_mapping_gets_all_defaults(self):
        obs = normalize_observation({}, "Nanshan")

        assert obs.location == "Nanshan"
        assert obs.resolved_address == "Nanshan"
        for key, default in NUMERIC_DEFAULTS.items():
            assert getattr(obs, key) == default
        for key, default in TEXT_DEFAULTS.items():
            assert getattr(obs, key) == default
        assert not obs.is_synthetic

    def test_provider_values_kept(self):
        data = {
            "temp": -3.5,
            "windspeed": "21",
            "conditions": "Snow",
            "resolvedAddress": "Miyun, Beijing",
        }
        obs = normalize_observation(data, "Nanshan")

        assert obs.temp == -3.5
        assert obs.windspeed == 21.0
        assert obs.conditions == "Snow"
        assert obs.resolved_address == "Miyun, Beijing"

    @pytest.mark.parametrize("bad", [None, "n/a", math.nan, math.inf, True])
    def test_unusable_numbers_defaulted(self, bad):
        obs = normalize_observation({"temp": bad}, "Nanshan")
        assert obs.temp == NUMERIC_DEFAULTS["temp"]

    def test_blank_text_defaulted(self):
        obs = normalize_observation({"icon": "  "}, "Nanshan")
        assert obs.icon == TEXT_DEFAULTS["icon"]

    def test_fallback_address_used(self):
        obs = normalize_observation({}, "Nanshan", fallback_address="北京市密云区")
        assert obs.resolved_address == "北京市密云区"

    def test_non_mapping_rejected(self):
        with pytest.raises(WeatherPayloadError):
            normalize_observation(["temp", -3], "Nanshan")


class TestSyntheticObservation:

    def test_values_within_bands(self):
        rng = random.Random(7)
        for _ in range(200):
            obs = synthetic_observation("Nanshan", "", rng)
            assert -11 <= obs.temp <= -5
            assert -19 <= obs.feelslike <= -11
            assert 10 <= obs.windspeed <= 30
            assert 15 <= obs.visibility <= 25
            assert 2 <= obs.uvindex <= 5
            assert 0 <= obs.snow <= 5
            assert 0 <= obs.winddir <= 360
            assert obs.is_synthetic

    def test_seeded_rng_is_reproducible(self):
        first = synthetic_observation("Nanshan", "", random.Random(42))
        second = synthetic_observation("Nanshan", "", random.Random(42))
        assert first == second

    def test_address_falls_back_to_name(self):
        obs = synthetic_observation("Nanshan", "", random.Random(1))
        assert obs.resolved_address == "Nanshan"


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class TestFetchObservation:

    @pytest.mark.asyncio
    async def test_provider_reading_normalized(self):
        provider = FakeWeatherProvider(weather={"temp": -8, "windspeed": 12})
        gateway = WeatherGateway(provider)

        obs = await gateway.fetch_observation("40.33,116.86", name="Nanshan")

        assert provider.weather_queries == ["40.33,116.86"]
        assert obs.location == "Nanshan"
        assert obs.temp == -8
        assert not obs.is_synthetic

    @pytest.mark.asyncio
    async def test_provider_failure_gives_synthetic(self):
        provider = FakeWeatherProvider(weather=RuntimeError("503 from upstream"))
        gateway = WeatherGateway(provider, rng=random.Random(3))

        obs = await gateway.fetch_observation("Yanqing")

        assert obs.is_synthetic
        assert obs.location == "Yanqing"

    @pytest.mark.asyncio
    async def test_no_provider_gives_synthetic(self):
        obs = await WeatherGateway(None).fetch_observation("Yanqing")
        assert obs.is_synthetic

    @pytest.mark.asyncio
    async def test_timeout_gives_synthetic(self):
        gateway = WeatherGateway(HangingProvider(), timeout_seconds=0.05)
        obs = await gateway.fetch_observation("Yanqing")
        assert obs.is_synthetic

    @pytest.mark.asyncio
    async def test_failure_raises_when_synthetic_disabled(self):
        provider = FakeWeatherProvider(weather=RuntimeError("down"))
        gateway = WeatherGateway(provider, synthetic_fallback=False)

        with pytest.raises(WeatherUnavailableError):
            await gateway.fetch_observation("Yanqing")

    @pytest.mark.asyncio
    async def test_resort_reading_uses_lat_lng(self):
        provider = FakeWeatherProvider(weather={})
        gateway = WeatherGateway(provider)
        resort = make_resort(location="116.5,40.2")

        obs = await gateway.fetch_for_resort(resort)

        assert provider.weather_queries == ["40.2,116.5"]
        assert obs.location == resort.name
        assert obs.resolved_address == "北京市延庆区"


class TestResortDirectory:

    @pytest.mark.asyncio
    async def test_directory_results_returned(self):
        resorts = [make_resort("R1"), make_resort("R2", name="Other Park")]
        provider = FakeWeatherProvider(resorts=resorts)
        gateway = WeatherGateway(provider, default_city="北京", default_keywords="滑雪场")

        result = await gateway.fetch_resorts()

        assert result == resorts
        assert provider.resort_queries == [("北京", "滑雪场")]

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_builtin(self):
        gateway = WeatherGateway(FakeWeatherProvider(resorts=RuntimeError("quota")))
        result = await gateway.fetch_resorts(city="张家口")
        assert result == list(DEFAULT_SKI_RESORTS)

    @pytest.mark.asyncio
    async def test_empty_result_falls_back_to_builtin(self):
        gateway = WeatherGateway(FakeWeatherProvider(resorts=[]))
        assert await gateway.fetch_resorts() == list(DEFAULT_SKI_RESORTS)

    @pytest.mark.asyncio
    async def test_no_provider_uses_builtin(self):
        assert await WeatherGateway(None).fetch_resorts() == list(DEFAULT_SKI_RESORTS)

    @pytest.mark.asyncio
    async def test_listed_resort_resolvable_by_id(self):
        gateway = WeatherGateway(FakeWeatherProvider(resorts=[make_resort("R9")]))
        await gateway.fetch_resorts()

        assert gateway.get_resort("R9").id == "R9"
        assert gateway.get_resort(DEFAULT_SKI_RESORTS[0].id) == DEFAULT_SKI_RESORTS[0]
        assert gateway.get_resort("missing") is None

    def test_builtin_list_has_six_resorts(self):
        assert len(DEFAULT_SKI_RESORTS) == 6
        assert len({r.id for r in DEFAULT_SKI_RESORTS}) == 6

    def test_weather_query_falls_back_to_name(self):
        assert make_resort(location="").weather_query == "Test Snow Park"
        assert make_resort(location="116.5").weather_query == "Test Snow Park"

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            WeatherGateway(None, timeout_seconds=0)
