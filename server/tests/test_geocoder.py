"""Tests for GeocodingResolver."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.geocoder import GeocodeReply, GeocodingResolver, is_current_location
from integrations.gemini.client import LLMNotConfiguredError, LLMTimeoutError
from integrations.location.provider import LocationProvider
from models.location import Coordinates


@pytest.fixture
def llm():
    client = MagicMock()
    client.generate_structured = AsyncMock()
    return client


@pytest.fixture
def location(settings):
    return LocationProvider(settings)


@pytest.fixture
def resolver(llm, location, settings):
    return GeocodingResolver(llm, location, settings)


@pytest.mark.parametrize("name", ["현재 위치", "현재위치", "여기", " 내 위치 ", "지금 여기"])
def test_current_location_phrases(name):
    assert is_current_location(name)


@pytest.mark.parametrize("name", ["강남역", "우리집", "여기저기"])
def test_named_places_are_not_current_location(name):
    assert not is_current_location(name)


@pytest.mark.asyncio
async def test_current_location_skips_model(resolver, llm, location):
    location.update(Coordinates(latitude=35.1796, longitude=129.0756))

    result = await resolver.resolve("현재 위치")

    assert result == Coordinates(latitude=35.1796, longitude=129.0756)
    llm.generate_structured.assert_not_called()


@pytest.mark.asyncio
async def test_current_location_defaults_to_configured_point(resolver, settings):
    result = await resolver.resolve("여기")
    assert result.latitude == settings.DEFAULT_LATITUDE
    assert result.longitude == settings.DEFAULT_LONGITUDE


@pytest.mark.asyncio
async def test_resolves_named_place(resolver, llm, settings):
    llm.generate_structured.return_value = GeocodeReply(
        name="강남역", latitude=37.4979, longitude=127.0276
    )

    result = await resolver.resolve("강남역")

    assert result == Coordinates(latitude=37.4979, longitude=127.0276)
    kwargs = llm.generate_structured.call_args.kwargs
    assert "강남역" in kwargs["prompt"]
    assert kwargs["schema"] is GeocodeReply
    assert kwargs["model"] == settings.GEMINI_GEOCODING_MODEL
    assert kwargs["timeout_s"] == settings.LLM_GEOCODE_TIMEOUT


@pytest.mark.asyncio
async def test_null_coordinates_mean_not_found(resolver, llm):
    llm.generate_structured.return_value = GeocodeReply(name="우리집")
    assert await resolver.resolve("우리집") is None


@pytest.mark.asyncio
async def test_zero_coordinates_mean_not_found(resolver, llm):
    llm.generate_structured.return_value = GeocodeReply(name="?", latitude=0, longitude=0)
    assert await resolver.resolve("어딘가") is None


@pytest.mark.asyncio
async def test_out_of_range_coordinates_mean_not_found(resolver, llm):
    llm.generate_structured.return_value = GeocodeReply(name="?", latitude=123.0, longitude=127.0)
    assert await resolver.resolve("이상한 곳") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [LLMTimeoutError("slow"), LLMNotConfiguredError("no key"), ValueError("No valid JSON")],
)
async def test_failures_mean_not_found(resolver, llm, error):
    llm.generate_structured.side_effect = error
    assert await resolver.resolve("서울역") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("name", [None, "", "   "])
async def test_blank_name(resolver, llm, name):
    assert await resolver.resolve(name) is None
    llm.generate_structured.assert_not_called()
