"""Korea Meteorological Administration (KMA) open API client."""
import asyncio
import math
import httpx
import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from urllib.parse import unquote

from config.settings import Settings

logger = logging.getLogger(__name__)

# Short-range forecasts are published every 3 hours at these times
SHORT_RANGE_BASE_HOURS = (2, 5, 8, 11, 14, 17, 20, 23)


class WeatherError(Exception):
    """The weather backend could not answer."""


def to_grid(latitude: float, longitude: float) -> tuple[int, int]:
    """WGS84 -> KMA 5km Lambert conformal conic grid (nx, ny)."""
    re_km, grid_km = 6371.00877, 5.0
    slat1, slat2 = math.radians(30.0), math.radians(60.0)
    olon, olat = math.radians(126.0), math.radians(38.0)
    xo, yo = 43, 136

    re = re_km / grid_km
    sn = math.tan(math.pi * 0.25 + slat2 * 0.5) / math.tan(math.pi * 0.25 + slat1 * 0.5)
    sn = math.log(math.cos(slat1) / math.cos(slat2)) / math.log(sn)
    sf = math.tan(math.pi * 0.25 + slat1 * 0.5)
    sf = math.pow(sf, sn) * math.cos(slat1) / sn
    ro = math.tan(math.pi * 0.25 + olat * 0.5)
    ro = re * sf / math.pow(ro, sn)

    ra = math.tan(math.pi * 0.25 + math.radians(latitude) * 0.5)
    ra = re * sf / math.pow(ra, sn)
    theta = math.radians(longitude) - olon
    if theta > math.pi:
        theta -= 2.0 * math.pi
    if theta < -math.pi:
        theta += 2.0 * math.pi
    theta *= sn

    nx = math.floor(ra * math.sin(theta) + xo + 0.5)
    ny = math.floor(ro - ra * math.cos(theta) + yo + 0.5)
    return nx, ny


def short_range_base(now: datetime) -> tuple[str, str]:
    """Latest short-range publish time at or before ``now`` as (YYYYMMDD, HHMM)."""
    for hour in reversed(SHORT_RANGE_BASE_HOURS):
        if now.hour >= hour:
            return now.strftime("%Y%m%d"), f"{hour:02d}00"
    # Before 02:00 the newest run is yesterday's 23:00
    return (now - timedelta(days=1)).strftime("%Y%m%d"), "2300"


def mid_term_tm_fc(now: datetime) -> str:
    """Medium-range publish time (06:00 / 18:00) as YYYYMMDDHHMM."""
    if now.hour < 6:
        return (now - timedelta(days=1)).strftime("%Y%m%d") + "1800"
    if now.hour < 18:
        return now.strftime("%Y%m%d") + "0600"
    return now.strftime("%Y%m%d") + "1800"


class KmaWeatherClient:
    """Village (short-range) and medium-range forecast endpoints."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = unquote(settings.KMA_API_KEY) if settings.KMA_API_KEY else None
        self.mid_api_key = (
            unquote(settings.KMA_MID_API_KEY) if settings.KMA_MID_API_KEY else self.api_key
        )
        self.mid_stn_id = settings.KMA_MID_STN_ID
        self.mid_reg_id = settings.KMA_MID_REG_ID
        self.client = httpx.AsyncClient(
            base_url=settings.KMA_BASE_URL.rstrip("/"),
            timeout=settings.HTTP_TIMEOUT,
            transport=transport,
        )

    async def village_forecast(self, nx: int, ny: int, now: datetime) -> list[dict[str, Any]]:
        """Raw short-range forecast items for grid (nx, ny)."""
        if not self.api_key:
            raise WeatherError("KMA API key is not configured")

        base_date, base_time = short_range_base(now)
        params = {
            "serviceKey": self.api_key,
            "pageNo": "1",
            "numOfRows": "1000",
            "dataType": "JSON",
            "base_date": base_date,
            "base_time": base_time,
            "nx": str(nx),
            "ny": str(ny),
        }
        logger.info(f"KMA village forecast: grid=({nx},{ny}) base={base_date}{base_time}")
        body = await self._get("/VilageFcstInfoService_2.0/getVilageFcst", params)
        items = body.get("items", {}).get("item", [])
        if not items:
            raise WeatherError("No short-range forecast items")
        return items

    async def mid_term(self, now: datetime) -> tuple[dict[str, Any], dict[str, Any]]:
        """(summary item, temperature item) for the medium-range outlook.

        The two endpoints are queried concurrently.
        """
        if not self.mid_api_key:
            raise WeatherError("KMA medium-range API key is not configured")

        tm_fc = mid_term_tm_fc(now)
        common = {
            "serviceKey": self.mid_api_key,
            "dataType": "JSON",
            "pageNo": "1",
            "numOfRows": "10",
            "tmFc": tm_fc,
        }
        logger.info(f"KMA mid-term forecast: tmFc={tm_fc}")
        summary_body, temp_body = await asyncio.gather(
            self._get("/MidFcstInfoService/getMidFcst", {**common, "stnId": self.mid_stn_id}),
            self._get("/MidFcstInfoService/getMidTa", {**common, "regId": self.mid_reg_id}),
        )

        summary_items = summary_body.get("items", {}).get("item", [])
        temp_items = temp_body.get("items", {}).get("item", [])
        if not summary_items or not temp_items:
            raise WeatherError("No medium-range forecast items")
        return summary_items[0], temp_items[0]

    async def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise WeatherError(f"KMA API HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise WeatherError(f"KMA API request failed: {e}") from e

        header = data.get("response", {}).get("header", {})
        if header.get("resultCode") != "00":
            raise WeatherError(f"KMA API error: {header.get('resultMsg', 'unknown')}")
        return data["response"].get("body", {})

    async def close(self):
        await self.client.aclose()
