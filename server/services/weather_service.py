"""Weather answers backed by the KMA short- and medium-range forecasts."""
import logging
import re
from datetime import datetime, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from core.fallback import call_with_fallback
from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import WEATHER_ANSWER_PROMPT, WEATHER_DATE_PROMPT
from integrations.kma.client import KmaWeatherClient, WeatherError, to_grid
from integrations.location.provider import LocationProvider
from models.weather import (
    HourlyWeather,
    MidTermDayForecast,
    MidTermForecast,
    WeatherAlert,
    WeatherDateAnalysis,
    WeatherInfo,
)

logger = logging.getLogger(__name__)

PRECIPITATION_TYPES = {"0": "없음", "1": "비", "2": "비/눈", "3": "눈", "4": "소나기"}
SKY_CONDITIONS = {"1": "맑음", "3": "구름많음", "4": "흐림"}

HOURLY_WINDOW = 12
ALERT_WINDOW = 6
RAIN_PROBABILITY_ALERT = 70
MID_TERM_DAYS = range(5, 11)
SUMMARY_LIMIT = 100

SHORT_RANGE_UNAVAILABLE = "죄송합니다. 현재 날씨 정보를 가져올 수 없습니다. 😅"
MID_TERM_UNAVAILABLE = "죄송합니다. 해당 날짜의 중기예보 정보를 가져올 수 없습니다. 😅"

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def precipitation_type(pty: Optional[str]) -> str:
    return PRECIPITATION_TYPES.get(pty or "0", "없음")


def describe_sky(sky: Optional[str], pty: Optional[str]) -> str:
    """Precipitation wins over sky state."""
    if pty and pty != "0":
        return precipitation_type(pty)
    return SKY_CONDITIONS.get(sky or "", "알 수 없음")


def _amount(value: Optional[str]) -> float:
    """Precipitation amount in mm from strings like "강수없음", "1.0mm", "30.0~50.0mm"."""
    if not value or value == "강수없음":
        return 0.0
    match = _NUMBER_RE.search(value)
    return float(match.group()) if match else 0.0


def _number(value: Optional[str], default: float = 0.0) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def weather_alert(hourly: list[HourlyWeather]) -> Optional[WeatherAlert]:
    """Rain/snow warning for the next few hours, or None when it stays dry."""
    wet = [
        h for h in hourly[:ALERT_WINDOW]
        if h.precipitation > 0 or h.precipitation_probability >= RAIN_PROBABILITY_ALERT
    ]
    if not wet:
        return None

    heaviest = max(h.precipitation for h in wet)
    severity, kind = "low", "rain"
    if heaviest >= 20:
        severity, kind = "high", "storm"
    elif heaviest >= 5:
        severity = "medium"
    if any("눈" in h.precipitation_type for h in wet):
        kind = "snow"

    start, end = wet[0].time, wet[-1].time
    if kind == "snow":
        message = f"{start}부터 {end}까지 눈이 예상됩니다. 따뜻하게 입고 챙겨주세요! ☂️"
    else:
        message = f"{start}부터 {end}까지 비가 예상됩니다. 우산을 챙겨주세요! ☂️"
    return WeatherAlert(type=kind, message=message, start_time=start, end_time=end, severity=severity)


def parse_short_range(items: list[dict[str, Any]], location: str) -> WeatherInfo:
    """Fold KMA category rows into hourly slots; the earliest slot is "now"."""
    slots: dict[str, dict[str, str]] = {}
    for item in items:
        key = f"{item['fcstDate']}_{item['fcstTime']}"
        slots.setdefault(key, {})[item["category"]] = str(item["fcstValue"])

    if not slots:
        raise WeatherError("Forecast contained no time slots")

    hourly = []
    for key in sorted(slots)[:HOURLY_WINDOW]:
        data = slots[key]
        fcst_time = key.split("_")[1]
        hourly.append(
            HourlyWeather(
                time=f"{fcst_time[:2]}:00",
                temp=_number(data.get("TMP")),
                precipitation=_amount(data.get("PCP")),
                precipitation_type=precipitation_type(data.get("PTY")),
                precipitation_probability=int(_number(data.get("POP"))),
            )
        )

    current = slots[min(slots)]
    return WeatherInfo(
        location=location,
        current_temp=_number(current.get("TMP")),
        description=describe_sky(current.get("SKY"), current.get("PTY")),
        humidity=int(_number(current.get("REH"))),
        precipitation=_amount(current.get("PCP")),
        precipitation_type=precipitation_type(current.get("PTY")),
        precipitation_probability=int(_number(current.get("POP"))),
        hourly_forecast=hourly,
        weather_alert=weather_alert(hourly),
    )


def parse_mid_term(
    summary_item: dict[str, Any],
    temp_item: dict[str, Any],
    now: datetime,
    location: str,
    target_date: Optional[str] = None,
) -> MidTermForecast:
    days = []
    for offset in MID_TERM_DAYS:
        day = (now + timedelta(days=offset)).date().isoformat()
        days.append(
            MidTermDayForecast(
                date=day,
                min_temp=_number(str(temp_item.get(f"taMin{offset}", 0))),
                max_temp=_number(str(temp_item.get(f"taMax{offset}", 0))),
            )
        )

    target = next((d for d in days if d.date == target_date), days[0])
    summary = summary_item.get("wfSv") or "중기예보 정보가 없습니다."
    if len(summary) > SUMMARY_LIMIT:
        summary = summary[:SUMMARY_LIMIT] + "..."

    return MidTermForecast(
        location=location,
        target_date=target.date,
        min_temp=target.min_temp,
        max_temp=target.max_temp,
        weather_condition=summary,
        precipitation_probability=max(target.am_rain_prob, target.pm_rain_prob),
        days=days,
    )


def describe_short_range(info: WeatherInfo) -> str:
    lines = [
        f"현재 날씨: {info.current_temp}°C, {info.description}, 습도 {info.humidity}%, "
        f"강수확률 {info.precipitation_probability}%",
        "",
        f"시간별 예보 (향후 {HOURLY_WINDOW}시간):",
    ]
    for h in info.hourly_forecast:
        kind = h.precipitation_type if h.precipitation_type != "없음" else "맑음"
        lines.append(f"{h.time}: {h.temp}°C, {kind}, 강수확률 {h.precipitation_probability}%")
    return "\n".join(lines)


def describe_mid_term(forecast: MidTermForecast) -> str:
    lines = [
        f"중기예보 ({forecast.target_date}):",
        forecast.weather_condition,
        f"최저/최고 기온: {forecast.min_temp}°C / {forecast.max_temp}°C",
        f"강수확률: {forecast.precipitation_probability}%",
        "",
        "향후 일주일 예보:",
    ]
    for day in forecast.days[:7]:
        lines.append(
            f"{day.date}: {day.min_temp}°C~{day.max_temp}°C, "
            f"오전 {day.am_rain_prob}% / 오후 {day.pm_rain_prob}%"
        )
    return "\n".join(lines)


def basic_response(
    info: Optional[WeatherInfo] = None,
    mid_term: Optional[MidTermForecast] = None,
) -> str:
    """Deterministic answer used when the model cannot compose one."""
    if info is not None:
        text = f"🌤️ 현재 {info.current_temp}°C, {info.description}입니다.\n"
        text += f"☔ 강수확률은 {info.precipitation_probability}%에요.\n\n"
        if info.weather_alert:
            text += f"⚠️ {info.weather_alert.message}"
        elif info.precipitation_probability >= RAIN_PROBABILITY_ALERT:
            text += "🌧️ 비가 올 가능성이 높으니 우산을 챙기세요!"
        else:
            text += "😊 날씨가 괜찮네요!"
        return text

    if mid_term is not None:
        return (
            f"📅 {mid_term.target_date} 예보: 최저 {mid_term.min_temp}°C / "
            f"최고 {mid_term.max_temp}°C\n{mid_term.weather_condition}"
        )

    return "날씨 정보를 가져올 수 없습니다. 😅"


def morning_message(info: WeatherInfo) -> str:
    text = "안녕하세요! 좋은 아침입니다 ☀️\n\n오늘 날씨에 대한 정보를 알려드리겠습니다.\n\n"
    text += f"🌡️ 현재 기온: {info.current_temp}°C\n"
    text += f"☁️ 날씨: {info.description}\n"
    text += f"💧 습도: {info.humidity}%\n"
    text += f"☔ 강수확률: {info.precipitation_probability}%\n"
    if info.precipitation > 0:
        text += f"🌧️ 예상 강수량: {info.precipitation}mm\n"

    if info.precipitation_probability >= RAIN_PROBABILITY_ALERT or info.precipitation > 0:
        text += "\n⚠️ 비가 올 예정이니 우산을 꼭 챙기세요! ☂️"
    elif info.precipitation_probability >= 30:
        text += "\n☁️ 구름이 많으니 혹시 모르니 우산을 준비해주세요."
    else:
        text += "\n😊 맑은 하루가 될 것 같아요! 좋은 하루 되세요!"

    if info.weather_alert:
        text += f"\n\n🚨 {info.weather_alert.message}"
    return text


class _DateAnalysisReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    needs_mid_term: bool = Field(False, alias="needsMidTerm")
    target_date: Optional[str] = Field(None, alias="targetDate")
    days_from_now: int = Field(0, alias="daysFromNow")


class WeatherService:
    """Chooses the forecast range for a question and composes the answer."""

    def __init__(
        self,
        kma: KmaWeatherClient,
        llm: GeminiClient,
        location: LocationProvider,
        settings: Settings,
    ):
        self.kma = kma
        self.llm = llm
        self.location = location
        self.location_name = settings.DEFAULT_LOCATION_NAME
        self.model = settings.GEMINI_CHAT_MODEL
        self.timeout = settings.LLM_CHAT_TIMEOUT
        self.tz = ZoneInfo(settings.TIMEZONE)

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or datetime.now(self.tz)

    async def current_weather(self, now: Optional[datetime] = None) -> WeatherInfo:
        """Short-range forecast at the current location. Raises WeatherError."""
        now = self._now(now)
        coords = await self.location.current_location()
        if coords is None:
            raise WeatherError("Current location unavailable")
        nx, ny = to_grid(coords.latitude, coords.longitude)
        items = await self.kma.village_forecast(nx, ny, now)
        return parse_short_range(items, "현재 위치")

    async def mid_term_forecast(
        self,
        target_date: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MidTermForecast:
        """Day 5-10 outlook. Raises WeatherError."""
        now = self._now(now)
        summary_item, temp_item = await self.kma.mid_term(now)
        return parse_mid_term(summary_item, temp_item, now, self.location_name, target_date)

    async def analyze_date(self, query: str, now: Optional[datetime] = None) -> WeatherDateAnalysis:
        """Decide short vs. medium range. Defaults to short range on any failure."""
        now = self._now(now)

        async def remote() -> WeatherDateAnalysis:
            reply = await self.llm.generate_structured(
                prompt=WEATHER_DATE_PROMPT.format(today=now.date().isoformat(), query=query),
                schema=_DateAnalysisReply,
                model=self.model,
                timeout_s=self.timeout,
            )
            return WeatherDateAnalysis(
                needs_mid_term=reply.needs_mid_term,
                target_date=reply.target_date or None,
                days_from_now=reply.days_from_now,
            )

        return await call_with_fallback(remote, WeatherDateAnalysis, label="weather date analysis")

    async def answer(
        self,
        query: str,
        info: Optional[WeatherInfo] = None,
        mid_term: Optional[MidTermForecast] = None,
    ) -> str:
        if not self.llm.configured:
            return basic_response(info, mid_term)

        sections = []
        if info is not None:
            sections.append(describe_short_range(info))
        if mid_term is not None:
            sections.append(describe_mid_term(mid_term))

        async def remote() -> str:
            text = await self.llm.generate(
                prompt=WEATHER_ANSWER_PROMPT.format(query=query, weather_data="\n\n".join(sections)),
                model=self.model,
                temperature=0.7,
                timeout_s=self.timeout,
            )
            return text.strip()

        return await call_with_fallback(
            remote,
            lambda: basic_response(info, mid_term),
            label="weather answer",
        )

    async def smart_response(self, query: str, now: Optional[datetime] = None) -> str:
        now = self._now(now)
        analysis = await self.analyze_date(query, now)

        if analysis.needs_mid_term:
            logger.info(f"Weather question needs medium-range forecast ({analysis.target_date})")
            try:
                forecast = await self.mid_term_forecast(analysis.target_date, now)
            except WeatherError as e:
                logger.error(f"Medium-range forecast failed: {e}")
                return MID_TERM_UNAVAILABLE
            return await self.answer(query, mid_term=forecast)

        try:
            info = await self.current_weather(now)
        except WeatherError as e:
            logger.error(f"Short-range forecast failed: {e}")
            return SHORT_RANGE_UNAVAILABLE
        return await self.answer(query, info=info)

    async def morning_message(self, now: Optional[datetime] = None) -> str:
        """Raises WeatherError when the forecast is unavailable."""
        return morning_message(await self.current_weather(now))
