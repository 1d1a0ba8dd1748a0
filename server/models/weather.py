"""Weather data models"""
from typing import Literal, Optional

from pydantic import BaseModel


class HourlyWeather(BaseModel):
    time: str  # "HH:00"
    temp: float
    precipitation: float  # mm
    precipitation_type: str  # 없음 / 비 / 비/눈 / 눈 / 소나기
    precipitation_probability: int


class WeatherAlert(BaseModel):
    type: Literal["rain", "snow", "storm", "typhoon", "extreme_weather"]
    message: str
    start_time: str
    end_time: str
    severity: Literal["low", "medium", "high"]


class WeatherInfo(BaseModel):
    """Short-range forecast for the current location."""
    location: str
    current_temp: float
    description: str
    humidity: int
    precipitation: float
    precipitation_type: str
    precipitation_probability: int
    hourly_forecast: list[HourlyWeather] = []
    weather_alert: Optional[WeatherAlert] = None


class MidTermDayForecast(BaseModel):
    date: str  # YYYY-MM-DD
    min_temp: float
    max_temp: float
    am_weather: str = "구름많음"
    pm_weather: str = "구름많음"
    am_rain_prob: int = 30
    pm_rain_prob: int = 30


class MidTermForecast(BaseModel):
    """Medium-range (day 5-10) outlook."""
    location: str
    target_date: str
    min_temp: float
    max_temp: float
    weather_condition: str
    precipitation_probability: int
    reliability: str = "B"  # A high, B normal, C low
    days: list[MidTermDayForecast] = []


class WeatherDateAnalysis(BaseModel):
    """Which forecast range a weather question needs."""
    needs_mid_term: bool = False
    target_date: Optional[str] = None
    days_from_now: int = 0
