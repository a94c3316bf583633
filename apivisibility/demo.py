#!/usr/bin/env python3
"""Demo FastAPI service with configurable catalogue visibility.

Two groups of operations:
- User: GetUser, SetUser, DeleteUser
- WeatherForecast: GetWeatherForecast, DeleteWeatherForecast

Run with ``uvicorn --factory apivisibility.demo:create_demo_app`` and open
``/docs``; set ``APIVISIBILITY_HIDDEN_ITEMS=User.Delete*`` to watch
operations drop out of the catalogue while still answering requests.
"""

import random
from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, FastAPI
from pydantic import BaseModel

from apivisibility.core.constants import APIVISIBILITY_VERSION, ConfigKey
from apivisibility.infrastructure.config_manager import ApiConfiguration, get_config_manager
from apivisibility.infrastructure.logger import configure_logging
from apivisibility.integration.fastapi_adapter import install_visibility
from apivisibility.rules.engine import VisibilityRuleEngine

SUMMARIES = [
    "Freezing",
    "Bracing",
    "Chilly",
    "Cool",
    "Mild",
    "Warm",
    "Balmy",
    "Hot",
    "Sweltering",
    "Scorching",
]


class User(BaseModel):
    """A demo user."""

    name: str
    created: datetime


class WeatherForecast(BaseModel):
    """A demo forecast entry."""

    forecast_date: date
    temperature_c: int
    summary: Optional[str] = None


def build_user_router() -> APIRouter:
    """Create the ``User`` group: GetUser, SetUser and DeleteUser."""
    router = APIRouter(prefix="/User", tags=["User"])

    @router.get("", operation_id="GetUser", response_model=List[User])
    def get_users() -> List[User]:
        now = datetime.now()
        return [User(name=f"User {index}", created=now) for index in range(1, 6)]

    @router.post("", operation_id="SetUser", status_code=204)
    def set_user(user: User) -> None:
        # no implementation
        return None

    @router.delete("", operation_id="DeleteUser", status_code=204)
    def delete_user() -> None:
        # no implementation
        return None

    return router


def build_weather_router() -> APIRouter:
    """Create the ``WeatherForecast`` group: GetWeatherForecast and DeleteWeatherForecast."""
    router = APIRouter(prefix="/WeatherForecast", tags=["WeatherForecast"])

    @router.get("", operation_id="GetWeatherForecast", response_model=List[WeatherForecast])
    def get_weather_forecast() -> List[WeatherForecast]:
        today = date.today()
        return [
            WeatherForecast(
                forecast_date=today + timedelta(days=index),
                temperature_c=random.randint(-20, 55),
                summary=random.choice(SUMMARIES),
            )
            for index in range(1, 6)
        ]

    @router.delete("", operation_id="DeleteWeatherForecast", status_code=204)
    def delete_weather_forecast() -> None:
        # no implementation
        return None

    return router


def create_demo_app(api_configuration: Optional[ApiConfiguration] = None) -> FastAPI:
    """Create the demo application with visibility rules installed.

    Logging is configured from the ``logging`` section of the global
    configuration manager. Each call builds fresh routers, so visibility
    applied to one app never leaks into another.

    Args:
        api_configuration: Mask lists to apply; resolved from the global
            configuration manager when omitted

    Returns:
        FastAPI application
    """
    manager = get_config_manager()
    configure_logging(
        manager.get(f"{ConfigKey.LOGGING}.{ConfigKey.LOG_LEVEL}", "INFO"),
        manager.get(f"{ConfigKey.LOGGING}.{ConfigKey.LOG_FILE}"),
    )

    if api_configuration is None:
        api_configuration = manager.get_api_configuration()

    app = FastAPI(
        title="API Visibility Demo",
        description="Operations hidden from the catalogue remain callable",
        version=APIVISIBILITY_VERSION,
    )
    app.include_router(build_user_router())
    app.include_router(build_weather_router())

    install_visibility(app, VisibilityRuleEngine.from_config(api_configuration))
    return app
