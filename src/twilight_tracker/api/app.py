"""FastAPI app exposing the twilight state and trigger endpoints."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from pydantic import BaseModel, Field

from twilight_tracker.config import load_config_from_env
from twilight_tracker.contracts import Location, TwilightState
from twilight_tracker.orchestrate.service import TwilightService


class LocationUpdateRequest(BaseModel):
    """Request schema for one externally obtained location fix."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    accuracy: float | None = Field(default=None, ge=0.0)
    timestamp: datetime | None = None
    provider: str = "api"

    def to_contract(self) -> Location:
        """Convert API model into a Location contract."""
        return Location(**self.model_dump())


class TwilightStateResponse(BaseModel):
    """Twilight boundaries as of the last published evaluation."""

    sunrise_millis: int
    sunset_millis: int
    previous_sunset_millis: int
    next_sunrise_millis: int
    sunrise_utc: datetime
    sunset_utc: datetime
    previous_sunset_utc: datetime
    next_sunrise_utc: datetime
    is_night: bool
    next_transition_utc: datetime


class TwilightResponse(BaseModel):
    """Response wrapper; `state` is null until a location is known."""

    state: TwilightStateResponse | None


class TriggerResponse(BaseModel):
    """Acknowledgement that a trigger was queued."""

    queued: str


def _state_response(state: TwilightState | None, now: datetime) -> TwilightResponse:
    if state is None:
        return TwilightResponse(state=None)
    return TwilightResponse(state=TwilightStateResponse(**state.to_dict(now=now)))


def create_app(service: TwilightService | None = None) -> FastAPI:
    """Create and configure the FastAPI app.

    Without an explicit service one is built from ``TWILIGHT_*`` environment
    variables and started with the app.
    """
    owns_service = service is None
    if service is None:
        service = TwilightService.from_config(load_config_from_env())

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        service.start()
        try:
            yield
        finally:
            service.stop()

    app = FastAPI(
        title="Twilight Tracker API",
        version="0.1.0",
        lifespan=lifespan if owns_service else None,
    )
    app.state.service = service

    @app.get("/twilight", response_model=TwilightResponse)
    def get_twilight() -> TwilightResponse:
        """Return the last published twilight state."""
        now = datetime.now(timezone.utc)
        return _state_response(service.get_last_twilight_state(), now)

    @app.post("/location", response_model=TriggerResponse)
    def post_location(payload: LocationUpdateRequest) -> TriggerResponse:
        """Report a location fix; (0, 0) fixes are accepted but ignored."""
        service.report_location(payload.to_contract())
        return TriggerResponse(queued="location_changed")

    @app.post("/time-changed", response_model=TriggerResponse)
    def post_time_changed() -> TriggerResponse:
        """Signal a wall clock or timezone change."""
        service.report_time_changed()
        return TriggerResponse(queued="time_changed")

    return app
