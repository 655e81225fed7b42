from typing import Any

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class LocationResponse(BaseModel):
    """Response model for a full location lookup."""

    model_config = ConfigDict(extra="forbid")

    ip: str | None = None
    country_code: str | None = None
    country_name: str | None = None
    region_code: str | None = None
    region_name: str | None = None
    city_name: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    timezone: str | None = None
    isp: str | None = None
    driver: str | None = None


class LocationFieldResponse(BaseModel):
    """Response model for a single location attribute."""

    model_config = ConfigDict(extra="forbid")

    field: str
    value: Any = None


class LocationIsResponse(BaseModel):
    """Response model for the location value match."""

    value: str
    match: bool


class CountryListResponse(BaseModel):
    countries: dict[str, str]
