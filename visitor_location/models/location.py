from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Location(BaseModel):
    """Normalized location record returned by every driver.

    `error` has no default: a driver must always say whether its lookup failed,
    the resolver relies on this flag (not on exceptions) to move on to the
    fallback drivers.
    """

    model_config = ConfigDict(frozen=True)

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
    error: bool
    error_message: str | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_lat_lon(cls, value: Any) -> float | None:
        """Allow latitude/longitude to be provided as strings, numbers, or null.

        Providers may return these fields as strings; this validator normalizes them
        into floats while gracefully handling missing or invalid values.
        """
        if value is None:
            return None
        try:
            # For general GPS and mapping, 5-6 decimal places (e.g., 34.052235)
            return round(float(value), 6)
        except (TypeError, ValueError):
            return None

    @classmethod
    def failed(cls, ip: str | None, driver: str | None, message: str) -> "Location":
        """Build an errored record for a lookup that did not succeed."""
        return cls(ip=ip, driver=driver, error=True, error_message=message)

    def has_value(self, value: str) -> bool:
        """Return True if any attribute, compared as a string, equals `value` ignoring case.

        Unset attributes and the `error` flag never match.
        """
        needle = value.casefold()
        return any(
            str(attr).casefold() == needle
            for attr in self.model_dump(exclude={"error"}).values()
            if attr is not None
        )
