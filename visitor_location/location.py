"""Resolve a visitor's location from their IP address.

The resolver caches the first successful lookup in the visitor's session. Once a
location is cached, `get()` returns it for the rest of the session without
resolving the IP or calling any driver, even when a different `ip` is passed.
Callers that need a per-call IP override should use a fresh session.
"""

import warnings
from typing import Any

from visitor_location.config import Settings
from visitor_location.drivers.base import BaseDriver
from visitor_location.drivers.factory import DriverFactory
from visitor_location.errors import FieldNotFoundError, NoDriverAvailableError
from visitor_location.ip_resolver import IpResolver
from visitor_location.logger import logger
from visitor_location.models.location import Location
from visitor_location.session import LOCATION_SESSION_KEY, SessionStore

COUNTRY_LIST_FIELDS = ("country_code", "country_name")


class LocationResolver:
    """Look up, cache and fall back between location drivers.

    The selected driver is created eagerly, so a misconfigured driver name fails
    with DriverNotFoundError when the resolver is built rather than on first use.
    """

    def __init__(
        self,
        settings: Settings,
        session: SessionStore,
        driver_factory: DriverFactory | None = None,
        ip_resolver: IpResolver | None = None,
    ) -> None:
        self._settings = settings
        self._session = session
        self._driver_factory = driver_factory or DriverFactory(settings)
        self._ip_resolver = ip_resolver or IpResolver(settings)
        self._driver: BaseDriver = self._driver_factory.create(settings.selected_driver)
        self._location: Location | None = None

    @property
    def location(self) -> Location | None:
        """The location resolved by the last `get()` call, if any."""
        return self._location

    async def get(self, ip: str | None = None, field: str | None = None) -> Any:
        """Return the visitor's location, or a single field of it when `field` is given.

        Raises:
            InvalidAddressError: `ip` is not a valid IPv4/IPv6 address.
            NoDriverAvailableError: the selected driver and every fallback failed.
            FieldNotFoundError: `field` is not a location attribute. The location is
                still resolved and cached before this is raised.
        """
        self._location = await self._resolve(ip)

        if field is None:
            return self._location

        if field not in Location.model_fields:
            raise FieldNotFoundError(field)
        return getattr(self._location, field)

    async def is_(self, value: str) -> bool:
        """Return True if any field value of the current location equals `value`, ignoring case.

        Resolves the location first when this resolver has not done so yet.
        """
        if self._location is None:
            await self.get()
        return self._location.has_value(value)

    def lists(self, value_field: str | None = None, name_field: str | None = None) -> dict[str, str]:
        """Return the configured countries as a `{value: name}` mapping.

        Both fields are either "country_code" or "country_name"; an omitted field
        falls back to the configured dropdown field.
        """
        value_field = value_field or self._settings.dropdown_value
        name_field = name_field or self._settings.dropdown_name

        for field in (value_field, name_field):
            if field not in COUNTRY_LIST_FIELDS:
                raise FieldNotFoundError(str(field))

        countries = [
            {"country_code": code, "country_name": name} for code, name in self._settings.country_codes.items()
        ]
        return {country[value_field]: country[name_field] for country in countries}

    def dropdown(self, value_field: str | None = None, name_field: str | None = None) -> dict[str, str]:
        """Deprecated alias for `lists`."""
        warnings.warn("dropdown() is deprecated, use lists() instead", DeprecationWarning, stacklevel=2)
        return self.lists(value_field, name_field)

    async def _resolve(self, ip: str | None) -> Location:
        if self._settings.localhost_forget_location:
            self._session.forget(LOCATION_SESSION_KEY)

        if self._session.has(LOCATION_SESSION_KEY):
            return self._session.get(LOCATION_SESSION_KEY)

        resolved_ip = self._ip_resolver.resolve(ip)
        logger.info(f"Resolving location ip={resolved_ip} driver={self._settings.selected_driver}")

        location = await self._driver.get(resolved_ip)
        if location.error:
            location = await self._get_from_fallbacks(resolved_ip)

        self._session.set(LOCATION_SESSION_KEY, location)
        return location

    async def _get_from_fallbacks(self, ip: str) -> Location:
        last_driver = self._settings.selected_driver

        for driver_name in self._settings.selected_driver_fallbacks:
            last_driver = driver_name
            logger.info(f"Trying fallback driver={driver_name} ip={ip}")
            location = await self._driver_factory.create(driver_name).get(ip)
            if not location.error:
                return location

        logger.error(f"All location drivers failed ip={ip} last_driver={last_driver}")
        raise NoDriverAvailableError(last_driver)
