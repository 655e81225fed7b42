from abc import ABC, abstractmethod

from visitor_location.config import Settings
from visitor_location.errors import IpProviderError
from visitor_location.logger import logger
from visitor_location.models.location import Location


class BaseDriver(ABC):
    """Abstract base for all location drivers.

    Concrete implementations (ipapi.co, ip-api.com, MaxMind, ...) implement
    `_lookup` and map their data source into a normalized `Location`. A provider
    that reports its own failure is returned as an errored record by `_lookup`;
    transport and data source failures are raised as `IpProviderError`.
    `get` turns any exception from `_lookup` into an errored record, so a failed
    lookup never escapes the driver and the resolver can move on to a fallback.
    """

    name: str = ""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def get(self, ip: str) -> Location:
        """Look up the location of `ip`, returning a record with `error` set on failure."""
        try:
            location = await self._lookup(ip)
        except IpProviderError as exc:
            logger.warning(f"Driver lookup failed driver={self.name} ip={ip} error={exc!r}")
            return Location.failed(ip=ip, driver=self.name, message=str(exc))
        except Exception as exc:
            logger.exception(f"Unexpected driver failure driver={self.name} ip={ip} error={exc!r}")
            return Location.failed(ip=ip, driver=self.name, message=f"Unexpected {self.name} failure: {exc!r}")

        if location.error:
            logger.warning(f"Driver reported no location driver={self.name} ip={ip} reason={location.error_message}")
        else:
            logger.debug(f"Driver lookup succeeded driver={self.name} ip={ip}")
        return location

    @abstractmethod
    async def _lookup(self, ip: str) -> Location:
        """Look up geolocation information for an explicit IP address."""
        raise NotImplementedError
