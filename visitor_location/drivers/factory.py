from visitor_location.config import DEFAULT_DRIVER_NAMESPACE, Settings
from visitor_location.drivers.base import BaseDriver
from visitor_location.drivers.ip_api_co import IpApiCo
from visitor_location.drivers.ip_api_com import IpApiCom
from visitor_location.drivers.maxmind import MaxMind
from visitor_location.errors import DriverNotFoundError

DEFAULT_DRIVERS: dict[str, type[BaseDriver]] = {
    f"{DEFAULT_DRIVER_NAMESPACE}{driver_cls.name}": driver_cls for driver_cls in (IpApiCo, IpApiCom, MaxMind)
}


class DriverFactory:
    """Factory for location drivers.

    A driver name is combined with the configured namespace to form a registry key,
    e.g. "IpApiCo" -> "visitor_location.drivers.IpApiCo". Keys are case-sensitive.
    """

    def __init__(self, settings: Settings, registry: dict[str, type[BaseDriver]] | None = None) -> None:
        self._settings = settings
        self._registry = dict(DEFAULT_DRIVERS if registry is None else registry)

    def register(self, name: str, driver_cls: type[BaseDriver], namespace: str | None = None) -> None:
        """Make `driver_cls` available under `name` (in `namespace`, defaulting to the configured one)."""
        prefix = self._settings.driver_namespace if namespace is None else namespace
        self._registry[f"{prefix}{name}"] = driver_cls

    def create(self, driver_name: str) -> BaseDriver:
        driver_cls = self._registry.get(f"{self._settings.driver_namespace}{driver_name}")
        if driver_cls is None:
            raise DriverNotFoundError(driver_name)
        return driver_cls(self._settings)

