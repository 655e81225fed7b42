from http import HTTPStatus
from typing import Any

import httpx

from visitor_location.config import Settings
from visitor_location.drivers.base import BaseDriver
from visitor_location.drivers.factory import DriverFactory
from visitor_location.models.location import Location


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self) -> Any:
        return self._payload


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient that records requested URLs."""

    def __init__(self, response: MockResponse, requested_urls: list[str] | None = None) -> None:
        self._response = response
        self.requested_urls = [] if requested_urls is None else requested_urls

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        self.requested_urls.append(url)
        return self._response


class FailingAsyncClient:
    """Async client that raises a RequestError on enter to simulate network failure."""

    def __init__(self, url: str, *args: Any, **kwargs: Any) -> None:
        self._url = url

    async def __aenter__(self) -> "FailingAsyncClient":
        request = httpx.Request("GET", self._url)
        raise httpx.RequestError("Network failure", request=request)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        return MockResponse(status_code=HTTPStatus.OK, payload={})


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the process environment and any `.env` file."""
    values: dict[str, Any] = {
        "selected_driver": "Primary",
        "selected_driver_fallbacks": [],
        "localhost_testing": False,
        "localhost_forget_location": False,
        "default_ip": "66.102.0.0",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_location(**fields: Any) -> Location:
    values: dict[str, Any] = {
        "ip": "8.8.8.8",
        "country_code": "US",
        "country_name": "United States",
        "city_name": "Mountain View",
        "error": False,
    }
    values.update(fields)
    return Location(**values)


class StubDriver(BaseDriver):
    """Driver returning a fixed record and counting its calls.

    Every instance created for the same subclass shares `calls`, so tests can
    assert on drivers the factory instantiated internally.
    """

    name = "Stub"
    result: Location = make_location()
    calls: list[str] = []

    async def _lookup(self, ip: str) -> Location:
        type(self).calls.append(ip)
        return self.result


def make_stub_driver(name: str, result: Location) -> type[StubDriver]:
    return type(f"{name}Driver", (StubDriver,), {"name": name, "result": result, "calls": []})


def make_factory(settings: Settings, *drivers: type[BaseDriver]) -> DriverFactory:
    factory = DriverFactory(settings, registry={})
    for driver_cls in drivers:
        factory.register(driver_cls.name, driver_cls)
    return factory
