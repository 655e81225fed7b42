from collections.abc import Callable
from http import HTTPStatus
from typing import Any

import httpx
import pytest

from tests.common import FailingAsyncClient, MockAsyncClient, MockResponse, make_settings
from visitor_location.drivers.ip_api_com import IpApiCom
from visitor_location.errors import UpstreamServiceError


def make_fake_async_client(response: MockResponse, requested_urls: list[str] | None = None) -> Callable[..., MockAsyncClient]:
    """Factory for a fake httpx.AsyncClient returning a fixed response."""

    def _fake_client(*args: Any, **kwargs: Any) -> MockAsyncClient:
        return MockAsyncClient(response, requested_urls)

    return _fake_client


def _driver() -> IpApiCom:
    return IpApiCom(make_settings(ip_api_com_base_url="http://ip-api.com"))


@pytest.mark.asyncio
async def test_get_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """Happy path: successful lookup with normalized fields."""
    payload = {
        "status": "success",
        "query": "8.8.8.8",
        "countryCode": "US",
        "country": "United States",
        "region": "CA",
        "regionName": "California",
        "city": "Mountain View",
        "zip": "94043",
        "lat": 37.386,
        "lon": -122.0838,
        "timezone": "America/Los_Angeles",
        "isp": "Google LLC",
    }
    requested_urls: list[str] = []
    response = MockResponse(status_code=HTTPStatus.OK, payload=payload)

    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response, requested_urls))

    result = await _driver().get("8.8.8.8")

    assert result.error is False
    assert result.driver == "IpApiCom"
    assert result.ip == "8.8.8.8"
    assert result.country_code == "US"
    assert result.country_name == "United States"
    assert result.region_code == "CA"
    assert result.region_name == "California"
    assert result.city_name == "Mountain View"
    assert result.postal_code == "94043"
    assert result.latitude == pytest.approx(37.386)
    assert result.longitude == pytest.approx(-122.0838)
    assert result.timezone == "America/Los_Angeles"
    assert result.isp == "Google LLC"
    assert requested_urls == ["http://ip-api.com/json/8.8.8.8"]


@pytest.mark.asyncio
async def test_get_uses_org_when_isp_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = {"status": "success", "query": "1.1.1.1", "countryCode": "AU", "org": "Cloudflare", "zip": ""}
    response = MockResponse(status_code=HTTPStatus.OK, payload=payload)

    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    result = await _driver().get("1.1.1.1")

    assert result.isp == "Cloudflare"
    assert result.postal_code is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"status": "fail", "message": "private range", "query": "192.168.0.1"},
        {"status": "fail", "message": "reserved range", "query": "192.168.0.1"},
        {"status": "fail", "message": "invalid query", "query": "192.168.0.1"},
    ],
)
async def test_lookup_fail_status_returns_errored_record(
    monkeypatch: pytest.MonkeyPatch,
    payload: dict[str, Any],
) -> None:
    response = MockResponse(status_code=HTTPStatus.OK, payload=payload)

    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    result = await _driver()._lookup("192.168.0.1")

    assert result.error is True
    assert result.ip == "192.168.0.1"
    assert result.driver == "IpApiCom"
    assert result.error_message == payload["message"]


@pytest.mark.asyncio
async def test_lookup_missing_status_is_a_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    response = MockResponse(status_code=HTTPStatus.OK, payload={"query": "8.8.8.8", "countryCode": "US"})

    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    result = await _driver()._lookup("8.8.8.8")

    assert result.error is True
    assert result.error_message == "ip-api.com lookup failed"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "expected_message"),
    [
        (HTTPStatus.TOO_MANY_REQUESTS, "request budget exhausted"),
        (HTTPStatus.BAD_REQUEST, "HTTP 400"),
        (HTTPStatus.FORBIDDEN, "HTTP 403"),
        (HTTPStatus.NOT_FOUND, "HTTP 404"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, "HTTP 500"),
    ],
)
async def test_lookup_raises_for_http_error_statuses(
    monkeypatch: pytest.MonkeyPatch,
    status_code: HTTPStatus,
    expected_message: str,
) -> None:
    response = MockResponse(status_code=status_code, payload={}, text="Some error")

    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    with pytest.raises(UpstreamServiceError, match=expected_message):
        await _driver()._lookup("8.8.8.8")


@pytest.mark.asyncio
async def test_get_non_object_payload_returns_errored_record(monkeypatch: pytest.MonkeyPatch) -> None:
    response = MockResponse(status_code=HTTPStatus.OK, payload="success")

    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    result = await _driver().get("8.8.8.8")

    assert result.error is True
    assert result.driver == "IpApiCom"
    assert "str" in result.error_message


@pytest.mark.asyncio
async def test_get_network_failure_returns_errored_record(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda *args, **kwargs: FailingAsyncClient("http://ip-api.com", *args, **kwargs),
    )

    result = await _driver().get("8.8.8.8")

    assert result.error is True
