from http import HTTPStatus
from typing import Any

import httpx

from visitor_location.config import Settings
from visitor_location.drivers.base import BaseDriver
from visitor_location.errors import UpstreamServiceError
from visitor_location.models.location import Location


class IpApiCom(BaseDriver):
    """Driver for the http://ip-api.com JSON API.

    ip-api.com answers HTTP 200 for every lookup and reports the outcome in the
    body: `{"status": "success", ...}` or `{"status": "fail", "message": "private range"}`.
    The only HTTP error it uses is 429, once the per-minute request budget is spent.
    """

    name = "IpApiCom"

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self._base_url = settings.ip_api_com_base_url.rstrip("/")
        self._timeout_seconds = settings.http_timeout_seconds

    async def _lookup(self, ip: str) -> Location:
        url = f"{self._base_url}/json/{ip}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamServiceError(f"Request to ip-api.com failed: {repr(exc)}") from exc

        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
            raise UpstreamServiceError("ip-api.com request budget exhausted (HTTP 429).")
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            raise UpstreamServiceError(f"ip-api.com returned HTTP {response.status_code}: {response.text}")

        data = self._parse_json(response)
        if data.get("status") != "success":
            message = str(data.get("message") or "ip-api.com lookup failed")
            return Location.failed(ip=ip, driver=self.name, message=message)

        return self._normalize_payload(data)

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(f"Failed to decode ip-api.com response as JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise UpstreamServiceError(f"ip-api.com returned a JSON {type(data).__name__} instead of an object")
        return data

    def _normalize_payload(self, data: dict[str, Any]) -> Location:
        return Location(
            ip=data.get("query"),
            country_code=data.get("countryCode"),
            country_name=data.get("country"),
            region_code=data.get("region"),
            region_name=data.get("regionName"),
            city_name=data.get("city"),
            postal_code=data.get("zip") or None,
            latitude=data.get("lat"),
            longitude=data.get("lon"),
            timezone=data.get("timezone"),
            isp=data.get("isp") or data.get("org"),
            driver=self.name,
            error=False,
        )
