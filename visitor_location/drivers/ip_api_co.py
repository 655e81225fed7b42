from http import HTTPStatus
from typing import Any

import httpx

from visitor_location.config import Settings
from visitor_location.drivers.base import BaseDriver
from visitor_location.errors import UpstreamServiceError
from visitor_location.models.location import Location


class IpApiCo(BaseDriver):
    """Driver for the https://ipapi.co/ IP geolocation API."""

    name = "IpApiCo"

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self._base_url = settings.ipapi_co_base_url.rstrip("/")
        self._timeout_seconds = settings.http_timeout_seconds

    async def _lookup(self, ip: str) -> Location:
        """Perform the HTTP request and normalize the response.

        ipapi.co explains a failed lookup in the JSON body, with or without an
        HTTP error status, see https://ipapi.co/api/#errors:

            { "error": true, "reason": "Reserved IP Address", "ip": "127.0.0.1", "reserved": true }
            { "error": true, "reason": "RateLimited", "message": "..." }

        Such answers become an errored record carrying ipapi.co's reason.
        """
        url = f"{self._base_url}/{ip}/json/"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamServiceError(f"Request to ipapi.co failed: {repr(exc)}") from exc

        data = self._parse_json(response)
        if data.get("error"):
            return Location.failed(ip=ip, driver=self.name, message=self._error_reason(data))

        if response.status_code != HTTPStatus.OK:
            raise UpstreamServiceError(f"ipapi.co returned HTTP {response.status_code}: {response.text}")

        return self._normalize_payload(data)

    @staticmethod
    def _error_reason(data: dict[str, Any]) -> str:
        reason = str(data.get("reason") or "Unknown error from ipapi.co")
        message = data.get("message")
        return f"{reason}: {message}" if message else reason

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(
                f"ipapi.co returned HTTP {response.status_code} with a body that is not valid JSON: {exc}"
            ) from exc

        if not isinstance(data, dict):
            raise UpstreamServiceError(f"ipapi.co returned a JSON {type(data).__name__} instead of an object")
        return data

    def _normalize_payload(self, data: dict[str, Any]) -> Location:
        """Map ipapi.co's response into a `Location`.

        Latitude/longitude are passed through as-is; the model coerces them into floats.
        """
        return Location(
            ip=data.get("ip"),
            country_code=data.get("country_code") or data.get("country"),
            country_name=data.get("country_name"),
            region_code=data.get("region_code"),
            region_name=data.get("region"),
            city_name=data.get("city"),
            postal_code=data.get("postal"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            timezone=data.get("timezone"),
            # ipapi.co exposes organisation/ISP information via the "org" field.
            isp=data.get("org"),
            driver=self.name,
            error=False,
        )
