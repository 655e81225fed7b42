import os
from collections.abc import Mapping, Sequence
from ipaddress import ip_address

from starlette.requests import Request

from visitor_location.config import Settings
from visitor_location.errors import InvalidAddressError
from visitor_location.logger import logger


def environ_from_request(request: Request) -> dict[str, str]:
    """Build a CGI-style environment for `request`.

    Every header becomes `HTTP_<NAME>` (e.g. `X-Forwarded-For` -> `HTTP_X_FORWARDED_FOR`)
    and the socket peer address becomes `REMOTE_ADDR`.
    """
    environ = {f"HTTP_{name.upper().replace('-', '_')}": value for name, value in request.headers.items()}
    if request.client and request.client.host:
        environ["REMOTE_ADDR"] = request.client.host
    return environ


class IpResolver:
    """Determine which IP address a lookup should use.

    - An explicit IP is validated and returned unchanged.
    - Otherwise, in local testing mode, the configured testing IP is returned as-is.
    - Otherwise `sources` are read from `environ` in order and the first non-empty
      value wins; `settings.default_ip` is used when none is present.
    """

    def __init__(
        self,
        settings: Settings,
        environ: Mapping[str, str] | None = None,
        sources: Sequence[str] | None = None,
    ) -> None:
        self._settings = settings
        self._environ = os.environ if environ is None else environ
        self._sources = tuple(settings.ip_sources if sources is None else sources)

    @property
    def sources(self) -> tuple[str, ...]:
        return self._sources

    def resolve(self, explicit_ip: str | None = None) -> str:
        if explicit_ip:
            return self.validate(explicit_ip)

        if self._settings.localhost_testing:
            return self._settings.localhost_testing_ip

        return self.detect()

    @staticmethod
    def validate(ip: str) -> str:
        """Return `ip` if it is a valid IPv4 or IPv6 address, raise InvalidAddressError otherwise."""
        try:
            ip_address(ip)
        except ValueError as exc:
            raise InvalidAddressError(ip) from exc
        return ip

    def detect(self) -> str:
        for source in self._sources:
            value = (self._environ.get(source) or "").strip()
            if not value:
                continue
            # Proxy chains list the originating client first: "client, proxy1, proxy2".
            client_ip = value.split(",")[0].strip()
            logger.debug(f"Detected client IP source={source} ip={client_ip}")
            return client_ip

        logger.debug(f"No client IP found in sources={list(self._sources)}, using default_ip={self._settings.default_ip}")
        return self._settings.default_ip
