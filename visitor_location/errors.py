class AppError(Exception):
    """Base application error for the visitor location service."""


class LocationError(AppError):
    """Base error for failures surfaced by the location resolver."""


class InvalidAddressError(LocationError):
    """Raised when an explicitly supplied IP address is not valid IPv4 or IPv6."""

    def __init__(self, ip: str) -> None:
        self.ip = ip
        super().__init__(f"The IP address: {ip} is invalid")


class DriverNotFoundError(LocationError):
    """Raised when no driver is registered under the requested name."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"The driver: {driver}, does not exist. Check the configured driver names.")


class NoDriverAvailableError(LocationError):
    """Raised when the selected driver and every fallback failed for an IP."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"No location drivers are available. Last driver tried was: {driver}.")


class FieldNotFoundError(LocationError):
    """Raised when a location field that does not exist is requested."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Location field: {field} does not exist.")


class IpProviderError(AppError):
    """Base error for IP geolocation provider failures.

    These never leave a driver: `BaseDriver.get` turns them into errored records.
    """


class InvalidIpError(IpProviderError):
    """Raised when the provider rejects the IP address as syntactically invalid."""


class IpNotFoundError(IpProviderError):
    """Raised when no geolocation information is found for the IP."""


class UpstreamServiceError(IpProviderError):
    """Raised when the upstream IP provider or database fails."""
