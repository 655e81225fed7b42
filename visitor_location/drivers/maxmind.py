"""Driver backed by a local MaxMind GeoLite2/GeoIP2 City database.

Lookups never leave the machine: the `.mmdb` file is opened with `geoip2` and
queried directly. The database file is not shipped with the project, download it
from your MaxMind account and point `LOCATION_MAXMIND_DATABASE_PATH` at it.
"""

from pathlib import Path

import geoip2.database
import maxminddb
from geoip2.errors import AddressNotFoundError

from visitor_location.config import Settings
from visitor_location.drivers.base import BaseDriver
from visitor_location.errors import InvalidIpError, IpNotFoundError, UpstreamServiceError
from visitor_location.models.location import Location


class MaxMind(BaseDriver):
    """Driver for a local MaxMind City database."""

    name = "MaxMind"

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self.db_path = Path(settings.maxmind_database_path)

    async def _lookup(self, ip: str) -> Location:
        if not self.db_path.exists():
            raise UpstreamServiceError(f"MaxMind database not found at {self.db_path}")

        try:
            with geoip2.database.Reader(str(self.db_path)) as reader:
                response = reader.city(ip)
        except AddressNotFoundError as exc:
            # Private, loopback and unallocated addresses are not in the database.
            raise IpNotFoundError(str(exc)) from exc
        except ValueError as exc:
            raise InvalidIpError(f"Invalid IP address format: {ip}") from exc
        except (OSError, maxminddb.InvalidDatabaseError) as exc:
            raise UpstreamServiceError(f"Failed to read MaxMind database {self.db_path}: {exc}") from exc

        subdivision = response.subdivisions.most_specific
        return Location(
            ip=ip,
            country_code=response.country.iso_code,
            country_name=response.country.name,
            region_code=subdivision.iso_code,
            region_name=subdivision.name,
            city_name=response.city.name,
            postal_code=response.postal.code,
            latitude=response.location.latitude,
            longitude=response.location.longitude,
            timezone=response.location.time_zone,
            driver=self.name,
            error=False,
        )
