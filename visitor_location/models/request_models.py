from pydantic import BaseModel, Field, field_validator


class LocationRequest(BaseModel):
    """Request model for a location lookup via query parameters.

    If `ip` is provided, the service will look up that explicit IP address.
    If `ip` is omitted or blank, the visitor's IP address is detected from the request.
    The address itself is validated by the resolver, only when the visitor's session
    has no cached location yet.

    If `field` is provided, only that attribute of the location is returned.
    """

    ip: str | None = Field(
        default=None,
        description="IPv4 or IPv6 address to look up. If omitted, the client's IP is used.",
        examples=["8.8.8.8", "2001:4860:4860::8888"],
    )
    field: str | None = Field(
        default=None,
        description="Return only this location attribute.",
        examples=["country_code", "city_name"],
    )

    @field_validator("ip", "field", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return str(value).strip() or None


class LocationIsRequest(BaseModel):
    """Request model for matching a value against the visitor's location."""

    value: str = Field(
        min_length=1,
        description="Value compared case-insensitively with every location attribute.",
        examples=["US", "Berlin"],
    )


class CountryListRequest(BaseModel):
    """Request model for the country list."""

    value: str | None = Field(default=None, description="Key field: country_code or country_name.")
    name: str | None = Field(default=None, description="Value field: country_code or country_name.")
