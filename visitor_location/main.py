from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware

from visitor_location.config import Settings, get_settings
from visitor_location.drivers.factory import DriverFactory
from visitor_location.errors import (
    DriverNotFoundError,
    FieldNotFoundError,
    InvalidAddressError,
    NoDriverAvailableError,
)
from visitor_location.exception_handlers import (
    driver_not_found_exception_handler,
    pydantic_validation_exception_handler,
    unhandled_exception_handler,
)
from visitor_location.ip_resolver import IpResolver, environ_from_request
from visitor_location.location import LocationResolver
from visitor_location.logger import logger
from visitor_location.models.request_models import CountryListRequest, LocationIsRequest, LocationRequest
from visitor_location.models.response_models import (
    CountryListResponse,
    HealthResponse,
    LocationFieldResponse,
    LocationIsResponse,
    LocationResponse,
)
from visitor_location.session import RequestSession

settings = get_settings()

app = FastAPI(
    title="Visitor Location Service",
    version="0.1.0",
    description="Resolves a visitor's approximate location from their IP address.",
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    max_age=settings.session_max_age_seconds,
)
logger.info(
    "Started Visitor Location Service "
    f"selected_driver={settings.selected_driver} fallbacks={settings.selected_driver_fallbacks}"
)


def get_driver_factory(settings: Annotated[Settings, Depends(get_settings)]) -> DriverFactory:
    """Dependency to provide a DriverFactory instance."""
    return DriverFactory(settings)


def get_location_resolver(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    driver_factory: Annotated[DriverFactory, Depends(get_driver_factory)],
) -> LocationResolver:
    """Dependency to provide a LocationResolver bound to the visitor's session and request."""
    return LocationResolver(
        settings,
        RequestSession(request),
        driver_factory=driver_factory,
        ip_resolver=IpResolver(settings, environ=environ_from_request(request)),
    )


app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(DriverNotFoundError, driver_not_found_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get(
    "/v1/location",
    status_code=status.HTTP_200_OK,
    tags=["location"],
    summary="Look up the visitor's location.",
)
async def get_location(
    request: Request,
    query: Annotated[LocationRequest, Depends()],
    resolver: Annotated[LocationResolver, Depends(get_location_resolver)],
) -> LocationResponse | LocationFieldResponse:
    """Look up the location of either a specific IP or the caller's IP.

    - If `query.ip` is provided, that IP is used, otherwise it is detected from
      the request headers and the client address.
    - The first successful lookup is cached in the visitor's session and returned
      for every later request of that session.
    - If `query.field` is provided, only that attribute is returned.
    """
    ip = query.ip
    field = query.field
    logger.info(f"Location lookup path={request.url.path} method={request.method} ip={ip} field={field}")

    try:
        result = await resolver.get(ip, field)
    except InvalidAddressError as exc:
        logger.error(f"Invalid IP for location lookup path={request.url.path} ip={exc.ip} error={exc}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_ip", "message": str(exc)},
        ) from exc
    except FieldNotFoundError as exc:
        logger.error(f"Unknown location field path={request.url.path} field={exc.field}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "field_not_found", "message": str(exc)},
        ) from exc
    except NoDriverAvailableError as exc:
        logger.exception(f"No location driver available path={request.url.path} ip={ip} last_driver={exc.driver}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "no_driver_available", "message": str(exc), "driver": exc.driver},
        ) from exc

    if field is not None:
        return LocationFieldResponse(field=field, value=result)

    return LocationResponse(**result.model_dump(exclude={"error", "error_message"}))


@app.get(
    "/v1/location/is",
    response_model=LocationIsResponse,
    status_code=status.HTTP_200_OK,
    tags=["location"],
    summary="Check whether any attribute of the visitor's location equals a value.",
)
async def location_is(
    request: Request,
    query: Annotated[LocationIsRequest, Depends()],
    resolver: Annotated[LocationResolver, Depends(get_location_resolver)],
) -> LocationIsResponse:
    try:
        match = await resolver.is_(query.value)
    except NoDriverAvailableError as exc:
        logger.exception(f"No location driver available path={request.url.path} last_driver={exc.driver}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "no_driver_available", "message": str(exc), "driver": exc.driver},
        ) from exc

    return LocationIsResponse(value=query.value, match=match)


@app.get(
    "/v1/countries",
    response_model=CountryListResponse,
    status_code=status.HTTP_200_OK,
    tags=["countries"],
    summary="List countries keyed by code or name.",
)
async def countries(
    query: Annotated[CountryListRequest, Depends()],
    resolver: Annotated[LocationResolver, Depends(get_location_resolver)],
) -> CountryListResponse:
    try:
        return CountryListResponse(countries=resolver.lists(query.value, query.name))
    except FieldNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "field_not_found", "message": str(exc)},
        ) from exc
