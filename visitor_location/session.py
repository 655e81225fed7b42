from typing import Any, Protocol

from starlette.requests import Request

from visitor_location.models.location import Location

LOCATION_SESSION_KEY = "location"


class SessionStore(Protocol):
    """Per-visitor storage used to cache the resolved location."""

    def has(self, key: str) -> bool: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def forget(self, key: str) -> None: ...


class InMemorySession:
    """Dict-backed session, for scripts and tests that have no HTTP session."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = {} if data is None else data

    def has(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def forget(self, key: str) -> None:
        self.data.pop(key, None)


class RequestSession:
    """Adapter over Starlette's `request.session` (requires `SessionMiddleware`).

    The cookie session only holds JSON-compatible values, so `Location` records
    are stored as dicts and rebuilt on read.
    """

    def __init__(self, request: Request) -> None:
        self._session = request.session

    def has(self, key: str) -> bool:
        return key in self._session

    def get(self, key: str) -> Any:
        value = self._session.get(key)
        if key == LOCATION_SESSION_KEY and isinstance(value, dict):
            return Location.model_validate(value)
        return value

    def set(self, key: str, value: Any) -> None:
        if isinstance(value, Location):
            value = value.model_dump(mode="json")
        self._session[key] = value

    def forget(self, key: str) -> None:
        self._session.pop(key, None)
