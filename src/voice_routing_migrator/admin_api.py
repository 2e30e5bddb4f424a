"""
HTTP client for the voice administration REST API.

Both the source and the target domain expose the same JSON API: collections
under ``/voice/...`` returning ``{"value": [...], "nextLink": ...}`` pages,
camelCase field names, and entities addressed by their URL-quoted identity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import quote

import requests

from .exceptions import AdminApiError, DuplicateEntityError, EntityNotFoundError, MigrationError

if TYPE_CHECKING:
    from .config import ConnectionSettings

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Final[tuple[int, int]] = (5, 60)
ADMIN_DOMAIN_HEADER: Final[str] = "X-Admin-Domain"
SESSION_PATH: Final[str] = "/session"


def to_camel(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part.capitalize() for part in rest)


def camelize(value: Any) -> Any:  # noqa: ANN401 - arbitrary JSON
    """Convert the keys of a payload (recursively) from snake_case to camelCase."""
    if isinstance(value, dict):
        return {to_camel(key): camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [camelize(item) for item in value]
    return value


def entity_path(collection: str, identity: str) -> str:
    return f"{collection}/{quote(identity, safe='')}"


def get_session(settings: ConnectionSettings) -> requests.Session:
    """Create an authenticated session for one administrative system."""
    session = requests.Session()
    session.headers.update(
        {
            "Authorization": f"Bearer {settings.token}",
            "Accept": "application/json",
        }
    )
    if settings.admin_domain:
        session.headers[ADMIN_DOMAIN_HEADER] = settings.admin_domain
    return session


class AdminApiClient:
    """Thin wrapper around requests that maps HTTP failures to AdminApiError."""

    def __init__(
        self,
        settings: ConnectionSettings,
        session: requests.Session | None = None,
        timeout: tuple[int, int] = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url: str = settings.base_url
        self._session: requests.Session = session if session is not None else get_session(settings)
        self._timeout: tuple[int, int] = timeout

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    def request(
        self,
        method: str,
        path: str,
        *,
        payload: Any = None,  # noqa: ANN401 - arbitrary JSON
        params: dict[str, str] | None = None,
    ) -> requests.Response:
        try:
            response = self._session.request(
                method, self._url(path), json=payload, params=params, timeout=self._timeout
            )
        except requests.RequestException as e:
            msg = f"{method} {path} failed: {e}"
            raise AdminApiError(msg) from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        if response.ok:
            return response

        detail = response.text[:300]
        msg = f"{method} {path} returned {response.status_code}: {detail}"
        if response.status_code == 404:
            raise EntityNotFoundError(msg, response.status_code)
        if response.status_code == 409:
            raise DuplicateEntityError(msg, response.status_code)
        raise AdminApiError(msg, response.status_code)

    def get(self, path: str) -> dict[str, Any] | None:
        """GET a single entity, returning None if it does not exist."""
        try:
            response = self.request("GET", path)
        except EntityNotFoundError:
            return None
        return response.json()

    def list_all(self, path: str) -> list[Any]:
        """GET every item of a collection, following ``nextLink`` pages."""
        items: list[Any] = []
        next_path: str | None = path
        while next_path:
            page = self.request("GET", next_path).json()
            items.extend(page.get("value", []))
            next_path = page.get("nextLink")
        return items

    def post(self, path: str, payload: Any = None) -> dict[str, Any] | None:  # noqa: ANN401
        response = self.request("POST", path, payload=payload)
        return response.json() if response.content else None

    def patch(self, path: str, payload: Any) -> None:  # noqa: ANN401
        self.request("PATCH", path, payload=payload)

    def delete(self, path: str) -> None:
        self.request("DELETE", path)

    def validate_access(self, system: str) -> None:
        """Check that the session is accepted, raising MigrationError otherwise."""
        try:
            self.request("GET", SESSION_PATH)
        except AdminApiError as e:
            msg = f"{system} API access failed: {e}"
            raise MigrationError(msg) from e
        logger.info(f"{system} API access validated")
