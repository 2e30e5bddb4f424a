"""
Connection settings for the source and target administrative systems.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Final, Literal

from . import utils
from .exceptions import ConfigurationError

logger: logging.Logger = logging.getLogger(__name__)

Side = Literal["source", "target"]

_TOKEN_ENV_VARS: Final[dict[str, str]] = {
    "source": "SOURCE_ADMIN_TOKEN",  # noqa: S105
    "target": "TARGET_ADMIN_TOKEN",  # noqa: S105
}
_URL_ENV_VARS: Final[dict[str, str]] = {
    "source": "SOURCE_ADMIN_URL",
    "target": "TARGET_ADMIN_URL",
}
_DEFAULT_TOKEN_PASS_PATHS: Final[dict[str, str]] = {
    "source": "voice/source/token",  # noqa: S105
    "target": "voice/target/token",  # noqa: S105
}


@dataclass(frozen=True)
class ConnectionSettings:
    """Everything needed to open a session with one administrative system."""

    base_url: str
    token: str
    admin_domain: str | None = None


def get_token(side: Side, pass_path: str | None = None) -> str | None:
    """Get an API token from pass path, environment variable, or default pass location."""
    # Try pass path first
    if pass_path:
        return utils.get_pass_value(pass_path)

    token: str | None = os.environ.get(_TOKEN_ENV_VARS[side])
    if token:
        return token

    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATHS[side])
    except utils.PassError:
        logger.warning(f"No {side} token specified nor found")
        return None


def get_base_url(side: Side, url: str | None = None) -> str | None:
    return url or os.environ.get(_URL_ENV_VARS[side]) or None


def load_settings(
    side: Side,
    *,
    url: str | None = None,
    pass_path: str | None = None,
    admin_domain: str | None = None,
) -> ConnectionSettings:
    """Resolve the connection settings of one side.

    Raises:
        ConfigurationError: If the base URL or token cannot be determined
    """
    base_url = get_base_url(side, url)
    if not base_url:
        msg = f"No {side} URL given. Use --{side}-url or set {_URL_ENV_VARS[side]}."
        raise ConfigurationError(msg)

    try:
        token = get_token(side, pass_path)
    except (utils.PassError, ValueError) as e:
        msg = f"Could not read the {side} token: {e}"
        raise ConfigurationError(msg) from e
    if not token:
        msg = (
            f"No {side} token found. Use --{side}-pass-token, set {_TOKEN_ENV_VARS[side]}, "
            f"or store it in pass at '{_DEFAULT_TOKEN_PASS_PATHS[side]}'."
        )
        raise ConfigurationError(msg)

    return ConnectionSettings(base_url=base_url.rstrip("/"), token=token, admin_domain=admin_domain)
