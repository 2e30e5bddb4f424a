"""
Identity normalization and composite identity parsing.
"""

from __future__ import annotations

import re
from typing import Final

from .models import EntityRef

SCOPE_PREFIX: Final[str] = "Site:"
GATEWAY_KIND: Final[str] = "PstnGateway"

_SCOPE_PREFIX_RE: Final = re.compile(rf"^(?:{re.escape(SCOPE_PREFIX)})+")
# <Kind>:<name>, e.g. "PstnGateway:gw1.example.com"
_REFERENCE_RE: Final = re.compile(r"^(?P<kind>[^:/]+):(?P<name>[^/]+)$")
# <Kind>:<name>/<suffix>, e.g. "PstnGateway:gw1.example.com/StripPlus"
_RULE_IDENTITY_RE: Final = re.compile(r"^(?P<kind>[^:/]+):(?P<name>[^/]+)/(?P<suffix>.+)$")


def strip_scope_prefix(identity: str) -> str:
    """Remove a leading "Site:" scope marker from an identity.

    Identities without the marker are returned unchanged. Two differently
    scoped identities may normalize to the same name; no attempt is made to
    merge them.
    """
    return _SCOPE_PREFIX_RE.sub("", identity)


def parse_reference(ref: str) -> EntityRef | None:
    """Parse ``<Kind>:<name>`` into an EntityRef, or None if the marker is absent."""
    match = _REFERENCE_RE.match(ref.strip())
    if not match:
        return None
    return EntityRef(kind=match["kind"], name=match["name"])


def parse_rule_identity(identity: str) -> EntityRef | None:
    """Parse ``<Kind>:<name>/<suffix>`` into an EntityRef, or None if it has no such structure."""
    match = _RULE_IDENTITY_RE.match(identity.strip())
    if not match:
        return None
    return EntityRef(kind=match["kind"], name=match["name"], suffix=match["suffix"])


def extract_gateway_from_route_reference(ref: str) -> str | None:
    """Return the gateway name of a route gateway reference such as ``PstnGateway:gw1``."""
    parsed = parse_reference(ref)
    return parsed.name if parsed else None


def extract_gateway_from_rule_identity(identity: str) -> str | None:
    """Return the gateway name embedded in a translation rule identity.

    >>> extract_gateway_from_rule_identity("PstnGateway:gw1.example.com/StripPlus")
    'gw1.example.com'
    """
    parsed = parse_rule_identity(identity)
    return parsed.name if parsed else None
