"""
SourceSystem implementation on top of the voice administration REST API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .identity import GATEWAY_KIND, parse_reference, parse_rule_identity
from .models import Dialplan, EntityRef, NormalizationRule, TranslationRule, VoicePolicy, VoiceRoute

if TYPE_CHECKING:
    from .admin_api import AdminApiClient

logger: logging.Logger = logging.getLogger(__name__)

DIALPLANS_PATH: Final[str] = "/voice/dialplans"
VOICE_ROUTES_PATH: Final[str] = "/voice/routes"
PSTN_USAGES_PATH: Final[str] = "/voice/pstn-usages"
VOICE_POLICIES_PATH: Final[str] = "/voice/policies"
PSTN_GATEWAYS_PATH: Final[str] = "/voice/pstn-gateways"
CALLING_RULES_PATH: Final[str] = "/voice/translation-rules/outbound-calling"
CALLED_RULES_PATH: Final[str] = "/voice/translation-rules/outbound-called"


def normalization_rule_from_json(data: dict[str, Any]) -> NormalizationRule:
    return NormalizationRule(
        name=data.get("name", ""),
        pattern=data["pattern"],
        translation=data["translation"],
        description=data.get("description") or "",
        is_internal_extension=bool(data.get("isInternalExtension", False)),
    )


def dialplan_from_json(data: dict[str, Any]) -> Dialplan:
    return Dialplan(
        identity=data["identity"],
        description=data.get("description") or "",
        optimize_device_dialing=bool(data.get("optimizeDeviceDialing", False)),
        external_access_prefix=data.get("externalAccessPrefix") or None,
        normalization_rules=tuple(normalization_rule_from_json(rule) for rule in data.get("normalizationRules") or []),
    )


def _route_gateways(identity: str, references: list[str]) -> tuple[EntityRef, ...]:
    gateways: list[EntityRef] = []
    for reference in references:
        ref = parse_reference(reference)
        if ref is None:
            logger.debug(f"Route {identity}: gateway reference {reference!r} names no gateway, ignoring it")
            continue
        gateways.append(ref)
    return tuple(gateways)


def voice_route_from_json(data: dict[str, Any]) -> VoiceRoute:
    identity: str = data["identity"]
    return VoiceRoute(
        identity=identity,
        number_pattern=data.get("numberPattern", ""),
        priority=int(data.get("priority", 0)),
        pstn_usages=tuple(data.get("pstnUsages") or []),
        description=data.get("description") or "",
        gateways=_route_gateways(identity, data.get("pstnGatewayList") or []),
    )


def voice_policy_from_json(data: dict[str, Any]) -> VoicePolicy:
    return VoicePolicy(
        identity=data["identity"],
        pstn_usages=tuple(data.get("pstnUsages") or []),
        description=data.get("description") or "",
    )


def translation_rule_from_json(data: dict[str, Any]) -> TranslationRule:
    """Build a rule, parsing its owning gateway from the identity.

    Rules defined at global or site scope (``Global/...``, ``Site:HQ/...``)
    belong to no gateway.
    """
    identity: str = data["identity"]
    owner = parse_rule_identity(identity)
    return TranslationRule(
        identity=identity,
        name=data.get("name") or (owner.suffix if owner else identity),
        pattern=data["pattern"],
        translation=data["translation"],
        description=data.get("description") or "",
        gateway=owner if owner is not None and owner.kind == GATEWAY_KIND else None,
    )


class AdminApiSource:
    """Reads voice routing configuration from the source domain."""

    def __init__(self, client: AdminApiClient) -> None:
        self._client: AdminApiClient = client

    def validate_access(self) -> None:
        self._client.validate_access("Source")

    def list_dialplans(self) -> list[Dialplan]:
        return [dialplan_from_json(item) for item in self._client.list_all(DIALPLANS_PATH)]

    def list_voice_routes(self) -> list[VoiceRoute]:
        return [voice_route_from_json(item) for item in self._client.list_all(VOICE_ROUTES_PATH)]

    def list_pstn_usage_names(self) -> list[str]:
        return [str(name) for name in self._client.list_all(PSTN_USAGES_PATH)]

    def list_voice_policies(self) -> list[VoicePolicy]:
        return [voice_policy_from_json(item) for item in self._client.list_all(VOICE_POLICIES_PATH)]

    def list_pstn_gateway_addresses(self) -> list[str]:
        return [item["address"] for item in self._client.list_all(PSTN_GATEWAYS_PATH)]

    def list_outbound_calling_translation_rules(self) -> list[TranslationRule]:
        return [translation_rule_from_json(item) for item in self._client.list_all(CALLING_RULES_PATH)]

    def list_outbound_called_translation_rules(self) -> list[TranslationRule]:
        return [translation_rule_from_json(item) for item in self._client.list_all(CALLED_RULES_PATH)]
