"""
TargetSystem implementation on top of the voice administration REST API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .admin_api import camelize, entity_path
from .exceptions import AdminApiError, EntityNotFoundError
from .models import Gateway
from .source import dialplan_from_json, translation_rule_from_json, voice_policy_from_json, voice_route_from_json

if TYPE_CHECKING:
    from .admin_api import AdminApiClient
    from .models import Dialplan, RuleSlot, TranslationRule, VoicePolicy, VoiceRoute

logger: logging.Logger = logging.getLogger(__name__)

DIALPLANS_PATH: Final[str] = "/voice/dialplans"
VOICE_ROUTES_PATH: Final[str] = "/voice/routes"
ROUTING_POLICIES_PATH: Final[str] = "/voice/routing-policies"
TRANSLATION_RULES_PATH: Final[str] = "/voice/translation-rules"
PSTN_USAGES_PATH: Final[str] = "/voice/pstn-usages"
GATEWAYS_PATH: Final[str] = "/voice/gateways"


def gateway_from_json(data: dict[str, Any]) -> Gateway:
    return Gateway(identity=data["identity"], enabled=bool(data.get("enabled", True)))


def gateway_rules_path(gateway: str, slot: RuleSlot) -> str:
    return f"{entity_path(GATEWAYS_PATH, gateway)}/translation-rules/{slot.value}"


class AdminApiTarget:
    """Reads and writes voice routing configuration in the target domain."""

    def __init__(self, client: AdminApiClient) -> None:
        self._client: AdminApiClient = client

    def validate_access(self) -> None:
        self._client.validate_access("Target")

    def _get(self, collection: str, identity: str) -> dict[str, Any] | None:
        return self._client.get(entity_path(collection, identity))

    def _create(self, collection: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        return self._client.post(collection, camelize(fields))

    def _update(self, collection: str, fields: dict[str, Any]) -> None:
        self._client.patch(entity_path(collection, fields["identity"]), camelize(fields))

    def _delete_all(self, collection: str) -> None:
        for item in self._client.list_all(collection):
            identity: str = item["identity"]
            try:
                self._client.delete(entity_path(collection, identity))
            except EntityNotFoundError:
                logger.debug(f"{collection}: {identity} was already gone")
            else:
                logger.debug(f"{collection}: deleted {identity}")

    # Dialplans
    def get_dialplan(self, identity: str) -> Dialplan | None:
        data = self._get(DIALPLANS_PATH, identity)
        return dialplan_from_json(data) if data else None

    def create_dialplan(self, fields: dict[str, Any]) -> None:
        self._create(DIALPLANS_PATH, fields)

    def update_dialplan(self, fields: dict[str, Any]) -> None:
        self._update(DIALPLANS_PATH, fields)

    def delete_all_dialplans(self) -> None:
        self._delete_all(DIALPLANS_PATH)

    # Voice routes
    def get_voice_route(self, identity: str) -> VoiceRoute | None:
        data = self._get(VOICE_ROUTES_PATH, identity)
        return voice_route_from_json(data) if data else None

    def create_voice_route(self, fields: dict[str, Any]) -> None:
        self._create(VOICE_ROUTES_PATH, fields)

    def update_voice_route(self, fields: dict[str, Any]) -> None:
        self._update(VOICE_ROUTES_PATH, fields)

    def delete_all_voice_routes(self) -> None:
        self._delete_all(VOICE_ROUTES_PATH)

    # Voice routing policies
    def get_voice_routing_policy(self, identity: str) -> VoicePolicy | None:
        data = self._get(ROUTING_POLICIES_PATH, identity)
        return voice_policy_from_json(data) if data else None

    def create_voice_routing_policy(self, fields: dict[str, Any]) -> None:
        self._create(ROUTING_POLICIES_PATH, fields)

    def update_voice_routing_policy(self, fields: dict[str, Any]) -> None:
        self._update(ROUTING_POLICIES_PATH, fields)

    def delete_all_voice_routing_policies(self) -> None:
        self._delete_all(ROUTING_POLICIES_PATH)

    # Translation rules
    def get_translation_rule(self, identity: str) -> TranslationRule | None:
        data = self._get(TRANSLATION_RULES_PATH, identity)
        return translation_rule_from_json(data) if data else None

    def create_translation_rule(self, fields: dict[str, Any]) -> TranslationRule:
        data = self._create(TRANSLATION_RULES_PATH, fields)
        if not data:
            # Some deployments answer 204; the rule is then addressed by the name we chose
            data = camelize(fields)
        return translation_rule_from_json(data)

    def update_translation_rule(self, fields: dict[str, Any]) -> None:
        self._update(TRANSLATION_RULES_PATH, fields)

    def delete_all_translation_rules(self) -> None:
        self._delete_all(TRANSLATION_RULES_PATH)

    # PSTN usages
    def add_pstn_usage(self, name: str) -> None:
        self._client.post(PSTN_USAGES_PATH, {"name": name})

    def clear_pstn_usages(self) -> None:
        self._client.delete(PSTN_USAGES_PATH)

    # Gateways
    def list_gateways(self) -> list[Gateway]:
        return [gateway_from_json(item) for item in self._client.list_all(GATEWAYS_PATH)]

    def get_gateway(self, identity: str) -> Gateway | None:
        data = self._get(GATEWAYS_PATH, identity)
        return gateway_from_json(data) if data else None

    def create_gateway(self, identity: str | None = None) -> Gateway:
        payload = {"identity": identity} if identity else {}
        data = self._client.post(GATEWAYS_PATH, payload)
        if not data:
            msg = f"Gateway creation returned no gateway (requested identity: {identity or 'generated'})"
            raise AdminApiError(msg)
        return gateway_from_json(data)

    def add_gateway_translation_rule(self, gateway: str, slot: RuleSlot, rule_id: str) -> None:
        self._client.post(gateway_rules_path(gateway, slot), {"ruleId": rule_id})

    def clear_gateway_translation_rules(self, gateway: str, slot: RuleSlot) -> None:
        self._client.delete(gateway_rules_path(gateway, slot))
