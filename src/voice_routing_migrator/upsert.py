"""Idempotent upsert of source configuration into the target system.

Entity kinds are processed in dependency order: dialplans, PSTN usages,
voice routes, voice routing policies, then translation rules with their
gateway attachments. For every entity the target is queried by identity and
the entity is updated in place if it exists or created otherwise, so the
pipeline can safely be re-run against a partially populated target.

Optional fields without a source value are left out of the write payload.
Write failures are not caught here; they propagate and halt the run.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from .exceptions import DuplicateEntityError
from .identity import strip_scope_prefix
from .models import RuleSlot
from .translation_rules import TranslationRuleSynchronizer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .migrator import MigrationStats
    from .models import Dialplan, GatewayMapping, SourceSnapshot, TranslationRule, VoicePolicy, VoiceRoute
    from .protocols import TargetSystem

logger: logging.Logger = logging.getLogger(__name__)


def dialplan_fields(dialplan: Dialplan) -> dict[str, Any]:
    """Build the target payload for a dialplan.

    The identity loses its "Site:" prefix. The external access prefix is only
    sent when the source has one.
    """
    fields: dict[str, Any] = {
        "identity": strip_scope_prefix(dialplan.identity),
        "optimize_device_dialing": dialplan.optimize_device_dialing,
        "normalization_rules": [asdict(rule) for rule in dialplan.normalization_rules],
    }
    if dialplan.description:
        fields["description"] = dialplan.description
    if dialplan.external_access_prefix:
        fields["external_access_prefix"] = dialplan.external_access_prefix
    return fields


def translate_route_gateways(route: VoiceRoute, mapping: GatewayMapping) -> list[str]:
    """Map the gateway references of a route to target gateway identities.

    Unmatched gateways are dropped. Order is kept and duplicates are not removed.
    """
    gateways: list[str] = []
    for ref in route.gateways:
        target_gateway = mapping.resolve(ref.name)
        if target_gateway is None:
            logger.debug(f"Route {route.identity}: gateway {ref.name} is unmatched, dropping it")
            continue
        gateways.append(target_gateway)
    return gateways


def voice_route_fields(route: VoiceRoute, mapping: GatewayMapping) -> dict[str, Any]:
    """Build the target payload for a voice route.

    The gateway list is omitted entirely when none of the route's gateways
    resolved to a target gateway.
    """
    fields: dict[str, Any] = {
        "identity": route.identity,
        "number_pattern": route.number_pattern,
        "priority": route.priority,
        "pstn_usages": list(route.pstn_usages),
    }
    if route.description:
        fields["description"] = route.description
    gateways = translate_route_gateways(route, mapping)
    if gateways:
        fields["online_pstn_gateways"] = gateways
    return fields


def voice_routing_policy_fields(policy: VoicePolicy) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "identity": strip_scope_prefix(policy.identity),
        "pstn_usages": list(policy.pstn_usages),
    }
    if policy.description:
        fields["description"] = policy.description
    return fields


class UpsertPipeline:
    """Writes a source snapshot into the target in dependency order."""

    def __init__(self, target: TargetSystem, mapping: GatewayMapping, stats: MigrationStats) -> None:
        self._target: TargetSystem = target
        self._mapping: GatewayMapping = mapping
        self._stats: MigrationStats = stats
        self.rule_synchronizer: TranslationRuleSynchronizer = TranslationRuleSynchronizer(target, mapping, stats)

    def run(self, snapshot: SourceSnapshot) -> None:
        self.upsert_dialplans(snapshot.dialplans)
        self.add_pstn_usages(snapshot.distinct_pstn_usages())
        self.upsert_voice_routes(snapshot.voice_routes)
        self.upsert_voice_routing_policies(snapshot.voice_policies)
        self.sync_translation_rules(snapshot.calling_rules, RuleSlot.CALLING)
        self.sync_translation_rules(snapshot.called_rules, RuleSlot.CALLED)

    def _upsert(
        self,
        kind: str,
        fields: dict[str, Any],
        get: Callable[[str], object | None],
        create: Callable[[dict[str, Any]], object],
        update: Callable[[dict[str, Any]], object],
    ) -> bool:
        """Create or update one entity. Returns True if it was created."""
        identity: str = fields["identity"]
        if get(identity) is None:
            create(fields)
            logger.debug(f"Created {kind} {identity}")
            return True
        update(fields)
        logger.debug(f"Updated {kind} {identity}")
        return False

    def upsert_dialplans(self, dialplans: Iterable[Dialplan]) -> None:
        print("Migrating dialplans...")
        for dialplan in dialplans:
            created = self._upsert(
                "dialplan",
                dialplan_fields(dialplan),
                self._target.get_dialplan,
                self._target.create_dialplan,
                self._target.update_dialplan,
            )
            if created:
                self._stats.dialplans_created += 1
            else:
                self._stats.dialplans_updated += 1

    def add_pstn_usages(self, names: Iterable[str]) -> None:
        print("Migrating PSTN usages...")
        for name in names:
            try:
                self._target.add_pstn_usage(name)
            except DuplicateEntityError:
                logger.warning(f"PSTN usage {name} already exists in target")
                continue
            logger.debug(f"Added PSTN usage {name}")
            self._stats.pstn_usages_added += 1

    def upsert_voice_routes(self, routes: Iterable[VoiceRoute]) -> None:
        print("Migrating voice routes...")
        for route in routes:
            fields = voice_route_fields(route, self._mapping)
            if route.gateways and "online_pstn_gateways" not in fields:
                logger.warning(f"Voice route {route.identity} has no matched gateway, migrating it without gateways")
            created = self._upsert(
                "voice route",
                fields,
                self._target.get_voice_route,
                self._target.create_voice_route,
                self._target.update_voice_route,
            )
            if created:
                self._stats.voice_routes_created += 1
            else:
                self._stats.voice_routes_updated += 1

    def upsert_voice_routing_policies(self, policies: Iterable[VoicePolicy]) -> None:
        print("Migrating voice routing policies...")
        for policy in policies:
            created = self._upsert(
                "voice routing policy",
                voice_routing_policy_fields(policy),
                self._target.get_voice_routing_policy,
                self._target.create_voice_routing_policy,
                self._target.update_voice_routing_policy,
            )
            if created:
                self._stats.voice_routing_policies_created += 1
            else:
                self._stats.voice_routing_policies_updated += 1

    def sync_translation_rules(self, rules: Iterable[TranslationRule], slot: RuleSlot) -> None:
        print(f"Migrating {slot.value.replace('_', ' ')} translation rules...")
        for rule in rules:
            self.rule_synchronizer.sync(rule, slot)
