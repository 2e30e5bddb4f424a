"""
Translation rule synchronization and gateway attachment.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import DuplicateEntityError
from .models import GatewayAttachments

if TYPE_CHECKING:
    from .migrator import MigrationStats
    from .models import GatewayMapping, RuleSlot, TranslationRule
    from .protocols import TargetSystem

logger: logging.Logger = logging.getLogger(__name__)


def rules_match(existing: TranslationRule, rule: TranslationRule) -> bool:
    """Return True if two rules translate numbers identically."""
    return existing.pattern == rule.pattern and existing.translation == rule.translation


def disambiguated_rule_name(name: str, target_gateway: str) -> str:
    """Name used when a different rule already holds ``name`` in the target."""
    return f"{name}_{target_gateway}"


def translation_rule_fields(rule: TranslationRule, name: str) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "identity": name,
        "name": name,
        "pattern": rule.pattern,
        "translation": rule.translation,
    }
    if rule.description:
        fields["description"] = rule.description
    return fields


class TranslationRuleSynchronizer:
    """Creates or reuses target translation rules and attaches them to gateways.

    Target rules are global and identified by name. For a source rule named N:

    - an existing target rule N with the same pattern and translation is reused
      without any write;
    - an existing target rule N with different content is left untouched and
      the source rule is stored as ``N_<target gateway>`` instead;
    - otherwise a new rule N is created.

    The resulting rule is then added to the calling or called slot of the
    target gateway that owns it. Attachment is additive and each
    (gateway, slot, rule) attachment is issued at most once per run. A rule
    the target reports as already attached (left by an earlier run) counts
    as attached.
    """

    def __init__(
        self,
        target: TargetSystem,
        mapping: GatewayMapping,
        stats: MigrationStats,
        attachments: GatewayAttachments | None = None,
    ) -> None:
        self._target: TargetSystem = target
        self._mapping: GatewayMapping = mapping
        self._stats: MigrationStats = stats
        self.attachments: GatewayAttachments = attachments if attachments is not None else GatewayAttachments()

    def sync(self, rule: TranslationRule, slot: RuleSlot) -> str | None:
        """Synchronize one source rule and attach it to its gateway.

        Returns:
            The identity of the target rule, or None if the rule was skipped
            because its owning gateway has no target counterpart.
        """
        if rule.gateway is None:
            logger.warning(f"Skipping translation rule {rule.identity}: identity does not name a gateway")
            self._stats.translation_rules_skipped += 1
            return None

        target_gateway = self._mapping.resolve(rule.gateway.name)
        if target_gateway is None:
            logger.warning(
                f"Skipping translation rule {rule.identity}: gateway {rule.gateway.name} has no target gateway"
            )
            self._stats.translation_rules_skipped += 1
            return None

        rule_id = self._ensure_rule(rule, target_gateway)
        self._attach(target_gateway, slot, rule_id)
        return rule_id

    def _ensure_rule(self, rule: TranslationRule, target_gateway: str) -> str:
        existing = self._target.get_translation_rule(rule.name)
        if existing is None:
            return self._create(rule, rule.name)

        if rules_match(existing, rule):
            logger.debug(f"Translation rule {rule.name} already present in target")
            self._stats.translation_rules_reused += 1
            return existing.identity

        name = disambiguated_rule_name(rule.name, target_gateway)
        logger.info(f"Translation rule {rule.name} differs from the target rule of that name, using {name}")

        alternate = self._target.get_translation_rule(name)
        if alternate is None:
            self._stats.translation_rules_disambiguated += 1
            return self._create(rule, name)
        if rules_match(alternate, rule):
            self._stats.translation_rules_reused += 1
            return alternate.identity

        self._target.update_translation_rule(translation_rule_fields(rule, name))
        logger.debug(f"Updated translation rule {name}")
        self._stats.translation_rules_updated += 1
        return alternate.identity

    def _create(self, rule: TranslationRule, name: str) -> str:
        created = self._target.create_translation_rule(translation_rule_fields(rule, name))
        logger.debug(f"Created translation rule {created.identity}")
        self._stats.translation_rules_created += 1
        return created.identity

    def _attach(self, gateway: str, slot: RuleSlot, rule_id: str) -> None:
        if not self.attachments.add(gateway, slot, rule_id):
            logger.debug(f"Rule {rule_id} already attached to {gateway} ({slot})")
            return
        try:
            self._target.add_gateway_translation_rule(gateway, slot, rule_id)
        except DuplicateEntityError:
            logger.debug(f"Rule {rule_id} was already attached to {gateway} ({slot}) in the target")
            return
        logger.debug(f"Attached rule {rule_id} to {gateway} ({slot})")
        self._stats.translation_rule_attachments += 1
