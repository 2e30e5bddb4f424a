"""Migration orchestrator that coordinates source and target systems.

Migration Flow
--------------
Phase 1: Preparation
    - Validate API access to both source and target. A failure here is
      fatal and happens before any read or write.
    - Read the complete source configuration once (SourceSnapshot).
    - Unless existing target configuration is kept, ask the operator to
      confirm erasing it. Declining aborts the run before any write.

Phase 2: Gateway reconciliation
    - Resolve every distinct source gateway to a target gateway, or to
      UNMATCHED, automatically or by asking the operator.

Phase 3: Erase (optional)
    - Delete target dialplans, routes, routing policies, PSTN usages and
      translation rules, and empty the rule slots of every gateway.

Phase 4: Upsert
    - Dialplans, PSTN usages, voice routes, voice routing policies and
      translation rules are created or updated in that order.

Error Handling
--------------
Nothing is rolled back. Entities written before a failure stay written,
and re-running the migration with ``keep_existing`` updates them in place.
The run is sequential; concurrent runs against the same target can race on
the global PSTN usage list and on gateway rule attachments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from .eraser import confirm_erase, erase_target
from .gateways import GatewayReconciler
from .models import SourceSnapshot
from .upsert import UpsertPipeline

if TYPE_CHECKING:
    from .models import GatewayMapping
    from .protocols import OperatorPrompt, SourceSystem, TargetSystem

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    gateways_auto_matched: int = 0
    gateways_manually_matched: int = 0
    gateways_created: int = 0
    gateways_unmatched: int = 0
    dialplans_created: int = 0
    dialplans_updated: int = 0
    pstn_usages_added: int = 0
    voice_routes_created: int = 0
    voice_routes_updated: int = 0
    voice_routing_policies_created: int = 0
    voice_routing_policies_updated: int = 0
    translation_rules_created: int = 0
    translation_rules_updated: int = 0
    translation_rules_reused: int = 0
    translation_rules_disambiguated: int = 0
    translation_rules_skipped: int = 0
    translation_rule_attachments: int = 0

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class MigrationResult:
    """Result of a migration run."""

    success: bool
    stats: MigrationStats
    gateway_mapping: GatewayMapping
    erased: bool = False
    warnings: list[str] = field(default_factory=list)


def read_snapshot(source: SourceSystem) -> SourceSnapshot:
    """Read all source configuration once."""
    print("Reading source configuration...")
    snapshot = SourceSnapshot(
        dialplans=source.list_dialplans(),
        voice_routes=source.list_voice_routes(),
        pstn_usages=source.list_pstn_usage_names(),
        voice_policies=source.list_voice_policies(),
        gateway_addresses=source.list_pstn_gateway_addresses(),
        calling_rules=source.list_outbound_calling_translation_rules(),
        called_rules=source.list_outbound_called_translation_rules(),
    )
    logger.info(
        f"Read {len(snapshot.dialplans)} dialplans, {len(snapshot.voice_routes)} voice routes, "
        f"{len(snapshot.voice_policies)} voice policies, {len(snapshot.pstn_usages)} PSTN usages, "
        f"{len(snapshot.gateway_addresses)} gateways and {len(snapshot.translation_rules())} translation rules"
    )
    return snapshot


class VoiceRoutingMigrator:
    """Orchestrates migration of voice routing configuration.

    Usage:
        source = AdminApiSource(source_client)
        target = AdminApiTarget(target_client)
        migrator = VoiceRoutingMigrator(source, target, ConsolePrompt())
        result = migrator.migrate()
    """

    def __init__(
        self,
        source: SourceSystem,
        target: TargetSystem,
        prompt: OperatorPrompt,
        *,
        keep_existing: bool = False,
    ) -> None:
        self._source: SourceSystem = source
        self._target: TargetSystem = target
        self._prompt: OperatorPrompt = prompt
        self.keep_existing: bool = keep_existing

    def migrate(self) -> MigrationResult:
        """Execute the full migration.

        Raises:
            MigrationError: If access validation fails or a write is rejected
            UserCancelledError: If the operator declines erasing the target or
                stops answering during gateway matching
        """
        self._source.validate_access()
        self._target.validate_access()

        snapshot = read_snapshot(self._source)

        if not self.keep_existing:
            confirm_erase(self._prompt)

        stats = MigrationStats()

        print("Matching gateways...")
        reconciler = GatewayReconciler(self._target, self._prompt, stats)
        mapping = reconciler.reconcile(snapshot.distinct_gateways())

        if not self.keep_existing:
            erase_target(self._target)

        UpsertPipeline(self._target, mapping, stats).run(snapshot)

        warnings: list[str] = []
        if stats.gateways_unmatched:
            warnings.append(f"{stats.gateways_unmatched} source gateway(s) left unmatched")
        if stats.translation_rules_skipped:
            warnings.append(f"{stats.translation_rules_skipped} translation rule(s) skipped")

        logger.info("Migration completed")
        return MigrationResult(
            success=True,
            stats=stats,
            gateway_mapping=mapping,
            erased=not self.keep_existing,
            warnings=warnings,
        )
