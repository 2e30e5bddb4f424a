"""Reconciliation of source gateways with target gateways.

Source and target gateways live in separate namespaces. Each source gateway
is resolved exactly once per run, in source enumeration order:

1. Auto-match: a target gateway with exactly the same identity exists.
2. Otherwise the operator picks from a numbered list made of the target
   gateways captured before the loop, followed by "create a gateway named
   like the source gateway" (only for names containing a letter, since a
   bare IP address cannot be created as a gateway), "create a gateway with
   a target-assigned identity" and "skip".

Failed creations are reported and the same gateway is asked again. Gateways
created during the loop are visible to later auto-matches (which query the
target) but are not added to the numbered list shown for later gateways.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from .exceptions import AdminApiError
from .models import UNMATCHED, GatewayMapping

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .migrator import MigrationStats
    from .models import Gateway, GatewayTarget
    from .protocols import OperatorPrompt, TargetSystem

logger: logging.Logger = logging.getLogger(__name__)

_HAS_LETTER: Final = re.compile(r"[A-Za-z]")


class GatewayAction(StrEnum):
    EXISTING = "existing"
    CREATE_NAMED = "create_named"
    CREATE_NEW = "create_new"
    SKIP = "skip"


@dataclass(frozen=True)
class GatewayOption:
    """One numbered choice offered for an unmatched source gateway."""

    action: GatewayAction
    label: str
    gateway: str | None = None  # Target gateway identity for EXISTING


def is_creatable_gateway_name(name: str) -> bool:
    """Return True if a gateway literally named ``name`` may be created in the target."""
    return bool(_HAS_LETTER.search(name))


def build_gateway_options(source_gateway: str, candidates: Sequence[Gateway]) -> list[GatewayOption]:
    """Build the numbered option list for a source gateway without an exact match."""
    options = [
        GatewayOption(GatewayAction.EXISTING, f"Use existing gateway {gateway.identity}", gateway.identity)
        for gateway in candidates
    ]
    if is_creatable_gateway_name(source_gateway):
        options.append(GatewayOption(GatewayAction.CREATE_NAMED, f"Create gateway {source_gateway}"))
    options.append(GatewayOption(GatewayAction.CREATE_NEW, "Create a new gateway with a generated identity"))
    options.append(GatewayOption(GatewayAction.SKIP, "Skip matching for this gateway"))
    return options


class GatewayReconciler:
    """Builds the GatewayMapping for a run, asking the operator when needed."""

    def __init__(
        self,
        target: TargetSystem,
        prompt: OperatorPrompt,
        stats: MigrationStats,
        mapping: GatewayMapping | None = None,
    ) -> None:
        self._target: TargetSystem = target
        self._prompt: OperatorPrompt = prompt
        self._stats: MigrationStats = stats
        self.mapping: GatewayMapping = mapping if mapping is not None else GatewayMapping()
        self._candidates: list[Gateway] | None = None

    def reconcile(self, source_gateways: Iterable[str]) -> GatewayMapping:
        """Resolve every source gateway and return the completed mapping.

        The target gateway list is captured once, before the first gateway is
        resolved. Gateways already present in the mapping are not asked again.
        """
        if self._candidates is None:
            self._candidates = self._target.list_gateways()
            logger.debug(f"Captured {len(self._candidates)} target gateways")

        for source_gateway in source_gateways:
            self.resolve(source_gateway)

        return self.mapping

    def resolve(self, source_gateway: str) -> GatewayTarget:
        """Resolve a single source gateway, returning the cached result if already resolved."""
        if source_gateway in self.mapping:
            return self.mapping.get(source_gateway)

        if self._target.get_gateway(source_gateway) is not None:
            logger.info(f"Gateway {source_gateway} matched automatically")
            self._stats.gateways_auto_matched += 1
            result: GatewayTarget = source_gateway
        else:
            result = self._match_manually(source_gateway)

        self.mapping.set(source_gateway, result)
        return result

    def _match_manually(self, source_gateway: str) -> GatewayTarget:
        candidates = self._candidates if self._candidates is not None else []

        while True:
            options = build_gateway_options(source_gateway, candidates)
            choice = self._prompt.select_gateway(source_gateway, options)
            if choice is None or not 1 <= choice <= len(options):
                self._prompt.report(f"Invalid selection. Enter a number between 1 and {len(options)}.")
                continue

            option = options[choice - 1]

            if option.action is GatewayAction.SKIP:
                logger.warning(f"Gateway {source_gateway} left unmatched")
                self._stats.gateways_unmatched += 1
                return UNMATCHED

            if option.action is GatewayAction.EXISTING:
                assert option.gateway is not None  # always set for EXISTING
                logger.info(f"Gateway {source_gateway} matched to {option.gateway}")
                self._stats.gateways_manually_matched += 1
                return option.gateway

            requested = source_gateway if option.action is GatewayAction.CREATE_NAMED else None
            try:
                created = self._target.create_gateway(requested)
            except AdminApiError as e:
                name = requested or "with a generated identity"
                self._prompt.report(f"Could not create gateway {name}: {e}")
                logger.warning(f"Gateway creation for {source_gateway} failed: {e}")
                continue

            logger.info(f"Created gateway {created.identity} for {source_gateway}")
            self._stats.gateways_created += 1
            return created.identity
