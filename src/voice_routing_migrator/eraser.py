"""
Removal of existing voice routing configuration from the target system.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import EntityNotFoundError, UserCancelledError
from .models import RuleSlot

if TYPE_CHECKING:
    from collections.abc import Callable

    from .protocols import OperatorPrompt, TargetSystem

logger: logging.Logger = logging.getLogger(__name__)

ERASE_CONFIRMATION = (
    "All dialplans, voice routes, voice routing policies, PSTN usages and translation rules "
    "in the target will be deleted before migrating. Continue?"
)


def confirm_erase(prompt: OperatorPrompt) -> None:
    """Ask the operator to confirm erasing the target.

    Raises:
        UserCancelledError: If the operator does not answer yes
    """
    if not prompt.confirm(ERASE_CONFIRMATION):
        msg = "Migration cancelled: erasing the target configuration was not confirmed"
        raise UserCancelledError(msg)


def _tolerate_missing(description: str, action: Callable[[], object]) -> None:
    try:
        action()
    except EntityNotFoundError:
        logger.debug(f"Nothing to remove for {description}")


def erase_target(target: TargetSystem) -> None:
    """Remove the target's voice routing configuration.

    Each step runs independently and a missing entity counts as removed.
    Gateways are kept; only their translation rule slots are emptied.
    """
    print("Erasing existing target configuration...")

    _tolerate_missing("dialplans", target.delete_all_dialplans)
    _tolerate_missing("voice routes", target.delete_all_voice_routes)
    _tolerate_missing("voice routing policies", target.delete_all_voice_routing_policies)
    _tolerate_missing("PSTN usages", target.clear_pstn_usages)

    for gateway in target.list_gateways():
        for slot in RuleSlot:
            _tolerate_missing(
                f"{slot} rules of gateway {gateway.identity}",
                lambda gateway=gateway, slot=slot: target.clear_gateway_translation_rules(gateway.identity, slot),
            )

    _tolerate_missing("translation rules", target.delete_all_translation_rules)
    logger.info("Target configuration erased")
