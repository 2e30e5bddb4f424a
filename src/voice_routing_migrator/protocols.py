"""Protocols defining the contracts for source, target and operator.

The migration architecture separates concerns into three components:

1. SourceSystem: Reads voice routing configuration from the source domain
2. TargetSystem: Reads and writes configuration in the target domain
3. OperatorPrompt: Answers the questions the migration cannot decide alone

This separation allows:
- Testing the reconciliation and upsert logic with in-memory implementations
- Replacing the interactive console with a scripted operator
- Clear boundaries for API-specific logic (endpoints, payload casing, paging)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .gateways import GatewayOption
    from .models import Dialplan, Gateway, RuleSlot, TranslationRule, VoicePolicy, VoiceRoute


class SourceSystem(Protocol):
    """Protocol for reading configuration from the source system.

    All methods are read-only. The migrator calls each list method exactly
    once, at the start of a run, to take a consistent snapshot.

    Composite identities are parsed by the implementation: routes carry
    their gateway references as EntityRef objects and translation rules
    carry the EntityRef of their owning gateway.
    """

    def validate_access(self) -> None:
        """Validate API access to the source system.

        Raises:
            MigrationError: If a session cannot be established
        """
        ...

    def list_dialplans(self) -> list[Dialplan]: ...

    def list_voice_routes(self) -> list[VoiceRoute]: ...

    def list_pstn_usage_names(self) -> list[str]: ...

    def list_voice_policies(self) -> list[VoicePolicy]: ...

    def list_pstn_gateway_addresses(self) -> list[str]: ...

    def list_outbound_calling_translation_rules(self) -> list[TranslationRule]: ...

    def list_outbound_called_translation_rules(self) -> list[TranslationRule]: ...


class TargetSystem(Protocol):
    """Protocol for reading and writing configuration in the target system.

    Write payloads are plain dicts with snake_case keys. Optional fields
    without a value are left out of the payload entirely; implementations
    must not add them back as empty or null values.

    The ``get_*`` methods return None when the entity does not exist.
    Write methods raise AdminApiError (or a subclass) when the target
    rejects the request.
    """

    def validate_access(self) -> None:
        """Validate API access to the target system.

        Raises:
            MigrationError: If a session cannot be established
        """
        ...

    # Dialplans
    def get_dialplan(self, identity: str) -> Dialplan | None: ...

    def create_dialplan(self, fields: dict[str, Any]) -> None: ...

    def update_dialplan(self, fields: dict[str, Any]) -> None: ...

    def delete_all_dialplans(self) -> None: ...

    # Voice routes
    def get_voice_route(self, identity: str) -> VoiceRoute | None: ...

    def create_voice_route(self, fields: dict[str, Any]) -> None: ...

    def update_voice_route(self, fields: dict[str, Any]) -> None: ...

    def delete_all_voice_routes(self) -> None: ...

    # Voice routing policies
    def get_voice_routing_policy(self, identity: str) -> VoicePolicy | None: ...

    def create_voice_routing_policy(self, fields: dict[str, Any]) -> None: ...

    def update_voice_routing_policy(self, fields: dict[str, Any]) -> None: ...

    def delete_all_voice_routing_policies(self) -> None: ...

    # Translation rules
    def get_translation_rule(self, identity: str) -> TranslationRule | None: ...

    def create_translation_rule(self, fields: dict[str, Any]) -> TranslationRule:
        """Create a translation rule and return it as stored by the target."""
        ...

    def update_translation_rule(self, fields: dict[str, Any]) -> None: ...

    def delete_all_translation_rules(self) -> None: ...

    # PSTN usages
    def add_pstn_usage(self, name: str) -> None:
        """Add a name to the global PSTN usage list.

        Raises:
            DuplicateEntityError: If the name is already in the list
        """
        ...

    def clear_pstn_usages(self) -> None: ...

    # Gateways
    def list_gateways(self) -> list[Gateway]: ...

    def get_gateway(self, identity: str) -> Gateway | None: ...

    def create_gateway(self, identity: str | None = None) -> Gateway:
        """Create a gateway, letting the target assign an identity when None is given.

        Raises:
            AdminApiError: If the target rejects the gateway (for example an
                address whose domain is not provisioned for the tenant)
        """
        ...

    def add_gateway_translation_rule(self, gateway: str, slot: RuleSlot, rule_id: str) -> None:
        """Attach a rule to a gateway slot, keeping rules already attached."""
        ...

    def clear_gateway_translation_rules(self, gateway: str, slot: RuleSlot) -> None: ...


class OperatorPrompt(Protocol):
    """Protocol for the decisions taken by the operator running the migration."""

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Anything but an explicit yes means no."""
        ...

    def select_gateway(self, source_gateway: str, options: Sequence[GatewayOption]) -> int | None:
        """Ask which option to apply to an unmatched source gateway.

        Returns:
            The 1-based number typed by the operator, or None if the input
            was not a number. Range validation is done by the caller.

        Raises:
            UserCancelledError: If the operator can no longer answer
        """
        ...

    def report(self, message: str) -> None:
        """Show a message to the operator."""
        ...
