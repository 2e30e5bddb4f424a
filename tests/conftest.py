"""
Pytest configuration and fixtures.

- Integration tests (end-to-end migrations against an in-memory target) fail
  on any WARNING logged by the code under test.
- Unit tests allow warnings.
- ``memory_target``, ``make_prompt`` and ``make_source`` provide in-memory
  stand-ins for the target system, the operator and the source system.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from typing_extensions import override

import pytest

from voice_routing_migrator.exceptions import AdminApiError, DuplicateEntityError, EntityNotFoundError
from voice_routing_migrator.models import (
    Dialplan,
    Gateway,
    RuleSlot,
    SourceSnapshot,
    TranslationRule,
    VoicePolicy,
    VoiceRoute,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Sequence

    from voice_routing_migrator.gateways import GatewayOption

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Custom logging handler to capture warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Capture WARNING and above level logs."""
        _integration_test_warnings.setdefault(self.test_nodeid, []).append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """Capture logger warnings emitted while an integration test runs."""
    if request.node.get_closest_marker("integration") is None:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """Mark a passed integration test as failed if it logged warnings."""
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        test_nodeid = item.nodeid
        warning_records = _integration_test_warnings.get(test_nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]
            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(test_nodeid, None)


class InMemoryTarget:
    """TargetSystem keeping its state in dicts and recording every write."""

    def __init__(self) -> None:
        self.dialplans: dict[str, dict[str, Any]] = {}
        self.voice_routes: dict[str, dict[str, Any]] = {}
        self.routing_policies: dict[str, dict[str, Any]] = {}
        self.translation_rules: dict[str, TranslationRule] = {}
        self.pstn_usages: list[str] = []
        self.gateways: dict[str, Gateway] = {}
        self.attachments: dict[tuple[str, RuleSlot], list[str]] = {}
        self.rejected_gateway_names: set[str | None] = set()
        self.writes: list[tuple[str, str]] = []
        self._generated: int = 0

    def add_gateways(self, *identities: str) -> None:
        for identity in identities:
            self.gateways[identity] = Gateway(identity)

    def add_rule(self, name: str, pattern: str, translation: str) -> None:
        self.translation_rules[name] = TranslationRule(
            identity=name, name=name, pattern=pattern, translation=translation
        )

    def validate_access(self) -> None:
        pass

    def get_dialplan(self, identity: str) -> Dialplan | None:
        return Dialplan(identity=identity) if identity in self.dialplans else None

    def create_dialplan(self, fields: dict[str, Any]) -> None:
        self.writes.append(("create_dialplan", fields["identity"]))
        self.dialplans[fields["identity"]] = dict(fields)

    def update_dialplan(self, fields: dict[str, Any]) -> None:
        self.writes.append(("update_dialplan", fields["identity"]))
        self.dialplans[fields["identity"]] = dict(fields)

    def delete_all_dialplans(self) -> None:
        self.writes.append(("delete_all_dialplans", ""))
        self.dialplans.clear()

    def get_voice_route(self, identity: str) -> VoiceRoute | None:
        if identity not in self.voice_routes:
            return None
        return VoiceRoute(identity=identity, number_pattern="", priority=0)

    def create_voice_route(self, fields: dict[str, Any]) -> None:
        self.writes.append(("create_voice_route", fields["identity"]))
        self.voice_routes[fields["identity"]] = dict(fields)

    def update_voice_route(self, fields: dict[str, Any]) -> None:
        self.writes.append(("update_voice_route", fields["identity"]))
        self.voice_routes[fields["identity"]] = dict(fields)

    def delete_all_voice_routes(self) -> None:
        self.writes.append(("delete_all_voice_routes", ""))
        self.voice_routes.clear()

    def get_voice_routing_policy(self, identity: str) -> VoicePolicy | None:
        return VoicePolicy(identity=identity) if identity in self.routing_policies else None

    def create_voice_routing_policy(self, fields: dict[str, Any]) -> None:
        self.writes.append(("create_voice_routing_policy", fields["identity"]))
        self.routing_policies[fields["identity"]] = dict(fields)

    def update_voice_routing_policy(self, fields: dict[str, Any]) -> None:
        self.writes.append(("update_voice_routing_policy", fields["identity"]))
        self.routing_policies[fields["identity"]] = dict(fields)

    def delete_all_voice_routing_policies(self) -> None:
        self.writes.append(("delete_all_voice_routing_policies", ""))
        self.routing_policies.clear()

    def get_translation_rule(self, identity: str) -> TranslationRule | None:
        return self.translation_rules.get(identity)

    def create_translation_rule(self, fields: dict[str, Any]) -> TranslationRule:
        self.writes.append(("create_translation_rule", fields["identity"]))
        if fields["identity"] in self.translation_rules:
            msg = f"Rule {fields['identity']} already exists"
            raise DuplicateEntityError(msg, 409)
        rule = TranslationRule(
            identity=fields["identity"],
            name=fields["name"],
            pattern=fields["pattern"],
            translation=fields["translation"],
            description=fields.get("description", ""),
        )
        self.translation_rules[rule.identity] = rule
        return rule

    def update_translation_rule(self, fields: dict[str, Any]) -> None:
        self.writes.append(("update_translation_rule", fields["identity"]))
        current = self.translation_rules[fields["identity"]]
        self.translation_rules[current.identity] = replace(
            current, pattern=fields["pattern"], translation=fields["translation"]
        )

    def delete_all_translation_rules(self) -> None:
        self.writes.append(("delete_all_translation_rules", ""))
        self.translation_rules.clear()

    def add_pstn_usage(self, name: str) -> None:
        self.writes.append(("add_pstn_usage", name))
        if name in self.pstn_usages:
            msg = f"PSTN usage {name} already exists"
            raise DuplicateEntityError(msg, 409)
        self.pstn_usages.append(name)

    def clear_pstn_usages(self) -> None:
        self.writes.append(("clear_pstn_usages", ""))
        self.pstn_usages.clear()

    def list_gateways(self) -> list[Gateway]:
        return list(self.gateways.values())

    def get_gateway(self, identity: str) -> Gateway | None:
        return self.gateways.get(identity)

    def create_gateway(self, identity: str | None = None) -> Gateway:
        self.writes.append(("create_gateway", identity or ""))
        if identity in self.rejected_gateway_names:
            msg = f"Domain of {identity} is not provisioned"
            raise AdminApiError(msg, 400)
        if identity is None:
            self._generated += 1
            identity = f"generated-{self._generated}.example.net"
        gateway = Gateway(identity)
        self.gateways[identity] = gateway
        return gateway

    def add_gateway_translation_rule(self, gateway: str, slot: RuleSlot, rule_id: str) -> None:
        self.writes.append(("add_gateway_translation_rule", f"{gateway}/{slot}/{rule_id}"))
        if gateway not in self.gateways:
            msg = f"Gateway {gateway} not found"
            raise EntityNotFoundError(msg, 404)
        attached = self.attachments.setdefault((gateway, slot), [])
        if rule_id not in attached:
            attached.append(rule_id)

    def clear_gateway_translation_rules(self, gateway: str, slot: RuleSlot) -> None:
        self.writes.append(("clear_gateway_translation_rules", f"{gateway}/{slot}"))
        self.attachments.pop((gateway, slot), None)


class ScriptedPrompt:
    """OperatorPrompt answering from a fixed script."""

    def __init__(self, selections: Sequence[int | None] = (), *, confirm: bool = True) -> None:
        self.selections: list[int | None] = list(selections)
        self.confirm_answer: bool = confirm
        self.confirmations: list[str] = []
        self.asked: list[tuple[str, list[GatewayOption]]] = []
        self.messages: list[str] = []

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        return self.confirm_answer

    def select_gateway(self, source_gateway: str, options: Sequence[GatewayOption]) -> int | None:
        self.asked.append((source_gateway, list(options)))
        if not self.selections:
            msg = f"Unexpected gateway question for {source_gateway}"
            raise AssertionError(msg)
        return self.selections.pop(0)

    def report(self, message: str) -> None:
        self.messages.append(message)


class SnapshotSource:
    """SourceSystem serving a fixed SourceSnapshot."""

    def __init__(self, snapshot: SourceSnapshot) -> None:
        self.snapshot: SourceSnapshot = snapshot

    def validate_access(self) -> None:
        pass

    def list_dialplans(self) -> list[Dialplan]:
        return list(self.snapshot.dialplans)

    def list_voice_routes(self) -> list[VoiceRoute]:
        return list(self.snapshot.voice_routes)

    def list_pstn_usage_names(self) -> list[str]:
        return list(self.snapshot.pstn_usages)

    def list_voice_policies(self) -> list[VoicePolicy]:
        return list(self.snapshot.voice_policies)

    def list_pstn_gateway_addresses(self) -> list[str]:
        return list(self.snapshot.gateway_addresses)

    def list_outbound_calling_translation_rules(self) -> list[TranslationRule]:
        return list(self.snapshot.calling_rules)

    def list_outbound_called_translation_rules(self) -> list[TranslationRule]:
        return list(self.snapshot.called_rules)


@pytest.fixture
def memory_target() -> InMemoryTarget:
    return InMemoryTarget()


@pytest.fixture
def make_prompt() -> Callable[..., ScriptedPrompt]:
    return ScriptedPrompt


@pytest.fixture
def make_source() -> Callable[[SourceSnapshot], SnapshotSource]:
    return SnapshotSource
