"""Data models for migration between source and target systems.

These models represent the normalized voice routing configuration exchanged
between SourceSystem, TargetSystem, and the migrator. Source records are
immutable snapshots taken once at the start of a run.

Composite identities such as ``PstnGateway:gw1.example.com`` or
``PstnGateway:gw1.example.com/StripPlus`` are parsed into an EntityRef once,
when the records are loaded, so the migration logic never re-parses strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import TYPE_CHECKING, Final

from .exceptions import MigrationError

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class EntityRef:
    """A typed composite identity: ``<kind>:<name>`` with an optional ``/<suffix>``."""

    kind: str
    name: str
    suffix: str = ""

    def __str__(self) -> str:
        text = f"{self.kind}:{self.name}"
        return f"{text}/{self.suffix}" if self.suffix else text


@dataclass(frozen=True)
class NormalizationRule:
    """A pattern/translation pair of a dialplan, copied verbatim."""

    name: str
    pattern: str
    translation: str
    description: str = ""
    is_internal_extension: bool = False


@dataclass(frozen=True)
class Dialplan:
    identity: str  # May carry a "Site:" scope prefix in the source
    description: str = ""
    optimize_device_dialing: bool = False
    external_access_prefix: str | None = None  # None or "" means "do not set"
    normalization_rules: tuple[NormalizationRule, ...] = ()


@dataclass(frozen=True)
class VoiceRoute:
    """A voice route with its gateway references already parsed."""

    identity: str
    number_pattern: str
    priority: int
    pstn_usages: tuple[str, ...] = ()
    description: str = ""
    gateways: tuple[EntityRef, ...] = ()


@dataclass(frozen=True)
class VoicePolicy:
    """A source voice policy; becomes a voice routing policy in the target."""

    identity: str
    pstn_usages: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class TranslationRule:
    """A calling or called number translation rule.

    In the source, ``identity`` names the owning gateway
    (``PstnGateway:<address>/<rule>``) and ``gateway`` holds its parsed form.
    Rules read from the target are global and have no owning gateway.
    """

    identity: str
    name: str
    pattern: str
    translation: str
    description: str = ""
    gateway: EntityRef | None = None


@dataclass(frozen=True)
class Gateway:
    """A PSTN gateway in the target system."""

    identity: str
    enabled: bool = True


class RuleSlot(StrEnum):
    """Translation rule slots of a target gateway."""

    CALLING = "outbound_calling"
    CALLED = "outbound_called"


class _Unmatched(Enum):
    UNMATCHED = "unmatched"

    def __repr__(self) -> str:
        return "UNMATCHED"


UNMATCHED: Final = _Unmatched.UNMATCHED
"""Mapping value for a source gateway with no target counterpart."""

GatewayTarget = str | _Unmatched


class GatewayMapping:
    """Mapping from source gateway identifiers to target gateway identifiers.

    Each key is resolved once per run; assigning it again is an error. Keys
    keep their insertion order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, GatewayTarget] = {}

    def __contains__(self, source_gateway: object) -> bool:
        return source_gateway in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def set(self, source_gateway: str, target: GatewayTarget) -> None:
        if source_gateway in self._entries:
            msg = f"Gateway {source_gateway} has already been resolved to {self._entries[source_gateway]!r}"
            raise MigrationError(msg)
        self._entries[source_gateway] = target

    def get(self, source_gateway: str) -> GatewayTarget:
        """Return the target for a source gateway, which must have been resolved."""
        try:
            return self._entries[source_gateway]
        except KeyError:
            msg = f"Gateway {source_gateway} was not resolved before use"
            raise MigrationError(msg) from None

    def resolve(self, source_gateway: str) -> str | None:
        """Return the target gateway identifier, or None if unmatched."""
        target = self.get(source_gateway)
        return None if target is UNMATCHED else target

    def items(self) -> list[tuple[str, GatewayTarget]]:
        return list(self._entries.items())


@dataclass
class GatewayAttachments:
    """Translation rules attached to target gateways during this run.

    Attachment is additive: a rule is added to a gateway slot and rules
    attached earlier in the run are kept.
    """

    _attached: dict[tuple[str, RuleSlot], set[str]] = field(default_factory=dict)

    def add(self, gateway: str, slot: RuleSlot, rule_id: str) -> bool:
        """Record an attachment. Returns False if it was already recorded."""
        rules = self._attached.setdefault((gateway, slot), set())
        if rule_id in rules:
            return False
        rules.add(rule_id)
        return True

    def rules_for(self, gateway: str, slot: RuleSlot) -> set[str]:
        return set(self._attached.get((gateway, slot), set()))


@dataclass
class SourceSnapshot:
    """All source configuration, read once at the start of a run."""

    dialplans: list[Dialplan] = field(default_factory=list)
    voice_routes: list[VoiceRoute] = field(default_factory=list)
    pstn_usages: list[str] = field(default_factory=list)
    voice_policies: list[VoicePolicy] = field(default_factory=list)
    gateway_addresses: list[str] = field(default_factory=list)
    calling_rules: list[TranslationRule] = field(default_factory=list)
    called_rules: list[TranslationRule] = field(default_factory=list)

    def distinct_gateways(self) -> list[str]:
        """Return every source gateway name referenced anywhere, in first-seen order.

        Listed gateway addresses come first, followed by names that only
        appear in route gateway lists or translation rule identities.
        """
        names: list[str] = [*self.gateway_addresses]
        names.extend(ref.name for route in self.voice_routes for ref in route.gateways)
        names.extend(rule.gateway.name for rule in self.translation_rules() if rule.gateway is not None)
        return list(dict.fromkeys(name for name in names if name))

    def distinct_pstn_usages(self) -> list[str]:
        """Return listed PSTN usages followed by any only referenced by routes or policies."""
        names: list[str] = [*self.pstn_usages]
        names.extend(usage for route in self.voice_routes for usage in route.pstn_usages)
        names.extend(usage for policy in self.voice_policies for usage in policy.pstn_usages)
        return list(dict.fromkeys(name for name in names if name))

    def translation_rules(self) -> list[TranslationRule]:
        return [*self.calling_rules, *self.called_rules]
