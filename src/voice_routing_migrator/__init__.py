"""
Voice Routing Migration Tool

Migrates dialplans, voice routes, voice policies, PSTN usages, gateways and
translation rules from one voice administration domain to another,
reconciling gateways and entities that already exist in the target.
"""

from __future__ import annotations

from .cli import main
from .exceptions import (
    AdminApiError,
    ConfigurationError,
    DuplicateEntityError,
    EntityNotFoundError,
    MigrationError,
    UserCancelledError,
)
from .gateways import GatewayReconciler
from .migrator import MigrationResult, MigrationStats, VoiceRoutingMigrator
from .models import UNMATCHED, GatewayMapping
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "UNMATCHED",
    "AdminApiError",
    "ConfigurationError",
    "DuplicateEntityError",
    "EntityNotFoundError",
    "GatewayMapping",
    "GatewayReconciler",
    "MigrationError",
    "MigrationResult",
    "MigrationStats",
    "UserCancelledError",
    "VoiceRoutingMigrator",
    "main",
    "setup_logging",
]
