"""
Command-line interface for the voice routing migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING, Final

from . import config
from .admin_api import AdminApiClient
from .exceptions import UserCancelledError
from .migrator import VoiceRoutingMigrator
from .models import UNMATCHED
from .prompts import ConsolePrompt
from .source import AdminApiSource
from .target import AdminApiTarget
from .utils import setup_logging

if TYPE_CHECKING:
    from .migrator import MigrationResult

EXIT_SUCCESS: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_CANCELLED: Final[int] = 3

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate dialplans, voice routes, voice policies, PSTN usages and translation rules "
        "from a source voice administration domain to a target domain"
    )

    _ = parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Keep the existing target configuration instead of erasing it before migrating",
    )
    _ = parser.add_argument("--admin-domain", help="Administrative domain override used to authenticate to the target")
    _ = parser.add_argument("--source-url", help="Base URL of the source admin API (default: $SOURCE_ADMIN_URL)")
    _ = parser.add_argument("--target-url", help="Base URL of the target admin API (default: $TARGET_ADMIN_URL)")
    _ = parser.add_argument(
        "--source-pass-token", help="Path for the source token in pass utility (default: voice/source/token)"
    )
    _ = parser.add_argument(
        "--target-pass-token", help="Path for the target token in pass utility (default: voice/target/token)"
    )
    _ = parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase console verbosity (-v for INFO, -vv for DEBUG)",
    )

    return parser.parse_args(argv)


def _print_migration_report(result: MigrationResult) -> None:
    status = "COMPLETED" if result.success else "FAILED"
    print(f"\nMigration {status}")
    if result.erased:
        print("Existing target configuration was erased first")

    print("\nGateway mapping:")
    for source_gateway, target_gateway in result.gateway_mapping.items():
        shown = "(unmatched)" if target_gateway is UNMATCHED else target_gateway
        print(f"  {source_gateway} -> {shown}")

    print("\nStatistics:")
    for key, value in result.stats.as_dict().items():
        print(f"  {key.replace('_', ' ')}: {value}")

    for warning in result.warnings:
        print(f"Warning: {warning}")


def build_migrator(args: argparse.Namespace) -> VoiceRoutingMigrator:
    source_settings = config.load_settings("source", url=args.source_url, pass_path=args.source_pass_token)
    target_settings = config.load_settings(
        "target", url=args.target_url, pass_path=args.target_pass_token, admin_domain=args.admin_domain
    )
    return VoiceRoutingMigrator(
        AdminApiSource(AdminApiClient(source_settings)),
        AdminApiTarget(AdminApiClient(target_settings)),
        ConsolePrompt(),
        keep_existing=args.keep_existing,
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(verbosity=args.verbose)

    try:
        migrator = build_migrator(args)
        result = migrator.migrate()
    except UserCancelledError as e:
        print(str(e))
        sys.exit(EXIT_CANCELLED)
    except Exception:
        logger.exception("Migration failed")
        sys.exit(EXIT_FAILURE)

    _print_migration_report(result)
    sys.exit(EXIT_SUCCESS if result.success else EXIT_FAILURE)
