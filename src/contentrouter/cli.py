#!/usr/bin/env python3
"""Command-line interface for content-router.

Runs one launch of the resolution coordinator against the configured source,
prints the persisted coordinator state, or persists configuration settings.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import yaml

from contentrouter.app_utils.config_schema import ContentRouterConfig
from contentrouter.app_utils.logging_config import configure_logging
from contentrouter.core.constants import PERSISTED_KEYS
from contentrouter.services.config_service import ConfigService
from contentrouter.services.coordinator import ContentCoordinator
from contentrouter.services.preferences_store import PreferencesStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-router",
        description="Resolve whether the host shows basic or enhanced content",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml. Default: ~/.contentrouter/config.yaml",
    )
    parser.add_argument(
        "--state-file",
        default=None,
        help="Path to the persisted state JSON. Overrides storage.state_file",
    )
    parser.add_argument("--log-level", default="", help="Logging level (e.g. DEBUG)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Run one launch and print the mode")
    resolve.add_argument("--url", default=None, help="Override source.url")
    resolve.add_argument(
        "--variant",
        default=None,
        help="Override source.variant (dropbox, classic, withoutLibAndTest, privacy)",
    )
    resolve.add_argument(
        "--owner-id", default=None, help="Override source.owner_identifier"
    )
    resolve.add_argument(
        "--no-delay",
        action="store_true",
        help="Skip the artificial loading delays",
    )

    subparsers.add_parser("state", help="Print the persisted coordinator state")

    config = subparsers.add_parser("config", help="Edit the configuration file")
    config_commands = config.add_subparsers(dest="config_command", required=True)
    config_set = config_commands.add_parser(
        "set", help="Persist settings, e.g. source.url=https://start.example.com/r"
    )
    config_set.add_argument("settings", nargs="+", metavar="SECTION.FIELD=VALUE")
    return parser


def _open_store(
    config: ContentRouterConfig, state_file: Optional[str]
) -> PreferencesStore:
    return PreferencesStore(state_file or config.storage.resolved_state_file())


async def _resolve(args, config) -> int:
    source_overrides = {
        "url": args.url,
        "variant": args.variant,
        "owner_identifier": args.owner_id,
    }
    source_overrides = {k: v for k, v in source_overrides.items() if v is not None}
    if source_overrides:
        # Validate through the schema without touching the file on disk
        data = config.to_dict()
        data["source"].update(source_overrides)
        config = ContentRouterConfig.from_dict(data)

    extra = {}
    if args.no_delay:
        extra = {"display_delay": 0.0, "rating_prompt_delay": 0.0}

    store = _open_store(config, args.state_file)
    coordinator = ContentCoordinator.from_config(config, store=store, **extra)
    mode = await coordinator.resolve()
    if coordinator.rating_prompt_task is not None:
        # Failures are logged by the coordinator
        await asyncio.wait({coordinator.rating_prompt_task})

    print(json.dumps(mode.to_dict()))
    return 0


def _show_state(args, config) -> int:
    store = _open_store(config, args.state_file)
    values = store.as_dict()
    print(json.dumps({key: values.get(key) for key in PERSISTED_KEYS}, indent=2))
    return 0


def _set_config(args, service: ConfigService, config: ContentRouterConfig) -> int:
    known = config.to_dict()
    updates = {}
    for setting in args.settings:
        name, sep, raw = setting.partition("=")
        section, _, field_name = name.partition(".")
        if not sep or field_name not in known.get(section, {}):
            print(f"Error: unknown setting '{name}'", file=sys.stderr)
            return 2
        try:
            value = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError:
            value = raw
        updates[f"{section}_{field_name}"] = value

    updated = service.update(**updates).to_dict()
    for key in updates:
        section, _, field_name = key.partition("_")
        print(f"{section}.{field_name} = {updated[section][field_name]!r}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    service = ConfigService(args.config)
    try:
        config = service.load()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 2
    logger.debug(f"Loaded configuration from {service.config_file}")

    if args.command == "state":
        return _show_state(args, config)
    if args.command == "config":
        try:
            return _set_config(args, service, config)
        except ValueError as e:
            print(f"Error: invalid configuration: {e}", file=sys.stderr)
            return 2

    try:
        return asyncio.run(_resolve(args, config))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
