"""
CLI Module

Architectural Intent:
- Command-line interface for henix
- Entry point for all user interactions
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control

Exit status:
- 0: every node deployed
- 1: generic error (unreadable configuration, bad deploy configuration)
- 2: usage error (argparse, or no subcommand given)
- 3: one or more nodes failed to deploy
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import traceback
from pathlib import Path

from henix.application.use_cases.deploy_fleet import DeployOptions
from henix.composition_root import create_container
from henix.domain.entities.deployment_report import EXIT_ERROR, EXIT_USAGE
from henix.domain.errors import DeployConfigError, TreeUnreadable
from henix.infrastructure.config import CONFIG_FILE_NAME, load_config
from henix.infrastructure.logging import configure_logging

CFG_DIR_ENV_VAR = "HENIX_CFG_DIR"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="henix",
        description="henix: hash-addressed NixOS fleet deployment",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--cfg-dir",
        type=Path,
        default=None,
        help=f"Directory containing the configuration (env: {CFG_DIR_ENV_VAR}, "
        "default: current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the henix settings file (default: <cfg-dir>/{CONFIG_FILE_NAME})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    deploy_parser = subparsers.add_parser("deploy", help="Deploy nodes")
    deploy_parser.add_argument(
        "--target",
        "-t",
        action="append",
        dest="targets",
        metavar="NAME",
        help="Only deploy to this node (repeatable). Unknown names are an error.",
    )
    deploy_parser.add_argument(
        "--boot",
        action="store_true",
        help="Activate on next boot only, equivalent to `nixos-rebuild boot`",
    )
    deploy_parser.add_argument(
        "--show-trace", action="store_true", help="Pass --show-trace to the remote build"
    )
    deploy_parser.add_argument(
        "--force-transfer",
        action="store_true",
        help="Copy the configuration even if its slot already exists",
    )
    deploy_parser.add_argument(
        "--sequential", action="store_true", help="Deploy one node at a time"
    )
    deploy_parser.add_argument(
        "--json", action="store_true", help="Print the deployment report as JSON"
    )

    subparsers.add_parser("hash", help="Print the identifier of the configuration")
    subparsers.add_parser("nodes", help="List the nodes of the deploy configuration")
    return parser


def _resolve_cfg_dir(arg: Path) -> Path:
    if arg is not None:
        return arg
    env = os.environ.get(CFG_DIR_ENV_VAR)
    return Path(env) if env else Path.cwd()


async def async_main():
    parser = build_parser()
    args = parser.parse_args()

    cfg_dir = _resolve_cfg_dir(args.cfg_dir)
    try:
        config = load_config(args.config or str(cfg_dir / CONFIG_FILE_NAME))
    except ValueError as e:
        print(f"[-] Invalid configuration: {e}")
        sys.exit(EXIT_ERROR)

    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.getLevelName(str(config.log_level).upper())
        if not isinstance(level, int):
            level = logging.INFO
    configure_logging(level=level, json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_USAGE)

    try:
        container = create_container(
            config,
            mode="boot" if getattr(args, "boot", False) else None,
            show_trace=True if getattr(args, "show_trace", False) else None,
        )

        if args.command == "hash":
            _, identifier = await container.deriver.derive_path(cfg_dir)
            print(identifier)
            return

        targets = await container.resolve_targets.execute(
            cfg_dir, getattr(args, "targets", None), config.nodes
        )

        if args.command == "nodes":
            for target in targets:
                print(f"{target.name}\t{target.user}@{target.host}:{target.port}")
            return

        if not targets:
            print("[-] No nodes to deploy to.")
            sys.exit(EXIT_ERROR)

        options = DeployOptions(
            check_existing=config.deploy.check_existing,
            force_transfer=args.force_transfer,
            parallel=config.deploy.parallel and not args.sequential,
            max_parallel=config.deploy.max_parallel,
        )
        if not args.json:
            print(f"[*] Deploying {cfg_dir} to: {', '.join(t.name for t in targets)}...")
        report = await container.deploy_fleet.execute(cfg_dir, targets, options)
    except TreeUnreadable as e:
        print(f"[-] {e}")
        sys.exit(EXIT_ERROR)
    except DeployConfigError as e:
        print(f"[-] Deploy configuration error: {e}")
        sys.exit(EXIT_ERROR)
    except ValueError as e:
        print(f"[-] Invalid configuration: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(EXIT_ERROR)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(f"[*] Identifier: {report.identifier}")
        for line in report.summary_lines():
            print(line)
        if report.is_success:
            print(f"[+] Deployment successful to all {len(report.succeeded)} node(s).")
        else:
            print(
                f"[-] Deployment failed on {len(report.failed)} of "
                f"{len(report.attempts)} node(s)."
            )

    if not report.is_success:
        sys.exit(report.exit_code)


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
