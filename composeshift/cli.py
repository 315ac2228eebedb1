"""
CLI for composeshift - compose descriptor to cluster manifests.

Usage:
    composeshift [DESCRIPTOR] --prefix PREFIX            write manifests
    composeshift [DESCRIPTOR] --prefix PREFIX --project NAME --up
    composeshift [DESCRIPTOR] --prefix PREFIX --project NAME --down
    composeshift [DESCRIPTOR] --prefix PREFIX --project NAME --down-all
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import RunConfig
from .gateway import ClusterGateway
from .generators import translate_manifest, write_translation
from .orchestrator import DeployPlan, LifecycleOrchestrator
from .parser import discover_descriptors, parse_manifest
from .prompts import Prompter, TerminalPrompter
from .templates import TemplateStore
from .types import ComposeShiftError, ConfigurationError, Mode, RunReport


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="composeshift",
        description="Convert a compose descriptor to cluster manifests and deploy them",
    )
    parser.add_argument(
        "descriptor",
        nargs="?",
        help="Path to the compose descriptor (default: discovered in the current directory)",
    )
    parser.add_argument(
        "--prefix",
        help="Prefix for every generated resource name (required)",
    )
    parser.add_argument(
        "--project",
        help="Cluster project to deploy into (required for --up/--down/--down-all)",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=".",
        help="Directory for generated manifests (default: current directory)",
    )
    parser.add_argument(
        "--cli",
        help="Cluster CLI binary (default: $COMPOSESHIFT_CLI or oc)",
    )
    parser.add_argument(
        "--server",
        help="Cluster server URL used when a login is needed",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--up",
        action="store_true",
        help="Create the generated resources on the cluster",
    )
    mode.add_argument(
        "--down",
        action="store_true",
        help="Remove the resources of one selected service",
    )
    mode.add_argument(
        "--down-all",
        action="store_true",
        help="Remove the resources of every service",
    )

    return parser


async def resolve_descriptor(config: RunConfig, prompter: Prompter) -> str:
    """Return the descriptor to use, asking when several are found."""
    if config.descriptor:
        return config.descriptor

    candidates = discover_descriptors(".")
    if not candidates:
        raise ConfigurationError(
            "Please specify the compose descriptor path: composeshift <descriptor>"
        )
    return await prompter.select_one("Select the compose descriptor", candidates)


def print_report(report: RunReport) -> None:
    """Print unit failures and the route list."""
    for unit in report.failures:
        print(f"Error: {unit.service}: {unit.error}", file=sys.stderr)
    if report.routes:
        print(report.routes)


async def run(
    config: RunConfig,
    prompter: Prompter,
    gateway: Optional[ClusterGateway] = None,
    templates: Optional[TemplateStore] = None,
) -> int:
    """
    Execute a configured run.

    Returns:
        Process exit code
    """
    manifest = parse_manifest(await resolve_descriptor(config, prompter))
    orchestrator = LifecycleOrchestrator(
        gateway or ClusterGateway(config.cli),
        prompter,
        config,
    )

    if config.mode == Mode.DOWN_ALL:
        report = await orchestrator.down_all(manifest.names)
    elif config.mode == Mode.DOWN:
        report = await orchestrator.down(manifest.names)
    else:
        # Translate everything before touching the cluster
        translations = translate_manifest(
            manifest,
            config.naming,
            templates or TemplateStore.load(),
        )
        plans = []
        for translation in translations:
            pod_file, service_file = write_translation(translation, config.output_dir)
            print(f"Written: {pod_file}", file=sys.stderr)
            if service_file:
                print(f"Written: {service_file}", file=sys.stderr)
            plans.append(DeployPlan(translation.service, pod_file, service_file))

        if config.mode == Mode.GENERATE:
            return 0
        report = await orchestrator.up(plans)

    print_report(report)
    return 0 if report.ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = RunConfig.from_args(args)
        return asyncio.run(run(config, TerminalPrompter()))
    except (ComposeShiftError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Aborted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
