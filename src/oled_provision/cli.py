"""Interactive command line entry point for provisioning a display node."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import load_provision_config
from .pipelines import ConsolePrompter, Prompter, Provisioner, collect_request
from .system import SystemEnvironment, shell_environment
from .utils.errors import ProvisionError
from .utils.logging import configure_logging

LOGGER = logging.getLogger("oled_provision.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNEXPECTED = 2
EXIT_INTERRUPTED = 130


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the provisioning helper."""
    parser = argparse.ArgumentParser(
        description="Prepare a Raspberry Pi to run the OLED Mother Hub or Daughter Box service"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a provisioning YAML file (defaults to the packaged profile)",
    )
    parser.add_argument(
        "--username",
        type=str,
        default=None,
        help="System user owning the service scripts; prompted for when omitted",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default=None,
        help="Device mode, 'mh' (Mother Hub) or 'db' (Daughter Box); prompted for when omitted",
    )
    parser.add_argument(
        "--no-reboot",
        action="store_true",
        help="Skip the reboot prompt and only print a reminder",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging, including every external command",
    )
    return parser.parse_args(argv)


def main(
    argv: Sequence[str] | None = None,
    *,
    env: SystemEnvironment | None = None,
    prompter: Prompter | None = None,
) -> int:
    """Entry point for the provisioning CLI.

    Args:
        argv: Command line arguments, ``sys.argv[1:]`` when ``None``.
        env: System environment to act on; the real machine when ``None``.
        prompter: Source of operator answers; standard input when ``None``.

    Returns:
        int: Process exit status.
    """
    args = parse_args(argv)
    configure_logging(args.verbose)
    prompter = prompter or ConsolePrompter()

    try:
        config = load_provision_config(args.config)
        request = collect_request(prompter, username=args.username, mode=args.mode)
        provisioner = Provisioner(env or shell_environment(), config, prompter)
        provisioner.run(request, offer_reboot=not args.no_reboot)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file not found: %s", exc)
        return EXIT_FAILURE
    except ProvisionError as exc:
        LOGGER.error("%s", exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        LOGGER.warning("Interrupted; the system is left in its current partial state")
        return EXIT_INTERRUPTED
    except Exception:
        LOGGER.exception("Provisioning terminated with an unexpected error")
        return EXIT_UNEXPECTED
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
