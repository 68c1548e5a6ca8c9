from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from checkkit.errors import ConfigurationError, ReportingError

from .foundation.logging_utils import setup_operational_logger

EXIT_OK = 0
EXIT_CHECKS_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_REPORT_ERROR = 3

EXAMPLES_GROUP = "examples"
WORKSPACE_GROUP = "workspace"

EPILOG = f"""\
With no -e/-w/-g flag, the groups listed in run.default_groups run
(bundled defaults: {EXAMPLES_GROUP}, then {WORKSPACE_GROUP}).

Exit status: {EXIT_OK} all checks passed, {EXIT_CHECKS_FAILED} some checks failed,
{EXIT_CONFIG_ERROR} configuration error, {EXIT_REPORT_ERROR} report could not be written.

e.g.:
    workspace-check -e -w
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspace-check",
        description="Run the workspace build/test/lint check matrix and report a single verdict.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-e", "--examples", action="store_true", help=f"Check example projects (group '{EXAMPLES_GROUP}')"
    )
    parser.add_argument(
        "-w", "--workspace", action="store_true", help=f"Check the workspace (group '{WORKSPACE_GROUP}')"
    )
    parser.add_argument(
        "-g",
        "--group",
        action="append",
        default=[],
        metavar="NAME",
        help="Run a configured check group by name (repeatable)",
    )
    parser.add_argument("--config", default=None, help="Path to a checks YAML file")
    parser.add_argument("--root", default=None, help="Workspace root (default: discovered from cwd)")
    parser.add_argument(
        "--list", dest="list_only", action="store_true", help="Print the expanded steps without running them"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def selected_groups(args: argparse.Namespace) -> list[str] | None:
    """Groups requested on the command line, or None to use the configured defaults."""

    groups: list[str] = []
    if args.examples:
        groups.append(EXAMPLES_GROUP)
    if args.workspace:
        groups.append(WORKSPACE_GROUP)
    for name in args.group:
        if name not in groups:
            groups.append(name)
    return groups or None


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logger = setup_operational_logger(verbose=args.verbose)

    from .app.run_checks import run_checks

    try:
        return run_checks(
            groups=selected_groups(args),
            root=args.root,
            config_path=args.config,
            list_only=args.list_only,
            logger=logger,
        )
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR
    except ReportingError as exc:
        logger.error("Reporting error: %s", exc)
        return EXIT_REPORT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
