"""depup command line entry point."""

import logging
import os
import sys

from args import LANGUAGE_FLAGS, parse_args
from common.errors import ConfigError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from orchestrator import run
from output.diff import render_diff
from output.json_report import render_json
from output.progress import LookupProgress
from output.text import render_text
from policy.age import parse_duration
from policy.filter import UpdateFilter, split_names
from versioning.models import Ecosystem

logger = logging.getLogger(__name__)


def build_filter(args) -> UpdateFilter:
    """Translate parsed CLI arguments into an UpdateFilter."""
    languages = frozenset(
        Ecosystem(flag) for flag in LANGUAGE_FLAGS if getattr(args, f"LANG_{flag.upper()}", False)
    )
    return UpdateFilter(
        languages=languages,
        only=frozenset(split_names(args.ONLY)),
        exclude=frozenset(split_names(args.EXCLUDE)),
        include_pinned=args.INCLUDE_PINNED,
    )


def render(result, args) -> str:
    if args.JSON:
        return render_json(result, verbose=args.VERBOSE)
    if args.DIFF:
        return render_diff(result)
    return render_text(result, verbose=args.VERBOSE, quiet=args.QUIET)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(getattr(logging, args.LOG_LEVEL, logging.WARNING), args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    cli_age = None
    if args.AGE is not None:
        try:
            cli_age = parse_duration(args.AGE, "--age")
        except ConfigError as exc:
            logger.error("%s", exc)
            sys.exit(ExitCodes.USAGE_ERROR.value)

    if not os.path.isdir(args.path):
        logger.error("No such directory: %s", args.path)
        sys.exit(ExitCodes.FILE_ERROR.value)

    result = run(
        args.path,
        build_filter(args),
        dry_run=args.DRY_RUN,
        cli_age=cli_age,
        install=args.INSTALL,
        progress=LookupProgress(enabled=not (args.QUIET or args.JSON or args.DIFF)),
    )
    sys.stdout.write(render(result, args))

    if result.registry_unreachable:
        logger.error("No package registry could be reached.")
        sys.exit(ExitCodes.CONNECTION_ERROR.value)

    if result.has_warnings:
        logger.warning("One or more dependencies or manifests could not be processed.")
        if args.ERROR_ON_WARNINGS:
            logger.error("Warnings present, exiting with non-zero status code.")
            sys.exit(ExitCodes.EXIT_WARNINGS.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
