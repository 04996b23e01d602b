"""Argument parsing functionality for depup."""

import argparse

from constants import __version__

LANGUAGE_FLAGS = ("node", "python", "rust", "go", "ruby", "php", "java")


def build_parser():
    """Build the depup argument parser."""
    parser = argparse.ArgumentParser(
        prog="depup",
        description=(
            "depup - Update dependency version specifiers in project manifests"
        ),
        add_help=True,
    )

    parser.add_argument("path",
                        nargs="?",
                        default=".",
                        help="Project directory (default: current directory)")
    parser.add_argument("-V", "--version",
                        action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("-n", "--dry-run",
                        dest="DRY_RUN",
                        help="Show what would change without writing files",
                        action="store_true")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose",
                           dest="VERBOSE",
                           help="Also list skipped dependencies and their reasons",
                           action="store_true")
    verbosity.add_argument("-q", "--quiet",
                           dest="QUIET",
                           help="Only print a one-line summary",
                           action="store_true")

    languages = parser.add_argument_group("languages",
                                          "Restrict the run to these ecosystems (default: all)")
    for flag in LANGUAGE_FLAGS:
        languages.add_argument(f"--{flag}",
                               dest=f"LANG_{flag.upper()}",
                               help=f"Update {flag} manifests",
                               action="store_true")

    parser.add_argument("--exclude",
                        dest="EXCLUDE",
                        help="Package names to leave alone (repeatable, comma-separated)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--only",
                        dest="ONLY",
                        help="Only update these packages (repeatable, comma-separated); wins over --exclude",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--include-pinned",
                        dest="INCLUDE_PINNED",
                        help="Also update exact-pinned versions",
                        action="store_true")
    parser.add_argument("--age",
                        dest="AGE",
                        help="Minimum release age of a new version, e.g. 7d, 2w, 1m",
                        action="store",
                        type=str)

    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json",
                        dest="JSON",
                        help="Print a JSON report",
                        action="store_true")
    output.add_argument("--diff",
                        dest="DIFF",
                        help="Print a diff of the changed specifier lines",
                        action="store_true")

    parser.add_argument("--install",
                        dest="INSTALL",
                        help="Run the package manager's install step after updating",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if lookups, manifests or patches failed.",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
