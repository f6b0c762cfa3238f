"""Command line entry point for readprops.

Reads property files, resolves their placeholders and prints the result.

USAGE:
    readprops FILE [FILE ...] [-P PROFILE] [-D KEY=VALUE] [--quiet] [--skip]
              [--max-expansions N] [--no-probe] [--env-file PATH]
              [--format properties|json]

EXAMPLES:
    # Resolve two files, later file wins on duplicate keys:
    readprops base.properties local.properties

    # Pick conf/prod.properties through the profile token:
    readprops 'conf/${project.activeProfile}.properties' -P prod

    # Supply system properties and emit JSON:
    readprops app.properties -D user.home=/home/ci --format json

ENVIRONMENT:
    READPROPS_QUIET, READPROPS_SKIP, READPROPS_ACTIVE_PROFILES,
    READPROPS_MAX_EXPANSIONS, READPROPS_PROBE_ENVIRONMENT, READPROPS_ENV_FILE,
    READPROPS_LOG_LEVEL, READPROPS_LOG_FILE, READPROPS_LOG_JSON

Command line flags take precedence over environment settings.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Mapping, Optional, TextIO

from readprops.config import Settings
from readprops.environment import SystemProperties
from readprops.exceptions import ReadPropsError
from readprops.loader import PropertyFileLoader
from readprops.logger import DEFAULT_LOGGER_NAME, create_logger
from readprops.resolver import PlaceholderResolver


def _max_expansions(value: str) -> Optional[int]:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return parsed or None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readprops",
        description="Read property files and resolve ${...} placeholders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  %(prog)s base.properties local.properties
  %(prog)s 'conf/${project.activeProfile}.properties' -P dev -P prod
  %(prog)s app.properties -D user.home=/home/ci --format json
        """,
    )
    parser.add_argument("files", nargs="*", help="Property files, read in order")
    parser.add_argument(
        "-P", "--profile",
        dest="profiles",
        action="append",
        default=None,
        help="Active profile for ${project.activeProfile} in paths (repeatable)",
    )
    parser.add_argument(
        "-D", "--define",
        dest="defines",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="System property consulted after the files (repeatable)",
    )
    parser.add_argument("--quiet", "-q", action="store_true", default=None,
                        help="Warn instead of failing on missing files")
    parser.add_argument("--skip", action="store_true", default=None,
                        help="Do not read anything")
    parser.add_argument(
        "--max-expansions",
        type=_max_expansions,
        default=argparse.SUPPRESS,
        help="Substitutions allowed per key, 0 for unbounded",
    )
    parser.add_argument("--no-probe", action="store_true",
                        help="Always snapshot the environment")
    parser.add_argument("--env-file", default=None,
                        help=".env file consulted for ${env.*} placeholders")
    parser.add_argument("--format", choices=["properties", "json"], default="properties",
                        help="Output format. Default: %(default)s")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def write_properties(props: Mapping[str, str], fmt: str, out: TextIO) -> None:
    """Write the store sorted by key."""
    ordered = {k: props[k] for k in sorted(props)}
    if fmt == "json":
        out.write(json.dumps(ordered, indent=2) + "\n")
        return
    for key, value in ordered.items():
        out.write(f"{key}={value}\n")


def load_settings(args: argparse.Namespace) -> Settings:
    """Read environment settings, apply command line overrides and validate.

    Raises:
        ConfigurationError: If the combined settings are invalid
    """
    settings = Settings.from_env()

    if args.quiet is not None:
        settings.loader.quiet = args.quiet
    if args.skip is not None:
        settings.loader.skip = args.skip
    if args.profiles is not None:
        settings.loader.active_profiles = args.profiles
    if hasattr(args, "max_expansions"):
        settings.resolver.max_expansions = args.max_expansions
    if args.no_probe:
        settings.resolver.probe_environment = False
    if args.env_file:
        settings.resolver.env_file = Path(args.env_file)

    settings.validate()
    return settings


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ReadPropsError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    logger = create_logger(
        name=DEFAULT_LOGGER_NAME,
        level=logging.DEBUG if args.verbose else settings.log.level_number,
        log_file=settings.log.file,
        json_format=settings.log.json,
    )

    resolver = PlaceholderResolver.from_settings(
        settings.resolver,
        system_properties=SystemProperties.from_definitions(args.defines),
        logger=logger,
    )
    loader = PropertyFileLoader.from_settings(args.files, settings.loader, resolver=resolver, logger=logger)

    try:
        props = loader.execute()
    except ReadPropsError as exc:
        logger.error(exc.message, code=exc.code)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    write_properties(props, args.format, out or sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
