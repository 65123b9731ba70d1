"""Main CLI entry point for the xml-beautifier command-line tool.

Takes exactly one XML file, rebuilds it and prints the indented result.
Diagnostics are logged and the completion message goes to stderr so that stdout
carries only the beautified document.
"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from xml_beautifier import __version__
from xml_beautifier.api import XMLBeautifier
from xml_beautifier.shared import (
    BeautifierConfig,
    BeautifierError,
    ConfigError,
    configure_logging,
    get_logger,
)

PROG = "xml-beautifier"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

EPILOG = (
    "Each element keeps a single namespace declaration. Further declarations on "
    "the same element are dropped with a warning, so prefixes they bound may be "
    "left undefined in the output."
)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Rebuild an XML file and print it with consistent indentation",
        epilog=EPILOG
    )

    parser.add_argument("--version", action="version", version=__version__)

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        metavar="FILE",
        help="XML file to beautify (exactly one)"
    )
    parser.add_argument(
        "--indent", "-i",
        type=int,
        help="Spaces per indentation level (default: 2)"
    )
    parser.add_argument(
        "--no-declaration",
        action="store_true",
        help="Omit the XML declaration"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on structurally inconsistent parse events"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help=(
            "Configuration file path (JSON). Documents declaring internal DTD "
            "entities need {\"parser\": {\"forbid_entities\": false}}"
        )
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def load_config(args: argparse.Namespace) -> BeautifierConfig:
    """Build the effective configuration from the file and command-line overrides."""
    config = BeautifierConfig.from_file(args.config) if args.config else BeautifierConfig()

    overrides = {}
    if args.indent is not None:
        if args.indent < 0:
            raise ConfigError("--indent must be >= 0")
        overrides["output__indent"] = " " * args.indent
    if args.no_declaration:
        overrides["output__xml_declaration"] = False
    if args.strict:
        overrides["builder__strict_mode"] = True
    if args.verbose:
        overrides["global__logging_level"] = "DEBUG"
    elif args.quiet:
        overrides["global__logging_level"] = "ERROR"

    return config.override(**overrides) if overrides else config


def report_invalid_arguments(parser: argparse.ArgumentParser, paths: List[Path]) -> int:
    """Print the usage message for a missing or extra file argument."""
    given = " ".join(str(path) for path in paths) or "[missing Filename]"
    print(f"Invalid Command Line Arguments: {PROG} {given}", file=sys.stderr)
    parser.print_usage(sys.stderr)
    return EXIT_USAGE


def run(args: argparse.Namespace) -> int:
    """Beautify the single input file described by ``args``."""
    config = load_config(args)
    configure_logging(config.global_.logging_level)
    logger = get_logger(__name__, None, "cli")

    path = args.paths[0]
    beautifier = XMLBeautifier(config)
    output = beautifier.process_file(path)

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        logger.info("Output written", extra={"output": str(args.output)})
        if not args.quiet:
            print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(output)

    if not args.quiet:
        print("Done!", file=sys.stderr)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if len(args.paths) != 1:
        return report_invalid_arguments(parser, args.paths)

    try:
        return run(args)
    except (BeautifierError, ConfigError, OSError) as e:
        traceback.print_exception(type(e), e, e.__traceback__, file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
