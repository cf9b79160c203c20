"""Main CLI entry point for the xml-doc-format command-line tool.

Formats XML files or standard input, either printing the result, writing
it to a file, rewriting files in place, or only checking whether files are
already formatted.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from xml_doc_formatter import XMLDocumentFormatter, __version__
from xml_doc_formatter.shared.config import ConfigError, FormattingPreferences
from xml_doc_formatter.shared.logging import get_logger

STDIN_PATH = "-"

LINE_ENDINGS = {
    "lf": "\n",
    "crlf": "\r\n",
    "cr": "\r",
    "native": os.linesep,
}

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

# Preference fields that can be overridden from the command line
PREFERENCE_ARGUMENTS = (
    "delete_blank_lines",
    "split_multi_attrs",
    "wrap_long_lines",
    "well_formed_validation",
    "max_line_length",
    "tab_instead_of_spaces",
    "tab_width",
)


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.preferences = FormattingPreferences()
        self.line_separator = LINE_ENDINGS["lf"]

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load formatting preferences from a JSON file.

        Raises:
            ConfigError: If the file content is not valid preferences
            OSError: If the file cannot be read
        """
        config = cls()
        config.preferences = FormattingPreferences.from_file(config_path)
        return config

    def apply_arguments(self, args: argparse.Namespace) -> None:
        """Apply command-line overrides on top of the loaded preferences.

        Raises:
            ConfigError: If an overridden value is invalid
        """
        overrides = {
            name: getattr(args, name)
            for name in PREFERENCE_ARGUMENTS
            if getattr(args, name) is not None
        }
        if overrides:
            self.preferences = self.preferences.override(**overrides)
        self.line_separator = LINE_ENDINGS[args.line_ending]


class DocumentProcessor:
    """Reads, formats and writes documents for one CLI invocation."""

    def __init__(self, config: CLIConfig):
        self.config = config
        self.formatter = XMLDocumentFormatter(config.line_separator, config.preferences)
        self.logger = get_logger(__name__, None, "cli_processor")

    @staticmethod
    def read_source(source: str) -> str:
        """Read a document from a path, or from stdin for ``-``."""
        if source == STDIN_PATH:
            return sys.stdin.read()
        with Path(source).open(encoding="utf-8", newline="") as handle:
            return handle.read()

    @staticmethod
    def write_text(path: Path, text: str) -> None:
        """Write text exactly as given, without newline translation."""
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)

    def process_single(self, source: str) -> Dict[str, Any]:
        """Format one document and return a summary of the outcome."""
        try:
            original = self.read_source(source)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(
                "Could not read source",
                extra={"source": source, "error": str(e)},
                exc_info=False
            )
            return {"source": source, "success": False, "skipped": True, "error": str(e)}

        result = self.formatter.format_document(original)
        summary: Dict[str, Any] = {
            "source": source,
            "success": result.success,
            "skipped": False,
            "original": original,
            "text": result.text,
            "changed": result.success and result.text != original,
            "diagnostics": len(result.diagnostics),
            "processing_time_ms": result.processing_time_ms,
        }
        if result.error is not None:
            summary["error"] = str(result.error)
        return summary


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-doc-format",
        description="Reformat XML documents into a consistent indented layout"
    )

    parser.add_argument("--version", action="version", version=__version__)

    parser.add_argument(
        "paths",
        nargs="*",
        default=[STDIN_PATH],
        help="XML files to format ('-' or nothing reads standard input)"
    )

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file for a single input (default: stdout)"
    )
    output_group.add_argument(
        "--in-place", "-i",
        action="store_true",
        help="Rewrite files in place"
    )
    output_group.add_argument(
        "--check",
        action="store_true",
        help="Only report files that are not formatted; exit 1 if any"
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON file with formatting preferences"
    )
    parser.add_argument(
        "--line-ending",
        choices=sorted(LINE_ENDINGS),
        default="lf",
        help="Line separator of the output (default: lf)"
    )

    # Formatting preferences; None means "keep the configured value"
    parser.add_argument(
        "--delete-blank-lines",
        action="store_true",
        default=None,
        help="Drop blank lines from the output"
    )
    parser.add_argument(
        "--split-multi-attrs",
        action="store_true",
        default=None,
        help="Put each attribute of multi-attribute tags on its own line"
    )
    parser.add_argument(
        "--no-wrap-long-lines",
        dest="wrap_long_lines",
        action="store_false",
        default=None,
        help="Do not wrap start tags longer than the maximum line length"
    )
    parser.add_argument(
        "--validation",
        dest="well_formed_validation",
        choices=["fail", "warn", "ignore"],
        help="Well-formedness policy (default: warn)"
    )
    parser.add_argument(
        "--max-line-length",
        type=int,
        help="Column limit used for wrapping (default: 120)"
    )
    parser.add_argument(
        "--tab-width",
        type=int,
        help="Spaces per indent level, and width of a tab (default: 4)"
    )
    parser.add_argument(
        "--spaces",
        dest="tab_instead_of_spaces",
        action="store_false",
        default=None,
        help="Indent with spaces instead of tabs"
    )

    # Global options
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


def load_config(args: argparse.Namespace) -> CLIConfig:
    """Build the CLI configuration from the config file and arguments.

    Raises:
        ConfigError: If the preferences are invalid
        OSError: If the config file cannot be read
    """
    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    config.apply_arguments(args)
    return config


def cmd_format(args: argparse.Namespace, config: CLIConfig) -> int:
    """Format every input and emit the results."""
    processor = DocumentProcessor(config)
    exit_code = EXIT_OK
    unformatted = 0

    for source in args.paths:
        result = processor.process_single(source)

        if result["skipped"]:
            print(f"Skipping {source}: {result['error']}", file=sys.stderr)
            exit_code = EXIT_FAILURE
            continue

        if not result["success"]:
            print(f"{source}: {result['error']}", file=sys.stderr)
            exit_code = EXIT_FAILURE
            continue

        if args.check:
            if result["changed"]:
                print(f"Would reformat {source}", file=sys.stderr)
                unformatted += 1
                exit_code = EXIT_FAILURE
        elif args.in_place:
            if result["changed"]:
                try:
                    processor.write_text(Path(source), result["text"])
                except OSError as e:
                    processor.logger.error(
                        "Could not write result",
                        extra={"target": source, "error": str(e)},
                        exc_info=False
                    )
                    print(f"Error writing {source}: {e}", file=sys.stderr)
                    exit_code = EXIT_FAILURE
                    continue
                if not args.quiet:
                    print(f"Reformatted {source}", file=sys.stderr)
        elif args.output:
            try:
                processor.write_text(args.output, result["text"])
            except OSError as e:
                processor.logger.error(
                    "Could not write result",
                    extra={"target": str(args.output), "error": str(e)},
                    exc_info=False
                )
                print(f"Error writing output: {e}", file=sys.stderr)
                return EXIT_FAILURE
        else:
            sys.stdout.write(result["text"])

    if args.check and not args.quiet:
        checked = len(args.paths)
        print(f"{unformatted} of {checked} file(s) would be reformatted", file=sys.stderr)

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.output and len(args.paths) > 1:
        parser.error("--output accepts a single input")
    if args.in_place and STDIN_PATH in args.paths:
        parser.error("--in-place cannot rewrite standard input")

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE
    except OSError as e:
        print(f"Could not load config file: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        return cmd_format(args, config)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
