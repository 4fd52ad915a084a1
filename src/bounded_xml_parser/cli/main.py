"""Main CLI entry point for the bounded-xml command-line tool.

Parses XML snippets from files and prints the resulting tree, element
counts, element lookups or attribute values.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from bounded_xml_parser import __version__
from bounded_xml_parser.api import BoundedXMLParser, ParseResult
from bounded_xml_parser.shared import (
    CloseTagMatch,
    ConfigError,
    ParserConfig,
    QuoteStyle,
    configure_logging,
    get_logger,
)
from bounded_xml_parser.tree import (
    format_tree,
    get_attribute_by_name,
    get_elements_by_name,
)


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig()
        self.output_format = "text"
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file holds ParserConfig fields plus an optional ``output_format``.
        """
        config = cls()
        with config_path.open() as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file must hold an object: {config_path}")

        config.output_format = data.pop("output_format", config.output_format)
        config.parser_config = ParserConfig.from_dict(data)
        return config

    def apply_arguments(self, args: argparse.Namespace) -> None:
        """Apply command-line overrides to the parser configuration."""
        overrides: Dict[str, Any] = {}
        if args.quote_style:
            overrides["quote_style"] = QuoteStyle[args.quote_style.upper()]
        if args.close_tag_match:
            overrides["close_tag_match"] = CloseTagMatch[args.close_tag_match.upper()]
        if args.max_token_length is not None:
            overrides["max_token_length"] = args.max_token_length
        if args.stack_capacity is not None:
            overrides["stack_capacity"] = args.stack_capacity
        if args.verbose:
            overrides["trace_transitions"] = True
        if overrides:
            self.parser_config = self.parser_config.override(**overrides)

        if getattr(args, "format", None):
            self.output_format = args.format
        self.verbose = args.verbose
        self.quiet = args.quiet

    def logging_level(self) -> str:
        """Level name for the root logger; -v and -q win over the configuration."""
        if self.verbose:
            return "DEBUG"
        if self.quiet:
            return "ERROR"
        return self.parser_config.logging_level


class XMLProcessor:
    """Core processing logic for CLI operations."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.parser = BoundedXMLParser(config=config.parser_config)
        self.logger = get_logger(__name__, None, "cli_processor")

    def parse_path(self, file_path: Path) -> ParseResult:
        """Parse a single file."""
        result = self.parser.parse_file(file_path)
        self.logger.debug(
            "Processed file",
            extra={"file_path": str(file_path), "success": result.success}
        )
        return result

    def describe(self, file_path: Path, result: ParseResult) -> Dict[str, Any]:
        """Summarize a parse result for output."""
        summary: Dict[str, Any] = {
            "file": str(file_path),
            "success": result.success,
            "processing_time_ms": result.processing_time_ms,
        }
        if result.success:
            summary["element_count"] = result.element_count
            summary["tree"] = result.root.to_dict()
        else:
            summary["failure"] = result.failure.name if result.failure else None
            summary["errors"] = [diag.message for diag in result.diagnostics]
        return summary


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="bounded-xml",
        description="Bounded single-pass parser for small XML snippets"
    )

    parser.add_argument("--version", action="version", version=__version__)

    # Global options
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--quote-style",
        choices=["double", "single"],
        help="Attribute value quote character"
    )
    parser.add_argument(
        "--close-tag-match",
        choices=["exact", "prefix"],
        help="Closing tag matching policy"
    )
    parser.add_argument(
        "--max-token-length",
        type=int,
        help="Longest accepted name, value, body or comment"
    )
    parser.add_argument(
        "--stack-capacity",
        type=int,
        help="Deepest combined element and attribute nesting, root included"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output, including every state transition"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only report errors"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse files and show their trees")
    parse_parser.add_argument("paths", nargs="+", type=Path, help="XML files to parse")
    parse_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        help="Output format (default: text)"
    )

    count_parser = subparsers.add_parser("count", help="Count elements by name")
    count_parser.add_argument("name", help="Element name")
    count_parser.add_argument("paths", nargs="+", type=Path, help="XML files to parse")

    find_parser = subparsers.add_parser("find", help="Show elements by name")
    find_parser.add_argument("name", help="Element name")
    find_parser.add_argument("paths", nargs="+", type=Path, help="XML files to parse")
    find_parser.add_argument(
        "--limit", "-n",
        type=int,
        help="Maximum number of elements per file"
    )

    attr_parser = subparsers.add_parser("attr", help="Show attribute values")
    attr_parser.add_argument("element", help="Element name")
    attr_parser.add_argument("attribute", help="Attribute name")
    attr_parser.add_argument("paths", nargs="+", type=Path, help="XML files to parse")

    return parser


def _report_failure(path: Path, result: ParseResult) -> None:
    reason = result.failure.name if result.failure else "UNKNOWN"
    messages = "; ".join(diag.message for diag in result.diagnostics)
    print(f"{path}: parse failed ({reason}): {messages}", file=sys.stderr)


def cmd_parse(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle parse command."""
    processor = XMLProcessor(config)
    summaries: List[Dict[str, Any]] = []
    failures = 0

    for path in args.paths:
        result = processor.parse_path(path)
        if not result.success:
            failures += 1
            if config.output_format != "json":
                _report_failure(path, result)
        summaries.append(processor.describe(path, result))

        if result.success and config.output_format == "text" and not config.quiet:
            print(f"{path}:")
            print(format_tree(result.root))

    if config.output_format == "json":
        print(json.dumps(summaries, indent=2))

    return 0 if failures == 0 else 1


def cmd_count(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle count command."""
    processor = XMLProcessor(config)
    failures = 0

    for path in args.paths:
        result = processor.parse_path(path)
        if not result.success:
            failures += 1
            _report_failure(path, result)
            continue
        print(f"{path}: {result.count(args.name)}")

    return 0 if failures == 0 else 1


def cmd_find(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle find command."""
    if args.limit is not None and args.limit < 0:
        print("--limit must be >= 0", file=sys.stderr)
        return 2

    processor = XMLProcessor(config)
    failures = 0

    for path in args.paths:
        result = processor.parse_path(path)
        if not result.success:
            failures += 1
            _report_failure(path, result)
            continue
        for element in get_elements_by_name(result.root, args.name, args.limit):
            print(f"{path}:")
            print(format_tree(element))

    return 0 if failures == 0 else 1


def cmd_attr(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle attr command."""
    processor = XMLProcessor(config)
    failures = 0

    for path in args.paths:
        result = processor.parse_path(path)
        if not result.success:
            failures += 1
            _report_failure(path, result)
            continue
        for element in result.find_all(args.element):
            attribute = get_attribute_by_name(element, args.attribute)
            if attribute is not None:
                print(f"{path}: {attribute.value}")

    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
        config.apply_arguments(args)
    except (OSError, ValueError, ConfigError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(config.logging_level())

    handlers = {
        "parse": cmd_parse,
        "count": cmd_count,
        "find": cmd_find,
        "attr": cmd_attr,
    }

    try:
        return handlers[args.command](args, config)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
