"""Core parser API for bounded XML parsing.

The driver walks the input once, asking the transition table for a state
change at every position. Characters that do not start a transition are
collected into the pending token; when a transition matches, the token is
handed to the action handler of the state being left and the cursor jumps
over the matched delimiter.

Progressive API:
- Level 1: module functions - parse(), parse_string(), parse_file(), create_tree()
- Level 2: configured parser - BoundedXMLParser
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, TextIO, Union

from bounded_xml_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    FailureReason,
    ParseError,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from bounded_xml_parser.tokenization import (
    END_OF_INPUT,
    ParserState,
    char_at,
    get_transition_table,
)
from bounded_xml_parser.tree import (
    ElementFrame,
    FrameStack,
    TreeAssembler,
    XMLElement,
    count_elements_by_name,
    get_elements_by_name,
    iter_with_depth,
    release_tree,
)

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path]

LEADING_DELIMITER = "<"
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000

COMPONENT = "bounded_parser"


@dataclass
class ParseResult:
    """Outcome of one parse attempt.

    On failure ``root`` is an empty root sentinel and ``failure`` names the
    reason; no partial tree is exposed.
    """

    root: XMLElement = field(default_factory=XMLElement.create_root)
    success: bool = True
    failure: Optional[FailureReason] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def element_count(self) -> int:
        """Number of parsed elements, not counting the root sentinel."""
        return sum(1 for _ in iter_with_depth(self.root)) - 1

    @property
    def attribute_count(self) -> int:
        """Number of parsed attributes."""
        return sum(len(element.attributes) for element, _ in iter_with_depth(self.root))

    @property
    def max_depth(self) -> int:
        """Deepest element level, 0 for an empty tree."""
        return max((depth for _, depth in iter_with_depth(self.root)), default=0)

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def find(self, name: str) -> Optional[XMLElement]:
        """Find the first element called ``name`` in document order."""
        found = get_elements_by_name(self.root, name, limit=1)
        return found[0] if found else None

    def find_all(self, name: str) -> List[XMLElement]:
        """Find every element called ``name`` in document order."""
        return get_elements_by_name(self.root, name)

    def count(self, name: str) -> int:
        """Count the elements called ``name``."""
        return count_elements_by_name(self.root, name)

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        return {
            "success": self.success,
            "failure": self.failure.name if self.failure else None,
            "element_count": self.element_count,
            "attribute_count": self.attribute_count,
            "max_depth": self.max_depth,
            "root": self.root.to_dict(),
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "performance": self.performance.to_dict(),
        }


class BoundedXMLParser:
    """Configured single-pass parser.

    Examples:
        >>> parser = BoundedXMLParser()
        >>> result = parser.parse_string('<a k="v"><b/></a>')
        >>> result.success
        True
        >>> result.find("a").attributes[0].value
        'v'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize parser.

        Args:
            config: Parser configuration, defaults to ParserConfig()
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.table = get_transition_table(self.config.quote_style)
        self.logger = get_logger(__name__, correlation_id, COMPONENT)

    def create_tree(self, text: str, root: XMLElement) -> bool:
        """Populate ``root`` in place from ``text``.

        Returns:
            True on success. On failure ``root`` is left as an empty root
            sentinel and nothing else needs releasing.
        """
        return self.parse_string(text, root).success

    def parse_string(
        self,
        xml_string: str,
        root: Optional[XMLElement] = None
    ) -> ParseResult:
        """Parse ``xml_string`` into ``root`` (a new root when omitted).

        Malformed input never raises; it yields a failed ParseResult.
        """
        start_time = time.time()
        if root is None:
            root = XMLElement.create_root()
        result = ParseResult(root=root, correlation_id=self.correlation_id)

        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Starting string parse operation",
                extra={
                    "content_length": len(xml_string),
                    "preview": (
                        xml_string[:PREVIEW_LENGTH] + "..."
                        if len(xml_string) > PREVIEW_LENGTH else xml_string
                    )
                }
            )

        try:
            self._build(xml_string, root, result.performance)
        except ParseError as e:
            released = release_tree(root)
            result.success = False
            result.failure = e.reason
            result.add_diagnostic(
                DiagnosticSeverity.CRITICAL,
                e.message,
                COMPONENT,
                position={"offset": e.position} if e.position is not None else None,
                details={"reason": e.reason.name, "released_elements": released}
            )
            self.logger.warning(
                "Parse failed",
                extra={
                    "reason": e.reason.name,
                    "offset": e.position,
                    "error": e.message,
                    "released_elements": released
                }
            )
        except Exception:
            release_tree(root)
            raise
        finally:
            result.performance.processing_time_ms = (
                (time.time() - start_time) * MS_PER_SECOND
            )

        if result.success:
            self.logger.info(
                "String parse completed",
                extra={
                    "element_count": result.element_count,
                    "processing_time_ms": result.performance.processing_time_ms
                }
            )
        return result

    def parse_file(self, file_path: Union[str, Path]) -> ParseResult:
        """Parse a file decoded with the configured encoding."""
        path_obj = Path(file_path)
        self.logger.debug("Starting file parse operation", extra={"file_path": str(path_obj)})

        try:
            content = path_obj.read_bytes()
        except OSError as e:
            return self._input_error(f"Cannot read file {path_obj}: {e}")

        return self.parse_bytes(content)

    def parse_bytes(self, content: bytes) -> ParseResult:
        """Parse bytes decoded with the configured encoding."""
        try:
            text = content.decode(self.config.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            return self._input_error(
                f"Cannot decode input as {self.config.encoding}: {e}"
            )
        return self.parse_string(text)

    def parse(self, input_data: InputType) -> ParseResult:
        """Parse XML from a string, bytes, Path, or file-like object."""
        if isinstance(input_data, str):
            return self.parse_string(input_data)
        if isinstance(input_data, bytes):
            return self.parse_bytes(input_data)
        if isinstance(input_data, Path):
            return self.parse_file(input_data)
        if hasattr(input_data, "read"):
            content = input_data.read()
            if isinstance(content, bytes):
                return self.parse_bytes(content)
            return self.parse_string(content)
        raise TypeError(f"Unsupported input type: {type(input_data).__name__}")

    def _input_error(self, message: str) -> ParseResult:
        """Create a failed result for input that never reached the parser."""
        result = ParseResult(correlation_id=self.correlation_id)
        result.success = False
        result.failure = FailureReason.INPUT_ERROR
        result.add_diagnostic(
            DiagnosticSeverity.CRITICAL,
            message,
            COMPONENT,
            details={"reason": FailureReason.INPUT_ERROR.name}
        )
        self.logger.warning("Input could not be read", extra={"error": message})
        return result

    def _build(
        self,
        text: str,
        root: XMLElement,
        metrics: PerformanceMetrics
    ) -> None:
        """Run the automaton over ``text``, raising ParseError on failure."""
        root.reset_root()

        if char_at(text, 0) != LEADING_DELIMITER:
            raise ParseError(
                FailureReason.MISSING_LEADING_DELIMITER,
                f"Input must start with '{LEADING_DELIMITER}'",
                0,
            )

        stack = FrameStack(self.config.stack_capacity)
        stack.push(ElementFrame(root))
        assembler = TreeAssembler(root, stack, self.config)
        max_token_length = self.config.max_token_length
        trace = (
            self.config.trace_transitions
            and self.logger.is_enabled_for(logging.DEBUG)
        )

        state = ParserState.TAG_OPEN_NAME
        position = len(LEADING_DELIMITER)
        token: List[str] = []

        try:
            while not state.is_terminal and char_at(text, position) != END_OF_INPUT:
                transition = self.table.next_transition(state, text, position)

                if transition is None:
                    if len(token) >= max_token_length:
                        raise ParseError(
                            FailureReason.TOKEN_TOO_LONG,
                            f"Token exceeds {max_token_length} characters",
                        )
                    token.append(text[position])
                    position += 1
                    continue

                completed = "".join(token)
                token.clear()

                if trace:
                    self.logger.debug(
                        "Transition",
                        extra={
                            "source": state.name,
                            "target": transition.target.name,
                            "pattern": transition.pattern,
                            "token": completed,
                            "offset": position
                        }
                    )

                assembler.handle(state, completed, transition)
                metrics.transitions_taken += 1

                position += transition.advance
                state = transition.target

        except ParseError as e:
            if e.position is None:
                e.position = position
            raise
        finally:
            metrics.characters_processed = position
            metrics.max_stack_depth = stack.high_water_mark

        if not state.is_terminal:
            raise ParseError(
                FailureReason.UNEXPECTED_END_OF_INPUT,
                f"Input ended in state {state.name}",
                position,
            )
        if len(stack) != 1:
            raise ParseError(
                FailureReason.UNBALANCED_STACK,
                f"{len(stack) - 1} frame(s) left open at end of input",
                position,
            )


def create_tree(
    text: str,
    root: XMLElement,
    config: Optional[ParserConfig] = None
) -> bool:
    """Populate the caller's ``root`` from ``text``.

    Examples:
        >>> root = XMLElement.create_root()
        >>> create_tree('<a><b/></a>', root)
        True
        >>> root.children[0].children[0].name
        'b'
    """
    return BoundedXMLParser(config).create_tree(text, root)


def parse_string(
    xml_string: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse XML from a string.

    Examples:
        >>> result = parse_string('<a></b>')
        >>> result.success
        False
        >>> result.failure.name
        'CLOSE_TAG_MISMATCH'
    """
    return BoundedXMLParser(config, correlation_id).parse_string(xml_string)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse XML from a file."""
    return BoundedXMLParser(config, correlation_id).parse_file(file_path)


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse XML from a string, bytes, Path, or file-like object."""
    return BoundedXMLParser(config, correlation_id).parse(input_data)
