"""Conversion adapters between parsed trees and other XML libraries.

Adapters convert a ParseResult into the target library's element type and
back. The root sentinel converts to an element named ``root``; converting
such an element back parses its children as the top-level elements.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Type

from bounded_xml_parser.shared import ParserConfig, get_logger
from bounded_xml_parser.tree import ROOT_NAME, XMLElement

from .parser import BoundedXMLParser, ParseResult

MS_PER_SECOND = 1000


class AdapterType(Enum):
    """Types of integration adapters."""

    XML_LIBRARY = auto()     # XML processing libraries (lxml, ElementTree)


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    version: str
    adapter_type: AdapterType
    target_library: str
    description: str


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


class IntegrationAdapter(ABC):
    """Base class for adapters to other XML element APIs."""

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "adapter")

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the target library can be imported."""

    @abstractmethod
    def _etree(self) -> Any:
        """Return the target library's etree module."""

    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert a successful ParseResult into the target element type."""
        start_time = time.time()

        if not parse_result.success:
            return self._create_error_result(
                "ParseResult is not successful",
                parse_result,
                (time.time() - start_time) * MS_PER_SECOND
            )

        try:
            etree = self._etree()
            target_root = self._convert_element(parse_result.root, etree)
        except Exception as e:
            return self._create_error_result(
                f"Conversion to {self.metadata.target_library} failed: {e}",
                parse_result,
                (time.time() - start_time) * MS_PER_SECOND
            )

        return ConversionResult(
            success=True,
            converted_data=target_root,
            original_data=parse_result,
            conversion_time_ms=(time.time() - start_time) * MS_PER_SECOND,
            metadata={"element_count": sum(1 for _ in target_root.iter())},
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        """Serialize a target element and parse it back."""
        start_time = time.time()

        if not hasattr(target_data, "tag"):
            return self._create_error_result(
                "Target data is not an element",
                target_data,
                (time.time() - start_time) * MS_PER_SECOND
            )

        try:
            etree = self._etree()
            if target_data.tag == ROOT_NAME:
                xml_string = "".join(
                    self._serialize_without_tail(child, etree) for child in target_data
                )
            else:
                xml_string = self._serialize_without_tail(target_data, etree)
        except Exception as e:
            return self._create_error_result(
                f"Serialization of {self.metadata.target_library} element failed: {e}",
                target_data,
                (time.time() - start_time) * MS_PER_SECOND
            )

        parser = BoundedXMLParser(self.config, self.correlation_id)
        parse_result = parser.parse_string(xml_string)
        processing_time = (time.time() - start_time) * MS_PER_SECOND

        if not parse_result.success:
            self.logger.warning(
                "Converted element could not be parsed",
                extra={"failure": parse_result.failure.name}
            )
            return ConversionResult(
                success=False,
                converted_data=parse_result,
                original_data=target_data,
                conversion_time_ms=processing_time,
                errors=[diag.message for diag in parse_result.diagnostics],
            )

        return ConversionResult(
            success=True,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=processing_time,
            metadata={"original_tag": target_data.tag, "xml_length": len(xml_string)},
        )

    def _serialize_without_tail(self, element: Any, etree: Any) -> str:
        """Serialize one element, dropping text that follows it."""
        tail = element.tail
        element.tail = None
        try:
            return etree.tostring(element, encoding="unicode")
        finally:
            element.tail = tail

    def _convert_element(self, element: XMLElement, etree: Any) -> Any:
        """Convert an XMLElement subtree into target elements."""
        target_root = self._new_element(element, etree)
        pending = [(element, target_root)]

        while pending:
            source, target = pending.pop()
            for child in source.children:
                target_child = self._new_element(child, etree)
                target.append(target_child)
                pending.append((child, target_child))

        return target_root

    def _new_element(self, element: XMLElement, etree: Any) -> Any:
        target = etree.Element(element.name)
        for attribute in element.attributes:
            target.set(attribute.name, attribute.value or "")
        if element.body is not None:
            target.text = element.body
        return target

    def _create_error_result(
        self,
        message: str,
        original_data: Any,
        processing_time: float
    ) -> ConversionResult:
        self.logger.warning("Conversion failed", extra={"error": message})
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original_data,
            conversion_time_ms=processing_time,
            errors=[message],
        )


class ElementTreeAdapter(IntegrationAdapter):
    """Adapter for conversion with xml.etree.ElementTree."""

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="elementtree",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="xml.etree.ElementTree",
            description="Conversion between ParseResult and ElementTree"
        )

    def is_available(self) -> bool:
        """ElementTree ships with the standard library."""
        return True

    def _etree(self) -> Any:
        import xml.etree.ElementTree as ET
        return ET


class LxmlAdapter(IntegrationAdapter):
    """Adapter for conversion with lxml.etree."""

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="lxml",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="lxml",
            description="Conversion between ParseResult and lxml.etree"
        )

    def is_available(self) -> bool:
        """Check if lxml is installed."""
        try:
            import lxml.etree  # noqa: F401
        except ImportError:
            return False
        return True

    def _etree(self) -> Any:
        import lxml.etree as ET
        return ET


_ADAPTERS: Dict[str, Type[IntegrationAdapter]] = {
    "elementtree": ElementTreeAdapter,
    "lxml": LxmlAdapter,
}


def get_adapter(
    name: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Optional[IntegrationAdapter]:
    """Return an available adapter instance by name, or None."""
    adapter_class = _ADAPTERS.get(name)
    if adapter_class is None:
        return None
    adapter = adapter_class(config, correlation_id)
    return adapter if adapter.is_available() else None


def list_available_adapters() -> List[AdapterMetadata]:
    """List metadata of adapters whose target library is installed."""
    adapters = (adapter_class() for adapter_class in _ADAPTERS.values())
    return [adapter.metadata for adapter in adapters if adapter.is_available()]
