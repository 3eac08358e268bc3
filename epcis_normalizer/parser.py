import json
import logging
import re
from typing import Any, Dict, Union

import lxml.etree as ET

from .tree import TEXT_KEY, strip_namespace_prefix

logger = logging.getLogger(__name__)

_XML_DECLARATION = re.compile(r'^\ufeff?\s*<\?xml[^>]*\?>')


def to_bytes(content: Union[str, bytes]) -> bytes:
    """XML input for lxml

    Bytes pass through untouched so lxml honours the encoding declaration.
    Text is already decoded: its declaration is dropped and it is re-encoded
    as UTF-8, keeping line numbers intact.
    """
    if isinstance(content, bytes):
        return content
    return _XML_DECLARATION.sub('', content, count=1).encode('utf-8')


def to_text(content: Union[str, bytes]) -> str:
    text = content.decode('utf-8') if isinstance(content, bytes) else content
    return text.removeprefix('\ufeff')


def sniff_text(content: Union[str, bytes]) -> str:
    """Lenient decode for format detection; undecodable bytes become U+FFFD"""
    text = content.decode('utf-8', errors='replace') if isinstance(content, bytes) else content
    return text.removeprefix('\ufeff')


class TreeParser:
    """Turns raw EPCIS text into a generic tree of dicts, lists and strings"""

    @staticmethod
    def _xml_parser() -> ET.XMLParser:
        return ET.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)

    @staticmethod
    def check_xml_syntax(content: Union[str, bytes]) -> None:
        """Raise `lxml.etree.XMLSyntaxError` if the document is not well-formed"""
        ET.fromstring(to_bytes(content), TreeParser._xml_parser())

    @staticmethod
    def parse_xml(content: Union[str, bytes]) -> Dict[str, Any]:
        """Parse XML into `{root_tag: tree}`

        Namespace prefixes are stripped from tags and attributes, attributes
        are merged into the element mapping, and repeated child tags become lists.
        """
        root = ET.fromstring(to_bytes(content), TreeParser._xml_parser())
        tag = strip_namespace_prefix(root.tag)
        logger.debug(f"Parsed XML root element: {tag}")
        return {tag: TreeParser._xml_to_dict(root)}

    @staticmethod
    def parse_json(content: Union[str, bytes]) -> Any:
        return json.loads(to_text(content))

    @staticmethod
    def _xml_to_dict(element: ET._Element) -> Union[Dict[str, Any], str]:
        """Convert XML element to dictionary

        Args:
            element: XML element to convert

        Returns:
            Dict representation of the element, or its text when it has
            neither attributes nor child elements
        """
        result: Dict[str, Any] = {}

        # Handle attributes
        for key, value in element.attrib.items():
            result[strip_namespace_prefix(key)] = value

        # Handle child elements, skipping comments and processing instructions
        for child in element:
            if not isinstance(child.tag, str):
                continue
            tag = strip_namespace_prefix(child.tag)
            child_data = TreeParser._xml_to_dict(child)
            if tag in result:
                if isinstance(result[tag], list):
                    result[tag].append(child_data)
                else:
                    result[tag] = [result[tag], child_data]
            else:
                result[tag] = child_data

        # Handle text content
        text = element.text.strip() if element.text else ''
        if len(result) == 0:
            return text
        if text:
            result[TEXT_KEY] = text
        return result
