import json
import logging
from typing import Iterable, Union

from .exceptions import ERROR_MESSAGES, UnknownFormatError
from .models import EPCISFormat
from .parser import sniff_text
from .tree import as_list

logger = logging.getLogger(__name__)

EPCIS_JSONLD_CONTEXTS = (
    'https://ref.gs1.org/standards/epcis/2.0.0/epcis-context.jsonld',
    'https://ref.gs1.org/standards/epcis/epcis-context.jsonld',
)

EPCIS_1_2_XML_NAMESPACE = 'urn:epcglobal:epcis:xsd:1'
EPCIS_1_2_XML_MARKERS = (
    EPCIS_1_2_XML_NAMESPACE,
    'urn:epcglobal:epcis-query:xsd:1',
)
EPCIS_2_0_XML_MARKERS = (
    'urn:epcglobal:epcis:xsd:2',
    'urn:epcglobal:epcis-query:xsd:2',
    'https://ref.gs1.org/standards/epcis/2.0.0/',
)


def _has_jsonld_context(text: str, context_uris: Iterable[str]) -> bool:
    try:
        data = json.loads(text)
    except ValueError:
        return False
    if not isinstance(data, dict):
        return False
    known = set(context_uris)
    contexts = as_list(data.get('@context'))
    return any(isinstance(ctx, str) and ctx in known for ctx in contexts)


def detect_format(content: Union[str, bytes],
                  context_uris: Iterable[str] = EPCIS_JSONLD_CONTEXTS) -> EPCISFormat:
    """Decide which EPCIS dialect a raw document is written in

    JSON-LD wins when the document parses as JSON and declares the EPCIS 2.0
    context. XML dialects are told apart only by their namespace literal.

    Args:
        content: Raw document text or bytes
        context_uris: JSON-LD context URIs accepted as EPCIS 2.0

    Returns:
        The detected format

    Raises:
        UnknownFormatError: If no supported dialect matches
    """
    text = sniff_text(content)

    if _has_jsonld_context(text, context_uris):
        logger.debug("Detected EPCIS 2.0 JSON-LD document")
        return EPCISFormat.V2_0_JSON_LD

    if text.lstrip('\ufeff \t\r\n').startswith('<'):
        if any(marker in text for marker in EPCIS_1_2_XML_MARKERS):
            logger.debug("Detected EPCIS 1.2 XML document")
            return EPCISFormat.V1_2_XML
        if any(marker in text for marker in EPCIS_2_0_XML_MARKERS):
            logger.debug("Detected EPCIS 2.0 XML document")
            return EPCISFormat.V2_0_XML

    raise UnknownFormatError(ERROR_MESSAGES['UNKNOWN_FORMAT'])
