import logging
from typing import Any, Dict, Iterable, Tuple

from ..exceptions import ERROR_MESSAGES, StructuralError
from ..jsonld import JsonLdDocument
from ..models import EPCIS_FORMAT_LABELS, EVENT_TYPES_V2_0, EPCISFormat
from ..tree import as_mapping, get_ci, strip_namespace_prefix, unwrap_text
from .base import BaseVersionAdapter, VocabularyElement
from .xml_adapter import DOCUMENT_IDENTIFICATION_FIELDS

logger = logging.getLogger(__name__)

VTYPE_PREFIX = 'urn:epcglobal:epcis:vtype:'

HEADER_EXCLUDED_KEYS = {'documentIdentification', 'sender', 'receiver', 'epcisMasterData'}


class EPCIS20JsonLdAdapter(BaseVersionAdapter):
    """EPCIS 2.0 JSON-LD

    Events arrive as one flat `eventList` with a `type` discriminator; they
    are regrouped into the same type order the XML dialects produce.
    """

    FORMAT = EPCISFormat.V2_0_JSON_LD
    LABEL = EPCIS_FORMAT_LABELS[EPCISFormat.V2_0_JSON_LD]
    EVENT_TYPES = EVENT_TYPES_V2_0
    RESERVED_EVENT_KEYS = frozenset({'type', '@type', '@context'})

    def check_structure(self, tree: Any) -> None:
        if not isinstance(tree, dict):
            raise StructuralError(f"{ERROR_MESSAGES['INVALID_EPCIS']}: document is not a JSON object")
        if not isinstance(tree.get('epcisBody'), dict):
            raise StructuralError(f"{ERROR_MESSAGES['INVALID_EPCIS']}: missing epcisBody")

    def iter_event_nodes(self, tree: Any) -> Iterable[Tuple[str, Any]]:
        canonical = {event_type.lower(): event_type for event_type in self.EVENT_TYPES}
        groups: Dict[str, list] = {event_type: [] for event_type in self.EVENT_TYPES}

        for index, raw in enumerate(JsonLdDocument(tree).get_events()):
            event = {strip_namespace_prefix(key, known_only=True): value for key, value in raw.items()}
            declared = unwrap_text(event.get('type', event.get('@type'))) or ''
            event_type = canonical.get(strip_namespace_prefix(declared, known_only=True).lower())
            if event_type is None:
                logger.warning(f"Skipping event {index} of unknown type '{declared}'")
                continue
            groups[event_type].append(event)

        for event_type in self.EVENT_TYPES:
            for event in groups[event_type]:
                yield event_type, event

    def iter_vocabulary_elements(self, tree: Any) -> Iterable[VocabularyElement]:
        for vocab_type, elements in JsonLdDocument(tree).get_vocabulary().items():
            vocab_type = self.expand_vocabulary_type(vocab_type)
            for element in elements:
                yield vocab_type, element['id'], element['attributes'], element['children']

    @staticmethod
    def expand_vocabulary_type(vocab_type: str) -> str:
        """Expand a bare vocabulary term such as `Location` to its CBV URN"""
        if vocab_type and ':' not in vocab_type and vocab_type != 'unknown':
            return f"{VTYPE_PREFIX}{vocab_type}"
        return vocab_type

    def header_container(self, tree: Any) -> Dict[str, Any]:
        return JsonLdDocument(as_mapping(tree)).header

    def extract_header(self, tree: Any) -> Dict[str, Any]:
        header: Dict[str, Any] = {}
        if 'schemaVersion' in tree:
            header['standardVersion'] = tree['schemaVersion']
        if 'creationDate' in tree:
            header['creationDate'] = tree['creationDate']

        epcis_header = self.header_container(tree)
        identification = epcis_header.get('documentIdentification')
        if identification is None:
            sbdh_identification = get_ci(
                get_ci(epcis_header, 'StandardBusinessDocumentHeader'), 'DocumentIdentification')
            if isinstance(sbdh_identification, dict):
                identification = {
                    key: unwrap_text(get_ci(sbdh_identification, source))
                    for source, key in DOCUMENT_IDENTIFICATION_FIELDS.items()
                    if get_ci(sbdh_identification, source) is not None
                }
        if identification is not None:
            header['documentIdentification'] = identification

        for key, value in epcis_header.items():
            if key not in HEADER_EXCLUDED_KEYS:
                header[key] = value
        return header
