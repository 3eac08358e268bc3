import logging
from typing import Any, Dict, Iterable, List, Tuple

from ..exceptions import ERROR_MESSAGES, StructuralError
from ..tree import as_list, as_mapping, get_path, unwrap_text
from .base import BaseVersionAdapter, VocabularyElement

logger = logging.getLogger(__name__)

ROOT_TAGS = ('EPCISDocument', 'EPCISQueryDocument')

SBDH = 'StandardBusinessDocumentHeader'

# SBDH DocumentIdentification child -> canonical header key
DOCUMENT_IDENTIFICATION_FIELDS = {
    'CreationDateAndTime': 'creationDateTime',
    'InstanceIdentifier': 'instanceIdentifier',
    'Standard': 'standard',
    'TypeVersion': 'typeVersion',
    'Type': 'type',
}

HEADER_EXCLUDED_KEYS = {SBDH, 'extension', 'EPCISMasterData'}
SBDH_EXCLUDED_KEYS = {'DocumentIdentification', 'Sender', 'Receiver'}


class XMLVersionAdapter(BaseVersionAdapter):
    """Extraction over the tree produced by `TreeParser.parse_xml`

    Both XML dialects share the `EPCISDocument/EPCISBody/EventList` shape and
    keep master data in the header; they differ in event types and in where
    1.2 parks later additions.
    """

    def root(self, tree: Any) -> Tuple[str, Dict[str, Any]]:
        tree = as_mapping(tree)
        for tag in ROOT_TAGS:
            if tag in tree:
                return tag, as_mapping(tree[tag])
        raise StructuralError(f"{ERROR_MESSAGES['INVALID_EPCIS']}: missing EPCISDocument root element")

    def check_structure(self, tree: Any) -> None:
        _, document = self.root(tree)
        if 'EPCISBody' not in document:
            raise StructuralError(f"{ERROR_MESSAGES['INVALID_EPCIS']}: missing EPCISBody")

    def event_list(self, tree: Any) -> Dict[str, Any]:
        tag, document = self.root(tree)
        body = as_mapping(document.get('EPCISBody'))
        if tag == 'EPCISQueryDocument':
            return as_mapping(get_path(body, 'QueryResults', 'resultsBody', 'EventList'))
        return as_mapping(body.get('EventList'))

    def event_containers(self, tree: Any) -> List[Dict[str, Any]]:
        """Mappings of event tag -> event node(s) to scan"""
        return [self.event_list(tree)]

    def iter_event_nodes(self, tree: Any) -> Iterable[Tuple[str, Any]]:
        containers = self.event_containers(tree)
        known = set(self.EVENT_TYPES) | self.RESERVED_EVENT_KEYS
        for container in containers:
            for tag in container:
                if tag not in known:
                    logger.warning(f"Skipping unknown element '{tag}' in EventList")
        for event_type in self.EVENT_TYPES:
            for container in containers:
                for node in as_list(container.get(event_type)):
                    yield event_type, node

    def header_container(self, tree: Any) -> Dict[str, Any]:
        _, document = self.root(tree)
        return as_mapping(document.get('EPCISHeader'))

    def master_data_container(self, tree: Any) -> Dict[str, Any]:
        header = self.header_container(tree)
        master_data = get_path(header, 'extension', 'EPCISMasterData')
        if master_data is None:
            master_data = header.get('EPCISMasterData')
        return as_mapping(master_data)

    def iter_vocabulary_elements(self, tree: Any) -> Iterable[VocabularyElement]:
        vocabulary_list = as_mapping(self.master_data_container(tree).get('VocabularyList'))
        for vocabulary in as_list(vocabulary_list.get('Vocabulary')):
            vocabulary = as_mapping(vocabulary)
            vocab_type = unwrap_text(vocabulary.get('type'))
            elements = as_list(vocabulary.get('VocabularyElement'))
            element_list = vocabulary.get('VocabularyElementList')
            if element_list is not None:
                elements += as_list(as_mapping(element_list).get('VocabularyElement'))
            for element in elements:
                element = as_mapping(element)
                children = as_list(as_mapping(element.get('children')).get('id'))
                yield vocab_type, element.get('id'), self._raw_attributes(element), children

    @staticmethod
    def _raw_attributes(element: Dict[str, Any]) -> Dict[str, Any]:
        """Map attribute id to its node with the `id` XML attribute removed"""
        attributes = {}
        for attribute in as_list(element.get('attribute')):
            if not isinstance(attribute, dict) or not attribute.get('id'):
                logger.debug(f"Skipping vocabulary attribute without id in {element.get('id')}")
                continue
            rest = {key: value for key, value in attribute.items() if key != 'id'}
            attributes[attribute['id']] = rest if rest else ''
        return attributes

    def extract_header(self, tree: Any) -> Dict[str, Any]:
        _, document = self.root(tree)
        header: Dict[str, Any] = {}
        if 'schemaVersion' in document:
            header['standardVersion'] = document['schemaVersion']
        if 'creationDate' in document:
            header['creationDate'] = document['creationDate']

        epcis_header = self.header_container(tree)
        sbdh = epcis_header.get(SBDH)
        if isinstance(sbdh, dict):
            identification = as_mapping(sbdh.get('DocumentIdentification'))
            header['documentIdentification'] = {
                key: unwrap_text(identification[source])
                for source, key in DOCUMENT_IDENTIFICATION_FIELDS.items()
                if source in identification
            }
            for key, value in sbdh.items():
                if key not in SBDH_EXCLUDED_KEYS:
                    header[key] = value

        for key, value in epcis_header.items():
            if key not in HEADER_EXCLUDED_KEYS:
                header[key] = value
        return header
