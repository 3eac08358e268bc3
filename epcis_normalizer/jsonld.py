"""Thin accessor over a decoded EPCIS 2.0 JSON-LD document"""

import logging
from typing import Any, Dict, List

from .tree import as_list, as_mapping, get_path

logger = logging.getLogger(__name__)


class JsonLdDocument:
    """Read-only view exposing the events and vocabulary of an EPCIS 2.0 JSON-LD document"""

    def __init__(self, data: Dict[str, Any]):
        self.data = data

    @property
    def header(self) -> Dict[str, Any]:
        return as_mapping(self.data.get('epcisHeader'))

    @property
    def body(self) -> Dict[str, Any]:
        return as_mapping(self.data.get('epcisBody'))

    def get_events(self) -> List[Dict[str, Any]]:
        """Return the raw event objects in document order"""
        body = self.body
        events = body.get('eventList')
        if events is None:
            # EPCISQueryDocument wraps events in queryResults
            events = get_path(body, 'queryResults', 'resultsBody', 'eventList')
        return [event for event in as_list(events) if isinstance(event, dict)]

    def get_vocabulary(self) -> Dict[str, List[Dict[str, Any]]]:
        """Return vocabulary elements grouped by vocabulary type

        Each element is `{'id', 'attributes': {attrId: value}, 'children': [...]}`,
        whichever of the attribute/element list spellings the producer used.
        """
        vocabulary: Dict[str, List[Dict[str, Any]]] = {}
        master_data = as_mapping(self.header.get('epcisMasterData'))
        for vocab in as_list(master_data.get('vocabularyList')):
            if not isinstance(vocab, dict):
                continue
            vocab_type = vocab.get('type') or 'unknown'
            elements = vocab.get('vocabularyElementList')
            if elements is None:
                elements = vocab.get('vocabularyElements')
            bucket = vocabulary.setdefault(vocab_type, [])
            for element in as_list(elements):
                if not isinstance(element, dict):
                    continue
                bucket.append({
                    'id': element.get('id'),
                    'attributes': self._attributes(element.get('attributes')),
                    'children': as_list(element.get('children')),
                })
        return vocabulary

    @staticmethod
    def _attributes(node: Any) -> Dict[str, Any]:
        if isinstance(node, dict):
            return dict(node)
        attributes = {}
        for attr in as_list(node):
            if not isinstance(attr, dict) or 'id' not in attr:
                logger.debug(f"Skipping vocabulary attribute without id: {attr!r}")
                continue
            if 'attribute' in attr:
                attributes[attr['id']] = attr['attribute']
            else:
                attributes[attr['id']] = attr.get('value', '')
        return attributes
