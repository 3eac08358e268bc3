import logging
from typing import Any, Dict, List

from ..models import EPCIS_FORMAT_LABELS, EVENT_TYPES_V1_2, EPCISFormat
from ..tree import as_mapping
from .xml_adapter import XMLVersionAdapter

logger = logging.getLogger(__name__)


class EPCIS12XMLAdapter(XMLVersionAdapter):
    """EPCIS 1.2 XML

    Fields added after 1.0 live inside `<extension>` wrappers, sometimes
    nested two deep, and TransformationEvent sits in `EventList/extension`.
    """

    FORMAT = EPCISFormat.V1_2_XML
    LABEL = EPCIS_FORMAT_LABELS[EPCISFormat.V1_2_XML]
    EVENT_TYPES = EVENT_TYPES_V1_2
    # Hoisted into the event by prepare_event_node; also the TransformationEvent container
    RESERVED_EVENT_KEYS = frozenset({'extension'})

    def event_containers(self, tree: Any) -> List[Dict[str, Any]]:
        event_list = self.event_list(tree)
        containers = [event_list]
        if 'extension' in event_list:
            containers.append(as_mapping(event_list['extension']))
        return containers

    def prepare_event_node(self, node: Dict[str, Any]) -> Dict[str, Any]:
        """Hoist `extension` content to the event level without overriding direct fields"""
        hoisted = dict(node)
        extension = hoisted.pop('extension', None)
        while isinstance(extension, dict):
            nested = None
            for key, value in extension.items():
                if key == 'extension':
                    nested = value
                elif key in hoisted:
                    logger.debug(f"Ignoring extension field '{key}' already set on the event")
                else:
                    hoisted[key] = value
            extension = nested
        return hoisted
