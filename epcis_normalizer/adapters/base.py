import logging
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..identity import RECEIVER, SENDER, IdentityResolver
from ..models import EPCISFormat
from ..tree import (JSONLD_TEXT_KEY, TEXT_KEY, as_list, unwrap_text,
                    unwrap_text_or_value)

logger = logging.getLogger(__name__)

CBV_NAME_ATTRIBUTES = (
    'urn:epcglobal:cbv:mda#name',
    'urn:epcglobal:cbv:mda:name',
    'cbvmda:name',
    'name',
)

VocabularyElement = Tuple[Optional[str], Any, Dict[str, Any], List[Any]]


def coerce_quantity(node: Any):
    """Return a quantity as int when integral, float otherwise, None when absent

    Raises:
        ValueError: If the quantity is not numeric
    """
    value, _ = unwrap_text_or_value(node)
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value!r}")
    number = value if isinstance(value, (int, float)) else float(str(value).strip())
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _items(node: Any, item_key: str) -> List[Any]:
    """Children of a list container: XML wraps them under `item_key`, JSON does not"""
    if isinstance(node, dict):
        return as_list(node.get(item_key))
    return [item for item in as_list(node) if item != '']


def text_field(node: Any) -> Optional[str]:
    return unwrap_text(node) or None


def epc_list_field(node: Any) -> List[str]:
    values = []
    for item in _items(node, 'epc'):
        value = unwrap_text(item)
        if value:
            values.append(value)
    return values


def quantity_list_field(node: Any) -> List[Dict[str, Any]]:
    elements = []
    for item in _items(node, 'quantityElement'):
        if not isinstance(item, dict):
            raise TypeError(f"Expected a quantity element, got {item!r}")
        element = {}
        epc_class = unwrap_text(item.get('epcClass'))
        if epc_class:
            element['epcClass'] = epc_class
        try:
            quantity = coerce_quantity(item.get('quantity'))
        except ValueError as e:
            logger.warning(f"Dropping quantity for {epc_class}: {e}")
            quantity = None
        if quantity is not None:
            element['quantity'] = quantity
        uom = unwrap_text(item.get('uom'))
        if uom:
            element['uom'] = uom
        elements.append(element)
    return elements


def location_field(node: Any) -> Optional[Dict[str, str]]:
    identifier = unwrap_text(node.get('id')) if isinstance(node, dict) else unwrap_text(node)
    return {'id': identifier} if identifier else None


def typed_list_field(node: Any, item_key: str) -> List[Dict[str, Optional[str]]]:
    """Map each list element to `{type, value}`

    XML elements carry the type as an attribute and the value as text;
    JSON-LD objects carry the value under the element name (e.g. `source`).
    """
    entries = []
    for item in _items(node, item_key):
        if isinstance(item, dict):
            raw = item.get(item_key, item.get(TEXT_KEY, item.get(JSONLD_TEXT_KEY)))
            entries.append({'type': unwrap_text(item.get('type')), 'value': unwrap_text(raw)})
        else:
            entries.append({'type': None, 'value': unwrap_text(item)})
    return entries


def persistent_disposition_field(node: Any) -> Optional[Dict[str, List[str]]]:
    if node in (None, ''):
        return None
    if not isinstance(node, dict):
        raise TypeError(f"Expected set/unset mapping, got {node!r}")
    result = {}
    for key in ('set', 'unset'):
        values = [unwrap_text(value) for value in as_list(node.get(key))]
        values = [value for value in values if value]
        if values:
            result[key] = values
    return result or None


def sensor_element_list_field(node: Any) -> List[Any]:
    elements = []
    for item in _items(node, 'sensorElement'):
        if isinstance(item, dict) and 'sensorReport' in item:
            item = dict(item, sensorReport=as_list(item['sensorReport']))
        elements.append(item)
    return elements


def mapping_field(node: Any) -> Optional[Dict[str, Any]]:
    if node in (None, ''):
        return None
    if not isinstance(node, dict):
        raise TypeError(f"Expected a mapping, got {node!r}")
    return node


def verbatim_field(node: Any) -> Any:
    return None if node in (None, '') else node


# Structured event fields in output order; anything else goes to `extensions`
FIELD_EXTRACTORS: Tuple[Tuple[str, Callable[[Any], Any]], ...] = (
    ('eventTime', text_field),
    ('eventTimeZoneOffset', text_field),
    ('recordTime', text_field),
    ('eventID', text_field),
    ('action', text_field),
    ('bizStep', text_field),
    ('disposition', text_field),
    ('epcList', epc_list_field),
    ('parentID', text_field),
    ('childEPCs', epc_list_field),
    ('quantityList', quantity_list_field),
    ('childQuantityList', quantity_list_field),
    ('inputEPCList', epc_list_field),
    ('outputEPCList', epc_list_field),
    ('inputQuantityList', quantity_list_field),
    ('outputQuantityList', quantity_list_field),
    ('transformationID', text_field),
    ('epcClass', text_field),
    ('quantity', coerce_quantity),
    ('readPoint', location_field),
    ('bizLocation', location_field),
    ('bizTransactionList', partial(typed_list_field, item_key='bizTransaction')),
    ('sourceList', partial(typed_list_field, item_key='source')),
    ('destinationList', partial(typed_list_field, item_key='destination')),
    ('persistentDisposition', persistent_disposition_field),
    ('sensorElementList', sensor_element_list_field),
    ('certificationInfo', verbatim_field),
    ('errorDeclaration', mapping_field),
    ('ilmd', mapping_field),
)

STRUCTURED_FIELDS = frozenset(field for field, _ in FIELD_EXTRACTORS)

# Fields that must always come out as lists
LIST_FIELDS = (
    'epcList', 'childEPCs', 'quantityList', 'childQuantityList', 'inputEPCList',
    'outputEPCList', 'inputQuantityList', 'outputQuantityList', 'bizTransactionList',
    'sourceList', 'destinationList', 'sensorElementList',
)


class BaseVersionAdapter:
    """Common extraction pipeline shared by the three dialect adapters

    Subclasses locate events, vocabulary and header in their own tree shape;
    field normalization, master-data reshaping and identity resolution are
    shared.
    """

    FORMAT: EPCISFormat
    LABEL = ''
    EVENT_TYPES: Tuple[str, ...] = ()
    # Source keys that are neither structured fields nor extensions
    RESERVED_EVENT_KEYS: frozenset = frozenset()

    def check_structure(self, tree: Any) -> None:
        """Raise StructuralError if the mandatory root/body container is missing"""
        raise NotImplementedError

    def iter_event_nodes(self, tree: Any) -> Iterable[Tuple[str, Any]]:
        """Yield (event type, raw event node) in canonical order"""
        raise NotImplementedError

    def iter_vocabulary_elements(self, tree: Any) -> Iterable[VocabularyElement]:
        """Yield (vocabulary type, element id, raw attributes by id, raw child ids)"""
        raise NotImplementedError

    def header_container(self, tree: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_header(self, tree: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def prepare_event_node(self, node: Dict[str, Any]) -> Dict[str, Any]:
        return node

    def extract(self, tree: Any) -> Dict[str, Any]:
        """Run every extraction step over an already structure-checked tree

        Returns:
            Fragment with `events`, `masterData`, `header`, `sender` and `receiver`
        """
        events = self.extract_events(tree)
        master_data = self.extract_master_data(tree)
        header = self.extract_header(tree)
        sender, receiver = self.extract_sender_receiver(tree, master_data, events)
        logger.info(f"Extracted {len(events)} events and {len(master_data)} master data entries "
                    f"from EPCIS {self.LABEL}")
        return {
            'events': events,
            'masterData': master_data,
            'header': header,
            'sender': sender,
            'receiver': receiver,
        }

    def extract_events(self, tree: Any) -> List[Dict[str, Any]]:
        return [self.build_event(event_type, node) for event_type, node in self.iter_event_nodes(tree)]

    def build_event(self, event_type: str, node: Any) -> Dict[str, Any]:
        """Normalize one raw event node

        Structured fields are extracted first; a field that fails to extract is
        logged and omitted. Remaining keys are copied to `extensions`.
        """
        if not isinstance(node, dict):
            logger.warning(f"{event_type} has no content, emitting an empty event")
            node = {}
        node = self.prepare_event_node(node)

        event: Dict[str, Any] = {'type': event_type}
        for field, extractor in FIELD_EXTRACTORS:
            if field not in node:
                continue
            try:
                value = extractor(node[field])
            except Exception as e:
                logger.warning(f"Omitting malformed {field} in {event_type}: {e}")
                continue
            if value is not None:
                event[field] = value

        for field in LIST_FIELDS:
            event.setdefault(field, [])

        extensions: Dict[str, Any] = {}
        for key, value in node.items():
            if key in STRUCTURED_FIELDS or key in self.RESERVED_EVENT_KEYS:
                continue
            extensions.setdefault(key, value)
        event['extensions'] = extensions
        return event

    def extract_master_data(self, tree: Any) -> Dict[str, Dict[str, Any]]:
        master_data: Dict[str, Dict[str, Any]] = {}
        for vocab_type, element_id, raw_attributes, children in self.iter_vocabulary_elements(tree):
            element_id = unwrap_text(element_id)
            if not element_id:
                logger.warning(f"Skipping vocabulary element without id in {vocab_type}")
                continue
            if element_id in master_data:
                logger.debug(f"Master data id {element_id} repeated, keeping the last occurrence")
            master_data[element_id] = self.build_master_data_entry(element_id, vocab_type, raw_attributes, children)
        return master_data

    def build_master_data_entry(self, element_id: str, vocab_type: Optional[str],
                                raw_attributes: Dict[str, Any], children: List[Any]) -> Dict[str, Any]:
        attributes: Dict[str, Any] = {}
        for attr_id, raw in raw_attributes.items():
            try:
                value, aux = unwrap_text_or_value(raw)
            except Exception as e:
                logger.warning(f"Omitting attribute {attr_id} of {element_id}: {e}")
                continue
            attributes[attr_id] = {'value': value, **aux} if aux else value

        entry: Dict[str, Any] = {
            'id': element_id,
            'type': vocab_type,
            'attributes': attributes,
            'children': [{'id': child_id} for child_id in self._child_ids(children)],
        }
        name = self.promote_name(attributes)
        if name:
            entry['name'] = name
        return entry

    @staticmethod
    def promote_name(attributes: Dict[str, Any]) -> Optional[str]:
        for key in CBV_NAME_ATTRIBUTES:
            if key in attributes:
                value = attributes[key]
                if isinstance(value, dict):
                    value = value.get('value')
                return None if value is None else str(value)
        return None

    @staticmethod
    def _child_ids(children: List[Any]) -> List[str]:
        ids = []
        for child in children:
            child_id = unwrap_text(child.get('id')) if isinstance(child, dict) else unwrap_text(child)
            if child_id:
                ids.append(child_id)
        return ids

    def extract_sender_receiver(self, tree: Any, master_data: Dict[str, Dict[str, Any]],
                                events: List[Dict[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        resolver = IdentityResolver(self.header_container(tree), master_data, events)
        return resolver.resolve(SENDER), resolver.resolve(RECEIVER)
