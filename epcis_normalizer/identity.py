"""Heuristic resolution of the document sender and receiver

Strategies run in a fixed order. Each one returns a partial party (or None);
a strategy only fills fields left unset by the strategies before it, and
resolution stops once both an identifier and a name are known.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .tree import as_list, as_mapping, get_ci, unwrap_text, unwrap_text_or_value

logger = logging.getLogger(__name__)

SENDER = 'sender'
RECEIVER = 'receiver'

PARTY_PATTERN = re.compile(r':pgln:|/417/')

OWNING_PARTY_ATTRIBUTE = 'urn:epcglobal:cbv:owning_party'
OWNING_PARTY_TYPES = {
    'urn:epcglobal:cbv:sdt:owning_party',
    'https://ref.gs1.org/cbv/SDT-owning_party',
    'owning_party',
}

# Role hints searched for in a master-data `role` attribute
ROLE_HINTS = {
    SENDER: ('sender', 'source'),
    RECEIVER: ('receiver', 'destination'),
}

# Value of the owning-party attribute that marks each role
OWNING_PARTY_FLAGS = {
    SENDER: 'true',
    RECEIVER: 'false',
}

EVENT_LISTS = {
    SENDER: 'sourceList',
    RECEIVER: 'destinationList',
}

Party = Dict[str, Any]


class IdentityResolver:
    """Resolves sender/receiver from the header, master data and events

    Args:
        header: The dialect's raw header container (XML `EPCISHeader` or JSON-LD `epcisHeader`)
        master_data: Extracted master-data entries keyed by id
        events: Extracted events in canonical order
    """

    def __init__(self, header: Any, master_data: Dict[str, Dict[str, Any]], events: List[Dict[str, Any]]):
        self.header = as_mapping(header)
        self.master_data = master_data
        self.events = events

    @property
    def strategies(self) -> Tuple[Tuple[str, Callable[[str], Optional[Party]]], ...]:
        """Ordered (name, strategy) pairs; earlier strategies take priority"""
        return (
            ('business_document_header', self._from_business_document_header),
            ('header_party', self._from_header_party),
            ('master_data_party', self._from_master_data),
            ('event_owning_party', self._from_event_owning_party),
        )

    def resolve(self, role: str) -> Party:
        """Resolve one party

        Args:
            role: 'sender' or 'receiver'

        Returns:
            Party mapping; empty when nothing could be resolved
        """
        party: Party = {}
        for name, strategy in self.strategies:
            try:
                found = strategy(role)
            except Exception as e:
                logger.warning(f"Identity strategy '{name}' failed for {role}: {e}")
                continue
            if not found:
                continue
            filled = [key for key, value in found.items()
                      if value not in (None, '') and key not in party]
            for key in filled:
                party[key] = found[key]
            if filled:
                logger.debug(f"{role} fields {filled} resolved by '{name}'")
            if party.get('identifier') and party.get('name'):
                break
        return party

    def _from_business_document_header(self, role: str) -> Optional[Party]:
        sbdh = get_ci(self.header, 'StandardBusinessDocumentHeader')
        parties = as_list(get_ci(sbdh, role))
        if not parties or not isinstance(parties[0], dict):
            return None
        data = parties[0]

        party: Party = {}
        identifier, aux = unwrap_text_or_value(get_ci(data, 'Identifier'))
        if identifier is not None:
            party['identifier'] = str(identifier)
            authority = get_ci(aux, 'Authority')
            if authority:
                party['authority'] = unwrap_text(authority)

        for contact_info in as_list(get_ci(data, 'ContactInformation')):
            name = unwrap_text(get_ci(contact_info, 'Contact'))
            if name:
                party['name'] = name
                break
        return party

    def _from_header_party(self, role: str) -> Optional[Party]:
        data = get_ci(self.header, role)
        if isinstance(data, str):
            return {'identifier': data}
        if not isinstance(data, dict):
            return None
        party = dict(data)
        if 'identifier' in party:
            identifier, aux = unwrap_text_or_value(party['identifier'])
            party['identifier'] = None if identifier is None else str(identifier)
            if 'authority' not in party and get_ci(aux, 'authority'):
                party['authority'] = unwrap_text(get_ci(aux, 'authority'))
        return party

    def _from_master_data(self, role: str) -> Optional[Party]:
        for entry_id, entry in self.master_data.items():
            if not PARTY_PATTERN.search(entry_id):
                continue
            attributes = entry.get('attributes') or {}
            owning_party = unwrap_text(attributes.get(OWNING_PARTY_ATTRIBUTE))
            role_hint = (unwrap_text(attributes.get('role')) or '').lower()
            if (owning_party is not None and owning_party.lower() == OWNING_PARTY_FLAGS[role]) or \
                    any(hint in role_hint for hint in ROLE_HINTS[role]):
                return {
                    'identifier': entry_id,
                    'name': entry.get('name') or unwrap_text(attributes.get('name')),
                }
        return None

    def _from_event_owning_party(self, role: str) -> Optional[Party]:
        for event in self.events:
            for item in event.get(EVENT_LISTS[role]) or []:
                if item.get('type') in OWNING_PARTY_TYPES and item.get('value'):
                    identifier = item['value']
                    entry = self.master_data.get(identifier) or {}
                    return {'identifier': identifier, 'name': entry.get('name')}
        return None
