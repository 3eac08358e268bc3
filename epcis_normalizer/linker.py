"""Links master-data entries to the events that reference them"""

import logging
import re
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# ":<digits>.<digits>." as found in urn:epc:id:(sgln|sgtin|sscc|...) identifiers
PREFIX_PATTERN = re.compile(r':(\d+)\.(\d+)(?:\.|$)')

EPC_FIELDS = ('epcList', 'childEPCs')


class CrossLinker:
    """Associates vocabulary entries with events sharing GS1 identifier prefixes

    EPCIS documents rarely carry explicit foreign keys between master data and
    events, so entries are matched on the numeric segments their identifiers
    share with the EPCs of each event.
    """

    @staticmethod
    def build_prefix_map(master_data: Dict[str, Dict[str, Any]]) -> Dict[str, str]:
        """Map identifier fragments to master-data ids

        Registers, per linkable id: the full matched fragment, the captured
        reference digits and the company-prefix segment. Later ids win on
        collision.
        """
        prefix_map: Dict[str, str] = {}
        for entry_id in master_data:
            match = PREFIX_PATTERN.search(entry_id)
            if not match:
                continue
            for key in (match.group(0), match.group(2), f":{match.group(1)}."):
                if key in prefix_map and prefix_map[key] != entry_id:
                    logger.debug(f"Prefix '{key}' reassigned from {prefix_map[key]} to {entry_id}")
                prefix_map[key] = entry_id
        return prefix_map

    def link(self, events: List[Dict[str, Any]], master_data: Dict[str, Dict[str, Any]]) -> None:
        """Add `relatedEPCs`/`relatedEvents` to master data and `relatedMasterData` to events in place"""
        for entry in master_data.values():
            entry.setdefault('relatedEPCs', [])
            entry.setdefault('relatedEvents', [])

        prefix_map = self.build_prefix_map(master_data)
        if not prefix_map:
            for event in events:
                event.setdefault('relatedMasterData', [])
            return

        link_count = 0
        for event_index, event in enumerate(events):
            related_ids: Dict[str, None] = {}
            for epc in self._event_epcs(event):
                for prefix, entry_id in prefix_map.items():
                    if prefix not in epc:
                        continue
                    entry = master_data[entry_id]
                    related_ids[entry_id] = None
                    if epc not in entry['relatedEPCs']:
                        entry['relatedEPCs'].append(epc)
                    if not any(rel['eventIndex'] == event_index for rel in entry['relatedEvents']):
                        entry['relatedEvents'].append({
                            'eventIndex': event_index,
                            'eventType': event.get('type'),
                            'eventTime': event.get('eventTime'),
                        })

            event['relatedMasterData'] = [
                {
                    'id': entry_id,
                    'name': master_data[entry_id].get('name') or '',
                    'type': master_data[entry_id].get('type') or 'unknown',
                }
                for entry_id in related_ids
            ]
            link_count += len(related_ids)

        logger.debug(f"Cross-linked {link_count} event/master-data pairs")

    @staticmethod
    def _event_epcs(event: Dict[str, Any]) -> List[str]:
        epcs = []
        for field in EPC_FIELDS:
            epcs.extend(event.get(field) or [])
        if event.get('parentID'):
            epcs.append(event['parentID'])
        return epcs
