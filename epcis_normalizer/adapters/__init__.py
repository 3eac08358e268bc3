from .base import BaseVersionAdapter, coerce_quantity
from .epcis12_xml import EPCIS12XMLAdapter
from .epcis20_jsonld import EPCIS20JsonLdAdapter
from .epcis20_xml import EPCIS20XMLAdapter

__all__ = [
    'BaseVersionAdapter',
    'EPCIS12XMLAdapter',
    'EPCIS20XMLAdapter',
    'EPCIS20JsonLdAdapter',
    'coerce_quantity',
]
