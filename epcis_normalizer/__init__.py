"""Normalization of EPCIS 1.2 XML, 2.0 XML and 2.0 JSON-LD documents into one canonical model"""

from .assembler import EPCISDocumentParser, ParserState, detect_and_create_parser
from .detector import detect_format
from .exceptions import (EPCISParserError, ParsingError, StructuralError, UnknownFormatError,
                         ValidationError)
from .models import (CanonicalDocument, EPCISEvent, EPCISFormat, MasterDataEntry, ParserOptions,
                     Party, ValidationOptions, ValidationResult)

__version__ = '1.0.0'

__all__ = [
    'CanonicalDocument',
    'EPCISDocumentParser',
    'EPCISEvent',
    'EPCISFormat',
    'EPCISParserError',
    'MasterDataEntry',
    'ParserOptions',
    'ParserState',
    'ParsingError',
    'Party',
    'StructuralError',
    'UnknownFormatError',
    'ValidationError',
    'ValidationOptions',
    'ValidationResult',
    'detect_and_create_parser',
    'detect_format',
]
