"""Error classes for the EPCIS normalizer"""

from typing import List, Optional


class EPCISParserError(Exception):
    """Base class for every failure surfaced to callers"""


class UnknownFormatError(EPCISParserError):
    """Raised when a document matches none of the supported EPCIS dialects"""


class StructuralError(EPCISParserError):
    """Raised when the parsed tree lacks the mandatory root/body container"""


class ParsingError(EPCISParserError):
    """Raised when an adapter fails unexpectedly while extracting a document"""


class ValidationError(EPCISParserError):
    """Raised when schema or syntax validation fails in throw mode

    Attributes:
        errors: Individual validation messages reported by the validator
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return f"{base}: {'; '.join(self.errors)}"


ERROR_MESSAGES = {
    'INVALID_XML': 'Invalid XML syntax',
    'INVALID_JSON': 'Invalid JSON syntax',
    'INVALID_EPCIS': 'Invalid EPCIS document structure',
    'UNSUPPORTED_VERSION': 'Unsupported EPCIS version',
    'VALIDATION_FAILED': 'schema validation failed',
    'UNKNOWN_FORMAT': (
        'Could not determine EPCIS document format. Please provide a valid EPCIS 1.2 XML, '
        'EPCIS 2.0 XML, or EPCIS 2.0 JSON-LD document.'
    ),
}
