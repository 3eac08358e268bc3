import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from jsonschema import Draft7Validator, FormatChecker

from ..detector import EPCIS_JSONLD_CONTEXTS
from ..models import ValidationResult
from ..parser import to_text
from ..tree import as_list

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent.parent / 'schemas' / 'epcis20.schema.json'


class JSONSchemaValidator:
    """Validates EPCIS 2.0 JSON-LD documents against the bundled JSON Schema"""

    def __init__(self, schema_path: Path = SCHEMA_PATH, context_uris: Iterable[str] = EPCIS_JSONLD_CONTEXTS):
        self.schema_path = Path(schema_path)
        self.context_uris = set(context_uris)
        self._validator: Optional[Draft7Validator] = None

    @property
    def validator(self) -> Draft7Validator:
        if self._validator is None:
            with open(self.schema_path, 'r', encoding='utf-8') as f:
                schema = json.load(f)
            self._validator = Draft7Validator(schema, format_checker=FormatChecker())
        return self._validator

    def has_epcis_context(self, data: Dict[str, Any]) -> bool:
        return any(isinstance(ctx, str) and ctx in self.context_uris for ctx in as_list(data.get('@context')))

    async def validate(self, content: Union[str, bytes], version: str = '2.0') -> ValidationResult:
        """Validate a JSON-LD document

        Args:
            content: Raw JSON-LD document
            version: EPCIS version; only '2.0' has a JSON serialization

        Returns:
            ValidationResult with `<path> <message>` errors
        """
        try:
            data = json.loads(to_text(content))
        except ValueError as e:
            return ValidationResult(valid=False, errors=[f"JSON parsing error: {e}"])

        if not isinstance(data, dict) or not self.has_epcis_context(data):
            return ValidationResult(valid=False, errors=['Missing or invalid EPCIS 2.0 context in JSON-LD document'])

        errors = []
        for error in sorted(self.validator.iter_errors(data), key=lambda e: [str(part) for part in e.absolute_path]):
            path = '/' + '/'.join(str(part) for part in error.absolute_path)
            errors.append(f"{path} {error.message}")

        if errors:
            logger.debug(f"JSON Schema validation found {len(errors)} errors")
            return ValidationResult(valid=False, errors=errors)
        return ValidationResult(valid=True)
