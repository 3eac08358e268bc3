import logging
from pathlib import Path
from typing import Dict, Tuple, Union

import lxml.etree as ET

from ..models import ValidationResult
from ..parser import TreeParser, to_bytes

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent.parent / 'schemas'

SCHEMA_FILES = {
    '1.2': 'epcis12.xsd',
    '2.0': 'epcis20.xsd',
}

QUERY_SCHEMA_FILES = {
    '1.2': 'epcis12-query.xsd',
    '2.0': 'epcis20-query.xsd',
}

# Accepted root element -> bundled schema per version
ROOT_SCHEMA_FILES = {
    'EPCISDocument': SCHEMA_FILES,
    'EPCISQueryDocument': QUERY_SCHEMA_FILES,
}


class XMLSchemaValidator:
    """Validates EPCIS XML documents against the bundled XSDs

    Compiled schemas are cached per validator instance, keyed by EPCIS version
    and root element.
    """

    def __init__(self, schema_dir: Path = SCHEMA_DIR):
        self.schema_dir = Path(schema_dir)
        self._schema_cache: Dict[Tuple[str, str], ET.XMLSchema] = {}

    def load_schema(self, version: str, root: str = 'EPCISDocument') -> ET.XMLSchema:
        """Load and compile the XSD for an EPCIS version and document root

        Raises:
            ValueError: If the version has no bundled schema
        """
        key = (version, root)
        if key in self._schema_cache:
            return self._schema_cache[key]
        schema_files = ROOT_SCHEMA_FILES[root]
        if version not in schema_files:
            raise ValueError(f"Unsupported EPCIS version: {version}")

        schema_path = self.schema_dir / schema_files[version]
        logger.debug(f"Loading XSD schema for EPCIS {version} {root} from {schema_path}")
        schema = ET.XMLSchema(ET.parse(str(schema_path)))
        self._schema_cache[key] = schema
        return schema

    async def validate(self, content: Union[str, bytes], version: str) -> ValidationResult:
        """Validate an XML document

        Args:
            content: Raw XML document
            version: EPCIS version, '1.2' or '2.0'

        Returns:
            ValidationResult with `Line <n>: <message>` errors
        """
        errors = []
        try:
            document = ET.fromstring(to_bytes(content), TreeParser._xml_parser())
        except ET.XMLSyntaxError as e:
            return ValidationResult(valid=False, errors=[f"XML parsing error: {e}"])

        root_name = ET.QName(document).localname
        if root_name not in ROOT_SCHEMA_FILES:
            return ValidationResult(
                valid=False,
                errors=[f"Invalid root element: expected 'EPCISDocument' or 'EPCISQueryDocument', "
                        f"got '{root_name}'"],
            )

        try:
            schema = self.load_schema(version, root_name)
        except (ValueError, OSError, ET.XMLSchemaParseError) as e:
            return ValidationResult(valid=False, errors=[f"Schema validation error: {e}"])

        if schema.validate(document):
            return ValidationResult(valid=True)

        for error in schema.error_log:
            errors.append(f"Line {error.line}: {error.message}")
        logger.debug(f"XSD validation found {len(errors)} errors")
        return ValidationResult(valid=False, errors=errors)
