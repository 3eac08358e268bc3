from .json_validator import JSONSchemaValidator
from .xml_validator import XMLSchemaValidator

__all__ = ['JSONSchemaValidator', 'XMLSchemaValidator']
