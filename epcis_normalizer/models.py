"""Canonical, version-independent EPCIS document model"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EPCISFormat(str, Enum):
    """Supported EPCIS dialects"""
    V1_2_XML = "1.2-xml"
    V2_0_XML = "2.0-xml"
    V2_0_JSON_LD = "2.0-jsonld"

    @property
    def version(self) -> str:
        return "1.2" if self is EPCISFormat.V1_2_XML else "2.0"

    @property
    def is_xml(self) -> bool:
        return self is not EPCISFormat.V2_0_JSON_LD


EPCIS_FORMAT_LABELS = {
    EPCISFormat.V1_2_XML: '1.2 XML',
    EPCISFormat.V2_0_XML: '2.0 XML',
    EPCISFormat.V2_0_JSON_LD: '2.0 JSON-LD',
}

# Event types in extraction order, per dialect
EVENT_TYPES_V1_2 = (
    'ObjectEvent',
    'AggregationEvent',
    'TransactionEvent',
    'TransformationEvent',
    'QuantityEvent',  # legacy, removed in 2.0
)

EVENT_TYPES_V2_0 = (
    'ObjectEvent',
    'AggregationEvent',
    'TransactionEvent',
    'TransformationEvent',
    'AssociationEvent',
)

VALID_ACTIONS = {'OBSERVE', 'ADD', 'DELETE'}


class CanonicalModel(BaseModel):
    """Base for all canonical models: immutable, snake_case attributes, camelCase aliases"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    def to_dict(self) -> Dict[str, Any]:
        """Dump using the canonical camelCase field names"""
        return self.model_dump(by_alias=True, exclude_none=True, mode='json')


class TypedValue(CanonicalModel):
    """A `{type, value}` pair used for business transactions, sources and destinations"""
    type: Optional[str] = None
    value: Optional[str] = None


class QuantityElement(CanonicalModel):
    epc_class: Optional[str] = None
    quantity: Optional[Union[int, float]] = None
    uom: Optional[str] = None


class LocationReference(CanonicalModel):
    id: str


class MasterDataSummary(CanonicalModel):
    """Reciprocal link from an event to a master-data entry"""
    id: str
    name: str = ''
    type: str = 'unknown'


class RelatedEvent(CanonicalModel):
    event_index: int
    event_type: str
    event_time: Optional[str] = None


class ChildReference(CanonicalModel):
    id: str


class EPCISEvent(CanonicalModel):
    """A single normalized EPCIS event

    Every list-shaped field is always a list, whatever the source cardinality.
    Unrecognized source fields are kept in `extensions` under their original keys.
    """
    type: str
    event_time: Optional[str] = None
    event_time_zone_offset: Optional[str] = None
    record_time: Optional[str] = None
    event_id: Optional[str] = Field(default=None, alias='eventID')
    action: Optional[str] = None
    biz_step: Optional[str] = None
    disposition: Optional[str] = None
    epc_list: List[str] = Field(default_factory=list)
    parent_id: Optional[str] = Field(default=None, alias='parentID')
    child_epcs: List[str] = Field(default_factory=list, alias='childEPCs')
    quantity_list: List[QuantityElement] = Field(default_factory=list)
    child_quantity_list: List[QuantityElement] = Field(default_factory=list)
    input_epc_list: List[str] = Field(default_factory=list, alias='inputEPCList')
    output_epc_list: List[str] = Field(default_factory=list, alias='outputEPCList')
    input_quantity_list: List[QuantityElement] = Field(default_factory=list)
    output_quantity_list: List[QuantityElement] = Field(default_factory=list)
    transformation_id: Optional[str] = Field(default=None, alias='transformationID')
    epc_class: Optional[str] = None
    quantity: Optional[Union[int, float]] = None
    read_point: Optional[LocationReference] = None
    biz_location: Optional[LocationReference] = None
    biz_transaction_list: List[TypedValue] = Field(default_factory=list)
    source_list: List[TypedValue] = Field(default_factory=list)
    destination_list: List[TypedValue] = Field(default_factory=list)
    persistent_disposition: Optional[Dict[str, List[str]]] = None
    sensor_element_list: List[Any] = Field(default_factory=list)
    certification_info: Optional[Any] = None
    error_declaration: Optional[Dict[str, Any]] = None
    ilmd: Optional[Dict[str, Any]] = None
    extensions: Dict[str, Any] = Field(default_factory=dict)
    related_master_data: List[MasterDataSummary] = Field(default_factory=list)


class MasterDataEntry(CanonicalModel):
    """A vocabulary element, plus the links added by cross-linking"""
    id: str
    type: Optional[str] = None
    name: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    children: List[ChildReference] = Field(default_factory=list)
    related_epcs: List[str] = Field(default_factory=list, alias='relatedEPCs')
    related_events: List[RelatedEvent] = Field(default_factory=list)


class Party(CanonicalModel):
    """Sender or receiver identity; unknown properties are passed through"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra='allow')

    identifier: Optional[str] = None
    authority: Optional[str] = None
    name: Optional[str] = None


class ValidationResult(CanonicalModel):
    valid: bool = False
    errors: List[str] = Field(default_factory=list)


class CanonicalDocument(CanonicalModel):
    """The normalized document returned by every parser"""
    events: List[EPCISEvent] = Field(default_factory=list)
    master_data: Dict[str, MasterDataEntry] = Field(default_factory=dict)
    header: Dict[str, Any] = Field(default_factory=dict)
    sender: Party = Field(default_factory=Party)
    receiver: Party = Field(default_factory=Party)


class ValidationOptions(CanonicalModel):
    throw_on_error: bool = True


class ParserOptions(CanonicalModel):
    """Options recognized by `detect_and_create_parser`

    Accepts the camelCase names used by callers, e.g.
    `{'validate': False, 'validationOptions': {'throwOnError': False}}`.
    """
    validate_schema: bool = Field(default=True, alias='validate')
    validation_options: ValidationOptions = Field(default_factory=ValidationOptions)

    @classmethod
    def from_settings(cls, settings) -> 'ParserOptions':
        """Build default options from application settings"""
        return cls(
            validate_schema=settings.VALIDATE,
            validation_options=ValidationOptions(throw_on_error=settings.THROW_ON_ERROR),
        )
