"""Test configuration and fixtures"""

import json

import pytest

from epcis_normalizer.models import ValidationResult

SBDH_NS = "http://www.unece.org/cefact/namespaces/StandardBusinessDocumentHeader"

EPCIS_12_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<epcis:EPCISDocument xmlns:epcis="urn:epcglobal:epcis:xsd:1"
                     xmlns:sbdh="{SBDH_NS}"
                     schemaVersion="1.2" creationDate="2024-01-15T09:00:00.000Z">
    <EPCISHeader>
        <sbdh:StandardBusinessDocumentHeader>
            <sbdh:HeaderVersion>1.0</sbdh:HeaderVersion>
            <sbdh:Sender>
                <sbdh:Identifier Authority="SGLN">urn:epc:id:sgln:0614141.00001.0</sbdh:Identifier>
                <sbdh:ContactInformation>
                    <sbdh:Contact>John Doe</sbdh:Contact>
                </sbdh:ContactInformation>
            </sbdh:Sender>
            <sbdh:Receiver>
                <sbdh:Identifier Authority="SGLN">urn:epc:id:sgln:0614142.00001.0</sbdh:Identifier>
                <sbdh:ContactInformation>
                    <sbdh:Contact>Jane Smith</sbdh:Contact>
                </sbdh:ContactInformation>
            </sbdh:Receiver>
            <sbdh:DocumentIdentification>
                <sbdh:Standard>EPCglobal</sbdh:Standard>
                <sbdh:TypeVersion>1.0</sbdh:TypeVersion>
                <sbdh:InstanceIdentifier>Test-Instance-ID</sbdh:InstanceIdentifier>
                <sbdh:Type>Events</sbdh:Type>
                <sbdh:CreationDateAndTime>2024-01-15T09:00:00.000Z</sbdh:CreationDateAndTime>
            </sbdh:DocumentIdentification>
        </sbdh:StandardBusinessDocumentHeader>
        <extension>
            <EPCISMasterData>
                <VocabularyList>
                    <Vocabulary type="urn:epcglobal:epcis:vtype:Location">
                        <VocabularyElementList>
                            <VocabularyElement id="urn:epc:id:sgln:0614141.00001.0">
                                <attribute id="urn:epcglobal:cbv:mda#name">Distribution Center</attribute>
                                <attribute id="urn:epcglobal:cbv:mda#countryCode">US</attribute>
                            </VocabularyElement>
                        </VocabularyElementList>
                    </Vocabulary>
                </VocabularyList>
            </EPCISMasterData>
        </extension>
    </EPCISHeader>
    <EPCISBody>
        <EventList>
            <ObjectEvent>
                <eventTime>2024-01-15T10:30:47.000Z</eventTime>
                <eventTimeZoneOffset>+01:00</eventTimeZoneOffset>
                <epcList>
                    <epc>urn:epc:id:sgtin:0614141.107346.2017</epc>
                    <epc>urn:epc:id:sgtin:0614141.107346.2018</epc>
                </epcList>
                <action>OBSERVE</action>
                <bizStep>urn:epcglobal:cbv:bizstep:shipping</bizStep>
                <disposition>urn:epcglobal:cbv:disp:in_transit</disposition>
                <readPoint><id>urn:epc:id:sgln:0614141.00001.0</id></readPoint>
                <bizTransactionList>
                    <bizTransaction type="urn:epcglobal:cbv:btt:po">urn:epcglobal:cbv:bt:0614141000005:PO-1234</bizTransaction>
                </bizTransactionList>
            </ObjectEvent>
        </EventList>
    </EPCISBody>
</epcis:EPCISDocument>
"""

EPCIS_20_XML = """<?xml version="1.0" encoding="UTF-8"?>
<epcis:EPCISDocument xmlns:epcis="urn:epcglobal:epcis:xsd:2"
                     xmlns:example="http://ns.example.com/epcis"
                     schemaVersion="2.0" creationDate="2024-02-01T08:00:00.000Z">
    <EPCISHeader>
        <EPCISMasterData>
            <VocabularyList>
                <Vocabulary type="urn:epcglobal:epcis:vtype:EPCClass">
                    <VocabularyElementList>
                        <VocabularyElement id="urn:epc:idpat:sgtin:4012345.054321.*">
                            <attribute id="urn:epcglobal:cbv:mda#regulatedProductName">Acetaminophen</attribute>
                        </VocabularyElement>
                    </VocabularyElementList>
                </Vocabulary>
                <Vocabulary type="urn:epcglobal:epcis:vtype:Location">
                    <VocabularyElementList>
                        <VocabularyElement id="urn:epc:id:sgln:4012345.00000.0">
                            <attribute id="urn:epcglobal:cbv:mda#name">Plant A</attribute>
                            <children>
                                <id>urn:epc:id:sgln:4012345.00001.0</id>
                                <id>urn:epc:id:sgln:4012345.00002.0</id>
                            </children>
                        </VocabularyElement>
                    </VocabularyElementList>
                </Vocabulary>
            </VocabularyList>
        </EPCISMasterData>
    </EPCISHeader>
    <EPCISBody>
        <EventList>
            <AssociationEvent>
                <eventTime>2024-02-01T09:00:00.000Z</eventTime>
                <eventTimeZoneOffset>+01:00</eventTimeZoneOffset>
                <parentID>urn:epc:id:grai:4012345.55555.987</parentID>
                <childEPCs>
                    <epc>urn:epc:id:giai:4012345.SENSOR1</epc>
                </childEPCs>
                <action>ADD</action>
                <bizStep>urn:epcglobal:cbv:bizstep:assembling</bizStep>
            </AssociationEvent>
            <ObjectEvent>
                <eventTime>2024-02-01T08:30:00.000Z</eventTime>
                <eventTimeZoneOffset>+01:00</eventTimeZoneOffset>
                <eventID>ni:///sha-256;abc?ver=CBV2.0</eventID>
                <epcList>
                    <epc>urn:epc:id:sgtin:4012345.054321.1001</epc>
                </epcList>
                <action>OBSERVE</action>
                <bizStep>urn:epcglobal:cbv:bizstep:shipping</bizStep>
                <disposition>urn:epcglobal:cbv:disp:in_transit</disposition>
                <readPoint><id>urn:epc:id:sgln:4012345.00001.0</id></readPoint>
                <bizLocation><id>urn:epc:id:sgln:4012345.00000.0</id></bizLocation>
                <sourceList>
                    <source type="urn:epcglobal:cbv:sdt:owning_party">urn:epc:id:pgln:4012345.00000</source>
                </sourceList>
                <destinationList>
                    <destination type="urn:epcglobal:cbv:sdt:owning_party">urn:epc:id:pgln:0614141.00000</destination>
                </destinationList>
                <persistentDisposition>
                    <set>urn:epcglobal:cbv:disp:completeness_verified</set>
                </persistentDisposition>
                <sensorElementList>
                    <sensorElement>
                        <sensorMetadata time="2024-02-01T08:29:00.000Z"/>
                        <sensorReport type="gs1:Temperature" value="4.5" uom="CEL"/>
                    </sensorElement>
                </sensorElementList>
                <example:myField>Example Value</example:myField>
            </ObjectEvent>
        </EventList>
    </EPCISBody>
</epcis:EPCISDocument>
"""

EPCIS_20_JSONLD = {
    "@context": [
        "https://ref.gs1.org/standards/epcis/2.0.0/epcis-context.jsonld",
        {"example": "http://ns.example.com/epcis/"},
    ],
    "type": "EPCISDocument",
    "schemaVersion": "2.0",
    "creationDate": "2024-03-01T08:00:00.000Z",
    "epcisHeader": {
        "documentIdentification": {"instanceIdentifier": "Test-Instance-ID"},
        "sender": {"identifier": "urn:epc:id:pgln:0614141.00000", "name": "Acme Corp"},
        "epcisMasterData": {
            "vocabularyList": [
                {
                    "type": "Location",
                    "vocabularyElementList": [
                        {
                            "id": "urn:epc:id:sgln:0614141.00777.0",
                            "attributes": [
                                {"id": "urn:epcglobal:cbv:mda#name", "attribute": "Warehouse 7"},
                            ],
                            "children": ["urn:epc:id:sgln:0614141.00777.1"],
                        }
                    ],
                },
                {
                    "type": "urn:epcglobal:epcis:vtype:Party",
                    "vocabularyElementList": [
                        {
                            "id": "urn:epc:id:pgln:0012345.00000",
                            "attributes": [
                                {"id": "urn:epcglobal:cbv:mda#name", "attribute": "Retailer Inc"},
                                {"id": "role", "attribute": "receiver"},
                            ],
                        }
                    ],
                },
            ]
        },
    },
    "epcisBody": {
        "eventList": [
            {
                "type": "TransformationEvent",
                "eventTime": "2024-03-01T10:00:00.000Z",
                "eventTimeZoneOffset": "+00:00",
                "inputEPCList": ["urn:epc:id:sgtin:0614141.011111.1"],
                "outputEPCList": ["urn:epc:id:sgtin:0614141.022222.1"],
                "transformationID": "urn:epc:id:gdti:0614141.12345.1",
                "inputQuantityList": [
                    {"epcClass": "urn:epc:class:lgtin:0614141.033333.LOT1", "quantity": 10.5, "uom": "KGM"}
                ],
            },
            {
                "type": "ObjectEvent",
                "eventTime": "2024-03-01T09:00:00.000Z",
                "eventTimeZoneOffset": "+00:00",
                "eventID": "urn:uuid:1f1b8e2a-6a5a-4c5e-9d3b-000000000001",
                "epcList": ["urn:epc:id:sgtin:0614141.107346.2017"],
                "action": "ADD",
                "bizStep": "commissioning",
                "disposition": "active",
                "readPoint": {"id": "urn:epc:id:sgln:0614141.00777.0"},
                "bizTransactionList": [
                    {"type": "po", "bizTransaction": "urn:epcglobal:cbv:bt:0614141000005:PO-1"}
                ],
                "quantityList": [
                    {"epcClass": "urn:epc:class:lgtin:0614141.107346.LOT1", "quantity": 200}
                ],
                "ilmd": {"cbvmda:lotNumber": "LOT1"},
                "example:myField": "Example Value",
            },
        ]
    },
}


def _shipment_12_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<epcis:EPCISDocument xmlns:epcis="urn:epcglobal:epcis:xsd:1" schemaVersion="1.2" creationDate="2024-04-01T00:00:00Z">
    <EPCISBody>
        <EventList>
            <ObjectEvent>
                <eventTime>2024-04-01T10:00:00.000Z</eventTime>
                <eventTimeZoneOffset>-05:00</eventTimeZoneOffset>
                <epcList><epc>urn:epc:id:sgtin:0614141.107346.1</epc></epcList>
                <action>ADD</action>
                <bizStep>urn:epcglobal:cbv:bizstep:commissioning</bizStep>
            </ObjectEvent>
            <ObjectEvent>
                <eventTime>2024-04-01T12:00:00.000Z</eventTime>
                <eventTimeZoneOffset>-05:00</eventTimeZoneOffset>
                <epcList><epc>urn:epc:id:sscc:0614141.1234567890</epc></epcList>
                <action>OBSERVE</action>
                <bizStep>urn:epcglobal:cbv:bizstep:shipping</bizStep>
            </ObjectEvent>
            <AggregationEvent>
                <eventTime>2024-04-01T11:00:00.000Z</eventTime>
                <eventTimeZoneOffset>-05:00</eventTimeZoneOffset>
                <parentID>urn:epc:id:sscc:0614141.1234567890</parentID>
                <childEPCs><epc>urn:epc:id:sgtin:0614141.107346.1</epc></childEPCs>
                <action>ADD</action>
                <bizStep>urn:epcglobal:cbv:bizstep:packing</bizStep>
            </AggregationEvent>
        </EventList>
    </EPCISBody>
</epcis:EPCISDocument>
"""


def _shipment_20_xml() -> str:
    return (_shipment_12_xml()
            .replace("urn:epcglobal:epcis:xsd:1", "urn:epcglobal:epcis:xsd:2")
            .replace('schemaVersion="1.2"', 'schemaVersion="2.0"'))


def _shipment_20_jsonld() -> dict:
    return {
        "@context": ["https://ref.gs1.org/standards/epcis/2.0.0/epcis-context.jsonld"],
        "type": "EPCISDocument",
        "schemaVersion": "2.0",
        "creationDate": "2024-04-01T00:00:00Z",
        "epcisBody": {
            "eventList": [
                {
                    "type": "objectEvent",
                    "eventTime": "2024-04-01T10:00:00.000Z",
                    "eventTimeZoneOffset": "-05:00",
                    "epcList": ["urn:epc:id:sgtin:0614141.107346.1"],
                    "action": "ADD",
                    "bizStep": "commissioning",
                },
                {
                    "type": "AggregationEvent",
                    "eventTime": "2024-04-01T11:00:00.000Z",
                    "eventTimeZoneOffset": "-05:00",
                    "parentID": "urn:epc:id:sscc:0614141.1234567890",
                    "childEPCs": ["urn:epc:id:sgtin:0614141.107346.1"],
                    "action": "ADD",
                    "bizStep": "packing",
                },
                {
                    "type": "ObjectEvent",
                    "eventTime": "2024-04-01T12:00:00.000Z",
                    "eventTimeZoneOffset": "-05:00",
                    "epcList": ["urn:epc:id:sscc:0614141.1234567890"],
                    "action": "OBSERVE",
                    "bizStep": "shipping",
                },
            ]
        },
    }


class CountingValidator:
    """Validator double that records each call and returns a fixed result"""

    def __init__(self, result=None):
        self.result = result or ValidationResult(valid=True)
        self.calls = []

    async def validate(self, content, version):
        self.calls.append(version)
        return self.result


@pytest.fixture
def epcis12_xml():
    """EPCIS 1.2 XML with an SBDH, one location and one shipping ObjectEvent"""
    return EPCIS_12_XML


@pytest.fixture
def epcis20_xml():
    """EPCIS 2.0 XML with an AssociationEvent and a fully populated ObjectEvent"""
    return EPCIS_20_XML


@pytest.fixture
def epcis20_jsonld():
    """EPCIS 2.0 JSON-LD with a TransformationEvent and an ObjectEvent"""
    return json.dumps(EPCIS_20_JSONLD)


@pytest.fixture
def epcis20_jsonld_data():
    return json.loads(json.dumps(EPCIS_20_JSONLD))


@pytest.fixture
def shipment_documents():
    """The same three-event shipment in every supported encoding"""
    return {
        "1.2-xml": _shipment_12_xml(),
        "2.0-xml": _shipment_20_xml(),
        "2.0-jsonld": json.dumps(_shipment_20_jsonld()),
    }


@pytest.fixture
def counting_validator():
    return CountingValidator()


@pytest.fixture
def no_validation():
    return {"validate": False}
