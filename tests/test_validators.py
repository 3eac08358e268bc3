"""Tests for the bundled schema validators"""

import json

import pytest

from epcis_normalizer.validators import JSONSchemaValidator, XMLSchemaValidator


class TestXMLSchemaValidator:
    """Test cases for XSD validation"""

    @pytest.mark.asyncio
    async def test_valid_documents(self, epcis12_xml, epcis20_xml):
        validator = XMLSchemaValidator()

        assert (await validator.validate(epcis12_xml, "1.2")).valid is True
        assert (await validator.validate(epcis20_xml, "2.0")).valid is True

    @pytest.mark.asyncio
    async def test_unknown_event_element(self):
        document = """<epcis:EPCISDocument xmlns:epcis="urn:epcglobal:epcis:xsd:2"
                schemaVersion="2.0" creationDate="2024-02-01T08:00:00Z">
            <EPCISBody><EventList><FooEvent/></EventList></EPCISBody>
        </epcis:EPCISDocument>"""
        result = await XMLSchemaValidator().validate(document, "2.0")

        assert result.valid is False
        assert result.errors[0].startswith("Line 3: ")
        assert "FooEvent" in result.errors[0]

    @pytest.mark.asyncio
    async def test_wrong_root(self):
        document = '<epcis:EPCISMasterDataDocument xmlns:epcis="urn:epcglobal:epcis-masterdata:xsd:1"/>'
        result = await XMLSchemaValidator().validate(document, "1.2")
        assert result.errors == [
            "Invalid root element: expected 'EPCISDocument' or 'EPCISQueryDocument', got 'EPCISMasterDataDocument'"
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["1.2", "2.0"])
    async def test_query_document(self, version):
        major = version[0]
        document = f"""<epcisq:EPCISQueryDocument xmlns:epcisq="urn:epcglobal:epcis-query:xsd:{major}"
                schemaVersion="{version}" creationDate="2024-05-01T00:00:00Z">
            <EPCISBody><epcisq:QueryResults>
                <queryName>SimpleEventQuery</queryName>
                <resultsBody><EventList><ObjectEvent/></EventList></resultsBody>
            </epcisq:QueryResults></EPCISBody>
        </epcisq:EPCISQueryDocument>"""
        validator = XMLSchemaValidator()

        assert (await validator.validate(document, version)).valid is True
        assert (version, "EPCISQueryDocument") in validator._schema_cache

    @pytest.mark.asyncio
    async def test_query_document_without_query_name(self):
        document = """<epcisq:EPCISQueryDocument xmlns:epcisq="urn:epcglobal:epcis-query:xsd:1"
                schemaVersion="1.2" creationDate="2024-05-01T00:00:00Z">
            <EPCISBody><epcisq:QueryResults>
                <resultsBody><EventList/></resultsBody>
            </epcisq:QueryResults></EPCISBody>
        </epcisq:EPCISQueryDocument>"""
        result = await XMLSchemaValidator().validate(document, "1.2")

        assert result.valid is False
        assert "resultsBody" in result.errors[0]

    @pytest.mark.asyncio
    async def test_unsupported_version(self, epcis12_xml):
        result = await XMLSchemaValidator().validate(epcis12_xml, "3.0")
        assert result.valid is False
        assert result.errors == ["Schema validation error: Unsupported EPCIS version: 3.0"]

    @pytest.mark.asyncio
    async def test_syntax_error(self):
        result = await XMLSchemaValidator().validate("<EPCISDocument>", "1.2")
        assert result.valid is False
        assert result.errors[0].startswith("XML parsing error: ")

    def test_schema_cache_is_per_instance(self):
        first, second = XMLSchemaValidator(), XMLSchemaValidator()

        schema = first.load_schema("1.2")
        assert first.load_schema("1.2") is schema
        assert ("1.2", "EPCISDocument") not in second._schema_cache
        assert second.load_schema("1.2") is not schema


class TestJSONSchemaValidator:
    """Test cases for JSON Schema validation"""

    @pytest.mark.asyncio
    async def test_valid_document(self, epcis20_jsonld):
        result = await JSONSchemaValidator().validate(epcis20_jsonld, "2.0")
        assert result.valid is True
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_missing_context(self, epcis20_jsonld_data):
        epcis20_jsonld_data["@context"] = "https://example.com/other.jsonld"
        result = await JSONSchemaValidator().validate(json.dumps(epcis20_jsonld_data))
        assert result.errors == ["Missing or invalid EPCIS 2.0 context in JSON-LD document"]

    @pytest.mark.asyncio
    async def test_schema_errors_with_paths(self, epcis20_jsonld_data):
        del epcis20_jsonld_data["epcisBody"]["eventList"][1]["eventTimeZoneOffset"]
        epcis20_jsonld_data["epcisBody"]["eventList"][0]["eventTimeZoneOffset"] = "UTC"

        result = await JSONSchemaValidator().validate(json.dumps(epcis20_jsonld_data))

        assert result.valid is False
        assert result.errors[0].startswith("/epcisBody/eventList/0/eventTimeZoneOffset ")
        assert result.errors[1] == "/epcisBody/eventList/1 'eventTimeZoneOffset' is a required property"

    @pytest.mark.asyncio
    async def test_syntax_error(self):
        result = await JSONSchemaValidator().validate("{not json")
        assert result.errors[0].startswith("JSON parsing error: ")
