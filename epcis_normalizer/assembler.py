"""Builds the canonical document for one raw EPCIS input, exactly once"""

import asyncio
import copy
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import lxml.etree as ET

from .adapters import EPCIS12XMLAdapter, EPCIS20JsonLdAdapter, EPCIS20XMLAdapter
from .adapters.base import BaseVersionAdapter
from .detector import EPCIS_JSONLD_CONTEXTS, detect_format
from .exceptions import (ERROR_MESSAGES, EPCISParserError, ParsingError, StructuralError,
                         ValidationError)
from .linker import CrossLinker
from .models import (EPCIS_FORMAT_LABELS, CanonicalDocument, EPCISEvent, EPCISFormat,
                     MasterDataEntry, ParserOptions, Party, ValidationResult)
from .parser import TreeParser
from .validators import JSONSchemaValidator, XMLSchemaValidator

logger = logging.getLogger(__name__)

ADAPTERS = {
    EPCISFormat.V1_2_XML: EPCIS12XMLAdapter,
    EPCISFormat.V2_0_XML: EPCIS20XMLAdapter,
    EPCISFormat.V2_0_JSON_LD: EPCIS20JsonLdAdapter,
}


class ParserState(str, Enum):
    UNPARSED = "unparsed"
    PARSING = "parsing"
    PARSED = "parsed"
    FAILED = "failed"


def default_validator(fmt: EPCISFormat, context_uris: Iterable[str] = EPCIS_JSONLD_CONTEXTS):
    if fmt.is_xml:
        return XMLSchemaValidator()
    return JSONSchemaValidator(context_uris=context_uris)


class EPCISDocumentParser:
    """Lazily parses one EPCIS document into a `CanonicalDocument`

    The first accessor call runs validation, extraction, identity resolution
    and cross-linking; every later call (concurrent ones included) gets
    a deep copy of the memoized document, or the memoized failure re-raised.

    Args:
        content: Raw document text or bytes
        fmt: Dialect of `content`, usually from `detect_format`
        options: Validation options
        validator: Object with `async validate(content, version) -> ValidationResult`;
            defaults to the bundled XSD or JSON Schema validator

    Raises:
        ValidationError: If the document is not well-formed and `throw_on_error` is set
    """

    def __init__(self, content: Union[str, bytes], fmt: EPCISFormat,
                 options: Optional[ParserOptions] = None, validator: Any = None):
        self.content = content
        self.options = options or ParserOptions()
        self.adapter: BaseVersionAdapter = ADAPTERS[fmt]()
        self.validator = validator if validator is not None else default_validator(fmt)
        self._format = fmt
        self._state = ParserState.UNPARSED
        self._lock = asyncio.Lock()
        self._document: Optional[CanonicalDocument] = None
        self._failure: Optional[EPCISParserError] = None
        self._validation = ValidationResult(valid=True)
        self.check_syntax()

    @property
    def format(self) -> EPCISFormat:
        return self._format

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def label(self) -> str:
        return EPCIS_FORMAT_LABELS[self._format]

    def check_syntax(self) -> None:
        """Eager well-formedness check; records the failure in the validity report"""
        try:
            if self._format.is_xml:
                TreeParser.check_xml_syntax(self.content)
            else:
                TreeParser.parse_json(self.content)
            return
        except ET.XMLSyntaxError as e:
            kind, detail = 'XML', str(e)
        except ValueError as e:
            kind, detail = 'JSON', str(e)

        logger.warning(f"{kind} syntax error in EPCIS {self.label} document: {detail}")
        self._validation = ValidationResult(valid=False, errors=[f"{kind} syntax error: {detail}"])
        if self.options.validation_options.throw_on_error:
            raise ValidationError(ERROR_MESSAGES[f'INVALID_{kind}'], [detail])

    async def _ensure_parsed(self) -> CanonicalDocument:
        if self._state is ParserState.PARSED:
            return self._document
        if self._state is ParserState.FAILED:
            raise self._failure

        async with self._lock:
            # Another caller may have finished while we waited for the lock
            if self._state is ParserState.PARSED:
                return self._document
            if self._state is ParserState.FAILED:
                raise self._failure

            self._state = ParserState.PARSING
            logger.debug(f"Parsing EPCIS {self.label} document")
            try:
                self._document = await self._parse()
            except EPCISParserError as e:
                self._fail(e)
                raise
            except Exception as e:
                failure = ParsingError(f"Failed to parse EPCIS {self.label}: {e}")
                self._fail(failure)
                raise failure from e

            self._state = ParserState.PARSED
            logger.info(f"Parsed EPCIS {self.label} document: {len(self._document.events)} events, "
                        f"{len(self._document.master_data)} master data entries")
            return self._document

    def _fail(self, failure: EPCISParserError) -> None:
        self._failure = failure
        self._state = ParserState.FAILED
        logger.error(f"EPCIS {self.label} parse failed: {failure}")

    async def _parse(self) -> CanonicalDocument:
        tree = self._tokenize()
        self.adapter.check_structure(tree)

        if self.options.validate_schema:
            result = await self.validator.validate(self.content, self._format.version)
            if not self._validation.valid:
                result = ValidationResult(valid=False, errors=self._validation.errors + result.errors)
            self._validation = result
            if not result.valid:
                logger.warning(f"EPCIS {self.label} validation reported {len(result.errors)} errors")
                if self.options.validation_options.throw_on_error:
                    raise ValidationError(
                        f"EPCIS {self.label} {ERROR_MESSAGES['VALIDATION_FAILED']}", result.errors)

        fragment = self.adapter.extract(tree)
        CrossLinker().link(fragment['events'], fragment['masterData'])
        return self._assemble(fragment)

    def _tokenize(self) -> Any:
        try:
            if self._format.is_xml:
                return TreeParser.parse_xml(self.content)
            return TreeParser.parse_json(self.content)
        except (ET.XMLSyntaxError, ValueError) as e:
            key = 'INVALID_XML' if self._format.is_xml else 'INVALID_JSON'
            raise StructuralError(f"{ERROR_MESSAGES[key]}: {e}") from e

    @staticmethod
    def _assemble(fragment: Dict[str, Any]) -> CanonicalDocument:
        return CanonicalDocument(
            events=[EPCISEvent.model_validate(event) for event in fragment['events']],
            master_data={
                entry_id: MasterDataEntry.model_validate(entry)
                for entry_id, entry in fragment['masterData'].items()
            },
            header=fragment['header'],
            sender=Party.model_validate(fragment['sender']),
            receiver=Party.model_validate(fragment['receiver']),
        )

    # Accessors hand out deep copies; the memoized document is never exposed

    async def get_event_list(self) -> List[EPCISEvent]:
        return copy.deepcopy((await self._ensure_parsed()).events)

    async def get_master_data(self) -> Dict[str, MasterDataEntry]:
        return copy.deepcopy((await self._ensure_parsed()).master_data)

    async def get_epcis_header(self) -> Dict[str, Any]:
        return copy.deepcopy((await self._ensure_parsed()).header)

    async def get_sender(self) -> Party:
        return copy.deepcopy((await self._ensure_parsed()).sender)

    async def get_receiver(self) -> Party:
        return copy.deepcopy((await self._ensure_parsed()).receiver)

    async def is_valid(self) -> ValidationResult:
        await self._ensure_parsed()
        return copy.deepcopy(self._validation)

    async def get_document(self) -> CanonicalDocument:
        return copy.deepcopy(await self._ensure_parsed())


def detect_and_create_parser(content: Union[str, bytes],
                             options: Union[ParserOptions, Mapping[str, Any], None] = None,
                             validator: Any = None,
                             context_uris: Iterable[str] = EPCIS_JSONLD_CONTEXTS) -> EPCISDocumentParser:
    """Detect the EPCIS dialect of `content` and return a parser for it

    Args:
        content: Raw document text or bytes
        options: `ParserOptions`, or a mapping such as
            `{'validate': False, 'validationOptions': {'throwOnError': False}}`
        validator: Optional validator overriding the bundled default
        context_uris: JSON-LD context URIs accepted as EPCIS 2.0

    Raises:
        UnknownFormatError: If no supported dialect matches
        ValidationError: If the document is not well-formed and `throwOnError` is set
    """
    context_uris = tuple(context_uris)
    fmt = detect_format(content, context_uris)
    if options is None:
        options = ParserOptions()
    elif not isinstance(options, ParserOptions):
        options = ParserOptions.model_validate(dict(options))
    if validator is None:
        validator = default_validator(fmt, context_uris)
    return EPCISDocumentParser(content, fmt, options, validator)
