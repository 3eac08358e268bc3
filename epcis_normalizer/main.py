"""
Command line entry point for the EPCIS normalizer
"""
import argparse
import asyncio
import json
import sys

from epcis_normalizer.assembler import detect_and_create_parser
from epcis_normalizer.config.settings import Settings
from epcis_normalizer.exceptions import EPCISParserError
from epcis_normalizer.models import ParserOptions, ValidationOptions
from epcis_normalizer.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

SECTIONS = {
    "document": "get_document",
    "events": "get_event_list",
    "master-data": "get_master_data",
    "header": "get_epcis_header",
    "sender": "get_sender",
    "receiver": "get_receiver",
    "validity": "is_valid",
}


def _to_json(value):
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    return value


async def normalize(content: bytes, section: str, options: ParserOptions, context_uris):
    """Parse a document and return the requested section as plain JSON data"""
    parser = detect_and_create_parser(content, options, context_uris=context_uris)
    logger.info(f"Detected format: {parser.format.value}")
    result = await getattr(parser, SECTIONS[section])()
    return _to_json(result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epcis-normalize",
        description="Normalize an EPCIS 1.2 XML, 2.0 XML or 2.0 JSON-LD document to canonical JSON"
    )
    parser.add_argument("file", help="EPCIS document to normalize")
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip schema validation"
    )
    parser.add_argument(
        "--no-throw",
        action="store_true",
        help="Report validation errors instead of failing"
    )
    parser.add_argument(
        "--section",
        choices=sorted(SECTIONS),
        default="document",
        help="Part of the canonical document to print"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: EPCIS_LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--log-file",
        help="Rotating log file path (default: EPCIS_LOG_FILE, console only when unset)"
    )
    return parser


def main(argv=None) -> int:
    """Main CLI interface"""
    args = build_parser().parse_args(argv)
    settings = Settings()

    # Setup logging
    setup_logging(level=args.log_level or settings.LOG_LEVEL, log_file=args.log_file or settings.LOG_FILE)

    options = ParserOptions.from_settings(settings)
    if args.no_validate or args.no_throw:
        options = ParserOptions(
            validate_schema=options.validate_schema and not args.no_validate,
            validation_options=ValidationOptions(
                throw_on_error=options.validation_options.throw_on_error and not args.no_throw
            ),
        )

    try:
        with open(args.file, "rb") as f:
            content = f.read()
    except OSError as e:
        logger.error(f"Cannot read {args.file}: {e}")
        return 1

    try:
        result = asyncio.run(normalize(content, args.section, options, settings.JSONLD_CONTEXT_URIS))
    except EPCISParserError as e:
        logger.error(f"Failed to normalize {args.file}: {e}")
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
