from ..models import EPCIS_FORMAT_LABELS, EVENT_TYPES_V2_0, EPCISFormat
from .xml_adapter import XMLVersionAdapter


class EPCIS20XMLAdapter(XMLVersionAdapter):
    """EPCIS 2.0 XML: every field sits directly on the event element"""

    FORMAT = EPCISFormat.V2_0_XML
    LABEL = EPCIS_FORMAT_LABELS[EPCISFormat.V2_0_XML]
    EVENT_TYPES = EVENT_TYPES_V2_0
