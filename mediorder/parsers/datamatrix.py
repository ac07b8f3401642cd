from .constants import ROOT_TOKEN
from .errors import MalformedPayload
from .models import Plan
from .ukf import parse_ukf_xml

# BMP DataMatrix codes carry UKF XML in ISO 8859-1, usually behind a short
# "MC" marker. latin-1 maps every byte to the code point of the same value.
PAYLOAD_ENCODING = "latin-1"


def decode_payload(data: bytes) -> str:
    """Raw scanner bytes -> UKF XML string starting at <MP."""
    return decode_payload_text(bytes(data).decode(PAYLOAD_ENCODING))


def decode_payload_text(text: str) -> str:
    """For scanner libraries that already hand back a string: framing only."""
    start = text.find(ROOT_TOKEN)
    if start == -1:
        raise MalformedPayload()
    return text[start:]


def parse_datamatrix_payload(data: bytes) -> Plan:
    return parse_ukf_xml(decode_payload(data))


def parse_datamatrix_string(text: str) -> Plan:
    return parse_ukf_xml(decode_payload_text(text))
