"""Convert BMG (MESGbmg1) message files to editable XML and back."""

from .bmg import Charset, MESGEntry, MESGFile
from .errors import (
    BMGError, InvalidMagicError, UnsupportedEncodingError, UnexpectedEOFError,
    MalformedINFError, MalformedDATError, MalformedMIDError, MismatchedTablesError,
    MalformedXMLError,
)
from .xml_mapping import entries_to_xml, xml_to_entries

__version__ = "1.0.0"

def decode_bmg(data):
    """BMG file bytes -> UTF-8 XML bytes."""
    return entries_to_xml(MESGFile.from_bytes(data).entries)

def encode_bmg(xml_data):
    """UTF-8 XML bytes -> BMG file bytes."""
    return MESGFile(xml_to_entries(xml_data)).to_bytes()
