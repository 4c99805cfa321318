"""Translation-friendly XML form of a message table.

    <root>
        <str key="1" attributes="0">Hello ##LESS_THAN_SYMBOL##player##GREATER_THAN_SYMBOL##</str>
        <str key="2" attributes="3">==== THIS STRING INTENTIONALLY LEFT NULL ====</str>
    </root>

The games use < and > to delimit their inline commands, so both are swapped for
placeholder tokens instead of living in the XML as &lt; / &gt;. Control characters
XML 1.0 can't carry (and U+FFFE, U+FFFF) are written as ##CHAR_XXXX## tokens.
"""

import logging
import re
import struct
import xml.etree.ElementTree as ET

from .bmg import MESGEntry
from .errors import MalformedXMLError

log = logging.getLogger(__name__)

NULL_STRING_PLACEHOLDER = "==== THIS STRING INTENTIONALLY LEFT NULL ===="
LESS_THAN_PLACEHOLDER = "##LESS_THAN_SYMBOL##"
GREATER_THAN_PLACEHOLDER = "##GREATER_THAN_SYMBOL##"

CONTROL_CHAR_RE = re.compile(r"[\x01-\x08\x0b-\x1f\ufffe\uffff]")
# only the code points escape_text emits, any other ##CHAR_....## is plain text
CONTROL_TOKEN_RE = re.compile(r"##CHAR_(000[1-8BCDEF]|001[0-9A-F]|FFF[EF])##")
DECIMAL_RE = re.compile(r"[0-9]+")

def escape_text(s):
    if s == "":
        return NULL_STRING_PLACEHOLDER
    s = s.replace("<", LESS_THAN_PLACEHOLDER)
    s = s.replace(">", GREATER_THAN_PLACEHOLDER)
    return CONTROL_CHAR_RE.sub(lambda m: "##CHAR_{:04X}##".format(ord(m.group())), s)

def unescape_text(s):
    if s == NULL_STRING_PLACEHOLDER:
        return ""
    s = s.replace(LESS_THAN_PLACEHOLDER, "<")
    s = s.replace(GREATER_THAN_PLACEHOLDER, ">")
    return CONTROL_TOKEN_RE.sub(lambda m: chr(int(m.group(1), 16)), s)

def entries_to_xml(entries):
    root = ET.Element("root")
    for entry in entries:
        attributes, = struct.unpack('>I', entry.attributes)
        node = ET.SubElement(root, "str", {"key": str(entry.key), "attributes": str(attributes)})
        node.text = escape_text(entry.text)
    tree = ET.ElementTree(root)
    ET.indent(tree, space="\t")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)

def parse_u32(node, name, index):
    value = node.get(name)
    if value is None:
        raise MalformedXMLError("<str> #{} has no {} attribute".format(index, name))
    if not DECIMAL_RE.fullmatch(value):
        raise MalformedXMLError("<str> #{} has non-decimal {}={!r}".format(index, name, value))
    n = int(value)
    if not 0 <= n <= 0xffffffff:
        raise MalformedXMLError("<str> #{} has {}={} outside the 32-bit range".format(index, name, n))
    return n

def xml_to_entries(xml_data):
    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as e:
        raise MalformedXMLError("could not parse XML: {}".format(e)) from e
    if root.tag != "root":
        raise MalformedXMLError("root element is <{}>, expected <root>".format(root.tag))

    entries = []
    for node in root:
        if node.tag != "str":
            log.warning("ignoring unexpected element <%s>", node.tag)
            continue
        index = len(entries)
        if len(node) > 0:
            raise MalformedXMLError("<str> #{} contains child elements, write < and > as {} and {}".format(
                index, LESS_THAN_PLACEHOLDER, GREATER_THAN_PLACEHOLDER))
        key = parse_u32(node, "key", index)
        attributes = parse_u32(node, "attributes", index)
        text = unescape_text(node.text or "")
        entries.append(MESGEntry(key, struct.pack('>I', attributes), text))
    return entries
