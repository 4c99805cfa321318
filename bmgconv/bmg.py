from gclib import fs_helpers as fs
from enum import IntEnum
import io
import logging
import struct

from .dat import StringPool, read_utf16
from .errors import (
    InvalidMagicError, UnsupportedEncodingError, UnexpectedEOFError,
    MalformedINFError, MalformedDATError, MalformedMIDError, MismatchedTablesError,
)
from .inf import INF1, INFEntry
from .mid import MID1

log = logging.getLogger(__name__)

MAGIC = b"MESGbmg1"
HEADER_SIZE = 0x20
SECTION_HEADER = struct.Struct('>4sI')

# padding the games expect after the real data of each section
INF1_TRAILER_WORDS = 6
DAT1_TRAILER_UNITS = 14
MID1_TRAILER_KEYS = 1

class Charset(IntEnum):
    # according to https://wiki.tockdom.com/wiki/BMG_(File_Format)
    UNDEFINED = 0
    CP1252 = 1
    UTF16 = 2
    SHIFT_JIS = 3
    UTF8 = 4

def charset_name(value):
    try:
        return Charset(value).name
    except ValueError:
        return "unknown ({})".format(value)

class MESGEntry:
    """One message: its MID1 key, the raw 4 byte INF1 attribute word and its text.

    An empty `text` is the null string, which is stored at the shared pool offset 0.
    """

    def __init__(self, key, attributes, text):
        self.key = key
        self.attributes = bytes(attributes)
        self.text = text

    @property
    def is_null(self):
        return self.text == ""

    def __eq__(self, other):
        return (isinstance(other, MESGEntry)
                and self.key == other.key
                and self.attributes == other.attributes
                and self.text == other.text)

    def __repr__(self):
        return "MESGEntry(key={}, attributes={}, text={!r})".format(
            self.key, self.attributes.hex(), self.text)

class MESGFile:
    def __init__(self, entries=None):
        # we only support UTF-16
        self.encoding = Charset.UTF16
        self.group_id = 0
        self.default_color = 0
        self.entries = entries if entries is not None else []

    def read(self, data):
        size = fs.data_len(data)
        magic = fs.read_bytes(data, 0, 8)
        if magic != MAGIC:
            raise InvalidMagicError("bad magic {!r}, expected {!r}".format(magic, MAGIC))
        if size < HEADER_SIZE:
            raise UnexpectedEOFError("file is {} bytes, too short for the BMG header".format(size))

        file_size = fs.read_u32(data, 8)
        if file_size != size:
            raise UnexpectedEOFError("header says the file is {} bytes but it is {} bytes".format(file_size, size))

        sections = fs.read_u32(data, 0xc)
        encoding = fs.read_u8(data, 0x10)
        if encoding != Charset.UTF16:
            raise UnsupportedEncodingError("charset {} is not supported, only UTF16 is".format(charset_name(encoding)))
        self.encoding = Charset(encoding)

        inf1 = None
        dat1_data = None
        mid1 = None
        off = HEADER_SIZE
        for i in range(sections):
            if off + SECTION_HEADER.size > size:
                raise UnexpectedEOFError("section {} header at 0x{:x} is past the end of the file".format(i, off))
            secname = fs.read_bytes(data, off, 4)
            sec_len = fs.read_u32(data, off+4)
            if sec_len < SECTION_HEADER.size or off + sec_len > size:
                raise UnexpectedEOFError("section {!r} at 0x{:x} has bad size 0x{:x}".format(secname, off, sec_len))
            sec_data = io.BytesIO(fs.read_bytes(data, off+8, sec_len-8))
            log.debug("section %r at 0x%x, 0x%x bytes", secname, off, sec_len)
            off += sec_len

            if secname == b"INF1":
                inf1 = INF1()
                inf1.read(sec_data)
                self.group_id = inf1.group_id
                self.default_color = inf1.default_color
            elif secname == b"DAT1":
                dat1_data = sec_data
            elif secname == b"MID1":
                mid1 = MID1()
                mid1.read(sec_data)
            else:
                log.warning("skipping unhandled section %r (0x%x bytes)", secname, sec_len)

        if inf1 is None:
            raise MalformedINFError("file has no INF1 section")
        if dat1_data is None:
            raise MalformedDATError("file has no DAT1 section")
        if mid1 is None:
            raise MalformedMIDError("file has no MID1 section")
        if len(inf1.entries) != len(mid1.keys):
            raise MismatchedTablesError("INF1 has {} entries but MID1 has {} keys".format(
                len(inf1.entries), len(mid1.keys)))

        # build entry list
        self.entries = []
        for inf_entry, key in zip(inf1.entries, mid1.keys):
            string = read_utf16(dat1_data, inf_entry.offset)
            self.entries.append(MESGEntry(key, inf_entry.attributes, string))
        log.debug("read %d messages", len(self.entries))

    def write(self, f):
        if len(self.entries) > 0xffff:
            raise MalformedINFError("{} messages do not fit in INF1, the limit is 65535".format(len(self.entries)))

        f.write(MAGIC + b'\0\0\0\0')
        f.write(struct.pack('>I', 3))
        f.write(struct.pack('>B15x', Charset.UTF16))

        # generate data blocks
        pool = StringPool()
        inf1 = INF1()
        mid1 = MID1()
        for entry in self.entries:
            inf1.entries.append(INFEntry(pool.append(entry.text), entry.attributes))
            mid1.keys.append(entry.key)
        pool.pad(DAT1_TRAILER_UNITS)
        log.debug("string pool is 0x%x bytes for %d messages", len(pool), len(self.entries))

        # write everything
        write_section(f, b"INF1", lambda sec: inf1.write(sec, INF1_TRAILER_WORDS))
        write_section(f, b"DAT1", lambda sec: sec.write(pool.getvalue()))
        write_section(f, b"MID1", lambda sec: mid1.write(sec, MID1_TRAILER_KEYS))

        # go back and write the full filesize
        size = fs.data_len(f)
        fs.write_u32(f, 8, size)
        f.seek(size)

    def to_bytes(self):
        f = io.BytesIO()
        self.write(f)
        return f.getvalue()

    @classmethod
    def from_bytes(cls, data):
        mesg = cls()
        mesg.read(io.BytesIO(data))
        return mesg

def write_section(f, secname, write_body):
    body = io.BytesIO()
    write_body(body)
    body = body.getvalue()
    f.write(SECTION_HEADER.pack(secname, len(body) + SECTION_HEADER.size))
    f.write(body)
