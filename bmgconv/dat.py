from gclib import fs_helpers as fs
import io
import logging

from .errors import MalformedDATError

log = logging.getLogger(__name__)

def read_utf16(data, off):
    """Read the NUL-terminated UTF-16BE string starting at byte offset `off` of the pool."""
    size = fs.data_len(data)
    if off < 0 or off >= size:
        raise MalformedDATError("string offset 0x{:x} is outside the {} byte string pool".format(off, size))
    if off % 2 != 0:
        raise MalformedDATError("string offset 0x{:x} is not aligned to a UTF-16 code unit".format(off))

    end = off
    while True:
        if end + 2 > size:
            raise MalformedDATError("string at offset 0x{:x} runs past the end of the pool".format(off))
        if fs.read_u16(data, end) == 0:
            break
        end += 2

    raw = fs.read_bytes(data, off, end - off)
    try:
        return raw.decode('utf-16be')
    except UnicodeDecodeError as e:
        raise MalformedDATError("invalid UTF-16 at offset 0x{:x}: {}".format(off, e)) from e

def encode_utf16(s):
    # add null terminator
    return s.encode('utf-16be') + b'\0\0'

class StringPool:
    """DAT1 payload builder. Offset 0 holds a lone NUL shared by every empty string."""

    EMPTY_OFFSET = 0

    def __init__(self):
        self.data = io.BytesIO()
        self.data.write(b'\0\0')

    def __len__(self):
        return fs.data_len(self.data)

    def append(self, s):
        if s == "":
            return self.EMPTY_OFFSET
        str_off = len(self)
        self.data.seek(str_off)
        self.data.write(encode_utf16(s))
        return str_off

    def pad(self, units):
        self.data.seek(len(self))
        self.data.write(b'\0\0' * units)

    def getvalue(self):
        return self.data.getvalue()
