from gclib import fs_helpers as fs
import struct

from .errors import MalformedINFError

# entry count, entry length, group id, default color, 1 byte padding
INF1_HEADER = struct.Struct('>HHHBx')
INF1_ENTRY = struct.Struct('>I4s')
INF1_ENTRY_SIZE = INF1_ENTRY.size

class INFEntry:
    def __init__(self, offset, attributes):
        self.offset = offset
        self.attributes = attributes

    def __eq__(self, other):
        return (isinstance(other, INFEntry)
                and self.offset == other.offset
                and self.attributes == other.attributes)

    def __repr__(self):
        return "INFEntry(offset=0x{:x}, attributes={!r})".format(self.offset, self.attributes)

class INF1:
    def __init__(self, entries=None):
        self.entries = entries if entries is not None else []
        self.group_id = 0
        self.default_color = 0

    def read(self, data):
        body_len = fs.data_len(data)
        if body_len < INF1_HEADER.size:
            raise MalformedINFError("INF1 body is {} bytes, too short for its header".format(body_len))

        entry_count = fs.read_u16(data, 0)
        entry_size = fs.read_u16(data, 2)
        self.group_id = fs.read_u16(data, 4)
        self.default_color = fs.read_u8(data, 6)

        if entry_size != INF1_ENTRY_SIZE:
            raise MalformedINFError("unsupported INF1 entry length {}".format(entry_size))
        if body_len < INF1_HEADER.size + entry_count*entry_size:
            raise MalformedINFError("INF1 declares {} entries but only has room for {}".format(
                entry_count, (body_len - INF1_HEADER.size) // entry_size))

        self.entries = []
        for j in range(entry_count):
            off = INF1_HEADER.size + j*entry_size
            string_pos = fs.read_u32(data, off)
            attributes = fs.read_bytes(data, off+4, 4)
            self.entries.append(INFEntry(string_pos, attributes))

    def write(self, f, trailing_words=0):
        # group id and default color are not interpreted, they always go out as 0
        f.write(INF1_HEADER.pack(len(self.entries), INF1_ENTRY_SIZE, 0, 0))
        for entry in self.entries:
            f.write(INF1_ENTRY.pack(entry.offset, entry.attributes))
        f.write(b'\0\0\0\0' * trailing_words)
