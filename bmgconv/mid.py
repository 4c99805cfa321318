from gclib import fs_helpers as fs
import struct

from .errors import MalformedMIDError

# section count, format, info, 4 bytes padding
MID1_HEADER = struct.Struct('>HBB4x')
MID1_FORMAT = 0x0a
MID1_INFO = 0x01

class MID1:
    def __init__(self, keys=None):
        self.keys = keys if keys is not None else []

    def read(self, data):
        body_len = fs.data_len(data)
        if body_len % 4 != 0:
            raise MalformedMIDError("MID1 body length {} is not a multiple of 4".format(body_len))
        if body_len < MID1_HEADER.size:
            raise MalformedMIDError("MID1 body is {} bytes, too short for its header".format(body_len))

        entry_count = fs.read_u16(data, 0)
        # format and info bytes are not checked, vendor files vary
        if body_len < MID1_HEADER.size + entry_count*4:
            raise MalformedMIDError("MID1 declares {} keys but only has room for {}".format(
                entry_count, (body_len - MID1_HEADER.size) // 4))

        self.keys = [fs.read_u32(data, MID1_HEADER.size + j*4) for j in range(entry_count)]

    def write(self, f, trailing_keys=0):
        f.write(MID1_HEADER.pack(len(self.keys), MID1_FORMAT, MID1_INFO))
        for key in self.keys:
            f.write(struct.pack('>I', key))
        f.write(b'\0\0\0\0' * trailing_keys)
