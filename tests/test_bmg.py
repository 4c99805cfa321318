import io
import logging
import struct

import pytest

from bmgconv import MESGEntry, MESGFile, Charset
from bmgconv.dat import read_utf16
from bmgconv.errors import (
    InvalidMagicError, UnsupportedEncodingError, UnexpectedEOFError,
    MalformedINFError, MalformedDATError, MalformedMIDError, MismatchedTablesError,
)

from bmgfiles import make_bmg, make_section, inf1_body, mid1_body, simple_bmg

NO_ATTRS = b'\0\0\0\0'

def encode(entries):
    return MESGFile(entries).to_bytes()

def sections_of(data):
    """Split an encoded file into (tag, body) pairs."""
    out = []
    off = 0x20
    for _ in range(struct.unpack_from('>I', data, 0xc)[0]):
        tag, size = struct.unpack_from('>4sI', data, off)
        out.append((tag, data[off+8:off+size]))
        off += size
    return out

def test_encode_single_record_layout():
    data = encode([MESGEntry(1, NO_ATTRS, "Hi")])

    assert data == (
        b'MESGbmg1' + struct.pack('>II', 148, 3) + b'\x02' + b'\0' * 15
        + b'INF1' + struct.pack('>I', 48)
        + b'\0\x01\0\x08\0\0\0\0' + b'\0\0\0\x02' + NO_ATTRS + b'\0' * 24
        + b'DAT1' + struct.pack('>I', 44)
        + b'\0\0\0\x48\0\x69\0\0' + b'\0' * 28
        + b'MID1' + struct.pack('>I', 24)
        + b'\0\x01\x0a\x01\0\0\0\0' + b'\0\0\0\x01\0\0\0\0'
    )

def test_encode_header_invariants():
    data = encode([MESGEntry(i, NO_ATTRS, "message {}".format(i)) for i in range(10)])
    assert data[:8] == bytes.fromhex("4D 45 53 47 62 6D 67 31")
    assert struct.unpack_from('>I', data, 8)[0] == len(data)
    assert struct.unpack_from('>I', data, 0xc)[0] == 3
    assert data[0x10] == Charset.UTF16
    assert [tag for tag, _ in sections_of(data)] == [b'INF1', b'DAT1', b'MID1']

def test_encode_empty_string_uses_offset_zero():
    data = encode([MESGEntry(7, b'\0\0\0\x03', "")])
    inf1, dat1, mid1 = [body for _, body in sections_of(data)]
    assert inf1[8:16] == b'\0\0\0\0\0\0\0\x03'
    assert dat1 == b'\0\0' + b'\0' * 28
    assert mid1[8:] == b'\0\0\0\x07\0\0\0\0'

def test_encode_offsets_are_well_formed():
    entries = [
        MESGEntry(1, NO_ATTRS, "one"),
        MESGEntry(2, NO_ATTRS, ""),
        MESGEntry(3, NO_ATTRS, "\U0001F31F two"),
        MESGEntry(4, NO_ATTRS, "one"),
    ]
    inf1, dat1, _ = [body for _, body in sections_of(encode(entries))]
    pool = io.BytesIO(dat1)
    offsets = [struct.unpack_from('>I', inf1, 8 + i*8)[0] for i in range(len(entries))]
    assert offsets[1] == 0
    assert offsets[0] != offsets[3]
    for offset, entry in zip(offsets, entries):
        assert offset % 2 == 0
        assert read_utf16(pool, offset) == entry.text

def test_encode_no_entries():
    data = encode([])
    mesg = MESGFile.from_bytes(data)
    assert mesg.entries == []
    assert struct.unpack_from('>I', data, 8)[0] == len(data)

def test_encode_too_many_entries():
    with pytest.raises(MalformedINFError):
        encode([MESGEntry(i, NO_ATTRS, "") for i in range(0x10000)])

def test_round_trip_entries():
    entries = [
        MESGEntry(0, NO_ATTRS, "Hello"),
        MESGEntry(0xffffffff, b'\xde\xad\xbe\xef', ""),
        MESGEntry(5, b'\x80\0\0\x01', "<color=red>Danger<color=white>"),
        MESGEntry(5, b'\0\0\0\x02', "line\nbreak \x1a\x06 and \U0001F31F"),
    ]
    assert MESGFile.from_bytes(encode(entries)).entries == entries

def test_decode_vendor_file():
    pool = b'\0\0' + 'Hi'.encode('utf-16be') + b'\0\0' + b'\0' * 4
    data = simple_bmg(pool, [(2, b'\0\0\0\x01'), (0, NO_ATTRS)], [10, 11])
    mesg = MESGFile.from_bytes(data)
    assert mesg.entries == [MESGEntry(10, b'\0\0\0\x01', "Hi"), MESGEntry(11, NO_ATTRS, "")]
    assert mesg.entries[1].is_null

def test_decode_skips_unknown_sections(caplog):
    pool = b'\0\0' + 'Hi'.encode('utf-16be') + b'\0\0'
    data = make_bmg([
        make_section(b'FLW1', b'\x01\x02\x03\x04'),
        make_section(b'INF1', inf1_body([(2, NO_ATTRS)])),
        make_section(b'DAT1', pool),
        make_section(b'MID1', mid1_body([3])),
    ])
    with caplog.at_level(logging.WARNING):
        mesg = MESGFile.from_bytes(data)
    assert mesg.entries == [MESGEntry(3, NO_ATTRS, "Hi")]
    assert "FLW1" in caplog.text

def test_decode_rejects_bad_magic():
    data = b'MESGbmg2' + simple_bmg(b'\0\0', [], [])[8:]
    with pytest.raises(InvalidMagicError):
        MESGFile.from_bytes(data)

def test_decode_rejects_short_file():
    with pytest.raises(InvalidMagicError):
        MESGFile.from_bytes(b'MESG')
    with pytest.raises(UnexpectedEOFError):
        MESGFile.from_bytes(b'MESGbmg1\0\0\0\x0c')

@pytest.mark.parametrize("charset", [0, 1, 3, 4, 9])
def test_decode_rejects_other_charsets(charset):
    data = simple_bmg(b'\0\0', [(0, NO_ATTRS)], [1], charset=charset)
    with pytest.raises(UnsupportedEncodingError):
        MESGFile.from_bytes(data)

def test_decode_rejects_mismatched_tables():
    data = simple_bmg(b'\0\0', [(0, NO_ATTRS)] * 5, [1, 2, 3, 4])
    with pytest.raises(MismatchedTablesError):
        MESGFile.from_bytes(data)

def test_decode_rejects_size_mismatch():
    data = make_bmg([], file_size=0x100, section_count=0)
    data += b'\0' * (0xff - len(data))
    assert len(data) == 0xff
    with pytest.raises(UnexpectedEOFError):
        MESGFile.from_bytes(data)

def test_decode_rejects_truncated_section():
    data = make_bmg([struct.pack('>4sI', b'INF1', 0x40) + b'\0' * 8])
    with pytest.raises(UnexpectedEOFError):
        MESGFile.from_bytes(data)

def test_decode_rejects_missing_section_header():
    data = make_bmg([], section_count=1)
    with pytest.raises(UnexpectedEOFError):
        MESGFile.from_bytes(data)

@pytest.mark.parametrize("missing, error", [
    (b'INF1', MalformedINFError),
    (b'DAT1', MalformedDATError),
    (b'MID1', MalformedMIDError),
])
def test_decode_rejects_missing_sections(missing, error):
    sections = {
        b'INF1': make_section(b'INF1', inf1_body([])),
        b'DAT1': make_section(b'DAT1', b'\0\0'),
        b'MID1': make_section(b'MID1', mid1_body([])),
    }
    del sections[missing]
    with pytest.raises(error):
        MESGFile.from_bytes(make_bmg(list(sections.values())))

def test_decode_rejects_bad_string_offset():
    data = simple_bmg(b'\0\0\0A\0\0', [(0x40, NO_ATTRS)], [1])
    with pytest.raises(MalformedDATError):
        MESGFile.from_bytes(data)
