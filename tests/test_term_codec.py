import struct

import pytest

from ppbert.binary.codecs.bytecursor import Cursor
from ppbert.binary.codecs.term_codec import decode, decode_term
from ppbert.binary.errors import (
    BadVersion,
    MalformedAtomText,
    MalformedFloatText,
    TooDeep,
    Underrun,
    UnsupportedTag,
)
from ppbert.models.term import (
    AtomTerm,
    BigIntTerm,
    BinaryTerm,
    FloatTerm,
    IntTerm,
    ListTerm,
    MapTerm,
    NilTerm,
    SmallIntTerm,
    StrTerm,
    TupleTerm,
)

V = b"\x83"

def atom(name: bytes) -> bytes:
    return bytes([100]) + len(name).to_bytes(2, "big") + name

def small(n: int) -> bytes:
    return bytes([97, n])

def old_float(text: bytes) -> bytes:
    return bytes([99]) + text.ljust(31, b"\x00")


def test_small_integer():
    term, used = decode(bytes([0x83, 97, 0x2A]))
    assert term == SmallIntTerm(value=42)
    assert used == 3

def test_integer_is_signed():
    term, _ = decode(V + bytes([98]) + (-123456).to_bytes(4, "big", signed=True))
    assert term == IntTerm(value=-123456)

def test_latin1_atom():
    term, _ = decode(bytes([0x83, 100, 0x00, 0x04, 0x61, 0x74, 0x6F, 0x6D]))
    assert term == AtomTerm(text="atom", encoding="latin1")

def test_latin1_atom_high_bytes():
    term, _ = decode(V + bytes([115, 1, 0xE9]))
    assert term.text == "é"

def test_utf8_atoms():
    name = "héllo".encode("utf-8")
    term, _ = decode(V + bytes([118]) + len(name).to_bytes(2, "big") + name)
    assert term == AtomTerm(text="héllo", encoding="utf8")
    term, _ = decode(V + bytes([119, len(name)]) + name)
    assert term == AtomTerm(text="héllo", encoding="utf8")

def test_empty_atom():
    term, _ = decode(V + bytes([119, 0]))
    assert term == AtomTerm(text="", encoding="utf8")

def test_invalid_utf8_atom():
    with pytest.raises(MalformedAtomText) as ei:
        decode(V + bytes([119, 3, 0x61, 0xFF, 0x62]))
    assert ei.value.offset == 4
    assert ei.value.encoding == "utf8"

def test_new_float():
    term, _ = decode(V + bytes([70]) + struct.pack(">d", 3.25))
    assert term == FloatTerm(value=3.25)

def test_old_float():
    term, used = decode(V + old_float(b"1.50000000000000000000e+00"))
    assert term == FloatTerm(value=1.5)
    assert used == 1 + 1 + 31

@pytest.mark.parametrize("text", [b"", b"abc", b"nan", b"inf", b"1_000.0", b" 1.0", b"1.0e"])
def test_old_float_rejects_bad_text(text):
    with pytest.raises(MalformedFloatText):
        decode(V + old_float(text))

@pytest.mark.parametrize(
    "payload,expected",
    [
        (bytes([110, 1, 0, 0x01]), 1),
        (bytes([110, 1, 1, 0x01]), -1),
        (bytes([110, 0, 0]), 0),
        (bytes([110, 0, 1]), 0),
        (bytes([110, 2, 0, 0x00, 0x01]), 256),
        (bytes([111, 0, 0, 0, 9, 1]) + (2**70).to_bytes(9, "little"), -(2**70)),
    ],
)
def test_bignums(payload, expected):
    term, _ = decode(V + payload)
    assert term == BigIntTerm(value=expected)

def test_bignum_digit_count_is_authoritative():
    with pytest.raises(Underrun):
        decode(V + bytes([110, 3, 0, 1, 2]))

def test_string_is_not_a_list():
    term, _ = decode(V + bytes([107, 0, 3]) + b"abc")
    assert term == StrTerm(data=b"abc")
    assert not isinstance(term, ListTerm)
    term, _ = decode(V + bytes([107, 0, 0]))
    assert term == StrTerm(data=b"")

def test_binary():
    term, _ = decode(V + bytes([109]) + (4).to_bytes(4, "big") + b"\x00\x01\xfe\xff")
    assert term == BinaryTerm(data=b"\x00\x01\xfe\xff")

def test_tuples():
    term, _ = decode(V + bytes([104, 2]) + small(1) + atom(b"ok"))
    assert term == TupleTerm(elements=[SmallIntTerm(value=1), AtomTerm(text="ok", encoding="latin1")])
    term, _ = decode(V + bytes([105]) + (1).to_bytes(4, "big") + small(7))
    assert term == TupleTerm(elements=[SmallIntTerm(value=7)])
    term, _ = decode(V + bytes([104, 0]))
    assert term == TupleTerm(elements=[])

def test_nil():
    term, _ = decode(V + bytes([106]))
    assert term == NilTerm()

def test_proper_list_consumes_tail():
    data = V + bytes([108]) + (2).to_bytes(4, "big") + small(1) + small(2) + bytes([106])
    term, used = decode(data)
    assert used == len(data)
    assert term.elements == [SmallIntTerm(value=1), SmallIntTerm(value=2)]
    assert term.is_proper

def test_improper_list_keeps_tail():
    data = V + bytes([108]) + (1).to_bytes(4, "big") + small(1) + small(2)
    term, _ = decode(data)
    assert not term.is_proper
    assert term.tail == SmallIntTerm(value=2)

def test_map_keeps_wire_order_and_duplicates():
    data = (
        V + bytes([116]) + (3).to_bytes(4, "big")
        + atom(b"b") + small(1)
        + atom(b"a") + small(2)
        + atom(b"b") + small(3)
    )
    term, _ = decode(data)
    assert isinstance(term, MapTerm)
    assert [k.text for k, _ in term.pairs] == ["b", "a", "b"]
    assert [v.value for _, v in term.pairs] == [1, 2, 3]

def test_trailing_bytes_are_left_alone():
    term, used = decode(V + small(5) + b"\x00\x00")
    assert term == SmallIntTerm(value=5)
    assert used == 3

def test_bad_version():
    with pytest.raises(BadVersion) as ei:
        decode(bytes([131 - 1, 97, 1]))
    assert ei.value.found == 130
    assert ei.value.offset == 0
    with pytest.raises(BadVersion) as ei:
        decode(b"")
    assert ei.value.found is None

@pytest.mark.parametrize("tag,name", [(103, "pid"), (88, "pid"), (102, "port"), (101, "reference"),
                                      (114, "reference"), (117, "fun"), (112, "fun"), (113, "export")])
def test_identity_tags_are_rejected(tag, name):
    with pytest.raises(UnsupportedTag) as ei:
        decode(V + bytes([104, 2]) + small(1) + bytes([tag]) + b"\x00" * 16)
    assert ei.value.tag == tag
    assert ei.value.name == name
    assert ei.value.offset == 5
    assert str(tag) in str(ei.value)

def test_unknown_tag():
    with pytest.raises(UnsupportedTag) as ei:
        decode(V + bytes([0]))
    assert ei.value.name is None

def _nested_tuples(depth: int) -> bytes:
    return V + bytes([104, 1]) * depth + small(0)

def test_depth_bound():
    term, _ = decode(_nested_tuples(5), max_depth=5)
    assert isinstance(term, TupleTerm)
    with pytest.raises(TooDeep) as ei:
        decode(_nested_tuples(6), max_depth=5)
    assert ei.value.offset == 1 + 2 * 5

def test_deep_input_fails_cleanly_at_default_bound():
    with pytest.raises(TooDeep):
        decode(_nested_tuples(100_000))

def test_decode_term_without_version():
    cur = Cursor(small(9) + small(10))
    assert decode_term(cur) == SmallIntTerm(value=9)
    assert decode_term(cur) == SmallIntTerm(value=10)
    assert cur.eof()


VALID = [
    V + small(42),
    V + bytes([98]) + (-1).to_bytes(4, "big", signed=True),
    V + bytes([70]) + struct.pack(">d", -0.5),
    V + old_float(b"2.0"),
    V + bytes([110, 2, 1, 0xFF, 0x01]),
    V + bytes([111, 0, 0, 0, 1, 0, 7]),
    V + atom(b"atom"),
    V + bytes([115, 2]) + b"ok",
    V + bytes([118, 0, 2]) + "é".encode(),
    V + bytes([119, 1]) + b"x",
    V + bytes([107, 0, 2]) + b"hi",
    V + bytes([109, 0, 0, 0, 1, 0]),
    V + bytes([104, 2]) + small(1) + small(2),
    V + bytes([105, 0, 0, 0, 1]) + atom(b"a"),
    V + bytes([108, 0, 0, 0, 1]) + small(1) + bytes([106]),
    V + bytes([116, 0, 0, 0, 1]) + atom(b"k") + bytes([107, 0, 1, 65]),
]

@pytest.mark.parametrize("data", VALID)
def test_every_truncation_underruns(data):
    decode(data)
    for n in range(1, len(data)):
        with pytest.raises(Underrun):
            decode(data[:n])
