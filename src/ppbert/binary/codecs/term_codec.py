from __future__ import annotations
import re
from typing import Callable, Dict, Tuple

from ppbert.binary.codecs.bytecursor import Cursor
from ppbert.binary.codecs.tags import OLD_FLOAT_WIDTH, REJECTED, VERSION, Tag
from ppbert.binary.errors import (
    BadVersion,
    MalformedAtomText,
    MalformedFloatText,
    TooDeep,
    UnsupportedTag,
)
from ppbert.models.config import DEFAULT_MAX_DEPTH
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
    Term,
    TupleTerm,
)

# Erlang writes these with "%.20e"; anything python's float() would also
# accept (inf, nan, underscores, spaces) is rejected.
_FLOAT_TEXT = re.compile(r"[+-]?\d+(\.\d*)?([eE][+-]?\d+)?")


def expect_version(cur: Cursor) -> None:
    offset = cur.tell()
    if cur.eof():
        raise BadVersion(None, offset=offset)
    found = cur.u8()
    if found != VERSION:
        raise BadVersion(found, offset=offset)


def decode(data: bytes | bytearray | memoryview, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[Term, int]:
    """
    Decode one version-prefixed term from the start of ``data``.
    Returns (term, bytes_consumed); trailing bytes are left for the caller.
    """
    cur = Cursor(data)
    expect_version(cur)
    term = decode_term(cur, max_depth=max_depth)
    return term, cur.tell()


def decode_term(cur: Cursor, *, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> Term:
    """Decode the tagged term at the cursor (no version byte)."""
    offset = cur.tell()
    tag = cur.u8()
    handler = _DECODERS.get(tag)
    if handler is None:
        raise UnsupportedTag(tag, offset=offset, name=REJECTED.get(tag))
    return handler(cur, tag, depth, max_depth)


# -----------------------------
# Basic terms
# -----------------------------

def _small_integer(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    return SmallIntTerm(value=cur.u8())

def _integer(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    return IntTerm(value=cur.s32())

def _new_float(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    return FloatTerm(value=cur.f64())

def _old_float(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    offset = cur.tell()
    raw = cur.take(OLD_FLOAT_WIDTH)
    text = raw.rstrip(b"\x00").decode("ascii", errors="replace")
    if not _FLOAT_TEXT.fullmatch(text):
        raise MalformedFloatText(text, offset=offset)
    return FloatTerm(value=float(text))

def _bignum(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    n = cur.u8() if tag == Tag.SMALL_BIG else cur.u32()
    sign = cur.u8()
    # base-256 digits, least significant first
    value = int.from_bytes(cur.take(n), "little")
    return BigIntTerm(value=-value if sign else value)

def _atom(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    n = cur.u8() if tag in (Tag.SMALL_ATOM, Tag.SMALL_ATOM_UTF8) else cur.u16()
    offset = cur.tell()
    raw = cur.take(n)
    if tag in (Tag.ATOM_UTF8, Tag.SMALL_ATOM_UTF8):
        encoding, codec = "utf8", "utf-8"
    else:
        encoding, codec = "latin1", "latin-1"
    try:
        text = raw.decode(codec)
    except UnicodeDecodeError as e:
        raise MalformedAtomText(encoding, offset=offset + e.start) from e
    return AtomTerm(text=text, encoding=encoding)

def _string(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    return StrTerm(data=cur.take(cur.u16()))

def _binary(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    return BinaryTerm(data=cur.take(cur.u32()))

def _nil(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    return NilTerm()


# -----------------------------
# Compound terms
# -----------------------------

def _enter(cur: Cursor, depth: int, max_depth: int) -> int:
    """Depth for the children of a compound whose tag was just read."""
    if depth >= max_depth:
        raise TooDeep(max_depth, offset=cur.tell() - 1)
    return depth + 1

def _tuple(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    child_depth = _enter(cur, depth, max_depth)
    arity = cur.u8() if tag == Tag.SMALL_TUPLE else cur.u32()
    # arity comes off the wire, so no preallocation; an underrun ends the loop.
    elements = []
    for _ in range(arity):
        elements.append(decode_term(cur, depth=child_depth, max_depth=max_depth))
    return TupleTerm(elements=elements)

def _list(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    child_depth = _enter(cur, depth, max_depth)
    n = cur.u32()
    elements = []
    for _ in range(n):
        elements.append(decode_term(cur, depth=child_depth, max_depth=max_depth))
    # The tail is always encoded, even for proper lists (as a NIL tag).
    tail = decode_term(cur, depth=child_depth, max_depth=max_depth)
    return ListTerm(elements=elements, tail=tail)

def _map(cur: Cursor, tag: int, depth: int, max_depth: int) -> Term:
    child_depth = _enter(cur, depth, max_depth)
    n = cur.u32()
    pairs = []
    for _ in range(n):
        key = decode_term(cur, depth=child_depth, max_depth=max_depth)
        value = decode_term(cur, depth=child_depth, max_depth=max_depth)
        pairs.append((key, value))
    return MapTerm(pairs=pairs)


_DECODERS: Dict[int, Callable[[Cursor, int, int, int], Term]] = {
    Tag.SMALL_INTEGER:   _small_integer,
    Tag.INTEGER:         _integer,
    Tag.NEW_FLOAT:       _new_float,
    Tag.FLOAT:           _old_float,
    Tag.SMALL_BIG:       _bignum,
    Tag.LARGE_BIG:       _bignum,
    Tag.ATOM:            _atom,
    Tag.SMALL_ATOM:      _atom,
    Tag.ATOM_UTF8:       _atom,
    Tag.SMALL_ATOM_UTF8: _atom,
    Tag.STRING:          _string,
    Tag.BINARY:          _binary,
    Tag.NIL:             _nil,
    Tag.SMALL_TUPLE:     _tuple,
    Tag.LARGE_TUPLE:     _tuple,
    Tag.LIST:            _list,
    Tag.MAP:             _map,
}
