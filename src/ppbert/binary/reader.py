from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from .codecs.bytecursor import Cursor
from .codecs.term_codec import decode_term, expect_version
from .errors import DecodeError, TrailingData, VarintTooLarge
from ppbert.models.config import DEFAULT_MAX_DEPTH, RenderConfig
from ppbert.models.term import Term
from ppbert.pretty import PrettyPrinter

logger = logging.getLogger(__name__)

BytesLike = Union[str, Path, bytes, bytearray, memoryview]

# protobuf-style varints; more than this many bytes is refused
MAX_VARINT_BYTES = 8


# -----------------------------
# Helpers
# -----------------------------

def _load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    if str(inp) == "-":
        return sys.stdin.buffer.read()
    p = Path(str(inp))
    return p.read_bytes()


def read_varint(cur: Cursor) -> int:
    """Little-endian base-128 varint, at most MAX_VARINT_BYTES long."""
    start = cur.tell()
    value = 0
    for i in range(MAX_VARINT_BYTES):
        b = cur.u8()
        value |= (b & 0x7F) << (7 * i)
        if not b & 0x80:
            return value
    raise VarintTooLarge(offset=start)


# -----------------------------
# Single term (BERT)
# -----------------------------

def parse_term(data: BytesLike, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Term:
    """
    Decode a buffer holding exactly one version-prefixed term.
    Bytes left over after the term are an error.
    """
    raw = _load_bytes(data)
    cur = Cursor(raw)
    expect_version(cur)
    term = decode_term(cur, max_depth=max_depth)
    if not cur.eof():
        raise TrailingData(cur.remaining(), offset=cur.tell())
    return term


# -----------------------------
# Framed stream (BERT2)
# -----------------------------

def iter_bert2(data: BytesLike, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[Term]:
    """
    Stream terms from a BERT2 buffer: each record is a varint length
    followed by that many bytes holding one version-prefixed term.
    """
    raw = _load_bytes(data)
    cur = Cursor(raw)
    while not cur.eof():
        size = read_varint(cur)
        # Fence off the record so a short term can't read into the next one.
        rec = cur.sub(size)
        expect_version(rec)
        term = decode_term(rec, max_depth=max_depth)
        if not rec.eof():
            raise TrailingData(rec.remaining(), offset=rec.tell())
        yield term


def parse_bert2(data: BytesLike, *, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Term]:
    return list(iter_bert2(data, max_depth=max_depth))


def iter_terms(data: BytesLike, *, bert2: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[Term]:
    if bert2:
        yield from iter_bert2(data, max_depth=max_depth)
    else:
        yield parse_term(data, max_depth=max_depth)


# -----------------------------
# One unit of work
# -----------------------------

@dataclass
class UnitResult:
    name: str
    text: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _dump_json(term: Term) -> str:
    import json
    return json.dumps(term.model_dump(mode="json"), indent=2)


def process(data: BytesLike, config: Optional[RenderConfig] = None, *, name: str = "-") -> UnitResult:
    """
    Decode one input and render it unless ``config.skip_render`` is set.
    Decode errors end up in ``UnitResult.error``; nothing is retried.
    """
    config = config or RenderConfig()
    try:
        raw = _load_bytes(data)
    except OSError as e:
        return UnitResult(name=name, error=e)

    t0 = time.perf_counter()
    try:
        terms = list(iter_terms(raw, bert2=config.bert2, max_depth=config.max_depth))
    except DecodeError as e:
        return UnitResult(name=name, error=e)
    t1 = time.perf_counter()
    logger.info("%s: decoded %d term(s) from %d bytes in %.3fs", name, len(terms), len(raw), t1 - t0)

    if config.skip_render:
        return UnitResult(name=name, text=None)

    if config.as_json:
        try:
            text = "\n".join(_dump_json(t) for t in terms)
        except ValueError as e:
            # pydantic-core gives up on very deep trees
            return UnitResult(name=name, error=e)
    else:
        pp = PrettyPrinter(config)
        text = "\n".join(pp.render(t) for t in terms)
    logger.info("%s: rendered in %.3fs", name, time.perf_counter() - t1)
    return UnitResult(name=name, text=text)


def run_batch(inputs: Iterable[BytesLike], config: Optional[RenderConfig] = None) -> List[UnitResult]:
    """Process every input independently; one failure never stops the rest."""
    results = []
    for inp in inputs:
        name = "<bytes>" if isinstance(inp, (bytes, bytearray, memoryview)) else str(inp)
        results.append(process(inp, config, name=name))
    return results


def all_ok(results: Iterable[UnitResult]) -> bool:
    return all(r.ok for r in results)
