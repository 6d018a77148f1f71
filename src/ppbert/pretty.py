from __future__ import annotations
import re
from typing import List, Optional, Sequence

from ppbert.models.config import RenderConfig
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

_BARE_ATOM = re.compile(r"[a-z][A-Za-z0-9_@]*")

RESERVED_WORDS = frozenset({
    "after", "and", "andalso", "band", "begin", "bnot", "bor", "bsl", "bsr",
    "bxor", "case", "catch", "cond", "div", "else", "end", "fun", "if", "let",
    "maybe", "not", "of", "or", "orelse", "receive", "rem", "try", "when", "xor",
})


def _is_printable(b: int) -> bool:
    return 0x20 <= b <= 0x7E


def quote_bytes(data: bytes, open_: str, close: str) -> str:
    out = [open_]
    for b in data:
        if b in (0x22, 0x5C):          # " and \
            out.append("\\" + chr(b))
        elif _is_printable(b):
            out.append(chr(b))
        else:
            out.append(f"\\x{b:02x}")
    out.append(close)
    return "".join(out)


def format_atom(text: str) -> str:
    if _BARE_ATOM.fullmatch(text) and text not in RESERVED_WORDS:
        return text
    out = ["'"]
    for ch in text:
        if ch in ("'", "\\"):
            out.append("\\" + ch)
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) <= 0xFF:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(f"\\x{{{ord(ch):x}}}")
    out.append("'")
    return "".join(out)


def format_basic(term: Term) -> str:
    """Fixed textual form of a basic (childless) term."""
    if isinstance(term, (SmallIntTerm, IntTerm, BigIntTerm)):
        return str(term.value)
    if isinstance(term, FloatTerm):
        return repr(term.value)
    if isinstance(term, AtomTerm):
        return format_atom(term.text)
    if isinstance(term, StrTerm):
        return quote_bytes(term.data, '"', '"')
    if isinstance(term, BinaryTerm):
        return quote_bytes(term.data, '<<"', '">>')
    if isinstance(term, NilTerm):
        return "[]"
    raise TypeError(f"not a basic term: {type(term).__name__}")


class PrettyPrinter:
    """
    Renders a term tree as indented text.

    A compound goes on one line when all of its children are basic and
    there are at most ``max_terms_per_line`` of them; otherwise every
    child gets its own line, indented ``indent_width`` spaces deeper.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()

    def render(self, term: Term) -> str:
        out: List[str] = []
        self._write(term, out, 0)
        return "".join(out)

    def _is_small(self, terms: Sequence[Term], slots: int) -> bool:
        return slots <= self.config.max_terms_per_line and all(t.is_basic for t in terms)

    def _indent(self, depth: int) -> str:
        return "\n" + " " * (depth * self.config.indent_width)

    def _write(self, term: Term, out: List[str], depth: int) -> None:
        if isinstance(term, TupleTerm):
            self._write_collection(term.elements, None, out, depth, "{", "}")
        elif isinstance(term, ListTerm):
            if not term.elements and not term.is_proper:
                # [] ++ T is just T
                self._write(term.tail, out, depth)
                return
            tail = None if term.is_proper else term.tail
            self._write_collection(term.elements, tail, out, depth, "[", "]")
        elif isinstance(term, MapTerm):
            self._write_map(term, out, depth)
        else:
            out.append(format_basic(term))

    def _write_collection(
        self,
        terms: Sequence[Term],
        tail: Optional[Term],
        out: List[str],
        depth: int,
        open_: str,
        close: str,
    ) -> None:
        children = list(terms) if tail is None else [*terms, tail]
        multi_line = not self._is_small(children, len(children))
        # Every element has the same indentation, so compute it once.
        prefix = self._indent(depth + 1) if multi_line else ""
        sep = "," if multi_line else ", "

        out.append(open_)
        for i, t in enumerate(terms):
            if i:
                out.append(sep)
            out.append(prefix)
            self._write(t, out, depth + 1)
        if tail is not None:
            out.append(prefix if multi_line else " ")
            out.append("| ")
            self._write(tail, out, depth + 1)
        if multi_line:
            out.append(self._indent(depth))
        out.append(close)

    def _write_map(self, term: MapTerm, out: List[str], depth: int) -> None:
        flat = [t for pair in term.pairs for t in pair]
        # A map is "small" by its pair count, not its key+value count.
        multi_line = not self._is_small(flat, len(term.pairs))
        prefix = self._indent(depth + 1) if multi_line else ""
        sep = "," if multi_line else ", "

        out.append("#{")
        for i, (key, value) in enumerate(term.pairs):
            if i:
                out.append(sep)
            out.append(prefix)
            self._write(key, out, depth + 1)
            out.append(" => ")
            self._write(value, out, depth + 1)
        if multi_line:
            out.append(self._indent(depth))
        out.append("}")


def render(term: Term, config: Optional[RenderConfig] = None) -> str:
    return PrettyPrinter(config).render(term)
