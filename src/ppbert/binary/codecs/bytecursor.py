from __future__ import annotations
import struct

from ppbert.binary.errors import Underrun

class Cursor:
    __slots__ = ("buf", "pos", "end")

    def __init__(self, data: bytes | bytearray | memoryview, pos: int = 0, end: int | None = None):
        self.buf = memoryview(data)
        self.pos = pos
        self.end = len(self.buf) if end is None else end

    def remaining(self) -> int: return self.end - self.pos
    def tell(self) -> int: return self.pos
    def eof(self) -> bool: return self.pos >= self.end

    def _check(self, n: int) -> int:
        end = self.pos + n
        if end > self.end:
            raise Underrun(n, offset=self.pos, have=self.remaining())
        return end

    def take(self, n: int) -> bytes:
        end = self._check(n)
        out = self.buf[self.pos:end].tobytes()
        self.pos = end
        return out

    def sub(self, n: int) -> "Cursor":
        """Fence off the next n bytes; offsets stay relative to the whole buffer."""
        end = self._check(n)
        fenced = Cursor(self.buf, self.pos, end)
        self.pos = end
        return fenced

    # byte-aligned big-endian reads
    def _unpack(self, fmt: str, n: int):
        return struct.unpack(fmt, self.take(n))[0]
    def u8(self) -> int:  return self._unpack(">B", 1)
    def u16(self) -> int: return self._unpack(">H", 2)
    def u32(self) -> int: return self._unpack(">I", 4)
    def s32(self) -> int: return self._unpack(">i", 4)
    def f64(self) -> float: return self._unpack(">d", 8)
