from __future__ import annotations


class DecodeError(ValueError):
    """Base class for everything that can go wrong while decoding a term.

    ``offset`` is the byte position in the input where the problem was
    detected; ``kind`` names the failure class independently of Python.
    """

    kind = "decode_error"

    def __init__(self, msg: str, *, offset: int) -> None:
        super().__init__(f"{msg} (at offset {offset})")
        self.offset = offset


class Underrun(DecodeError):
    kind = "underrun"

    def __init__(self, need: int, *, offset: int, have: int) -> None:
        super().__init__(f"underrun: need {need} byte(s), {have} left", offset=offset)
        self.need = need
        self.have = have


class BadVersion(DecodeError):
    kind = "bad_version"

    def __init__(self, found: int | None, *, offset: int) -> None:
        if found is None:
            msg = "missing version byte"
        else:
            msg = f"invalid version byte {found}"
        super().__init__(msg, offset=offset)
        self.found = found


class UnsupportedTag(DecodeError):
    kind = "unsupported_tag"

    def __init__(self, tag: int, *, offset: int, name: str | None = None) -> None:
        if name:
            msg = f"unsupported tag {tag} ({name})"
        else:
            msg = f"invalid tag {tag}"
        super().__init__(msg, offset=offset)
        self.tag = tag
        self.name = name


class MalformedAtomText(DecodeError):
    kind = "malformed_atom_text"

    def __init__(self, encoding: str, *, offset: int) -> None:
        super().__init__(f"atom is not valid {encoding}", offset=offset)
        self.encoding = encoding


class MalformedFloatText(DecodeError):
    kind = "malformed_float_text"

    def __init__(self, text: str, *, offset: int) -> None:
        super().__init__(f"invalid float text {text!r}", offset=offset)
        self.text = text


class TooDeep(DecodeError):
    kind = "too_deep"

    def __init__(self, max_depth: int, *, offset: int) -> None:
        super().__init__(f"nesting exceeds maximum depth {max_depth}", offset=offset)
        self.max_depth = max_depth


class TrailingData(DecodeError):
    kind = "trailing_data"

    def __init__(self, extra: int, *, offset: int) -> None:
        super().__init__(f"{extra} byte(s) of extra data after term", offset=offset)
        self.extra = extra


class VarintTooLarge(DecodeError):
    kind = "varint_too_large"

    def __init__(self, *, offset: int) -> None:
        super().__init__("varint length prefix is too large", offset=offset)
