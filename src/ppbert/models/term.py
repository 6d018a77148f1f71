from __future__ import annotations
from typing import Annotated, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Term(BaseModel):
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    @property
    def is_basic(self) -> bool:
        return True


class SmallIntTerm(_Term):
    kind: Literal["small_int"] = "small_int"
    value: int = Field(..., ge=0, le=255)


class IntTerm(_Term):
    kind: Literal["int"] = "int"
    value: int = Field(..., ge=-(2**31), le=2**31 - 1)


class FloatTerm(_Term):
    kind: Literal["float"] = "float"
    value: float


class BigIntTerm(_Term):
    kind: Literal["big_int"] = "big_int"
    value: int


class AtomTerm(_Term):
    kind: Literal["atom"] = "atom"
    text: str
    encoding: Literal["latin1", "utf8"] = "utf8"


class StrTerm(_Term):
    """Tag 107: a list of bytes sent in compact form."""
    kind: Literal["str"] = "str"
    data: bytes


class BinaryTerm(_Term):
    kind: Literal["binary"] = "binary"
    data: bytes


class NilTerm(_Term):
    """The empty list, also the tail of every proper list."""
    kind: Literal["nil"] = "nil"


class TupleTerm(_Term):
    kind: Literal["tuple"] = "tuple"
    elements: List[Term] = Field(default_factory=list)

    @property
    def is_basic(self) -> bool:
        return False


class ListTerm(_Term):
    kind: Literal["list"] = "list"
    elements: List[Term] = Field(default_factory=list)
    tail: Term = Field(default_factory=NilTerm)

    @property
    def is_basic(self) -> bool:
        return False

    @property
    def is_proper(self) -> bool:
        return isinstance(self.tail, NilTerm)


class MapTerm(_Term):
    """Pairs keep the order they had on the wire; duplicate keys are kept."""
    kind: Literal["map"] = "map"
    pairs: List[Tuple[Term, Term]] = Field(default_factory=list)

    @property
    def is_basic(self) -> bool:
        return False


Term = Annotated[
    Union[
        SmallIntTerm,
        IntTerm,
        FloatTerm,
        BigIntTerm,
        AtomTerm,
        StrTerm,
        BinaryTerm,
        NilTerm,
        TupleTerm,
        ListTerm,
        MapTerm,
    ],
    Field(discriminator="kind"),
]

for _model in (TupleTerm, ListTerm, MapTerm):
    _model.model_rebuild()
