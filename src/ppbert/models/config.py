from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INDENT_WIDTH = 2
DEFAULT_MAX_TERMS_PER_LINE = 4
# Every nesting level costs two frames in both the decoder and the printer,
# and pydantic-core refuses to serialize models nested much past 250.
DEFAULT_MAX_DEPTH = 128
MAX_DEPTH_LIMIT = 200

class RenderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    indent_width: int = Field(DEFAULT_INDENT_WIDTH, ge=1)
    max_terms_per_line: int = Field(DEFAULT_MAX_TERMS_PER_LINE, ge=1)
    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT)
    skip_render: bool = False
    bert2: bool = False
    as_json: bool = False
