from __future__ import annotations

VERSION = 131

class Tag:
    NEW_FLOAT = 70
    SMALL_INTEGER = 97
    INTEGER = 98
    FLOAT = 99
    ATOM = 100
    SMALL_TUPLE = 104
    LARGE_TUPLE = 105
    NIL = 106
    STRING = 107
    LIST = 108
    BINARY = 109
    SMALL_BIG = 110
    LARGE_BIG = 111
    SMALL_ATOM = 115
    MAP = 116
    ATOM_UTF8 = 118
    SMALL_ATOM_UTF8 = 119

# Tags the format defines but which only make sense inside a running node.
REJECTED = {
    68: "distribution header",
    77: "bit binary",
    82: "atom cache reference",
    88: "pid",
    89: "port",
    90: "reference",
    101: "reference",
    102: "port",
    103: "pid",
    112: "fun",
    113: "export",
    114: "reference",
    117: "fun",
    120: "port",
    121: "local",
}

# Width in bytes of the legacy ASCII float payload (tag 99).
OLD_FLOAT_WIDTH = 31
