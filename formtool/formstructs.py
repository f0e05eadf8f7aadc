import enum

import numpy as np
from construct import *

int32ul = np.dtype("<u4")

MAGIC = b"FORM"

# Intentionally does not include FORM itself.
class ChunkTag(enum.Enum):
    AGRP = "AGRP"
    AUDO = "AUDO"
    BGND = "BGND"
    CODE = "CODE"
    DAFL = "DAFL"
    EXTN = "EXTN"
    FONT = "FONT"
    FUNC = "FUNC"
    GEN8 = "GEN8"
    OBJT = "OBJT"
    OPTN = "OPTN"
    PATH = "PATH"
    ROOM = "ROOM"
    SCPT = "SCPT"
    SHDR = "SHDR"
    SOND = "SOND"
    SPRT = "SPRT"
    STRG = "STRG"
    TMLN = "TMLN"
    TPAG = "TPAG"
    TXTR = "TXTR"
    VARI = "VARI"

ChunkHeader = Struct(
    "tag"    / Bytes(4),
    "length" / Int32ul,
)

# Entry layouts, one per pointer-table target. Fields holding file offsets
# of length-prefixed strings are named after the string they point to.
ENTRIES = {}

ENTRIES["SOND"] = Struct(
    "name"      / Int32ul,
    "u1"        / Int32ul,
    "extension" / Int32ul,
    "filename"  / Int32ul,
    Padding(4),
    "u2"        / Int32ul,
    Padding(8),
    "index"     / Int32ul,
)

ENTRIES["AGRP"] = Struct(
    "name" / Int32ul,
)

ENTRIES["SPRT"] = Struct(
    "name"   / Int32ul,
    "width"  / Int32ul,
    "height" / Int32ul,
    "u1"     / Int32ul, #always 7?
    "u2"     / Int32ul,
    "u3"     / Int32ul,
    Padding(32),
    "frames" / PrefixedArray(Int32ul, Int32ul),
)

# Sprite frame pointers land two bytes past the sheet index.
SpriteFrame = Struct(
    "sheet"    / Int16ul,
    "geometry" / Array(10, Int16ul),
)

ENTRIES["SCPT"] = Struct(
    "name" / Int32ul,
    "code" / Int32ul,
)

ENTRIES["FONT"] = Struct(
    "varname" / Int32ul,
    "name"    / Int32ul,
    "size"    / Int32ul,
    Padding(8),
    "u1"      / Int16ul,
    "u2"      / Int16ul,
    "u3"      / Int16ul,
    "u4"      / Int16ul,
)

ENTRIES["CODE"] = Struct(
    "name" / Int32ul,
    "u1"   / Int32ul,
    "u2"   / Int32ul,
    "u3"   / Int32ul,
    "u4"   / Int32ul,
)

# Unlike names, string table pointers land on the length itself.
ENTRIES["STRG"] = Struct(
    "length" / Int32ul,
    "string" / Bytes(this.length),
    Padding(1), #terminating NUL
)

ENTRIES["TXTR"] = Struct(
    "u1"     / Int32ul,
    "offset" / Int32ul,
)

ENTRIES["SHDR"] = Struct(
    "u1"     / Int32ul,
    "u2"     / Int32ul,
    "u3"     / Int32ul,
    "slots"  / Array(6, Int32ul), #zero when unused
    Padding(8),
    "trailing" / PrefixedArray(Int32ul, Int32ul),
)

__all__ = ["int32ul", "MAGIC", "ChunkTag", "ChunkHeader",
           "ENTRIES", "SpriteFrame"]
