from collections import namedtuple
from types import MappingProxyType

from formtool.errors import UnknownChunk
from formtool.formstructs import ChunkTag

ContainerHeader = namedtuple("ContainerHeader", "magic total_length")
ChunkHeader     = namedtuple("ChunkHeader", "tag length end")

# u1..u4 fields are stored verbatim, their meaning is unknown.
SoundRecord       = namedtuple("SoundRecord", "index extension name filename u1 u2")
AudioBlob         = namedtuple("AudioBlob", "index offset length")
AudioGroupName    = namedtuple("AudioGroupName", "index name")
SpriteRecord      = namedtuple("SpriteRecord", "index name width height u1 u2 u3 frames")
SpriteFrame       = namedtuple("SpriteFrame", "index sheet geometry")
FontRecord        = namedtuple("FontRecord", "index varname name size u1 u2 u3 u4")
ShaderRecord      = namedtuple("ShaderRecord", "index u1 u2 u3 slots values")
ShaderSlot        = namedtuple("ShaderSlot", "slot offset length filename")
TexturePageRecord = namedtuple("TexturePageRecord", "index u1 offset length filename")
CodeRecord        = namedtuple("CodeRecord", "index varname u1 u2 u3 u4")
ScriptRecord      = namedtuple("ScriptRecord", "index name code")
StringRecord      = namedtuple("StringRecord", "index length string")
TpagRecord        = namedtuple("TpagRecord", "index offset")

TEXTURE_FILENAME = "TXTR_%03d.png"
SHADER_FILENAME  = "SHDR_%02d_%02d.txt"
STRINGS_FILENAME = "STRG.txt"

class DecodeConfig(namedtuple("DecodeConfig", "chunk_filter extract_blobs")):
    __slots__ = ()

    def __new__(cls, chunk_filter=None, extract_blobs=True):
        if chunk_filter is not None:
            try:
                chunk_filter = ChunkTag(chunk_filter).value
            except ValueError:
                raise UnknownChunk(chunk_filter) from None
        return super().__new__(cls, chunk_filter, bool(extract_blobs))

    def selects(self, tag):
        return self.chunk_filter is None or self.chunk_filter == tag

class ResultStore:
    """Everything one decode pass found, keyed by chunk tag.

    ``section_lengths`` has the declared length of every chunk walked, decoded
    or not. ``counts`` has the entry count of every chunk that was decoded,
    and ``records`` the records those decoders produced, in file order.
    """
    __slots__ = "total_length", "section_lengths", "counts", "records"

    def __init__(self, total_length, section_lengths, counts, records):
        self.total_length = total_length
        self.section_lengths = MappingProxyType(dict(section_lengths))
        self.counts = MappingProxyType(dict(counts))
        self.records = MappingProxyType({tag: tuple(recs) for tag, recs in records.items()})

    def __getitem__(self, tag):
        return self.records.get(tag, ())

    def __contains__(self, tag):
        return tag in self.records

    def __eq__(self, other):
        if not isinstance(other, ResultStore):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None

    def __repr__(self):
        return "<ResultStore total_length=%d chunks=%s>" % (
            self.total_length, " ".join(self.section_lengths))

    def _key(self):
        return (self.total_length, dict(self.section_lengths),
                dict(self.counts), dict(self.records))

    sounds         = property(lambda self: self["SOND"])
    audio          = property(lambda self: self["AUDO"])
    audio_groups   = property(lambda self: self["AGRP"])
    sprites        = property(lambda self: self["SPRT"])
    scripts        = property(lambda self: self["SCPT"])
    fonts          = property(lambda self: self["FONT"])
    code           = property(lambda self: self["CODE"])
    strings        = property(lambda self: self["STRG"])
    texture_pages  = property(lambda self: self["TXTR"])
    shaders        = property(lambda self: self["SHDR"])
    tpag           = property(lambda self: self["TPAG"])

__all__ = [
    "ContainerHeader", "ChunkHeader", "SoundRecord", "AudioBlob", "AudioGroupName",
    "SpriteRecord", "SpriteFrame", "FontRecord", "ShaderRecord", "ShaderSlot",
    "TexturePageRecord", "CodeRecord", "ScriptRecord", "StringRecord", "TpagRecord",
    "TEXTURE_FILENAME", "SHADER_FILENAME", "STRINGS_FILENAME",
    "DecodeConfig", "ResultStore",
]
