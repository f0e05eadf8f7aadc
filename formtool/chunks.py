# One decoder per chunk that carries records. Each takes the cursor, sitting
# just past the chunk header, and the ChunkHeader, and returns
# (entry count, records). They seek freely; the walker puts the cursor back
# on the chunk boundary afterwards.
#

import numpy as np

from formtool.cursor import prefixed_length, resolve_string
from formtool.errors import BadBlobRange, TruncatedRead
from formtool.formstructs import ENTRIES, SpriteFrame as SpriteFrameStruct
from formtool.records import *

def pointer_table(cursor):
    return cursor.read_u32_table(cursor.read_u32le())

def entries(cursor, tag, pointers):
    layout = ENTRIES[tag]
    for pointer in pointers:
        cursor.seek(pointer)
        yield cursor.parse(layout)

def blob_ranges(offsets, chunk_end):
    """Size blobs by the distance to the next one; the last runs to chunk_end.

    Only exact when the blobs are packed back to back in file order, which
    is how the engine writes them. Anything that infers to zero or less
    bytes means that assumption doesn't hold for this archive.
    """
    if not len(offsets):
        return ()
    offsets = np.asarray(offsets, dtype=np.int64)
    lengths = np.append(offsets[1:], chunk_end) - offsets
    bad = np.flatnonzero(lengths <= 0)
    if bad.size:
        i = int(bad[0])
        raise BadBlobRange("blob %d at 0x%x has inferred length %d"
            % (i, offsets[i], lengths[i]))
    return tuple(zip(offsets.tolist(), lengths.tolist()))

# The SOND chunk only has metadata; the audio itself is in AUDO, matched up
# by position.
def decode_sond(cursor, chunk):
    pointers = pointer_table(cursor)
    sounds = []
    for entry in entries(cursor, "SOND", pointers):
        sounds.append(SoundRecord(
            index=entry.index,
            extension=resolve_string(cursor, entry.extension),
            name=resolve_string(cursor, entry.name),
            filename=resolve_string(cursor, entry.filename),
            u1=entry.u1,
            u2=entry.u2,
        ))
    return len(pointers), sounds

def decode_agrp(cursor, chunk):
    pointers = pointer_table(cursor)
    groups = [AudioGroupName(i, resolve_string(cursor, entry.name))
        for i, entry in enumerate(entries(cursor, "AGRP", pointers))]
    return len(pointers), groups

def read_frames(cursor, pointers):
    for i, pointer in enumerate(pointers):
        if pointer < 2:
            raise TruncatedRead("sprite frame pointer 0x%x has no room for a sheet index" % pointer)
        cursor.seek(pointer - 2)
        frame = cursor.parse(SpriteFrameStruct)
        yield SpriteFrame(i, frame.sheet, tuple(frame.geometry))

def decode_sprt(cursor, chunk):
    pointers = pointer_table(cursor)
    sprites = []
    for i, entry in enumerate(entries(cursor, "SPRT", pointers)):
        frames = tuple(read_frames(cursor, entry.frames))
        sprites.append(SpriteRecord(
            index=i,
            name=resolve_string(cursor, entry.name),
            width=entry.width,
            height=entry.height,
            u1=entry.u1,
            u2=entry.u2,
            u3=entry.u3,
            frames=frames,
        ))
    return len(pointers), sprites

def decode_scpt(cursor, chunk):
    pointers = pointer_table(cursor)
    scripts = [ScriptRecord(i, resolve_string(cursor, entry.name), entry.code)
        for i, entry in enumerate(entries(cursor, "SCPT", pointers))]
    return len(pointers), scripts

def decode_font(cursor, chunk):
    pointers = pointer_table(cursor)
    fonts = []
    for i, entry in enumerate(entries(cursor, "FONT", pointers)):
        fonts.append(FontRecord(
            index=i,
            varname=resolve_string(cursor, entry.varname),
            name=resolve_string(cursor, entry.name),
            size=entry.size,
            u1=entry.u1,
            u2=entry.u2,
            u3=entry.u3,
            u4=entry.u4,
        ))
    return len(pointers), fonts

def decode_code(cursor, chunk):
    pointers = pointer_table(cursor)
    code = [CodeRecord(i, resolve_string(cursor, entry.name),
                       entry.u1, entry.u2, entry.u3, entry.u4)
        for i, entry in enumerate(entries(cursor, "CODE", pointers))]
    return len(pointers), code

# VARI and FUNC aren't pointer tables; only the leading count is known.
def decode_count(cursor, chunk):
    return cursor.read_u32le(), ()

def decode_strg(cursor, chunk):
    pointers = pointer_table(cursor)
    strings = [StringRecord(i, entry.length, entry.string)
        for i, entry in enumerate(entries(cursor, "STRG", pointers))]
    return len(pointers), strings

# Texture pages are raster images (PNG in practice) with no stored length,
# packed back to back up to the end of the chunk.
def decode_txtr(cursor, chunk):
    pointers = pointer_table(cursor)
    pages = list(entries(cursor, "TXTR", pointers))
    ranges = blob_ranges([page.offset for page in pages], chunk.end)
    textures = [TexturePageRecord(i, page.u1, offset, length, TEXTURE_FILENAME % i)
        for i, (page, (offset, length)) in enumerate(zip(pages, ranges))]
    return len(pointers), textures

# Each AUDO pointer lands on a u32 length followed by the audio payload.
def decode_audo(cursor, chunk):
    pointers = pointer_table(cursor)
    blobs = []
    for i, offset in enumerate(pointers):
        cursor.seek(offset)
        length = cursor.read_u32le()
        if not length:
            raise BadBlobRange("audio %d at 0x%x is empty" % (i, offset))
        if offset + 4 + length > chunk.end:
            raise TruncatedRead("audio %d at 0x%x (%d bytes) runs past the chunk end 0x%x"
                % (i, offset, length, chunk.end))
        blobs.append(AudioBlob(i, offset, length))
    return len(pointers), blobs

def read_slots(cursor, index, pointers):
    for slot, pointer in enumerate(pointers):
        if not pointer:
            continue
        length = prefixed_length(cursor, pointer)
        cursor.require(pointer, length)
        yield ShaderSlot(slot, pointer, length, SHADER_FILENAME % (index, slot))

def decode_shdr(cursor, chunk):
    pointers = pointer_table(cursor)
    shaders = []
    for i, entry in enumerate(entries(cursor, "SHDR", pointers)):
        shaders.append(ShaderRecord(
            index=i,
            u1=entry.u1,
            u2=entry.u2,
            u3=entry.u3,
            slots=tuple(read_slots(cursor, i, entry.slots)),
            values=tuple(entry.trailing),
        ))
    return len(pointers), shaders

# Only the raw pointers for now.
def decode_tpag(cursor, chunk):
    pointers = pointer_table(cursor)
    return len(pointers), [TpagRecord(i, offset) for i, offset in enumerate(pointers)]
