# This is *not* a general purpose IFF reader. It walks exactly the FORM
# layout the engine's asset compiler writes and gives up on anything else.
#

import logging
from contextlib import contextmanager
from pathlib import Path

from formtool import chunks
from formtool.cursor import ByteCursor
from formtool.errors import BadMagic, CountMismatch, TruncatedRead, UnknownChunk
from formtool.formstructs import MAGIC, ChunkTag, ChunkHeader as ChunkHeaderStruct
from formtool.records import ChunkHeader, ContainerHeader, DecodeConfig, ResultStore

logger = logging.getLogger(__name__)

# None means the chunk is walked past but has no records.
DECODERS = {
    ChunkTag.AGRP: chunks.decode_agrp,
    ChunkTag.AUDO: chunks.decode_audo,
    ChunkTag.BGND: None,
    ChunkTag.CODE: chunks.decode_code,
    ChunkTag.DAFL: None,
    ChunkTag.EXTN: None,
    ChunkTag.FONT: chunks.decode_font,
    ChunkTag.FUNC: chunks.decode_count,
    ChunkTag.GEN8: None,
    ChunkTag.OBJT: None,
    ChunkTag.OPTN: None,
    ChunkTag.PATH: None,
    ChunkTag.ROOM: None,
    ChunkTag.SCPT: chunks.decode_scpt,
    ChunkTag.SHDR: chunks.decode_shdr,
    ChunkTag.SOND: chunks.decode_sond,
    ChunkTag.SPRT: chunks.decode_sprt,
    ChunkTag.STRG: chunks.decode_strg,
    ChunkTag.TMLN: None,
    ChunkTag.TPAG: chunks.decode_tpag,
    ChunkTag.TXTR: chunks.decode_txtr,
    ChunkTag.VARI: chunks.decode_count,
}

if set(DECODERS) != set(ChunkTag):
    raise RuntimeError("decoder table out of step with ChunkTag: %s"
        % sorted(tag.value for tag in set(ChunkTag) ^ set(DECODERS)))

@contextmanager
def open_cursor(source):
    """Cursor over bytes, a path, or an already open binary stream.

    Streams are borrowed, not closed.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield ByteCursor.from_bytes(bytes(source))
    elif isinstance(source, (str, Path)):
        with open(source, "rb") as fd:
            yield ByteCursor(fd)
    else:
        yield ByteCursor(source)

# A short file is still a magic mismatch, so never read more than is there.
def read_header(cursor):
    magic = cursor.read_bytes(min(len(MAGIC), cursor.remaining()))
    if magic != MAGIC:
        raise BadMagic(magic)
    return ContainerHeader(magic, cursor.read_u32le())

def read_chunk_header(cursor, form_end):
    start = cursor.position()
    raw = cursor.parse(ChunkHeaderStruct)
    name = raw.tag.decode("latin-1")
    try:
        tag = ChunkTag(name)
    except ValueError:
        raise UnknownChunk(name) from None

    end = cursor.position() + raw.length
    if end > form_end:
        raise TruncatedRead("chunk %s at 0x%x ends at 0x%x, past the end of the FORM at 0x%x"
            % (name, start, end, form_end))
    return ChunkHeader(tag, raw.length, end)

def walk(cursor, config):
    header = read_header(cursor)
    # The declared length doesn't count the 8 bytes of FORM header.
    form_end = cursor.position() + header.total_length

    section_lengths = {}
    counts = {}
    records = {}

    while cursor.position() < header.total_length:
        chunk = read_chunk_header(cursor, form_end)
        tag = chunk.tag.value
        section_lengths[tag] = chunk.length
        logger.debug("%s: %d bytes, 0x%x-0x%x", tag, chunk.length,
            chunk.end - chunk.length, chunk.end)

        decoder = DECODERS[chunk.tag]
        if decoder is not None and config.selects(tag):
            counts[tag], records[tag] = decoder(cursor, chunk)
            logger.debug("%s: %d entries", tag, counts[tag])

        cursor.seek(chunk.end)

    if "SOND" in records and "AUDO" in records \
            and len(records["SOND"]) != len(records["AUDO"]):
        raise CountMismatch("%d sounds but %d audio blobs"
            % (len(records["SOND"]), len(records["AUDO"])))

    return ResultStore(header.total_length, section_lengths, counts, records)

def decode(source, config=None):
    """Decode a whole FORM archive into a ResultStore.

    Any FormError aborts the decode; there are no partial results.
    """
    if config is None:
        config = DecodeConfig()
    with open_cursor(source) as cursor:
        return walk(cursor, config)

__all__ = ["DECODERS", "open_cursor", "read_header", "read_chunk_header", "walk", "decode"]
