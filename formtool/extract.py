# Copies decoded resources out of the archive into standalone files.
#

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image

from formtool.errors import CountMismatch, FormError
from formtool.form import open_cursor
from formtool.records import DecodeConfig, STRINGS_FILENAME

logger = logging.getLogger(__name__)

def describe_image(data):
    try:
        with Image.open(BytesIO(data)) as img:
            fmt, size = img.format, img.size
            img.verify()
    except (OSError, SyntaxError) as e:
        raise FormError("texture page is not a readable image: %s" % e) from e
    return fmt, size

def escape(string):
    return repr(string.decode("utf-8", "surrogateescape"))[1:-1]

def safe_name(filename):
    name = Path(filename.decode("utf-8", "replace")).name
    if not name:
        raise FormError("sound has no usable filename: %r" % (filename,))
    return name

def write(path, data):
    logger.info("writing %s", path.name)
    path.write_bytes(data)
    return path

def extract_textures(cursor, store, outdir):
    for page in store.texture_pages:
        cursor.seek(page.offset)
        data = cursor.read_bytes(page.length)
        fmt, (width, height) = describe_image(data)
        logger.debug("%s: %s %dx%d", page.filename, fmt, width, height)
        yield write(outdir / page.filename, data)

# Sounds and audio blobs pair up by position only.
def extract_audio(cursor, store, outdir):
    if not store.audio:
        return
    if "SOND" not in store:
        logger.warning("no SOND names for %d audio blobs, skipping them", len(store.audio))
        return
    if len(store.sounds) != len(store.audio):
        raise CountMismatch("%d sounds but %d audio blobs" % (len(store.sounds), len(store.audio)))

    for sound, blob in zip(store.sounds, store.audio):
        cursor.seek(blob.offset + 4)
        yield write(outdir / safe_name(sound.filename), cursor.read_bytes(blob.length))

def extract_strings(store, outdir):
    if "STRG" not in store:
        return
    lines = ["%d\t%s\n" % (s.index, escape(s.string)) for s in store.strings]
    path = outdir / STRINGS_FILENAME
    logger.info("writing %s (%d strings)", path.name, len(lines))
    path.write_text("".join(lines), encoding="utf-8")
    yield path

def extract_shaders(cursor, store, outdir):
    for shader in store.shaders:
        for slot in shader.slots:
            cursor.seek(slot.offset)
            yield write(outdir / slot.filename, cursor.read_bytes(slot.length))

def extract(source, store, outdir, config=None):
    """Write the blobs in store out of source into outdir.

    Returns the written paths; nothing is written unless extract_blobs is set.
    """
    if config is None:
        config = DecodeConfig()
    if not config.extract_blobs:
        return []

    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    with open_cursor(source) as cursor:
        written = list(extract_textures(cursor, store, outdir))
        written += extract_audio(cursor, store, outdir)
        written += extract_strings(store, outdir)
        written += extract_shaders(cursor, store, outdir)
    logger.info("wrote %d files to %s", len(written), outdir)
    return written

__all__ = ["describe_image", "extract"]
