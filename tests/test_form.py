from io import BytesIO
from struct import pack

import pytest

import builders
from formtool import decode, DecodeConfig, ResultStore
from formtool.errors import BadMagic, CountMismatch, TruncatedRead, UnknownChunk
from formtool.form import DECODERS
from formtool.formstructs import ChunkTag

SOUNDS = [
    (b"snd_bell", b".wav", b"snd_bell.wav", 100, 7, 0),
    (b"mus_title", b".ogg", b"mus_title.ogg", 0, 1, 1),
]

def sample_archive():
    return builders.form(
        ("GEN8", None),
        builders.sond(SOUNDS),
        builders.agrp([b"audiogroup_default"]),
        builders.sprt([(b"spr_player", 32, 48, (7, 16, 24), [(0, range(10))])]),
        ("ROOM", None),
        builders.strg([b"hi", b"bye"]),
        builders.audo([b"RIFFwave", b"OggSvorbis"]),
    )

def test_magic_mismatch():
    with pytest.raises(BadMagic):
        decode(b"XYZW\x08\x00\x00\x00")

def test_short_input_is_bad_magic():
    with pytest.raises(BadMagic) as exc:
        decode(b"XYZ")
    assert exc.value.magic == b"XYZ"

def test_empty_input_is_bad_magic():
    with pytest.raises(BadMagic):
        decode(b"")

def test_unknown_chunk():
    data = builders.form(("GEN8", None), ("ZZZZ", lambda p: p.u32(1, 2, 3)))
    with pytest.raises(UnknownChunk) as exc:
        decode(data)
    assert exc.value.tag == "ZZZZ"

def test_unknown_chunk_with_bogus_length():
    data = b"FORM" + pack("<I", 100) + b"ZZZZ" + pack("<I", 0xFFFFFFF0) + bytes(92)
    with pytest.raises(UnknownChunk):
        decode(data)

def test_chunk_past_form_end():
    data = b"FORM" + pack("<I", 16) + b"GEN8" + pack("<I", 64) + bytes(8)
    with pytest.raises(TruncatedRead):
        decode(data)

def test_truncated_header():
    with pytest.raises(TruncatedRead):
        decode(b"FORM\x10\x00")

def test_records_and_lengths():
    store = decode(sample_archive())
    assert list(store.section_lengths) == ["GEN8", "SOND", "AGRP", "SPRT", "ROOM", "STRG", "AUDO"]
    assert store.section_lengths["GEN8"] == 4
    assert [s.name for s in store.sounds] == [b"snd_bell", b"mus_title"]
    assert [g.name for g in store.audio_groups] == [b"audiogroup_default"]
    assert store.sprites[0].name == b"spr_player"
    assert [s.string for s in store.strings] == [b"hi", b"bye"]
    assert store.counts["SOND"] == 2
    assert "GEN8" not in store.counts
    assert store["ROOM"] == ()

def test_sound_and_audio_counts_match():
    store = decode(sample_archive())
    assert len(store.sounds) == len(store.audio) == 2

def test_sound_and_audio_count_mismatch():
    data = builders.form(
        builders.sond([SOUNDS[0]]),
        builders.audo([b"one", b"two"]),
    )
    with pytest.raises(CountMismatch):
        decode(data)

def test_filtered_sound_count_is_not_checked():
    data = builders.form(
        builders.sond([SOUNDS[0]]),
        builders.audo([b"one", b"two"]),
    )
    assert len(decode(data, DecodeConfig(chunk_filter="AUDO")).audio) == 2

def test_decode_is_idempotent():
    data = sample_archive()
    first, second = decode(data), decode(data)
    assert first == second
    assert first.records == second.records

def test_decode_from_stream_and_path(tmp_path):
    data = sample_archive()
    path = tmp_path / "data.win"
    path.write_bytes(data)
    assert decode(BytesIO(data)) == decode(data)
    assert decode(path) == decode(data)
    assert decode(str(path)) == decode(data)

def test_chunk_filter_only_decodes_that_chunk():
    data = builders.form(
        builders.sond(SOUNDS),
        builders.sprt([(b"spr_a", 1, 1, (0, 0, 0), [])]),
        builders.strg([b"x"]),
    )
    store = decode(data, DecodeConfig(chunk_filter="SOND"))
    assert list(store.records) == ["SOND"]
    assert len(store.sounds) == 2
    assert store.sprites == () and store.strings == ()
    assert set(store.section_lengths) == {"SOND", "SPRT", "STRG"}

def test_chunk_filter_accepts_enum():
    assert DecodeConfig(ChunkTag.STRG).chunk_filter == "STRG"

def test_unknown_chunk_filter():
    with pytest.raises(UnknownChunk):
        DecodeConfig(chunk_filter="ZZZZ")

def test_walker_resyncs_after_under_read():
    # STRG decoder reads nothing past its entries; trailing slack is skipped
    def padded(p):
        builders.strg([b"a"])[1](p)
        p.raw(bytes(37))
    data = builders.form(("STRG", padded), ("GEN8", None), builders.agrp([b"grp"]))
    store = decode(data)
    assert store.section_lengths["GEN8"] == 4
    assert store.audio_groups[0].name == b"grp"

def test_store_is_read_only():
    store = decode(sample_archive())
    with pytest.raises(TypeError):
        store.records["SOND"] = ()
    with pytest.raises(TypeError):
        store.section_lengths["SOND"] = 0

def test_store_equality():
    store = decode(sample_archive())
    assert store != decode(builders.form(("GEN8", None)))
    assert store != object()
    assert isinstance(store, ResultStore)

def test_every_tag_has_a_dispatch_entry():
    assert set(DECODERS) == set(ChunkTag)
    assert len(ChunkTag) == 22
