import io
import random

import pytest

from codec import HuffmanCodec


def test_aaab_exact_bytes_and_roundtrip():
    comp = HuffmanCodec().compress(b"aaab")
    # header: 3 entries (sentinel, 'a', 'b'); body 1 1 1 01 00 + one pad bit
    assert comp == b"\x03\x00\x02a\x01b\x02\xE8"
    assert comp[0] == 3
    assert HuffmanCodec().decompress(comp) == b"aaab"


def test_empty_input():
    codec = HuffmanCodec()
    comp = codec.compress(b"")
    assert comp == b"\x01\x00\x01\x00"
    assert codec.decompress(comp) == b""


def test_single_byte_input():
    comp = HuffmanCodec().compress(b"a")
    assert comp == b"\x02\x00\x01a\x01\x80"
    assert HuffmanCodec().decompress(comp) == b"a"


@pytest.mark.parametrize(
    "data",
    [
        b"\x00",
        b"\x00\x00\x00",
        b"a\x00b",
        b"\x00" * 8 + b"ab",
        b"\x00\x00abc\x00",
        bytes(100) + b"\xff",
    ],
)
def test_literal_zero_bytes_roundtrip(data):
    codec = HuffmanCodec()
    assert codec.decompress(codec.compress(data)) == data


def test_literal_zero_is_escaped():
    # sentinel "0", 'a' "1"; 0x00 becomes "0" + escape bit "1"
    comp = HuffmanCodec().compress(b"\x00a")
    assert comp[:5] == b"\x02\x00\x01a\x01"
    assert comp[5:] == bytes([0b01100000])


@pytest.mark.parametrize("alphabet", [2, 3, 5, 17, 64, 128, 255, 256])
def test_roundtrip_alphabet_sizes(alphabet):
    rng = random.Random(alphabet)
    data = bytes(range(alphabet)) + bytes(
        rng.randrange(alphabet) for _ in range(2000)
    )
    codec = HuffmanCodec()
    comp = codec.compress(data)
    assert comp[0] == alphabet & 0xFF
    assert codec.decompress(comp) == data


def test_roundtrip_without_zero_bytes():
    data = bytes(range(1, 256)) * 4
    codec = HuffmanCodec()
    assert codec.decompress(codec.compress(data)) == data


def test_roundtrip_large_random():
    rng = random.Random(1234)
    data = bytes(rng.getrandbits(8) for _ in range(100_000))
    codec = HuffmanCodec()
    assert codec.decompress(codec.compress(data)) == data


def test_roundtrip_large_text_compresses():
    data = b"The quick brown fox jumps over the lazy dog. " * 2500
    codec = HuffmanCodec()
    comp = codec.compress(data)
    assert len(comp) < len(data)
    assert codec.decompress(comp) == data


def test_body_ending_on_byte_boundary():
    # 'a' = "1", 'b' = "01", sentinel = "00": 4 + 2 + 2 bits, no padding
    comp = HuffmanCodec().compress(b"aaaab")
    assert comp[7:] == b"\xF4"
    assert HuffmanCodec().decompress(comp) == b"aaaab"


def test_body_one_bit_past_byte_boundary():
    comp = HuffmanCodec().compress(b"aaaaab")
    assert comp[7:] == b"\xFA\x00"
    assert HuffmanCodec().decompress(comp) == b"aaaaab"


def test_padding_after_terminator_is_ignored():
    # sentinel "1", 'A' "00", 'B' "01"; body: B, terminator, then zero bits
    # that would otherwise spell "AA"
    header = bytes([3, 0, 1, ord("A"), 2, ord("B"), 2])
    body = bytes([0b01100000])
    assert HuffmanCodec().decompress(header + body) == b"B"


def test_body_without_terminator_decodes_to_end():
    header = bytes([3, 0, 2, ord("a"), 1, ord("b"), 2])
    assert HuffmanCodec().decompress(header + b"\xFF") == b"a" * 8


def test_truncated_header_is_not_rejected():
    assert HuffmanCodec().decompress(bytes([3, 0, 2, ord("a")])) == b""
    assert HuffmanCodec().decompress(b"") == b""


def test_codec_reuse_has_no_residue():
    reused = HuffmanCodec()
    first = reused.compress(b"aaab")
    second = reused.compress(b"xyz xyz")
    assert second == HuffmanCodec().compress(b"xyz xyz")
    assert reused.decompress(first) == b"aaab"
    assert reused.decompress(second) == b"xyz xyz"


def test_progress_is_reported(progress_recorder):
    data = b"The quick brown fox jumps over the lazy dog. " * 5
    codec = HuffmanCodec()
    on_prog, calls = progress_recorder
    comp = codec.compress(data, on_progress=on_prog)
    assert calls[-1] == (len(data), len(data))

    calls.clear()
    assert codec.decompress(comp, on_progress=on_prog) == data
    assert calls[-1] == (len(comp), len(comp))
    assert [done for done, _ in calls] == sorted(done for done, _ in calls)


def test_stream_api_leaves_objects_open():
    source = io.BytesIO(b"mississippi")
    sink = io.BytesIO()
    codec = HuffmanCodec()
    codec.compress_stream(source, sink)
    assert not source.closed and not sink.closed

    restored = io.BytesIO()
    written = codec.decompress_stream(io.BytesIO(sink.getvalue()), restored)
    assert written == len(b"mississippi")
    assert restored.getvalue() == b"mississippi"


def test_file_roundtrip(tmp_path, sample_file):
    comp_path = tmp_path / "sample.huf"
    out_path = tmp_path / "sample.out"
    codec = HuffmanCodec()
    codec.compress_file(str(sample_file), str(comp_path))
    assert comp_path.read_bytes() == codec.compress(sample_file.read_bytes())

    written = codec.decompress_file(str(comp_path), str(out_path))
    assert out_path.read_bytes() == sample_file.read_bytes()
    assert written == sample_file.stat().st_size


def test_missing_input_file_raises(tmp_path):
    out_path = tmp_path / "out.huf"
    with pytest.raises(FileNotFoundError):
        HuffmanCodec().compress_file(str(tmp_path / "nope"), str(out_path))
    assert not out_path.exists()
    with pytest.raises(FileNotFoundError):
        HuffmanCodec().decompress_file(str(tmp_path / "nope"), str(out_path))
