import io

import frequency
from frequency import count_frequencies
from huffman import ALPHABET_SIZE, EOF_SENTINEL


def test_counts_bytes_and_preincrements_sentinel():
    freqs = count_frequencies(b"aaab")
    assert len(freqs) == ALPHABET_SIZE
    assert freqs[EOF_SENTINEL] == 1
    assert freqs[ord("a")] == 3
    assert freqs[ord("b")] == 1
    assert sum(freqs) == 5


def test_empty_input_only_has_sentinel():
    freqs = count_frequencies(b"")
    assert freqs[EOF_SENTINEL] == 1
    assert sum(freqs) == 1


def test_literal_zero_bytes_add_to_sentinel():
    assert count_frequencies(b"\x00\x00")[EOF_SENTINEL] == 3


def test_stream_is_read_in_chunks(monkeypatch, progress_recorder):
    monkeypatch.setattr(frequency, "CHUNK_SIZE", 3)
    on_prog, calls = progress_recorder
    data = b"hello world"
    freqs = count_frequencies(io.BytesIO(data), len(data), on_prog)
    assert freqs[ord("l")] == 3
    assert freqs[ord("o")] == 2
    assert sum(freqs) == len(data) + 1
    assert [done for done, _ in calls] == [3, 6, 9, 11]
    assert all(total == len(data) for _, total in calls)
