from collections import Counter
from typing import BinaryIO, Callable, List, Optional, Union

from huffman import ALPHABET_SIZE, EOF_SENTINEL

CHUNK_SIZE = 64 * 1024  #: Bytes read per step when counting a stream


def count_frequencies(
    source: Union[bytes, bytearray, BinaryIO],
    total: Optional[int] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[int]:
    """Tally byte values of ``source``.

    The end-of-stream sentinel starts at 1 so it always gets a code.

    :param source: Raw bytes, or a readable binary object consumed to its end.
    :type source: bytes | bytearray | BinaryIO
    :param total: Expected number of bytes, only used for progress reports.
    :type total: int | None
    :param on_progress: Optional callback ``on_progress(done, total)``.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: ``ALPHABET_SIZE`` counts indexed by byte value.
    :rtype: List[int]
    """
    frequencies = [0] * ALPHABET_SIZE
    frequencies[EOF_SENTINEL] += 1

    if isinstance(source, (bytes, bytearray)):
        chunks = [source]
        total = len(source) if total is None else total
    else:
        chunks = iter(lambda: source.read(CHUNK_SIZE), b"")

    done = 0
    for chunk in chunks:
        for byte, count in Counter(chunk).items():
            frequencies[byte] += count
        done += len(chunk)
        if on_progress is not None and total:
            on_progress(done, total)

    return frequencies
