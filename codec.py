import io
import os
from typing import BinaryIO, Callable, Optional

from bitops import BitWriter, BitReader
from frequency import CHUNK_SIZE, count_frequencies
from huffman import CanonicalHuffman, EOF_SENTINEL


class HuffmanCodec:
    """Canonical Huffman compressor/decompressor for byte streams.

    Compressed layout: a header with the code-length table (see
    :meth:`CanonicalHuffman.write_header`) followed by the bit-packed body,
    which holds one code per input byte and then the code of
    ``EOF_SENTINEL`` as terminator. A literal ``0x00`` byte shares the
    terminator's code and is therefore followed by a single ``1`` bit.

    :ivar huffman: Code table of the most recent run.
    :type huffman: CanonicalHuffman
    """

    def __init__(self):
        self.huffman = CanonicalHuffman()

    def compress(
        self,
        data: bytes,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Compress ``data`` in memory.

        :param data: Input bytes to compress.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting input bytes encoded so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Compressed byte stream.
        :rtype: bytes
        """
        sink = io.BytesIO()
        self.compress_stream(io.BytesIO(data), sink, on_progress=on_progress)
        return sink.getvalue()

    def decompress(
        self,
        data: bytes,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Decompress data produced by :meth:`compress`.

        :param data: Compressed byte stream.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting compressed bytes consumed so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Recovered bytes.
        :rtype: bytes
        """
        sink = io.BytesIO()
        self.decompress_stream(io.BytesIO(data), sink, on_progress=on_progress)
        return sink.getvalue()

    def compress_stream(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ):
        """Compress a seekable binary ``source`` into ``sink``.

        Both objects stay open; the caller owns them.

        :param source: Seekable readable binary object, read from its
                       current position to the end (twice).
        :type source: BinaryIO
        :param sink: Writable binary object.
        :type sink: BinaryIO
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        """
        writer = BitWriter(sink)
        self._encode(source, writer, on_progress)
        writer.flush()

    def decompress_stream(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        total: Optional[int] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Decompress a binary ``source`` into ``sink``.

        Both objects stay open; the caller owns them.

        :param source: Readable binary object holding compressed data.
        :type source: BinaryIO
        :param sink: Writable binary object for the recovered bytes.
        :type sink: BinaryIO
        :param total: Compressed size for progress reports; taken from
                      ``source`` when it is a ``BytesIO``.
        :type total: int | None
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bytes written to ``sink``.
        :rtype: int
        """
        if total is None and isinstance(source, io.BytesIO):
            total = len(source.getbuffer()) - source.tell()
        return self._decode(BitReader(source), sink, total, on_progress)

    def compress_file(
        self,
        input_path: str,
        output_path: str,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ):
        """Compress the file at ``input_path`` into ``output_path``.

        :param input_path: File to compress.
        :type input_path: str
        :param output_path: Destination, created or truncated.
        :type output_path: str
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        :raises FileNotFoundError: If ``input_path`` does not exist.
        :raises OSError: On any read or write failure; bytes already
                         written to ``output_path`` are left in place.
        """
        with open(input_path, "rb") as source:
            with BitWriter(open(output_path, "wb")) as writer:
                self._encode(source, writer, on_progress)

    def decompress_file(
        self,
        input_path: str,
        output_path: str,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Decompress the file at ``input_path`` into ``output_path``.

        :param input_path: Compressed file.
        :type input_path: str
        :param output_path: Destination, created or truncated.
        :type output_path: str
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bytes written to ``output_path``.
        :rtype: int
        :raises FileNotFoundError: If ``input_path`` does not exist.
        :raises OSError: On any read or write failure.
        """
        total = os.path.getsize(input_path)
        with BitReader(open(input_path, "rb")) as reader:
            with open(output_path, "wb") as sink:
                return self._decode(reader, sink, total, on_progress)

    def _encode(
        self,
        source: BinaryIO,
        writer: BitWriter,
        on_progress: Optional[Callable[[int, int], None]],
    ):
        """Write header and body for ``source`` through ``writer``.

        :param source: Seekable readable binary object.
        :type source: BinaryIO
        :param writer: Byte-aligned bit writer.
        :type writer: BitWriter
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        """
        start = source.tell()
        total = source.seek(0, io.SEEK_END) - start
        source.seek(start)
        frequencies = count_frequencies(source)
        source.seek(start)

        self.huffman = CanonicalHuffman()
        self.huffman.build_from_frequencies(frequencies)
        self.huffman.write_header(writer)

        codes = self.huffman.codes
        done = 0
        for chunk in iter(lambda: source.read(CHUNK_SIZE), b""):
            for byte in chunk:
                code, length = codes[byte]
                writer.write_bits(code, length)
                if byte == EOF_SENTINEL:
                    writer.write_bit(1)
            done += len(chunk)
            if on_progress is not None and total:
                on_progress(done, total)

        code, length = codes[EOF_SENTINEL]
        writer.write_bits(code, length)

    def _decode(
        self,
        reader: BitReader,
        sink: BinaryIO,
        total: Optional[int],
        on_progress: Optional[Callable[[int, int], None]],
    ) -> int:
        """Read header and body from ``reader`` and write the bytes to ``sink``.

        Bits are gathered until they spell a known code. The sentinel code
        followed by a ``1`` bit is a literal ``0x00``; followed by a ``0`` bit
        or by the end of the source it is the terminator, and whatever comes
        after it (padding) is ignored. A body that never reaches a terminator
        is decoded up to the end of the source.

        :param reader: Bit reader positioned at the header.
        :type reader: BitReader
        :param sink: Writable binary object.
        :type sink: BinaryIO
        :param total: Compressed size for progress reports, if known.
        :type total: int | None
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bytes written to ``sink``.
        :rtype: int
        """
        self.huffman = CanonicalHuffman()
        self.huffman.read_header(reader)
        decode_table = self.huffman.decode_table

        output = bytearray()
        written = 0
        reported = reader.pos
        code = 0
        length = 0
        while not reader.is_empty():
            code = (code << 1) | reader.read_bit()
            length += 1
            symbol = decode_table.get((code, length))
            if symbol is None:
                continue
            code = 0
            length = 0
            if symbol != EOF_SENTINEL:
                output.append(symbol)
            elif not reader.is_empty() and reader.read_bit():
                output.append(EOF_SENTINEL)
            else:
                break

            if len(output) >= CHUNK_SIZE:
                sink.write(output)
                written += len(output)
                output.clear()
            if on_progress is not None and total and reader.pos != reported:
                reported = reader.pos
                on_progress(min(reported, total), total)

        sink.write(output)
        written += len(output)
        if on_progress is not None and total:
            on_progress(total, total)
        return written
