from typing import BinaryIO, Optional


class BitWriter:
    """Bit-packing writer over a binary sink.

    Accumulates individual bits MSB-first into an 8-bit scratch register and
    writes each completed byte to the sink.

    :ivar sink: Writable binary object receiving completed bytes.
    :type sink: BinaryIO
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    """

    def __init__(self, sink: BinaryIO):
        """Initialize an empty bit writer.

        :param sink: Writable binary object (file opened ``"wb"``, ``BytesIO``).
        :type sink: BinaryIO
        :returns: None
        :rtype: None
        """
        self.sink = sink
        self.bit_buffer = 0
        self.bit_count = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def write_bit(self, bit: int):
        """Append a single bit to the current byte.

        :param bit: ``0`` or ``1`` (``bool`` is accepted).
        :type bit: int
        :returns: None
        :rtype: None
        :raises ValueError: If ``bit`` is neither 0 nor 1.
        """
        if bit not in (0, 1):
            raise ValueError(f"Bit must be 0 or 1, got {bit!r}")
        self.bit_buffer = (self.bit_buffer << 1) | int(bit)
        self.bit_count += 1
        if self.bit_count == 8:
            self.sink.write(bytes((self.bit_buffer,)))
            self.bit_buffer = 0
            self.bit_count = 0

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value``, MSB first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write.
        :type nbits: int
        :returns: None
        :rtype: None
        """
        for i in range(nbits - 1, -1, -1):
            self.write_bit((value >> i) & 1)

    def write_byte(self, value: int):
        """Write the low 8 bits of ``value``.

        With no pending bits the byte goes to the sink directly, otherwise it
        is written bit by bit to keep ordering.

        :param value: Integer whose low byte is written.
        :type value: int
        :returns: None
        :rtype: None
        """
        value &= 0xFF
        if self.bit_count == 0:
            self.sink.write(bytes((value,)))
        else:
            self.write_bits(value, 8)

    def flush(self):
        """Write the partial final byte, if any, padded with zero low bits.

        The sink itself is left open.

        :returns: None
        :rtype: None
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.sink.write(bytes((self.bit_buffer,)))
            self.bit_buffer = 0
            self.bit_count = 0

    def close(self):
        """Flush pending bits and close the sink.

        :returns: None
        :rtype: None
        """
        try:
            self.flush()
        finally:
            self.sink.close()


class BitReader:
    """Bit-unpacking reader over a binary source.

    Keeps a one-byte lookahead which is fetched on construction and refilled
    whenever its last bit has been consumed.

    :ivar source: Readable binary object.
    :type source: BinaryIO
    :ivar current: Lookahead byte, or ``None`` once the source is exhausted.
    :type current: int | None
    :ivar bit_count: Number of unread bits remaining in ``current`` (1-8).
    :type bit_count: int
    :ivar pos: Number of bytes fetched from the source so far.
    :type pos: int
    """

    def __init__(self, source: BinaryIO):
        """Create a bit reader and pre-fetch the first byte.

        :param source: Source to read from.
        :type source: BinaryIO
        :returns: None
        :rtype: None
        """
        self.source = source
        self.current: Optional[int] = None
        self.bit_count = 0
        self.pos = 0
        self._fill()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _fill(self):
        chunk = self.source.read(1)
        if chunk:
            self.current = chunk[0]
            self.pos += 1
        else:
            self.current = None
        self.bit_count = 8

    def is_empty(self) -> bool:
        """Report whether the underlying source has no byte left to read.

        :returns: ``True`` once every bit of the last byte has been consumed.
        :rtype: bool
        """
        return self.current is None

    def read_bit(self) -> int:
        """Read the next bit, MSB first.

        :returns: ``0`` or ``1``.
        :rtype: int
        :raises EOFError: If the source is exhausted.
        """
        if self.current is None:
            raise EOFError("Unexpected end of data")
        self.bit_count -= 1
        bit = (self.current >> self.bit_count) & 1
        if self.bit_count == 0:
            self._fill()
        return bit

    def read_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits and return them as an integer, MSB first.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The integer value composed of the next ``nbits`` bits.
        :rtype: int
        :raises EOFError: If the end of data is reached before reading ``nbits``.
        """
        result = 0
        for _ in range(nbits):
            result = (result << 1) | self.read_bit()
        return result

    def read_byte(self) -> int:
        """Read a full byte.

        Intended for byte-aligned use (the header). When the cursor is aligned
        the lookahead byte is returned as is; otherwise the byte is put
        together from the rest of the current byte and the head of the next.

        :returns: Byte value 0-255.
        :rtype: int
        :raises EOFError: If the source is exhausted.
        """
        if self.current is None:
            raise EOFError("Unexpected end of data")
        if self.bit_count == 8:
            value = self.current
            self._fill()
            return value

        remaining = self.bit_count
        value = (self.current << (8 - remaining)) & 0xFF
        self._fill()
        if self.current is None:
            raise EOFError("Unexpected end of data")
        value |= self.current >> remaining
        self.bit_count = remaining
        return value

    read_char = read_byte

    def close(self):
        """Close the underlying source.

        :returns: None
        :rtype: None
        """
        self.source.close()
