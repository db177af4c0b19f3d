import heapq
import itertools
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from bitops import BitReader, BitWriter

ALPHABET_SIZE = 256  #: Number of distinct symbols (byte values)
EOF_SENTINEL = 0  #: Symbol whose code terminates the encoded body


class HuffmanNode:
    """Node for a standard binary Huffman tree.

    :ivar symbol: The byte value stored at a leaf; ``None`` for internal nodes.
    :type symbol: int | None
    :ivar freq: Frequency (weight) of the subtree rooted at this node.
    :type freq: int
    :ivar left: Left child node.
    :type left: HuffmanNode | None
    :ivar right: Right child node.
    :type right: HuffmanNode | None
    """

    def __init__(self, symbol=None, freq=0, left=None, right=None):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def build_tree(frequencies: Sequence[int]) -> Optional[HuffmanNode]:
    """Build a Huffman tree from a 256-entry frequency table.

    Leaves are queued in ascending symbol order and equal frequencies are
    popped in queue order, so the tree shape is fully determined by
    ``frequencies``.

    :param frequencies: Count per symbol.
    :type frequencies: Sequence[int]
    :returns: Root node, or ``None`` if every frequency is zero.
    :rtype: HuffmanNode | None
    """
    order = itertools.count()
    heap = [
        (freq, next(order), HuffmanNode(symbol=sym, freq=freq))
        for sym, freq in enumerate(frequencies)
        if freq > 0
    ]
    if not heap:
        return None
    heapq.heapify(heap)

    while len(heap) > 1:
        left_freq, _, left = heapq.heappop(heap)
        right_freq, _, right = heapq.heappop(heap)
        merged = HuffmanNode(
            freq=left_freq + right_freq, left=left, right=right
        )
        heapq.heappush(heap, (merged.freq, next(order), merged))

    return heap[0][2]


def assign_code_lengths(
    frequencies: Sequence[int],
) -> Tuple[List[int], int, int]:
    """Compute per-symbol code lengths from a frequency table.

    A single-leaf tree gives its symbol length 1 rather than 0.

    :param frequencies: Count per symbol, ``ALPHABET_SIZE`` entries.
    :type frequencies: Sequence[int]
    :returns: Tuple ``(code_lengths, max_length, symbol_count)``.
    :rtype: Tuple[List[int], int, int]
    :raises ValueError: If the table has the wrong size or no non-zero entry.
    """
    if len(frequencies) != ALPHABET_SIZE:
        raise ValueError(
            f"Frequency table must have {ALPHABET_SIZE} entries, "
            f"got {len(frequencies)}"
        )
    root = build_tree(frequencies)
    if root is None:
        raise ValueError("Frequency table has no non-zero entry")

    code_lengths = [0] * ALPHABET_SIZE
    _collect_depths(root, 0, code_lengths)
    symbol_count = sum(1 for length in code_lengths if length > 0)
    return code_lengths, max(code_lengths), symbol_count


def _collect_depths(node: HuffmanNode, depth: int, code_lengths: List[int]):
    """Populate ``code_lengths`` by traversing a Huffman tree.

    :param node: Current node in the Huffman tree.
    :type node: HuffmanNode
    :param depth: Current depth (code length so far).
    :type depth: int
    :param code_lengths: Table filled in place.
    :type code_lengths: List[int]
    :returns: None
    :rtype: None
    """
    if node.is_leaf():
        code_lengths[node.symbol] = max(1, depth)
    else:
        _collect_depths(node.left, depth + 1, code_lengths)
        _collect_depths(node.right, depth + 1, code_lengths)


def iter_canonical_codes(
    code_lengths: Sequence[int], max_length: Optional[int] = None
) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(symbol, code, length)`` for every symbol with a code.

    Codes are handed out from the longest length down to 1. Within a length
    they go to symbols in ascending order, counting up from the running
    value; moving to the next shorter length halves the value reached so far,
    which keeps shorter codes off the prefixes of the longer ones.

    Both directions of the codec derive their tables from this generator.

    :param code_lengths: Code length per symbol; 0 means no code.
    :type code_lengths: Sequence[int]
    :param max_length: Longest length in ``code_lengths``; computed if omitted.
    :type max_length: int | None
    :returns: Iterator over ``(symbol, code, length)`` triples.
    :rtype: Iterator[Tuple[int, int, int]]
    """
    if max_length is None:
        max_length = max(code_lengths, default=0)

    code = 0
    count_at_length = 0
    for length in range(max_length, 0, -1):
        begin_number = code
        for symbol, symbol_length in enumerate(code_lengths):
            if symbol_length != length:
                continue
            pattern = code
            # only an over-full table gets here; keep the leading bits
            if pattern.bit_length() > length:
                pattern >>= pattern.bit_length() - length
            yield symbol, pattern, length
            code += 1
            count_at_length += 1
        code = (begin_number + count_at_length) >> 1
        count_at_length = 0


def canonical_codes(
    code_lengths: Sequence[int], max_length: Optional[int] = None
) -> Dict[int, Tuple[int, int]]:
    """Map symbol to ``(code, length)``.

    :param code_lengths: Code length per symbol.
    :type code_lengths: Sequence[int]
    :param max_length: Longest length, if already known.
    :type max_length: int | None
    :rtype: Dict[int, Tuple[int, int]]
    """
    return {
        symbol: (code, length)
        for symbol, code, length in iter_canonical_codes(
            code_lengths, max_length
        )
    }


def canonical_decode_table(
    code_lengths: Sequence[int], max_length: Optional[int] = None
) -> Dict[Tuple[int, int], int]:
    """Map ``(code, length)`` to symbol; inverse of :func:`canonical_codes`.

    :param code_lengths: Code length per symbol.
    :type code_lengths: Sequence[int]
    :param max_length: Longest length, if already known.
    :type max_length: int | None
    :rtype: Dict[Tuple[int, int], int]
    """
    return {
        (code, length): symbol
        for symbol, code, length in iter_canonical_codes(
            code_lengths, max_length
        )
    }


class CanonicalHuffman:
    """Canonical Huffman code table for one compression or decompression run.

    Only ``code_lengths`` is ever persisted (as the header); ``codes`` and
    ``decode_table`` are rebuilt from it.

    :ivar code_lengths: Code length per symbol (0 = unused).
    :type code_lengths: List[int]
    :ivar max_length: Longest code length in the table.
    :type max_length: int
    :ivar codes: Mapping from symbol to ``(code, length)``.
    :type codes: Dict[int, Tuple[int, int]]
    :ivar decode_table: Mapping from ``(code, length)`` to symbol.
    :type decode_table: Dict[Tuple[int, int], int]
    """

    def __init__(self):
        self.code_lengths: List[int] = [0] * ALPHABET_SIZE
        self.max_length = 0
        self.codes: Dict[int, Tuple[int, int]] = {}
        self.decode_table: Dict[Tuple[int, int], int] = {}

    @property
    def symbols(self) -> List[int]:
        """Symbols that have a code, ascending."""
        return [s for s, length in enumerate(self.code_lengths) if length > 0]

    def build_from_frequencies(self, frequencies: Sequence[int]):
        """Build code lengths and canonical codes from a frequency table.

        :param frequencies: Count per symbol, ``ALPHABET_SIZE`` entries.
        :type frequencies: Sequence[int]
        :returns: None
        :rtype: None
        :raises ValueError: See :func:`assign_code_lengths`.
        """
        self.code_lengths, self.max_length, _ = assign_code_lengths(
            frequencies
        )
        self._generate_canonical_codes()

    def load_code_lengths(self, code_lengths: Sequence[int]):
        """Install an explicit code-length table and regenerate codes.

        :param code_lengths: Code length per symbol.
        :type code_lengths: Sequence[int]
        :returns: None
        :rtype: None
        """
        self.code_lengths = list(code_lengths)
        self.max_length = max(self.code_lengths, default=0)
        self._generate_canonical_codes()

    def _generate_canonical_codes(self):
        self.codes = canonical_codes(self.code_lengths, self.max_length)
        self.decode_table = {
            pattern: symbol for symbol, pattern in self.codes.items()
        }

    def encode_symbol(self, symbol: int) -> Tuple[int, int]:
        """Get the canonical Huffman code for a symbol.

        :param symbol: Symbol to encode.
        :type symbol: int
        :returns: Tuple ``(code, length)``.
        :rtype: Tuple[int, int]
        :raises KeyError: If ``symbol`` has no code.
        """
        return self.codes[symbol]

    def write_header(self, writer: BitWriter):
        """Serialize the code-length table.

        One count byte (256 wraps to 0), then a ``(symbol, length)`` byte
        pair for each symbol with a code, in ascending symbol order.

        :param writer: Byte-aligned bit writer.
        :type writer: BitWriter
        :returns: Number of header bytes written.
        :rtype: int
        """
        symbols = self.symbols
        writer.write_byte(len(symbols) & 0xFF)
        for symbol in symbols:
            writer.write_byte(symbol)
            writer.write_byte(self.code_lengths[symbol])
        return 1 + 2 * len(symbols)

    def read_header(self, reader: BitReader) -> int:
        """Load code lengths written by :meth:`write_header` and regenerate codes.

        A header cut short by the end of the source yields the pairs read so
        far. An empty source yields an empty table.

        :param reader: Byte-aligned bit reader.
        :type reader: BitReader
        :returns: Number of ``(symbol, length)`` pairs read.
        :rtype: int
        """
        code_lengths = [0] * ALPHABET_SIZE
        pairs = 0
        if not reader.is_empty():
            num_symbols = reader.read_byte() or ALPHABET_SIZE
            for _ in range(num_symbols):
                if reader.is_empty():
                    break
                symbol = reader.read_byte()
                if reader.is_empty():
                    break
                code_lengths[symbol] = reader.read_byte()
                pairs += 1
        self.load_code_lengths(code_lengths)
        return pairs
