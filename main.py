import argparse
import os
import sys

from codec import HuffmanCodec


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Canonical Huffman compressor for single files"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    compress = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    compress.add_argument("input", help="File to compress")
    compress.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    compress.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )

    decompress = subparsers.add_parser(
        "decompress", aliases=["d"], help="Decompress a file"
    )
    decompress.add_argument("input", help="Compressed file")
    decompress.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    decompress.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )

    return parser


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return "0%"
    pct = 100.0 * (done / float(total))
    return f"{pct:6.2f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


class Progress:
    """Callable progress reporter redrawn once per whole percent.

    :ivar label: Action label (e.g. "Compressing" or "Decompressing").
    :type label: str
    :ivar path: File name displayed next to the percentage.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress line.

        :param done: Bytes processed so far.
        :type done: int
        :param total: Total bytes to process.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def compress_file(input_path: str, output_path: str, hide_progress: bool) -> int:
    """Compress ``input_path`` into ``output_path`` and report the sizes.

    :param input_path: File to compress.
    :type input_path: str
    :param output_path: Destination file.
    :type output_path: str
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :returns: Process exit status.
    :rtype: int
    """
    if not os.path.isfile(input_path):
        print(f"[!] Input file does not exist: {input_path}")
        return 1
    on_prog = None if hide_progress else Progress("Compressing", input_path)
    try:
        HuffmanCodec().compress_file(input_path, output_path, on_progress=on_prog)
    except OSError as e:
        print(f"\n[!] I/O error while compressing {input_path}: {e}")
        return 1
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()

    size_before = os.path.getsize(input_path)
    size_after = os.path.getsize(output_path)
    print("Size before compression: ", _fmt_bytes(size_before))
    print("Size after compression: ", _fmt_bytes(size_after))
    print(f"Compression ratio: {size_before / size_after:.2f}")
    return 0


def decompress_file(input_path: str, output_path: str, hide_progress: bool) -> int:
    """Decompress ``input_path`` into ``output_path``.

    :param input_path: Compressed file.
    :type input_path: str
    :param output_path: Destination file.
    :type output_path: str
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :returns: Process exit status.
    :rtype: int
    """
    if not os.path.isfile(input_path):
        print(f"[!] Input file does not exist: {input_path}")
        return 1
    on_prog = None if hide_progress else Progress("Decompressing", input_path)
    try:
        HuffmanCodec().decompress_file(input_path, output_path, on_progress=on_prog)
    except OSError as e:
        print(f"\n[!] I/O error while decompressing {input_path}: {e}")
        return 1
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()
    return 0


def main(argv=None):
    """Entry point for the CLI tool.

    :param argv: Arguments to parse instead of ``sys.argv[1:]``.
    :type argv: List[str] | None
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.cmd in ["compress", "c"]:
        return compress_file(
            args.input, args.output, getattr(args, "no_progress", False)
        )
    return decompress_file(
        args.input, args.output, getattr(args, "no_progress", False)
    )


if __name__ == "__main__":
    sys.exit(main())
