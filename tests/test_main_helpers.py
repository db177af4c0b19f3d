import pytest


def test_fmt_pct_and_bytes(m):
    assert m._fmt_pct(0, 0) == "0%"
    assert m._fmt_pct(50, 100).strip().endswith("%")
    assert m._fmt_pct(10, 10).strip().startswith("100")

    assert m._fmt_bytes(0) == "0.00 B"
    assert m._fmt_bytes(1024).endswith("KiB")


def test_progress_calls_bucketed(no_progress, m):
    p = m.Progress("Compressing", "x.txt")
    p(0, 100)
    p(0, 100)
    p(10, 100)
    p(10, 100)
    p(19, 100)
    p(19, 100)
    p(5, 0)
    assert len(no_progress) == 3
    assert all(line.startswith("Compressing x.txt") for line in no_progress)


def test_cli_parser_accepts_subcommands(m):
    parser = m.get_parser()
    ns = parser.parse_args(["compress", "in.txt", "-o", "out.huf"])
    assert ns.cmd in ("compress", "c")
    assert ns.no_progress is False
    ns2 = parser.parse_args(["d", "in.huf", "-o", "out.txt", "-P"])
    assert ns2.cmd in ("decompress", "d")
    assert ns2.no_progress is True


def test_cli_parser_requires_output(m):
    with pytest.raises(SystemExit):
        m.get_parser().parse_args(["compress", "in.txt"])
