"""
Tests for the command line entry point.
"""
import pytest

from ustarscan.main import main
from ustarscan.modules.cli import parse_args

from tests.conftest import B_TEXT, SAMPLE_MEMBERS


class TestParseArgs:
    """Argument parsing"""

    def test_no_archive_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_args([])
        assert exc.value.code == 0
        assert "usage" in capsys.readouterr().out

    def test_no_mode_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_args(["some.tar"])
        assert exc.value.code == 0

    def test_list_requires_path(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_args(["some.tar", "--list"])
        assert exc.value.code == 2

    def test_defaults(self):
        args = parse_args(["some.tar", "-p", "docs/", "--read"])
        assert args.offset == 0
        assert args.length == 30
        assert args.max_hops == 8
        assert args.output_dir == "./carved"


class TestMain:
    """End to end runs against an archive on disk"""

    def test_check(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "--check"]) == 0
        out = capsys.readouterr().out
        assert f"check_archive returned {len(SAMPLE_MEMBERS)}" in out

    def test_check_invalid(self, tmp_path, sample_tar, capsys):
        data = bytearray(sample_tar.getvalue())
        data[263:265] = b"xx"
        path = tmp_path / "bad.tar"
        path.write_bytes(bytes(data))

        assert main([str(path), "--check"]) == 1
        assert "check_archive returned -2 (invalid version value)" in capsys.readouterr().out

    def test_missing_archive(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.tar"), "--check"]) == 1
        assert "Archive not found" in capsys.readouterr().out

    def test_entries(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "--entries"]) == 0
        out = capsys.readouterr().out
        assert "drwxr-xr-x" in out
        assert "link_a -> docs/a.txt" in out
        assert f"Entries: {len(SAMPLE_MEMBERS)}" in out

    def test_entries_simple(self, sample_tar_path, capsys):
        main([str(sample_tar_path), "--entries", "--simple-output"])
        out = capsys.readouterr().out
        assert "[DIR]  docs/" in out
        assert "[LINK] link_a -> docs/a.txt" in out

    def test_exists(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "-p", "docs/", "--exists"]) == 0
        out = capsys.readouterr().out
        assert "exists returned 1" in out
        assert "is_dir returned 1" in out
        assert "is_file returned 0" in out

    def test_exists_missing(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "-p", "nope", "--exists"]) == 1
        assert "exists returned 0" in capsys.readouterr().out

    def test_list(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "-p", "docs", "--list"]) == 0
        out = capsys.readouterr().out
        assert "    a.txt" in out
        assert "    sub/" in out
        assert "c.txt" not in out
        assert "list docs: 3 entries" in out

    def test_read(self, sample_tar_path, capsys):
        args = [str(sample_tar_path), "-p", "docs/b.txt", "--read", "--offset", "10", "--length", "30", "--hex"]
        assert main(args) == 0
        out = capsys.readouterr().out
        assert "buffer (30 bytes)" in out
        assert f"read returned {len(B_TEXT) - 40}" in out
        assert "0000:  " in out

    def test_read_offset_out_of_range(self, sample_tar_path, capsys):
        args = [str(sample_tar_path), "-p", "docs/a.txt", "--read", "--offset", "100"]
        assert main(args) == 1
        assert "read returned -2" in capsys.readouterr().out

    def test_read_symlink_loop(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "-p", "loop1", "--read"]) == 1
        out = capsys.readouterr().out
        assert "read returned -3" in out
        assert "read returned 0" not in out

    def test_read_chain_at_default_hops(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "-p", "chain", "--read"]) == 0
        assert "buffer (6 bytes)" in capsys.readouterr().out

    def test_harness(self, sample_tar_path, capsys):
        assert main([str(sample_tar_path), "-p", "docs/"]) == 0
        out = capsys.readouterr().out
        assert "Path = 'docs/'" in out
        assert "check_archive returned" in out
        assert "is_symlink returned 0" in out
        assert "list docs/: 3 entries" in out
        assert "read returned -1" in out

    def test_carve(self, sample_tar_path, tmp_path, capsys):
        out_dir = tmp_path / "carved"
        assert main([str(sample_tar_path), "-p", "docs/b.txt", "--carve", "-o", str(out_dir)]) == 0
        assert (out_dir / "docs" / "b.txt").read_bytes() == B_TEXT

    def test_carve_loop(self, sample_tar_path, tmp_path, capsys):
        assert main([str(sample_tar_path), "-p", "loop1", "--carve", "-o", str(tmp_path)]) == 1
        assert "[!]" in capsys.readouterr().out

    def test_log_file(self, sample_tar_path, tmp_path, capsys):
        log_path = tmp_path / "run.log"
        assert main([str(sample_tar_path), "--check", "--log-file", str(log_path)]) == 0
        assert "check_archive returned" in log_path.read_text(encoding="utf-8")
        assert "check_archive returned" in capsys.readouterr().out
