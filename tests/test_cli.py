from __future__ import annotations

import gzip

import pytest

from conftest import build_archive
from tarstream.main import main
from tarstream.modules.cli import parse_args


def run_main(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_no_mode_prints_help_and_exits_zero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args([])
    assert excinfo.value.code == 0
    assert "--archive" in capsys.readouterr().out


def test_archive_required_for_list():
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["--list"])
    assert excinfo.value.code == 2


def test_parse_args_flags():
    args = parse_args(["-t", "x.tar", "--list", "--native-skip", "--verify-checksums", "-q"])
    assert args.archive == "x.tar"
    assert args.list
    assert args.native_skip
    assert args.verify_checksums
    assert args.quiet


def test_list_simple_output(tmp_path, capsys):
    path = tmp_path / "a.tar"
    path.write_bytes(build_archive([("dir", None), ("dir/file.txt", b"hello")]))

    assert run_main(["-t", str(path), "--list", "--simple-output"]) == 0
    out = capsys.readouterr().out
    assert "  [DIR]  dir/" in out
    assert "  [FILE] dir/file.txt (5.0 B)" in out
    assert "Files found: 2 (complete)" in out


def test_list_table_output(tmp_path, capsys):
    path = tmp_path / "a.tar.gz"
    path.write_bytes(gzip.compress(build_archive([("notes.md", b"# notes")])))

    assert run_main(["-t", str(path), "--list", "-q"]) == 0
    assert "notes.md" in capsys.readouterr().out


def test_create_then_extract(sample_tree, tmp_path, capsys):
    archive = tmp_path / "tree.tgz"
    assert run_main(["-c", str(sample_tree), "-t", str(archive), "-z", "-q"]) == 0
    assert archive.read_bytes()[:2] == b"\x1f\x8b"

    out_dir = tmp_path / "out"
    assert run_main(["-t", str(archive), "-o", str(out_dir), "-q"]) == 0
    assert (out_dir / "tree" / "a.txt").read_bytes() == b"alpha\n"
    assert "Expanded 3 files" in capsys.readouterr().out


def test_size_of_matches_created_archive(sample_tree, tmp_path, capsys):
    archive = tmp_path / "tree.tar"
    run_main(["-c", str(sample_tree), "-t", str(archive), "-q"])
    capsys.readouterr()

    assert run_main(["--size-of", str(sample_tree), "-q"]) == 0
    assert capsys.readouterr().out.strip() == str(archive.stat().st_size)


def test_find_writes_member(tmp_path):
    path = tmp_path / "a.tar"
    path.write_bytes(build_archive([("etc/hosts", b"127.0.0.1\n")]))
    out_dir = tmp_path / "found"

    assert run_main(["-t", str(path), "-f", "etc/hosts", "-o", str(out_dir), "-q"]) == 0
    assert (out_dir / "hosts").read_bytes() == b"127.0.0.1\n"
    assert run_main(["-t", str(path), "-f", "etc/shadow", "-o", str(out_dir), "-q"]) == 1


def test_errors_exit_one(tmp_path, capsys):
    path = tmp_path / "bad.tar"
    path.write_bytes(build_archive([("../evil", b"x")]))

    assert run_main(["-t", str(path), "-o", str(tmp_path / "out"), "-q"]) == 1
    assert "[!] Error:" in capsys.readouterr().out


def test_log_file_captures_output(tmp_path):
    path = tmp_path / "a.tar"
    path.write_bytes(build_archive([("x.txt", b"x")]))
    log = tmp_path / "run.log"

    assert run_main(["-t", str(path), "--list", "--simple-output", "-l", str(log)]) == 0
    assert "[FILE] x.txt" in log.read_text(encoding="utf-8")


def test_list_table_with_bracketed_name(tmp_path, capsys):
    path = tmp_path / "odd.tar"
    path.write_bytes(build_archive([("logs[/x]", b"x"), ("[red]dir", None)]))

    assert run_main(["-t", str(path), "--list", "-q"]) == 0
    out = capsys.readouterr().out
    assert "logs[/x]" in out
    assert "[red]dir/" in out
