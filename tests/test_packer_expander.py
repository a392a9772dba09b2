from __future__ import annotations

import gzip
import io
import tarfile
from dataclasses import replace

import pytest

from conftest import KeepOpenBytesIO, build_archive
from tarstream.errors import UnsafeEntryPathError
from tarstream.modules.codec.tar_entry import TarEntry
from tarstream.modules.codec.tar_header import EOF_BLOCK, HEADER_BLOCK
from tarstream.modules.keepers import (
    TarGzExpander,
    archive_tree,
    calculate_tar_size,
    create_tar,
    create_tar_gz,
    entry_size,
    safe_target,
)
from tarstream.modules.streams.tar_writer import TarWriter


# =============================================================================
# Sizing
# =============================================================================

def test_entry_size_rounds_to_blocks():
    assert entry_size(0) == 512
    assert entry_size(1) == 1024
    assert entry_size(512) == 1024
    assert entry_size(513) == 1536


def test_calculate_tar_size_matches_created_archive(sample_tree, tmp_path):
    dest = tmp_path / "tree.tar"
    result = create_tar(sample_tree, dest)
    assert calculate_tar_size(sample_tree) == dest.stat().st_size
    assert result.archive_bytes == dest.stat().st_size


def test_calculate_tar_size_single_file(tmp_path):
    target = tmp_path / "one.txt"
    target.write_bytes(b"x" * 10)
    assert calculate_tar_size(target) == HEADER_BLOCK + 512 + EOF_BLOCK


def test_calculate_tar_size_empty_directory(tmp_path):
    empty = tmp_path / "nothing"
    empty.mkdir()
    assert calculate_tar_size(empty) == HEADER_BLOCK + EOF_BLOCK


# =============================================================================
# Packing
# =============================================================================

def test_create_tar_names_relative_to_root_parent(sample_tree, tmp_path):
    dest = tmp_path / "tree.tar"
    result = create_tar(sample_tree, dest, permissions=0o644)

    assert result.files_added == 3
    assert result.directories_added == 1
    assert result.content_bytes == 6 + 1280

    with tarfile.open(dest) as tf:
        assert tf.getnames() == [
            "tree/a.txt",
            "tree/empty",
            "tree/sub/b.bin",
            "tree/sub/deeper/c.txt",
        ]
        assert tf.extractfile("tree/sub/b.bin").read() == bytes(range(256)) * 5
        assert tf.getmember("tree/a.txt").mode == 0o644


def test_archive_tree_single_file_uses_base_name(tmp_path):
    target = tmp_path / "solo.txt"
    target.write_bytes(b"solo")
    sink = KeepOpenBytesIO()
    with TarWriter(sink) as writer:
        result = archive_tree(target, writer)
    assert result.files_added == 1

    with tarfile.open(fileobj=io.BytesIO(sink.getvalue())) as tf:
        assert tf.getnames() == ["solo.txt"]


def test_create_tar_gz_is_valid_gzip(sample_tree, tmp_path):
    dest = tmp_path / "tree.tar.gz"
    result = create_tar_gz(sample_tree, dest, level=6)

    raw = gzip.decompress(dest.read_bytes())
    assert len(raw) == calculate_tar_size(sample_tree) == result.archive_bytes
    with tarfile.open(dest, "r:gz") as tf:
        assert "tree/a.txt" in tf.getnames()


# =============================================================================
# Expanding
# =============================================================================

def test_expand_round_trip(sample_tree, tmp_path):
    archive = tmp_path / "tree.tar.gz"
    create_tar_gz(sample_tree, archive)

    out = tmp_path / "out"
    result = TarGzExpander().expand_tar_gz_file(archive, out)

    assert result.files_written == 3
    assert result.directories_created == 1
    assert (out / "tree" / "a.txt").read_bytes() == b"alpha\n"
    assert (out / "tree" / "sub" / "b.bin").read_bytes() == bytes(range(256)) * 5
    assert (out / "tree" / "sub" / "deeper" / "c.txt").read_bytes() == b""
    assert (out / "tree" / "empty").is_dir()
    assert result.to_dict()["bytes_written"] == 6 + 1280


def test_expand_detects_compression(sample_tree, tmp_path):
    plain = tmp_path / "tree.tar"
    create_tar(sample_tree, plain)
    result = TarGzExpander().expand(plain, tmp_path / "plain-out")
    assert result.files_written == 3

    packed = tmp_path / "tree.bin"
    create_tar_gz(sample_tree, packed)
    result = TarGzExpander().expand(packed, tmp_path / "gz-out")
    assert result.files_written == 3


def test_expand_tar_file_from_stream(tmp_path):
    data = build_archive([("x/y.txt", b"why")])
    result = TarGzExpander().expand_tar_file(io.BytesIO(data), tmp_path / "s")
    assert (tmp_path / "s" / "x" / "y.txt").read_bytes() == b"why"
    assert result.files_written == 1


def test_expand_rejects_path_traversal(tmp_path):
    data = build_archive([("../escape.txt", b"nope")])
    with pytest.raises(UnsafeEntryPathError):
        TarGzExpander().expand_tar_file(io.BytesIO(data), tmp_path / "dest")
    assert not (tmp_path / "escape.txt").exists()


def test_safe_target_strips_leading_slash(tmp_path):
    root = tmp_path.resolve()
    assert safe_target(root, "/etc/passwd") == root / "etc" / "passwd"


def test_expand_skips_links(tmp_path):
    sink = KeepOpenBytesIO()
    link = TarEntry(replace(TarEntry.create("link", 0, 0).header, link_flag="2", link_name="target"))
    with TarWriter(sink) as writer:
        writer.put_next_entry(link)
        writer.put_next_entry(TarEntry.create("real.txt", 2, 0))
        writer.write(b"ok")

    result = TarGzExpander().expand_tar_file(io.BytesIO(sink.getvalue()), tmp_path / "d")
    assert result.entries_skipped == 1
    assert result.files_written == 1
    assert not (tmp_path / "d" / "link").exists()


def test_handle_tar_gz_content_calls_handler(sample_tree, tmp_path):
    archive = tmp_path / "tree.tar.gz"
    create_tar_gz(sample_tree, archive)

    seen = {}
    TarGzExpander().handle_tar_gz_content(archive, lambda name, data: seen.__setitem__(name, data))

    assert seen == {
        "tree/a.txt": b"alpha\n",
        "tree/sub/b.bin": bytes(range(256)) * 5,
        "tree/sub/deeper/c.txt": b"",
    }


def test_iter_tar_gz_content_uncompressed(tmp_path):
    data = build_archive([("d", None), ("d/f", b"F")])
    items = list(TarGzExpander().iter_tar_gz_content(io.BytesIO(data), gzip=False))
    assert [(e.name, content) for e, content in items] == [("d/f", b"F")]
