from __future__ import annotations

import io
import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tarstream.modules.codec.tar_entry import TarEntry  # noqa: E402
from tarstream.modules.streams.tar_writer import TarWriter  # noqa: E402


class KeepOpenBytesIO(io.BytesIO):
    """BytesIO that survives close() so tests can inspect what was written."""

    def close(self):
        self.closed_called = True

    def really_close(self):
        super().close()


def build_archive(members, mod_time=1_700_000_000) -> bytes:
    """Write (name, content) pairs into an in-memory archive; content None means directory."""
    sink = KeepOpenBytesIO()
    with TarWriter(sink) as writer:
        for name, content in members:
            if content is None:
                writer.put_next_entry(TarEntry.create(name, 0, mod_time, is_directory=True))
            else:
                writer.put_next_entry(TarEntry.create(name, len(content), mod_time, permissions=0o644))
                writer.write(content)
    return sink.getvalue()


@pytest.fixture
def sample_tree(tmp_path):
    root = tmp_path / "tree"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "a.txt").write_bytes(b"alpha\n")
    (root / "sub" / "b.bin").write_bytes(bytes(range(256)) * 5)
    (root / "sub" / "deeper" / "c.txt").write_bytes(b"")
    return root
