from __future__ import annotations

import gzip
import io

import pytest
import requests

from conftest import build_archive
import tarstream.modules.streams.downloaders as downloaders
from tarstream.errors import RemoteSourceError
from tarstream.modules.finders import peek_archive
from tarstream.modules.keepers import TarGzExpander
from tarstream.modules.streams.downloaders import RemoteBlobSource, is_remote


class FakeRaw:
    def __init__(self, body: bytes):
        self._body = io.BytesIO(body)
        self.decode_content = True

    def read(self, size=-1):
        return self._body.read(size)


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200):
        self.raw = FakeRaw(body)
        self.status_code = status
        self.headers = {"Content-Length": str(len(body))}
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def close(self):
        self.closed = True


class FakeSession:
    bodies = {}
    instances = []

    def __init__(self):
        self.calls = []
        self.closed = False
        FakeSession.instances.append(self)

    def get(self, url, stream=False, timeout=None):
        self.calls.append((url, stream, timeout))
        if url not in self.bodies:
            return FakeResponse(b"", status=404)
        return FakeResponse(self.bodies[url])

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session(monkeypatch):
    FakeSession.bodies = {}
    FakeSession.instances = []
    monkeypatch.setattr(downloaders.requests, "Session", FakeSession)
    return FakeSession


def test_is_remote():
    assert is_remote("https://example.com/a.tar.gz")
    assert is_remote("http://example.com/a.tar")
    assert not is_remote("/tmp/a.tar")
    assert not is_remote(io.BytesIO())


def test_remote_source_streams_raw_body():
    session = FakeSession()
    session.bodies = {"https://example.com/blob": b"0123456789"}
    source = RemoteBlobSource("https://example.com/blob", timeout=5, session=session)

    assert session.calls == [("https://example.com/blob", True, 5)]
    assert source.total_size == 10
    assert source._resp.raw.decode_content is False
    assert source.read(4) == b"0123"
    assert source.read() == b"456789"
    assert source.bytes_downloaded == 10

    source.close()
    assert source._resp.closed
    # caller-owned session stays open
    assert not session.closed


def test_remote_source_http_error(fake_session):
    with pytest.raises(RemoteSourceError):
        RemoteBlobSource("https://example.com/missing.tar")
    assert fake_session.instances[0].closed


def test_peek_remote_gzip_archive(fake_session):
    body = gzip.compress(build_archive([("etc", None), ("etc/hosts", b"127.0.0.1 localhost\n")]))
    fake_session.bodies = {"https://example.com/layer.tar.gz": body}

    result = peek_archive("https://example.com/layer.tar.gz")

    assert result.error is None
    assert [e.name for e in result.entries] == ["etc/", "etc/hosts"]
    assert result.bytes_decompressed > 0
    assert fake_session.instances[0].closed


def test_expand_remote_archive(fake_session, tmp_path):
    body = build_archive([("pkg/readme.md", b"# readme\n")])
    fake_session.bodies = {"https://example.com/pkg.tar": body}

    result = TarGzExpander().expand("https://example.com/pkg.tar", tmp_path / "out")

    assert result.files_written == 1
    assert (tmp_path / "out" / "pkg" / "readme.md").read_bytes() == b"# readme\n"
