# downloaders.py
# Stream remote archives over HTTP without saving them first.

import requests
from typing import Optional

from tarstream import config
from tarstream.errors import RemoteSourceError


def is_remote(source) -> bool:
    """Whether source is an http(s) URL rather than a path or stream."""
    return isinstance(source, str) and source.startswith(("http://", "https://"))


# =============================================================================
# Remote Blob Source
# =============================================================================

class RemoteBlobSource:
    """
    Readable byte stream over the body of an HTTP GET.

    Usage:
        source = RemoteBlobSource("https://example.com/archive.tar.gz")
        reader = TarReader(GzipSource(source))

    The body is read from the raw socket stream, so compressed archives
    arrive exactly as stored.
    """

    def __init__(
        self,
        url: str,
        chunk_size: int = config.DEFAULT_CHUNK_SIZE,
        timeout: int = config.DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.chunk_size = chunk_size
        self.bytes_downloaded = 0
        self.total_size = 0  # Set from Content-Length when the server sends it
        self._owns_session = session is None
        self._session = session or requests.Session()

        try:
            resp = self._session.get(url, stream=True, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            self._close_session()
            raise RemoteSourceError(f"Error fetching {url}: {e}") from e

        self._resp = resp
        self._resp.raw.decode_content = False
        content_length = resp.headers.get("Content-Length", "")
        if content_length.isdigit():
            self.total_size = int(content_length)

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            data = self._resp.raw.read()
        else:
            data = self._resp.raw.read(size)
        data = data or b""
        self.bytes_downloaded += len(data)
        return data

    def close(self):
        try:
            self._resp.close()
        finally:
            self._close_session()

    def _close_session(self):
        if self._owns_session:
            self._session.close()
