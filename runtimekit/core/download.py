"""
Streaming network downloads for RuntimeKit.

Archives are never buffered whole in memory: the HTTP body is exposed as a
read-only binary stream that pulls chunks from the connection as the consumer
(e.g. a tar or gzip reader) asks for them.
"""

import io
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import requests
from requests.exceptions import RequestException

from runtimekit.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ResponseStream(io.RawIOBase):
    """
    File-like view over a streaming HTTP response body.

    Reads are served from ``response.iter_content`` so that content-encoding
    is decoded and connection failures surface as ``requests`` exceptions.
    """

    def __init__(self, response: requests.Response, chunk_size: int = CHUNK_SIZE):
        self._chunks = response.iter_content(chunk_size=chunk_size)
        self._buffer = b""
        self.bytes_read = 0

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        while not self._buffer:
            try:
                self._buffer = next(self._chunks)
            except StopIteration:
                return 0
        n = min(len(b), len(self._buffer))
        b[:n] = self._buffer[:n]
        self._buffer = self._buffer[n:]
        self.bytes_read += n
        return n


@contextmanager
def open_download(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> Iterator[io.BufferedReader]:
    """
    Open a URL for streaming reads.

    Args:
        url: URL to download from
        session: Optional requests session (proxies, headers)
        timeout: Connect/read timeout in seconds

    Yields:
        Buffered binary stream over the response body

    Raises:
        DownloadError: If the request fails or returns an error status

    Example:
        >>> with open_download("https://nodejs.org/dist/index.json") as stream:
        ...     data = stream.read()
    """
    if not url:
        raise ValueError("URL cannot be empty")

    http = session if session is not None else requests
    logger.info(f"Downloading from {url}")

    try:
        response = http.get(url, stream=True, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(url, str(e)) from e

    try:
        stream = ResponseStream(response)
        yield io.BufferedReader(stream, buffer_size=CHUNK_SIZE)
        logger.debug(f"Streamed {stream.bytes_read} bytes from {url}")
    finally:
        response.close()


__all__ = ["ResponseStream", "open_download", "CHUNK_SIZE"]
