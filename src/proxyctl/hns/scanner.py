"""Split hnsdiag output into individual JSON objects.

``hnsdiag list endpoints -df`` prints one pretty-printed JSON object per
endpoint, back to back, with no enclosing list and no separator. Rather than
parse the JSON to find object boundaries, we rely on the tool's formatting:
an object's closing brace is the only ``}`` that starts a line. This holds
for hnsdiag output; if it ever stops holding, this needs to become a
depth-counting scanner.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import BinaryIO, Union

logger = logging.getLogger(__name__)

MARKER = b"\n}"

DEFAULT_CHUNK_SIZE = 4096

Source = Union[bytes, bytearray, BinaryIO, Iterable[bytes]]


def iter_objects(source: Source, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield each object's bytes, up to and including its closing ``}``.

    A trailing fragment with no closing marker is dropped.
    """
    buf = bytearray()
    # Bytes before this offset are known not to start a marker.
    searched = 0
    for chunk in _iter_chunks(source, chunk_size):
        buf += chunk
        while True:
            i = buf.find(MARKER, searched)
            if i == -1:
                searched = max(0, len(buf) - len(MARKER) + 1)
                break
            end = i + len(MARKER)
            token = bytes(buf[:end])
            del buf[:end]
            searched = 0
            yield token

    if buf.strip():
        logger.debug("Dropping %d trailing bytes with no closing marker", len(buf))


def _iter_chunks(source: Source, chunk_size: int) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray)):
        for start in range(0, len(source), chunk_size):
            yield bytes(source[start : start + chunk_size])
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                return
            yield chunk
    else:
        yield from source
