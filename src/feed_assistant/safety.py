from __future__ import annotations

import codecs
import logging
import re
from typing import Iterable, Iterator, List, Union

from .config import STREAM_BUFFER_KEEP, STREAM_BUFFER_LIMIT

logger = logging.getLogger("feed_assistant")

STREAM_REDACTION_MARKER = "[content processed]"

STREAM_PATTERNS: List[re.Pattern] = [
    # {"key": value, ...} with identifier-like keys
    re.compile(
        r'\{\s*"[a-zA-Z0-9_]+"\s*:\s*("[^"]*"|[0-9]+|true|false|\{.*\}|\[.*\])'
        r'\s*(,\s*"[a-zA-Z0-9_]+"\s*:\s*("[^"]*"|[0-9]+|true|false|\{.*\}|\[.*\]))*\s*\}'
    ),
    # [{"key": ...}, {...}]
    re.compile(r'\[\s*\{\s*"[a-zA-Z0-9_]+"\s*:.*?\}\s*(,\s*\{.*?\})*\s*\]'),
]


class JsonPatternDetector:
    """Redacts JSON-like structures from text that arrives in fragments.

    Patterns are matched against everything buffered so far, so an object
    split across two fragments is still caught once it closes. Each call
    returns the sanitized view of the whole buffer.

    When the buffer outgrows ``limit`` its head is cut off. The sanitized
    text of that head is appended to ``released`` when ``release`` is set, so
    a consumer that writes the full output can emit it before it is lost.
    """

    def __init__(
        self,
        limit: int = STREAM_BUFFER_LIMIT,
        keep: int = STREAM_BUFFER_KEEP,
        marker: str = STREAM_REDACTION_MARKER,
        release: bool = False,
    ):
        self.buffer = ""
        self.limit = limit
        self.keep = keep
        self.marker = marker
        self.release = release
        self.released: List[str] = []

    def _redact(self, text: str) -> str:
        try:
            processed = text
            for pattern in STREAM_PATTERNS:
                processed = pattern.sub(self.marker, processed)
        except Exception as e:
            logger.warning("Stream redaction failed, passing content through: %s", e)
            processed = text
        return processed

    def process_chunk(self, chunk: str) -> str:
        self.buffer += chunk
        processed = self._redact(self.buffer)

        if len(self.buffer) > self.limit:
            # Objects still open at the cut point are lost.
            cut = len(self.buffer) - self.keep
            if self.release:
                self.released.append(self._redact(self.buffer[:cut]))
            self.buffer = self.buffer[cut:]

        return processed

    def pop_released(self) -> List[str]:
        released, self.released = self.released, []
        return released

    def flush(self) -> str:
        """Return the sanitized remainder of the buffer and empty it."""
        processed = self._redact(self.buffer)
        self.buffer = ""
        return processed


def _decoded(fragments: Iterable[Union[str, bytes]]) -> Iterator[str]:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for fragment in fragments:
        if isinstance(fragment, bytes):
            fragment = decoder.decode(fragment)
        yield fragment
    # A multi-byte sequence cut off at the end of the stream.
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


def sanitize_stream(fragments: Iterable[Union[str, bytes]]) -> Iterator[str]:
    """Yield one sanitized view per incoming fragment."""
    detector = JsonPatternDetector()
    for fragment in _decoded(fragments):
        yield detector.process_chunk(fragment)


def sanitize_stream_text(fragments: Iterable[Union[str, bytes]]) -> Iterator[str]:
    """Yield sanitized pieces that concatenate to the whole redacted stream.

    Text is released as it leaves the detector's buffer and the rest when the
    input ends, so nothing is repeated and nothing past the buffer bound is
    dropped.
    """
    detector = JsonPatternDetector(release=True)
    for fragment in _decoded(fragments):
        detector.process_chunk(fragment)
        for piece in detector.pop_released():
            yield piece
    yield detector.flush()
