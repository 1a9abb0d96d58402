"""Line scanner for the flat legacy ``KEY=value`` document.

A LegacyScanner owns one open legacy document and one reusable line buffer
for the duration of a parse session. Every lookup rewinds the document and
scans it from the top, so lookups for different keys may be issued in any
order. A lock serializes whole lookups (seek, scan and extract) because
helpers nested inside a read pass reuse the same scanner.

Key matching is a substring test for ``"<KEY>="`` anywhere in a line, not an
anchored prefix match. A key can therefore match inside another key's name
(``DEBUG_ALL=`` also matches ``XDEBUG_ALL=``) or inside a value. Existing
legacy files rely on this behavior, so it is kept as is.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import TracebackType
from typing import TextIO

from ftlconf.config.exceptions import ScannerClosedError

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("#", ";")


class LegacyScanner:
    """Scoped access to one legacy document.

    Example:
        with LegacyScanner.open(path) as scanner:
            value = scanner.lookup("MAXDBDAYS")

    The buffer is released and the file closed on every exit path of the
    ``with`` block.
    """

    def __init__(self, stream: TextIO, *, owns_stream: bool = False) -> None:
        """Wrap an open, seekable text stream.

        Args:
            stream: Legacy document opened for reading.
            owns_stream: Close the stream when the scanner is closed.
        """
        self._stream = stream
        self._owns_stream = owns_stream
        self._lock = threading.Lock()
        self._buffer: str | None = None
        self._closed = False

    @classmethod
    def open(cls, path: Path) -> LegacyScanner:
        """Open a legacy document.

        Raises:
            OSError: If the file cannot be opened.
        """
        stream = open(path, encoding="utf-8", errors="replace")
        return cls(stream, owns_stream=True)

    @property
    def name(self) -> str:
        return str(getattr(self._stream, "name", "<stream>"))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_buffer(self) -> bool:
        """True while the line buffer holds data from a previous lookup."""
        return self._buffer is not None

    def lookup(self, key: str) -> str | None:
        """Return the value of the first line mentioning ``key=``.

        Lines starting with ``#`` or ``;`` are skipped. The value is the text
        after the line's first ``=``, stripped of surrounding whitespace.

        Args:
            key: Legacy key, case-sensitive.

        Returns:
            The value, or None if no line matches.

        Raises:
            ScannerClosedError: If the scanner has been closed.
        """
        if self._closed:
            raise ScannerClosedError(f"Lookup of {key} on closed scanner {self.name}")

        needle = f"{key}="
        with self._lock:
            logger.debug("Obtained config lock for %s", key)
            self._stream.seek(0)
            while True:
                line = self._stream.readline()
                if not line:
                    break
                self._buffer = line

                if line.startswith(COMMENT_PREFIXES):
                    continue
                if needle not in line:
                    continue

                self._buffer = line[line.index("=") + 1 :].strip()
                logger.debug("Released config lock (match)")
                return self._buffer

            logger.debug("Released config lock (no match)")
            return None

    def release(self) -> None:
        """Drop the shared line buffer. Later lookups allocate a new one."""
        with self._lock:
            self._buffer = None

    def close(self) -> None:
        """Release the buffer and close the stream if the scanner owns it."""
        if self._closed:
            return
        self.release()
        if self._owns_stream:
            self._stream.close()
        self._closed = True

    def __enter__(self) -> LegacyScanner:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_scanner(path: Path) -> LegacyScanner:
    """Open ``path`` for use in a ``with`` block.

    Raises:
        OSError: If the file cannot be opened.
    """
    return LegacyScanner.open(path)
