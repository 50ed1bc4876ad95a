"""Record cursor over the DBF data region.

The reader owns its source and a single reusable record buffer. It is not
thread safe; open one reader per thread. Headers are immutable and may be
shared between readers opened on the same file.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from dbfscan.decoder import decode_record
from dbfscan.errors import (
    ClosedError,
    IndexOutOfRangeError,
    TruncatedRecordError,
    UnsupportedOperationError,
)
from dbfscan.header import Header, parse_header
from dbfscan.row import DbfRow
from dbfscan.values import Value

logger = logging.getLogger(__name__)

DATA_ENDED = 0x1A
DATA_DELETED = 0x2A
DEFAULT_ENCODING = "latin-1"


class CursorState(Enum):
    POSITIONED = "positioned"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"


class DbfReader:
    def __init__(self, source: BinaryIO, encoding: str = DEFAULT_ENCODING) -> None:
        self._source: BinaryIO | None = source
        self._encoding = encoding
        self._header = parse_header(source)
        self._buffer = bytearray(self._header.record_length - 1)
        self._view = memoryview(self._buffer)
        self._state = CursorState.POSITIONED
        self._skip_to_data_start()

    def _skip_to_data_start(self) -> None:
        gap = self._header.data_start_gap
        if gap > 0:
            logger.debug("Skipping %d header padding bytes before first record", gap)
            try:
                self._skip(gap)
            except TruncatedRecordError:
                self._state = CursorState.EXHAUSTED

    @property
    def header(self) -> Header:
        return self._header

    @property
    def record_count(self) -> int:
        return self._header.record_count

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is CursorState.CLOSED

    def _require_source(self) -> BinaryIO:
        if self._source is None or self._state is CursorState.CLOSED:
            raise ClosedError("Reader is closed")
        return self._source

    def can_seek(self) -> bool:
        source = self._require_source()
        seekable = getattr(source, "seekable", None)
        return bool(seekable()) if seekable is not None else False

    def _read_exact_into(self, view: memoryview) -> None:
        source = self._require_source()
        filled = 0
        total = len(view)
        while filled < total:
            count = source.readinto(view[filled:])
            if not count:
                raise TruncatedRecordError(total, filled)
            filled += count

    def _skip(self, size: int) -> None:
        source = self._require_source()
        if self.can_seek():
            source.seek(size, io.SEEK_CUR)
            return
        remaining = size
        while remaining > 0:
            chunk = source.read(min(remaining, 64 * 1024))
            if not chunk:
                raise TruncatedRecordError(size, size - remaining)
            remaining -= len(chunk)

    def advance(self) -> bool:
        """Load the next active record into the buffer.

        Deleted records are skipped. Returns False at the 0x1A marker, at end of
        input, or when the input stops mid-record.
        """
        source = self._require_source()
        if self._state is CursorState.EXHAUSTED:
            return False
        body = len(self._buffer)
        try:
            while True:
                flag = source.read(1)
                if not flag or flag[0] == DATA_ENDED:
                    self._state = CursorState.EXHAUSTED
                    return False
                if flag[0] != DATA_DELETED:
                    break
                logger.debug("Skipping deleted record")
                self._skip(body)
            self._read_exact_into(self._view)
        except TruncatedRecordError as exc:
            logger.warning("Treating truncated record as end of data: %s", exc)
            self._state = CursorState.EXHAUSTED
            return False
        return True

    def record_view(self) -> memoryview:
        """Borrow the current record bytes; overwritten by the next advance()."""
        self._require_source()
        return self._view.toreadonly()

    def record_bytes(self) -> bytes:
        """Copy out the current record bytes."""
        self._require_source()
        return bytes(self._buffer)

    def next_record_data(self) -> bytes | None:
        return self.record_bytes() if self.advance() else None

    def next_values(self) -> tuple[Value, ...] | None:
        if not self.advance():
            return None
        return decode_record(self._header, self._view)

    def decode_row(self) -> DbfRow | None:
        values = self.next_values()
        if values is None:
            return None
        return DbfRow(self._header, values, encoding=self._encoding)

    def seek(self, record_index: int) -> None:
        """Position the cursor so the next advance() starts at ``record_index``."""
        source = self._require_source()
        if not self.can_seek():
            raise UnsupportedOperationError("Seeking is not supported by this source")
        count = self._header.record_count
        if not 0 <= record_index < count:
            raise IndexOutOfRangeError(f"Record index out of range [0, {count}): {record_index}")
        source.seek(self._header.header_length + record_index * self._header.record_length)
        self._state = CursorState.POSITIONED

    def close(self) -> None:
        """Release the source. Safe to call more than once."""
        source, self._source = self._source, None
        self._state = CursorState.CLOSED
        if source is None:
            return
        try:
            source.close()
        except OSError as exc:
            logger.debug("Ignoring error while closing DBF source: %s", exc)

    def __iter__(self) -> Iterator[DbfRow]:
        while True:
            row = self.decode_row()
            if row is None:
                return
            yield row

    def __enter__(self) -> DbfReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DbfReader(fields={self._header.field_count}, "
            f"records={self._header.record_count}, state={self._state.value})"
        )


def open_dbf(path: Path | str, encoding: str = DEFAULT_ENCODING) -> DbfReader:
    """Open a DBF file on disk for reading."""
    handle = Path(path).open("rb")
    try:
        return DbfReader(handle, encoding=encoding)
    except BaseException:
        handle.close()
        raise
