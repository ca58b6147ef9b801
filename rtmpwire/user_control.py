"""Reading and writing RTMP user control (event) messages."""

from __future__ import annotations

import enum
import struct
from typing import Protocol, Union

from .messages import MsgTypeId, SetBufferLength, StreamBegin, StreamIsRecorded

_CONTROL_CHUNK_BASIC_HEADER = (0x0 << 6) | 0x02  # fmt 0, chunk stream id 2
_EVENT_MESSAGE_LENGTH = 6


class StreamWriterLike(Protocol):
    """What the writer writes to: ``write`` bytes, then await ``drain``."""

    def write(self, data: bytes) -> object: ...

    async def drain(self) -> None: ...


class EventType(enum.IntEnum):
    """User control event types."""

    STREAM_BEGIN = 0
    STREAM_EOF = 1
    STREAM_DRY = 2
    SET_BUFFER_LENGTH = 3
    STREAM_IS_RECORDED = 4
    PING = 6
    PONG = 7


class EventMessagesError(Exception):
    """Raised when a user control message cannot be read or written."""

    class Kind(enum.Enum):
        AMF0_WRITE = "amf0 write error"
        BYTES_WRITE = "bytes write error"
        BYTES_READ = "bytes read error"
        UNKNOWN_EVENT_MESSAGE_TYPE = "unknow event message type"

    def __init__(self, kind: "EventMessagesError.Kind", cause: BaseException | str | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class EventMessagesReader:
    """Decodes the payload of a user control message."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def _read(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        available = len(self._data) - self._pos
        if available < size:
            raise EventMessagesError(
                EventMessagesError.Kind.BYTES_READ,
                f"need {size} bytes, have {available}",
            )
        (value,) = struct.unpack_from(fmt, self._data, self._pos)
        self._pos += size
        return value

    def parse_event(self) -> Union[SetBufferLength, StreamBegin, StreamIsRecorded]:
        """Read the event type and the event that follows it."""
        event_type = self._read(">H")
        if event_type == EventType.SET_BUFFER_LENGTH:
            return self.read_set_buffer_length()
        if event_type == EventType.STREAM_BEGIN:
            return self.read_stream_begin()
        if event_type == EventType.STREAM_IS_RECORDED:
            return self.read_stream_is_recorded()
        raise EventMessagesError(
            EventMessagesError.Kind.UNKNOWN_EVENT_MESSAGE_TYPE, f"event type {event_type}"
        )

    def read_set_buffer_length(self) -> SetBufferLength:
        stream_id = self._read(">I")
        ms = self._read(">I")
        return SetBufferLength(stream_id=stream_id, buffer_length=ms)

    def read_stream_begin(self) -> StreamBegin:
        return StreamBegin(stream_id=self._read(">I"))

    def read_stream_is_recorded(self) -> StreamIsRecorded:
        return StreamIsRecorded(stream_id=self._read(">I"))


class EventMessagesWriter:
    """Writes user control messages as single type-0 chunks on stream 2."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self._writer = writer
        self._pending = bytearray()

    def _put(self, fmt: str, *values: int) -> None:
        try:
            self._pending.extend(struct.pack(fmt, *values))
        except struct.error as err:
            raise EventMessagesError(EventMessagesError.Kind.BYTES_WRITE, err) from err

    def _write_header(self, length: int) -> None:
        self._put(">B", _CONTROL_CHUNK_BASIC_HEADER)
        self._pending.extend((0).to_bytes(3, "big"))  # timestamp
        self._pending.extend(length.to_bytes(3, "big"))
        self._put(">B", MsgTypeId.USER_CONTROL_EVENT)
        self._put(">I", 0)  # message stream id

    async def _flush(self) -> None:
        data = bytes(self._pending)
        self._pending.clear()
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as err:
            raise EventMessagesError(EventMessagesError.Kind.BYTES_WRITE, err) from err

    async def _write_event(self, event: EventType, *values: int) -> None:
        self._write_header(_EVENT_MESSAGE_LENGTH)
        self._put(">H", event)
        for value in values:
            self._put(">I", value)
        await self._flush()

    async def write_stream_begin(self, stream_id: int) -> None:
        await self._write_event(EventType.STREAM_BEGIN, stream_id)

    async def write_stream_eof(self, stream_id: int) -> None:
        await self._write_event(EventType.STREAM_EOF, stream_id)

    async def write_stream_dry(self, stream_id: int) -> None:
        await self._write_event(EventType.STREAM_DRY, stream_id)

    async def write_set_buffer_length(self, stream_id: int, ms: int) -> None:
        await self._write_event(EventType.SET_BUFFER_LENGTH, stream_id, ms)

    async def write_stream_is_record(self, stream_id: int) -> None:
        await self._write_event(EventType.STREAM_IS_RECORDED, stream_id)

    async def write_ping_request(self, timestamp: int) -> None:
        await self._write_event(EventType.PING, timestamp)

    async def write_ping_response(self, timestamp: int) -> None:
        await self._write_event(EventType.PONG, timestamp)