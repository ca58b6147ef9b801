"""Reading and writing RTMP protocol control messages."""

from __future__ import annotations

import enum
import struct
from typing import Protocol

from .messages import MsgTypeId, SetPeerBandwidthProperties

_CONTROL_CHUNK_BASIC_HEADER = (0x0 << 6) | 0x02  # fmt 0, chunk stream id 2
_MAX_U24 = 0xFFFFFF


class StreamWriterLike(Protocol):
    """What the writers write to: ``write`` bytes, then await ``drain``."""

    def write(self, data: bytes) -> object: ...

    async def drain(self) -> None: ...


class ControlMessagesError(Exception):
    """Raised when a protocol control message cannot be written."""

    class Kind(enum.Enum):
        BYTES_WRITE = "bytes write error"

    def __init__(self, kind: "ControlMessagesError.Kind", cause: BaseException | str | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class ProtocolControlMessageReaderError(Exception):
    """Raised when a protocol control message payload is too short."""

    class Kind(enum.Enum):
        BYTES_READ = "bytes read error"

    def __init__(
        self,
        kind: "ProtocolControlMessageReaderError.Kind",
        cause: BaseException | str | None = None,
    ) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class ProtocolControlMessageReader:
    """Decodes the payloads of protocol control messages."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> bytes:
        """Bytes not yet consumed."""
        return self._data[self._pos:]

    def _read(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        available = len(self._data) - self._pos
        if available < size:
            raise ProtocolControlMessageReaderError(
                ProtocolControlMessageReaderError.Kind.BYTES_READ,
                f"need {size} bytes, have {available}",
            )
        (value,) = struct.unpack_from(fmt, self._data, self._pos)
        self._pos += size
        return value

    def read_set_chunk_size(self) -> int:
        return self._read(">I")

    def read_abort_message(self) -> int:
        return self._read(">I")

    def read_acknowledgement(self) -> int:
        return self._read(">I")

    def read_window_acknowledgement_size(self) -> int:
        return self._read(">I")

    def read_set_peer_bandwidth(self) -> SetPeerBandwidthProperties:
        window_size = self._read(">I")
        limit_type = self._read(">B")
        return SetPeerBandwidthProperties(window_size, limit_type)


class ProtocolControlMessagesWriter:
    """Writes protocol control messages as single type-0 chunks on stream 2."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self._writer = writer
        self._pending = bytearray()

    def _put(self, fmt: str, *values: int) -> None:
        try:
            self._pending.extend(struct.pack(fmt, *values))
        except struct.error as err:
            raise ControlMessagesError(ControlMessagesError.Kind.BYTES_WRITE, err) from err

    def _put_u24(self, value: int) -> None:
        if not 0 <= value <= _MAX_U24:
            raise ControlMessagesError(
                ControlMessagesError.Kind.BYTES_WRITE, f"{value} does not fit in 24 bits"
            )
        self._pending.extend(value.to_bytes(3, "big"))

    async def _flush(self) -> None:
        data = bytes(self._pending)
        self._pending.clear()
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as err:
            raise ControlMessagesError(ControlMessagesError.Kind.BYTES_WRITE, err) from err

    def write_control_message_header(self, msg_type_id: int, length: int) -> None:
        """Buffer the chunk header of a control message with the given body length."""
        self._put(">B", _CONTROL_CHUNK_BASIC_HEADER)
        self._put_u24(0)  # timestamp
        self._put_u24(length)
        self._put(">B", msg_type_id)
        self._put(">I", 0)  # message stream id

    async def write_set_chunk_size(self, chunk_size: int) -> None:
        self.write_control_message_header(MsgTypeId.SET_CHUNK_SIZE, 4)
        self._put(">I", chunk_size & 0x7FFFFFFF)  # first bit must be 0
        await self._flush()

    async def write_abort_message(self, chunk_stream_id: int) -> None:
        self.write_control_message_header(MsgTypeId.ABORT, 4)
        self._put(">I", chunk_stream_id)
        await self._flush()

    async def write_acknowledgement(self, sequence_number: int) -> None:
        self.write_control_message_header(MsgTypeId.ACKNOWLEDGEMENT, 4)
        self._put(">I", sequence_number)
        await self._flush()

    async def write_window_acknowledgement_size(self, window_size: int) -> None:
        self.write_control_message_header(MsgTypeId.WIN_ACKNOWLEDGEMENT_SIZE, 4)
        self._put(">I", window_size)
        await self._flush()

    async def write_set_peer_bandwidth(self, window_size: int, limit_type: int) -> None:
        self.write_control_message_header(MsgTypeId.SET_PEER_BANDWIDTH, 5)
        self._put(">I", window_size)
        self._put(">B", limit_type)
        await self._flush()