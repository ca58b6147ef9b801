"""Client and server sides of the RTMP handshake, simple and complex."""

from __future__ import annotations

import enum
import logging
import os
import struct
from typing import Protocol

from .digest import (
    RTMP_CLIENT_KEY_FIRST_HALF,
    RTMP_DIGEST_LENGTH,
    RTMP_HANDSHAKE_SIZE,
    RTMP_SERVER_KEY,
    RTMP_SERVER_KEY_FIRST_HALF,
    RTMP_SERVER_VERSION,
    RTMP_VERSION,
    DigestError,
    DigestProcessor,
    current_time,
)

log = logging.getLogger(__name__)

_RANDOM_SIZE = RTMP_HANDSHAKE_SIZE - 8
_S2_DATA_SIZE = RTMP_HANDSHAKE_SIZE - RTMP_DIGEST_LENGTH


class StreamWriterLike(Protocol):
    """What the handshakers write to: ``write`` bytes, then await ``drain``."""

    def write(self, data: bytes) -> object: ...

    async def drain(self) -> None: ...


class ClientHandshakeState(enum.Enum):
    WRITE_C0C1 = "write_c0c1"
    READ_S0S1S2 = "read_s0s1s2"
    WRITE_C2 = "write_c2"
    FINISH = "finish"


class ServerHandshakeState(enum.Enum):
    READ_C0C1 = "read_c0c1"
    WRITE_S0S1S2 = "write_s0s1s2"
    READ_C2 = "read_c2"
    FINISH = "finish"


class HandshakeError(Exception):
    """Raised when a handshake step cannot be completed."""

    class Kind(enum.Enum):
        BYTES_READ = "bytes read error"
        BYTES_WRITE = "bytes write error"
        SYS_TIME = "system time error"
        DIGEST = "digest error"
        DIGEST_NOT_FOUND = "Digest not found error"
        S0_VERSION_NOT_CORRECT = "s0 version not correct error"
        IO = "io error"

    def __init__(self, kind: "HandshakeError.Kind", cause: BaseException | str | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class _Reader:
    """Consuming reader over bytes received so far."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def extend(self, data: bytes) -> None:
        self._buffer.extend(data)

    def read_bytes(self, count: int) -> bytes:
        if len(self._buffer) < count:
            raise HandshakeError(
                HandshakeError.Kind.BYTES_READ,
                f"need {count} bytes, have {len(self._buffer)}",
            )
        chunk = bytes(self._buffer[:count])
        del self._buffer[:count]
        return chunk

    def read_u8(self) -> int:
        return self.read_bytes(1)[0]

    def remaining(self) -> bytes:
        return bytes(self._buffer)


class _Output:
    """Buffers outgoing bytes until flushed to the stream writer."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self._writer = writer
        self._pending = bytearray()

    def write(self, data: bytes) -> None:
        self._pending.extend(data)

    def write_u8(self, value: int) -> None:
        self._pending.append(value & 0xFF)

    def write_u32(self, value: int) -> None:
        self._pending.extend(struct.pack(">I", value & 0xFFFFFFFF))

    def write_random(self, count: int) -> None:
        self._pending.extend(os.urandom(count))

    async def flush(self) -> None:
        data = bytes(self._pending)
        self._pending.clear()
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as err:
            raise HandshakeError(HandshakeError.Kind.IO, err) from err


def _timestamp_of(packet: bytes) -> int:
    return struct.unpack_from(">I", packet)[0]


def _digest_call(operation):
    try:
        return operation()
    except DigestError as err:
        raise HandshakeError(HandshakeError.Kind.DIGEST, err) from err


async def _drive_server(server, label: str) -> None:
    """Run the server state machine as far as the received data allows."""
    while True:
        if server.state is ServerHandshakeState.READ_C0C1:
            log.info("[ S<-C ] [%s handshake] read C0C1", label)
            server.read_c0()
            server.read_c1()
            server.state = ServerHandshakeState.WRITE_S0S1S2
        elif server.state is ServerHandshakeState.WRITE_S0S1S2:
            log.info("[ S->C ] [%s handshake] write S0S1S2", label)
            server.write_s0()
            server.write_s1()
            server.write_s2()
            await server.output.flush()
            server.state = ServerHandshakeState.READ_C2
            return
        elif server.state is ServerHandshakeState.READ_C2:
            log.info("[ S<-C ] [%s handshake] read C2", label)
            server.read_c2()
            server.state = ServerHandshakeState.FINISH
        else:
            log.info("%s handshake successfully..", label)
            return


class SimpleHandshakeClient:
    """Client side of the plain (digest-free) handshake."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self._reader = _Reader()
        self._output = _Output(writer)
        self._s1_bytes = b""
        self.state = ClientHandshakeState.WRITE_C0C1

    def extend_data(self, data: bytes) -> None:
        self._reader.extend(data)

    async def flush(self) -> None:
        await self._output.flush()

    async def handshake(self) -> None:
        """Advance the handshake as far as the data received allows."""
        while True:
            if self.state is ClientHandshakeState.WRITE_C0C1:
                self.write_c0()
                self.write_c1()
                await self.flush()
                self.state = ClientHandshakeState.READ_S0S1S2
                return
            if self.state is ClientHandshakeState.READ_S0S1S2:
                self.read_s0()
                self.read_s1()
                self.read_s2()
                self.state = ClientHandshakeState.WRITE_C2
            elif self.state is ClientHandshakeState.WRITE_C2:
                self.write_c2()
                await self.flush()
                self.state = ClientHandshakeState.FINISH
            else:
                return

    def write_c0(self) -> None:
        self._output.write_u8(RTMP_VERSION)

    def write_c1(self) -> None:
        self._output.write_u32(current_time())
        self._output.write_u32(0)
        self._output.write_random(_RANDOM_SIZE)

    def write_c2(self) -> None:
        self._output.write(self._s1_bytes)

    def read_s0(self) -> None:
        self._reader.read_u8()

    def read_s1(self) -> None:
        self._s1_bytes = self._reader.read_bytes(RTMP_HANDSHAKE_SIZE)

    def read_s2(self) -> None:
        self._reader.read_bytes(RTMP_HANDSHAKE_SIZE)


class SimpleHandshakeServer:
    """Server side of the plain handshake: S2 echoes C1."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self.reader = _Reader()
        self.output = _Output(writer)
        self.state = ServerHandshakeState.READ_C0C1
        self._c1_bytes = b""
        self._c1_timestamp = 0

    def extend_data(self, data: bytes) -> None:
        self.reader.extend(data)

    async def handshake(self) -> None:
        """Advance the handshake as far as the data received allows."""
        await _drive_server(self, "simple")

    def read_c0(self) -> None:
        self.reader.read_u8()

    def read_c1(self) -> None:
        c1 = self.reader.read_bytes(RTMP_HANDSHAKE_SIZE)
        self._c1_bytes = c1
        self._c1_timestamp = _timestamp_of(c1)

    def read_c2(self) -> None:
        self.reader.read_bytes(RTMP_HANDSHAKE_SIZE)

    def write_s0(self) -> None:
        self.output.write_u8(RTMP_VERSION)

    def write_s1(self) -> None:
        self.output.write_u32(current_time())
        self.output.write_u32(self._c1_timestamp)
        self.output.write_random(_RANDOM_SIZE)

    def write_s2(self) -> None:
        self.output.write(self._c1_bytes)


class ComplexHandshakeServer:
    """Server side of the digest-based handshake."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self.reader = _Reader()
        self.output = _Output(writer)
        self.state = ServerHandshakeState.READ_C0C1
        self._c1_digest = b""
        self._c1_timestamp = 0

    def extend_data(self, data: bytes) -> None:
        self.reader.extend(data)

    async def handshake(self) -> None:
        """Advance the handshake as far as the data received allows."""
        await _drive_server(self, "complex")

    def read_c0(self) -> None:
        self.reader.read_u8()

    def read_c1(self) -> None:
        c1 = self.reader.read_bytes(RTMP_HANDSHAKE_SIZE)
        self._c1_timestamp = _timestamp_of(c1)
        processor = DigestProcessor(c1, RTMP_CLIENT_KEY_FIRST_HALF.encode("ascii"))
        self._c1_digest, _ = _digest_call(processor.read_digest)

    def read_c2(self) -> None:
        self.reader.read_bytes(RTMP_HANDSHAKE_SIZE)

    def write_s0(self) -> None:
        self.output.write_u8(RTMP_VERSION)

    def write_s1(self) -> None:
        s1 = (
            struct.pack(">I", current_time())
            + RTMP_SERVER_VERSION
            + os.urandom(_RANDOM_SIZE)
        )
        processor = DigestProcessor(s1, RTMP_SERVER_KEY_FIRST_HALF.encode("ascii"))
        self.output.write(_digest_call(processor.generate_and_fill_digest))

    def write_s2(self) -> None:
        s2 = (
            struct.pack(">II", current_time(), self._c1_timestamp)
            + os.urandom(_RANDOM_SIZE)
        )
        temp_key = _digest_call(
            lambda: DigestProcessor(b"", RTMP_SERVER_KEY).make_digest(self._c1_digest)
        )
        data = s2[:_S2_DATA_SIZE]
        digest = _digest_call(lambda: DigestProcessor(b"", temp_key).make_digest(data))
        self.output.write(data + digest)


class HandshakeServer:
    """Tries the complex handshake first and falls back to the simple one."""

    def __init__(self, writer: StreamWriterLike) -> None:
        self._simple = SimpleHandshakeServer(writer)
        self._complex = ComplexHandshakeServer(writer)
        self._is_complex = True
        self._saved_data = bytearray()

    @property
    def is_complex(self) -> bool:
        return self._is_complex

    def extend_data(self, data: bytes) -> None:
        if self._is_complex:
            self._complex.extend_data(data)
            self._saved_data.extend(data)
        else:
            self._simple.extend_data(data)

    def state(self) -> ServerHandshakeState:
        return self._complex.state if self._is_complex else self._simple.state

    def remaining_bytes(self) -> bytes:
        """Bytes received but not consumed by the handshake."""
        active = self._complex if self._is_complex else self._simple
        return active.reader.remaining()

    async def handshake(self) -> None:
        if not self._is_complex:
            await self._simple.handshake()
            return
        try:
            await self._complex.handshake()
        except HandshakeError as err:
            log.warning("complex handshake failed.. err:%s", err)
            self._is_complex = False
            self.extend_data(bytes(self._saved_data))
            await self._simple.handshake()