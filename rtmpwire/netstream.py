"""NetStream commands: play, publish, stream lifecycle and status notifications."""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from typing import Any

from .amf0 import Amf0Error, Amf0Writer
from .messages import MsgTypeId

Send = Callable[[int, bytes], Awaitable[object]]
"""Awaitable callable taking a message type id and the encoded message body."""


class NetStreamError(Exception):
    """Raised when a NetStream command cannot be encoded or sent."""

    class Kind(enum.Enum):
        AMF0_WRITE = "amf0 write error"
        INVALID_MAX_CHUNK_SIZE = "invalid max chunk size"
        PACK = "pack error"

    def __init__(self, kind: "NetStreamError.Kind", cause: BaseException | str | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class NetStreamWriter:
    """Encodes NetStream commands as AMF0 and hands them to ``send``.

    Every command carries a null command object and goes out as an AMF0
    command message (type id 20).
    """

    def __init__(self, send: Send) -> None:
        self._send = send

    async def _write_command(self, name: str, transaction_id: float, *values: Any) -> None:
        writer = Amf0Writer()
        try:
            writer.write_string(name)
            writer.write_number(transaction_id)
            writer.write_null()
            for value in values:
                if isinstance(value, bool):
                    writer.write_bool(value)
                elif isinstance(value, (int, float)):
                    writer.write_number(value)
                elif isinstance(value, str):
                    writer.write_string(value)
                elif isinstance(value, dict):
                    writer.write_object(value)
                else:
                    raise Amf0Error(Amf0Error.Kind.UNSUPPORTED_VALUE, type(value).__name__)
        except Amf0Error as err:
            raise NetStreamError(NetStreamError.Kind.AMF0_WRITE, err) from err
        payload = writer.extract_current_bytes()
        try:
            await self._send(MsgTypeId.COMMAND_AMF0, payload)
        except OSError as err:
            raise NetStreamError(NetStreamError.Kind.PACK, err) from err

    async def write_play(
        self, transaction_id: float, stream_name: str, start: float, duration: float, reset: bool
    ) -> None:
        await self._write_command(
            "play", transaction_id, stream_name, float(start), float(duration), bool(reset)
        )

    async def write_delete_stream(self, transaction_id: float, stream_id: float) -> None:
        await self._write_command("deleteStream", transaction_id, float(stream_id))

    async def write_close_stream(self, transaction_id: float, stream_id: float) -> None:
        await self._write_command("closeStream", transaction_id, float(stream_id))

    async def write_release_stream(self, transaction_id: float, stream_name: str) -> None:
        await self._write_command("releaseStream", transaction_id, stream_name)

    async def write_fcpublish(self, transaction_id: float, stream_name: str) -> None:
        await self._write_command("FCPublish", transaction_id, stream_name)

    async def write_receive_audio(self, transaction_id: float, enable: bool) -> None:
        await self._write_command("receiveAudio", transaction_id, bool(enable))

    async def write_receive_video(self, transaction_id: float, enable: bool) -> None:
        await self._write_command("receiveVideo", transaction_id, bool(enable))

    async def write_publish(self, transaction_id: float, stream_name: str, stream_type: str) -> None:
        await self._write_command("publish", transaction_id, stream_name, stream_type)

    async def write_seek(self, transaction_id: float, ms: float) -> None:
        await self._write_command("seek", transaction_id, float(ms))

    async def write_pause(self, transaction_id: float, pause: bool, ms: float) -> None:
        await self._write_command("pause", transaction_id, bool(pause), float(ms))

    async def write_on_bw_done(self, transaction_id: float, bandwidth: float) -> None:
        await self._write_command("onBWDone", transaction_id, float(bandwidth))

    async def write_on_status(self, transaction_id: float, level: str, code: str, description: str) -> None:
        """Send an ``onStatus`` notification with a status object."""
        status = {"level": level, "code": code, "description": description}
        await self._write_command("onStatus", transaction_id, status)