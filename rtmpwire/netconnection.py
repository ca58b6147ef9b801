"""NetConnection commands: connect, createStream and their responses."""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .amf0 import Amf0Error, Amf0Writer
from .messages import MsgTypeId

Send = Callable[[int, bytes], Awaitable[object]]
"""Awaitable callable taking a message type id and the encoded message body."""


class NetConnectionError(Exception):
    """Raised when a NetConnection command cannot be encoded or sent."""

    class Kind(enum.Enum):
        AMF0_WRITE = "amf0 write error"
        AMF0_READ = "amf0 read error"
        PACK = "pack error"

    def __init__(self, kind: "NetConnectionError.Kind", cause: BaseException | str | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


@dataclass
class ConnectProperties:
    """Properties of the command object sent with ``connect``.

    Fields left as ``None`` are not sent.
    """

    app: str | None = None
    flash_ver: str | None = None
    swf_url: str | None = None
    tc_url: str | None = None
    fpad: bool | None = None
    capabilities: float | None = None
    audio_codecs: float | None = None
    video_codecs: float | None = None
    video_function: float | None = None
    object_encoding: float | None = None
    page_url: str | None = None

    @classmethod
    def with_defaults(cls, app_name: str) -> "ConnectProperties":
        """Properties for the given application with the usual player defaults."""
        return cls(
            app=app_name,
            flash_ver="LNX 9,0,124,2",
            swf_url="",
            tc_url="",
            fpad=False,
            capabilities=15.0,
            audio_codecs=4071.0,
            video_codecs=252.0,
            video_function=1.0,
            object_encoding=0.0,
            page_url="",
        )

    @classmethod
    def empty(cls) -> "ConnectProperties":
        """Properties with nothing set."""
        return cls()

    def _as_object(self) -> dict[str, Any]:
        pairs = (
            ("app", self.app),
            ("flashVer", self.flash_ver),
            ("tcUrl", self.tc_url),
            ("swfUrl", self.swf_url),
            ("pageUrl", self.page_url),
            ("fpab", self.fpad),
            ("capabilities", self.capabilities),
            ("audioCodecs", self.audio_codecs),
            ("videoCodecs", self.video_codecs),
            ("videoFunction", self.video_function),
            ("objectEncoding", self.object_encoding),
        )
        return {key: value for key, value in pairs if value is not None}


def _encode_values(writer: Amf0Writer, values: tuple[Any, ...]) -> None:
    for value in values:
        if value is None:
            writer.write_null()
        elif isinstance(value, bool):
            writer.write_bool(value)
        elif isinstance(value, (int, float)):
            writer.write_number(value)
        elif isinstance(value, str):
            writer.write_string(value)
        elif isinstance(value, dict):
            writer.write_object(value)
        else:
            raise Amf0Error(Amf0Error.Kind.UNSUPPORTED_VALUE, type(value).__name__)


class NetConnection:
    """Encodes NetConnection commands as AMF0 and hands them to ``send``.

    Every command goes out as an AMF0 command message (type id 20).
    """

    def __init__(self, send: Send) -> None:
        self._send = send

    async def _write_command(self, name: str, transaction_id: float, *values: Any) -> None:
        writer = Amf0Writer()
        try:
            writer.write_string(name)
            writer.write_number(transaction_id)
            _encode_values(writer, values)
        except Amf0Error as err:
            raise NetConnectionError(NetConnectionError.Kind.AMF0_WRITE, err) from err
        payload = writer.extract_current_bytes()
        try:
            await self._send(MsgTypeId.COMMAND_AMF0, payload)
        except OSError as err:
            raise NetConnectionError(NetConnectionError.Kind.PACK, err) from err

    async def write_connect_with_value(self, transaction_id: float, properties: dict[str, Any]) -> None:
        """Send ``connect`` with a ready-made command object."""
        await self._write_command("connect", transaction_id, dict(properties))

    async def write_connect(self, transaction_id: float, properties: ConnectProperties) -> None:
        """Send ``connect`` with the properties that are set."""
        await self._write_command("connect", transaction_id, properties._as_object())

    async def write_connect_response(
        self,
        transaction_id: float,
        fmsver: str,
        capabilities: float,
        code: str,
        level: str,
        description: str,
        encoding: float,
    ) -> None:
        """Send the ``_result`` answering a ``connect``."""
        server_info = {"fmsVer": fmsver, "capabilities": float(capabilities)}
        status = {
            "level": level,
            "code": code,
            "description": description,
            "objectEncoding": float(encoding),
        }
        await self._write_command("_result", transaction_id, server_info, status)

    async def write_create_stream(self, transaction_id: float) -> None:
        await self._write_command("createStream", transaction_id, None)

    async def write_create_stream_response(self, transaction_id: float, stream_id: float) -> None:
        await self._write_command("_result", transaction_id, None, float(stream_id))

    async def error(self, transaction_id: float, code: str, level: str, description: str) -> None:
        """Send an ``_error`` with a status object."""
        status = {"level": level, "code": code, "description": description}
        await self._write_command("_error", transaction_id, None, status)