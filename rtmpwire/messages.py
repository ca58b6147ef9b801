"""Decoded RTMP message kinds, message type ids and the message error."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Union


class MsgTypeId(enum.IntEnum):
    """Message type id carried in a chunk's message header."""

    SET_CHUNK_SIZE = 1
    ABORT = 2
    ACKNOWLEDGEMENT = 3
    USER_CONTROL_EVENT = 4
    WIN_ACKNOWLEDGEMENT_SIZE = 5
    SET_PEER_BANDWIDTH = 6

    AUDIO = 8
    VIDEO = 9

    DATA_AMF3 = 15
    SHARED_OBJ_AMF3 = 16
    COMMAND_AMF3 = 17
    DATA_AMF0 = 18
    SHARED_OBJ_AMF0 = 19
    COMMAND_AMF0 = 20

    AGGREGATE = 22


class MessageError(Exception):
    """Raised when a message payload cannot be decoded."""

    class Kind(enum.Enum):
        BYTES_READ = "bytes read error"
        UNKNOWN_READ_STATE = "unknow read state"
        AMF0_READ = "amf0 read error"
        UNKNOWN_MESSAGE_TYPE = "unknown message type"
        PROTOCOL_CONTROL_MESSAGE_READER = "protocol control message read error"
        EVENT_MESSAGES = "user control message read error"

    def __init__(self, kind: "MessageError.Kind", cause: BaseException | str | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


@dataclass
class SetPeerBandwidthProperties:
    """Window size and limit type of a Set Peer Bandwidth message."""

    window_size: int
    limit_type: int


@dataclass
class RawMessage:
    """A message whose type is known but whose payload is not decoded."""

    msg_type_id: int
    payload: bytes = b""


@dataclass
class Amf0Command:
    """An AMF command: name, transaction id, command object and further arguments."""

    command_name: Any
    transaction_id: Any
    command_object: Any
    others: list[Any] = field(default_factory=list)


@dataclass
class AmfData:
    """An AMF data message (metadata), kept as raw bytes."""

    raw_data: bytes


@dataclass
class SetChunkSize:
    chunk_size: int


@dataclass
class AbortMessage:
    chunk_stream_id: int


@dataclass
class Acknowledgement:
    sequence_number: int


@dataclass
class WindowAcknowledgementSize:
    size: int


@dataclass
class SetPeerBandwidth:
    properties: SetPeerBandwidthProperties


@dataclass
class AudioData:
    data: bytes


@dataclass
class VideoData:
    data: bytes


@dataclass
class SetBufferLength:
    stream_id: int
    buffer_length: int


@dataclass
class StreamBegin:
    stream_id: int


@dataclass
class StreamIsRecorded:
    stream_id: int


RtmpMessage = Union[
    Amf0Command,
    AmfData,
    SetChunkSize,
    AbortMessage,
    Acknowledgement,
    WindowAcknowledgementSize,
    SetPeerBandwidth,
    AudioData,
    VideoData,
    SetBufferLength,
    StreamBegin,
    StreamIsRecorded,
    RawMessage,
]