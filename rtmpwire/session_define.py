"""Session constants, session kinds and the errors raised by sessions and relay clients."""

from __future__ import annotations

import enum

WINDOW_ACKNOWLEDGEMENT_SIZE = 4096
PEER_BANDWIDTH = 4096

FMSVER = "FMS/3,0,1,123"
CAPABILITIES = 31.0
LEVEL = "status"

OBJENCODING_AMF0 = 0.0
OBJENCODING_AMF3 = 3.0

STREAM_ID = 1.0

TRANSACTION_ID_CONNECT = 1
TRANSACTION_ID_CREATE_STREAM = 2

RTMP_LEVEL_WARNING = "warning"
RTMP_LEVEL_STATUS = "status"
RTMP_LEVEL_ERROR = "error\n"


class PeerBandwidthLimitType(enum.IntEnum):
    """Limit type sent with a Set Peer Bandwidth message."""

    HARD = 0
    SOFT = 1
    DYNAMIC = 2


class SessionSubType(enum.Enum):
    """Role a session takes when subscribing to a channel."""

    PLAYER = "player"
    PUBLISHER = "publisher"


class SessionType(enum.Enum):
    """Which side of the connection a session is."""

    CLIENT = "client"
    SERVER = "server"

    def __str__(self) -> str:
        return self.value


class SessionError(Exception):
    """Raised when an RTMP session cannot continue."""

    class Kind(enum.Enum):
        AMF0_WRITE = "amf0 write error"
        BYTES_WRITE = "bytes write error"
        UNPACK = "unpack error"
        MESSAGE = "message error"
        CONTROL_MESSAGES = "control message error"
        NET_CONNECTION = "net connection error"
        NET_STREAM = "net stream error"
        EVENT_MESSAGES = "event messages error"
        BYTES_IO = "net io error"
        PACK = "pack error"
        HANDSHAKE = "handshake error"
        AMF0_VALUE_COUNT_NOT_CORRECT = "amf0 count not correct error"
        AMF0_VALUE_TYPE_NOT_CORRECT = "amf0 value type not correct error"
        CHANNEL_EVENT_SEND = "channel event send error"
        NONE_CHANNEL_DATA_SENDER = "none channel data sender error"
        NONE_CHANNEL_DATA_RECEIVER = "none channel data receiver error"
        SEND_CHANNEL_DATA = "send channel data error"
        SUBSCRIBE_COUNT_LIMIT_REACH = "subscribe count limit is reached."
        NO_APP_NAME = "no app name error"
        NO_MEDIA_DATA_RECEIVED = "no media data can be received now."
        FINISH = "session is finished."

    def __init__(self, kind: "SessionError.Kind", cause: BaseException | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = kind.value if cause is None else f"{kind.value}: {cause}"
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class ClientError(Exception):
    """Raised when a relay push or pull client stops."""

    class Kind(enum.Enum):
        RECEIVE = "receive error"
        SEND = "send error"
        IO = "io error"

    def __init__(self, kind: "ClientError.Kind", cause: BaseException | None = None) -> None:
        self.kind = kind
        self.cause = cause
        super().__init__(kind.value)
        if cause is not None:
            self.__cause__ = cause